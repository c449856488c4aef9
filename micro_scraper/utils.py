def error_details(exc: BaseException) -> str:
    """Human readable message for an error body; falls back to the class name."""
    message = str(exc).strip()
    return message or type(exc).__name__
