class ScrapeError(Exception):
    """Base class for errors raised by the scrape pipeline."""


class InputError(ScrapeError, ValueError):
    """The target URL is missing or not an absolute http(s) URL."""


class NavigationError(ScrapeError):
    """
    The browser could not load the target page.

    Raised for navigation timeouts and load/connection failures
    reported by the engine. Retried by the RetryController.
    """

    def __init__(self, message: str, attempt: int | None = None):
        super().__init__(message)
        self.attempt = attempt


class DeadlineExceeded(ScrapeError):
    """The global request deadline elapsed before any attempt finished."""

    def __init__(self, deadline_s: float):
        super().__init__(f"Timeout after {deadline_s:g}s")
        self.deadline_s = deadline_s
