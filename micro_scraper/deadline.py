import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .errors import DeadlineExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded_run(
    work: Callable[[], Awaitable[T]],
    deadline_s: float,
    teardown_grace_s: float = 2.0,
) -> T:
    """
    Race `work()` against a wall-clock deadline.

    Whichever settles first decides the outcome: the work's result or
    exception is returned/raised unchanged, deadline expiry raises
    DeadlineExceeded. The grace period is part of `deadline_s`: the work
    gets `deadline_s - teardown_grace_s`, then it is cancelled so it can
    release its browser session, and teardown is awaited for at most the
    remaining grace. Either way the caller hears back within `deadline_s`.
    The cancelled work's eventual outcome is discarded.
    """
    race_s = deadline_s - teardown_grace_s
    if race_s <= 0:
        raise ValueError(f"teardown_grace_s ({teardown_grace_s}) must be shorter than deadline_s ({deadline_s})")

    task = asyncio.ensure_future(work())
    try:
        done, _ = await asyncio.wait({task}, timeout=race_s)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    logger.warning("Deadline of %.1fs reached, cancelling scrape", deadline_s)
    task.cancel()
    task.add_done_callback(_discard_late_outcome)
    if teardown_grace_s > 0:
        await asyncio.wait({task}, timeout=teardown_grace_s)
    if not task.done():
        logger.warning("Cancelled scrape still tearing down after %.1fs", teardown_grace_s)
    raise DeadlineExceeded(deadline_s)


def _discard_late_outcome(task: asyncio.Future) -> None:
    if task.cancelled():
        logger.debug("Abandoned scrape cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Discarding late failure of abandoned scrape: %s", exc)
    else:
        logger.debug("Discarding late result of abandoned scrape")
