"""
Retry policy: decides whether a failed extraction gets another attempt.

The logic is:
- fixed attempt budget (config.max_attempts, default 2)
- sequential, no backoff
- every failure is retryable, cancellation never is
- stop early once the request deadline has passed
"""

import asyncio
import logging
import time

from .browser_scraper import BrowserScraper
from .errors import DeadlineExceeded
from .models import AttemptOutcome, ScrapeResult
from .settings import ScrapeConfig
from .utils import error_details

logger = logging.getLogger(__name__)


class RetryController:
    def __init__(self, scraper: BrowserScraper, config: ScrapeConfig):
        self.scraper = scraper
        self.config = config
        self.max_attempts = config.max_attempts

    async def run(
        self,
        url: str,
        user_agent: str | None = None,
        deadline_at: float | None = None,
    ) -> ScrapeResult:
        """
        Run up to `max_attempts` extraction attempts and return the first success.

        `deadline_at` is an absolute time on the running loop's clock; once it
        has passed no new attempt is started and DeadlineExceeded is raised.
        When every attempt fails, the last attempt's error is re-raised.
        """
        loop = asyncio.get_running_loop()
        outcomes: list[AttemptOutcome] = []

        for attempt_no in range(1, self.max_attempts + 1):
            if deadline_at is not None and loop.time() >= deadline_at:
                logger.warning(
                    "Deadline passed before attempt #%d for %s, not retrying", attempt_no, url
                )
                raise DeadlineExceeded(self.config.global_timeout_s)

            outcome = await self._attempt(url, user_agent, attempt_no)
            outcomes.append(outcome)
            if outcome.ok:
                return outcome.result

        logger.error(
            "All %d attempts failed for %s after %.2fs",
            len(outcomes),
            url,
            sum(o.elapsed_s for o in outcomes),
        )
        raise outcomes[-1].error

    async def _attempt(self, url: str, user_agent: str | None, attempt_no: int) -> AttemptOutcome:
        logger.info("Starting scrape attempt #%d for %s", attempt_no, url)
        t0 = time.perf_counter()
        try:
            result = await self.scraper.attempt(url, user_agent, attempt_no)
        except Exception as e:
            elapsed = time.perf_counter() - t0
            logger.warning(
                "Scrape attempt #%d failed after %.2fs: %s", attempt_no, elapsed, error_details(e)
            )
            return AttemptOutcome(attempt=attempt_no, error=e, elapsed_s=elapsed)

        elapsed = time.perf_counter() - t0
        logger.info("Scrape successful (attempt #%d, %.2fs)", attempt_no, elapsed)
        return AttemptOutcome(attempt=attempt_no, result=result, elapsed_s=elapsed)
