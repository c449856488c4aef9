import asyncio

from .browser_scraper import BrowserScraper, PlaywrightEngine
from .deadline import bounded_run
from .models import ScrapeRequest, ScrapeResult
from .policy import RetryController
from .settings import ScrapeConfig


class MicroScraper:
    """
    Wires the deadline guard, the retry controller and the browser worker.

    One instance serves every request; per-request state lives in the
    coroutine, so nothing here is mutated while scraping.
    """

    def __init__(self, config: ScrapeConfig, scraper: BrowserScraper | None = None, engine: PlaywrightEngine | None = None):
        self.config = config
        self.scraper = scraper or BrowserScraper(config, engine=engine)
        self.retry = RetryController(self.scraper, config)

    @property
    def engine(self) -> PlaywrightEngine:
        return self.scraper.engine

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        deadline_at = asyncio.get_running_loop().time() + self.config.scrape_budget_s
        return await bounded_run(
            lambda: self.retry.run(request.url, request.user_agent, deadline_at=deadline_at),
            self.config.global_timeout_s,
            teardown_grace_s=self.config.teardown_grace_s,
        )

    async def close(self) -> None:
        if self.engine.started:
            await self.engine.stop()
