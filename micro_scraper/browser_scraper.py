import asyncio
import logging
import time

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .errors import NavigationError
from .models import ScrapeResult
from .settings import ScrapeConfig

logger = logging.getLogger(__name__)

# Standard description first, Open Graph as fallback
META_DESCRIPTION_SELECTORS = (
    'head > meta[name="description"]',
    'head > meta[property="og:description"]',
)


class PlaywrightEngine:
    """
    Lazily started Playwright driver shared by all requests.

    The driver is only started on the first scrape, so the server boots
    without paying for it. Concurrent first requests start it once.
    Browsers are never shared: each attempt launches its own.
    """

    def __init__(self):
        self._playwright = None
        self._lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._playwright is not None

    async def get(self):
        if self._playwright is None:
            async with self._lock:
                if self._playwright is None:
                    logger.info("Starting Playwright driver")
                    self._playwright = await async_playwright().start()
        return self._playwright

    async def stop(self) -> None:
        async with self._lock:
            if self._playwright is None:
                return
            playwright, self._playwright = self._playwright, None
            await playwright.stop()
            logger.info("Playwright driver stopped")


class BrowserSession:
    """
    One headless browser, one isolated context and one page.

    Owned by exactly one attempt and closed on every exit path
    (success, error, cancellation) via __aexit__.
    """

    def __init__(self, playwright, config: ScrapeConfig, user_agent: str | None = None):
        self._playwright = playwright
        self.config = config
        self.user_agent = user_agent

        self.browser = None
        self.context = None
        self.page = None

    async def __aenter__(self):
        try:
            self.browser = await self._playwright.chromium.launch(
                headless=self.config.browser_headless,
                args=self.config.browser_args,
            )
            # user_agent=None keeps the browser default
            self.context = await self.browser.new_context(user_agent=self.user_agent)
            self.page = await self.context.new_page()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        context, browser = self.context, self.browser
        self.page = self.context = self.browser = None

        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning("Failed to close browser context: %s", e)
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning("Failed to close browser: %s", e)


class BrowserScraper:
    """
    Extraction worker: one navigation plus three field lookups per attempt.

    - Fresh BrowserSession per attempt, released before returning
    - Waits for network idle, bounded by config.navigation_timeout_ms
    - Navigation failures raise NavigationError
    - Missing fields (or failing lookups) become None, never errors
    """

    name = "browser"

    def __init__(self, config: ScrapeConfig, engine: PlaywrightEngine | None = None):
        self.config = config
        self.engine = engine or PlaywrightEngine()

    async def attempt(self, url: str, user_agent: str | None = None, attempt_no: int = 1) -> ScrapeResult:
        playwright = await self.engine.get()

        async with BrowserSession(playwright, self.config, user_agent) as session:
            page = session.page
            t0 = time.perf_counter()
            try:
                await page.goto(
                    url,
                    wait_until=self.config.wait_until,
                    timeout=self.config.navigation_timeout_ms,
                )
            except PlaywrightError as e:
                raise NavigationError(str(e), attempt=attempt_no) from e
            logger.debug("Loaded %s in %.2fs (attempt #%d)", url, time.perf_counter() - t0, attempt_no)

            return ScrapeResult(
                title=await self._title(page),
                meta_description=await self._meta_description(page),
                h1=await self._h1(page),
            )

    async def _title(self, page) -> str | None:
        try:
            return (await page.title()) or None
        except Exception as e:
            logger.debug("Title lookup failed: %s", e)
            return None

    async def _meta_description(self, page) -> str | None:
        for selector in META_DESCRIPTION_SELECTORS:
            try:
                element = await page.query_selector(selector)
                content = await element.get_attribute("content") if element else None
            except Exception as e:
                logger.debug("Lookup of %s failed: %s", selector, e)
                continue
            if content:
                return content
        return None

    async def _h1(self, page) -> str | None:
        try:
            element = await page.query_selector("h1")
            if element is None:
                return None
            text = await element.text_content()
        except Exception as e:
            logger.debug("h1 lookup failed: %s", e)
            return None
        return text.strip() if text is not None else None
