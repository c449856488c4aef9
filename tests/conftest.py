import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from micro_scraper.api import create_app
from micro_scraper.browser_scraper import META_DESCRIPTION_SELECTORS, BrowserScraper
from micro_scraper.pipeline import MicroScraper
from micro_scraper.settings import ScrapeConfig

META_SELECTOR, OG_SELECTOR = META_DESCRIPTION_SELECTORS


def build_element(content=None, text=None):
    el = MagicMock()
    el.get_attribute = AsyncMock(return_value=content)
    el.text_content = AsyncMock(return_value=text)
    return el


def build_page(
    title="",
    meta_description=None,
    og_description=None,
    h1=None,
    goto_error=None,
    goto_delay=None,
):
    """Fake Playwright page; a field left as None means the element is absent."""
    elements = {}
    if meta_description is not None:
        elements[META_SELECTOR] = build_element(content=meta_description)
    if og_description is not None:
        elements[OG_SELECTOR] = build_element(content=og_description)
    if h1 is not None:
        elements["h1"] = build_element(text=h1)

    async def goto(url, **kwargs):
        if goto_delay:
            await asyncio.sleep(goto_delay)
        if goto_error is not None:
            raise goto_error
        return MagicMock(status=200)

    page = MagicMock()
    page.goto = AsyncMock(side_effect=goto)
    page.title = AsyncMock(return_value=title)
    page.query_selector = AsyncMock(side_effect=lambda selector: elements.get(selector))
    return page


class FakePlaywright:
    """Hands out one fake browser per launch, each serving the next page."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.browsers = []
        self.contexts = []
        self.chromium = MagicMock()
        self.chromium.launch = AsyncMock(side_effect=self._launch)

    async def _launch(self, **kwargs):
        page = self.pages.pop(0)

        context = MagicMock()
        context.new_page = AsyncMock(return_value=page)
        context.close = AsyncMock()

        browser = MagicMock()
        browser.new_context = AsyncMock(return_value=context)
        browser.close = AsyncMock()

        self.browsers.append(browser)
        self.contexts.append(context)
        return browser

    @property
    def sessions_created(self) -> int:
        return len(self.browsers)

    @property
    def sessions_released(self) -> int:
        return sum(1 for b in self.browsers if b.close.await_count == 1)


class FakeEngine:
    def __init__(self, playwright):
        self.playwright = playwright
        self.get = AsyncMock(return_value=playwright)
        self.stop = AsyncMock()


@pytest.fixture
def config() -> ScrapeConfig:
    return ScrapeConfig(
        global_timeout_s=0.5,
        navigation_timeout_ms=300,
        teardown_grace_s=0.1,
    )


@pytest.fixture
def make_page():
    return build_page


@pytest.fixture
def make_element():
    return build_element


@pytest.fixture
def scraper_factory(config):
    """Factory: BrowserScraper whose fake browser serves `pages`, plus that browser."""

    def factory(pages):
        playwright = FakePlaywright(pages)
        return BrowserScraper(config, engine=FakeEngine(playwright)), playwright

    return factory


@pytest_asyncio.fixture
async def client_factory(config, scraper_factory):
    """Factory: async HTTP client for an app whose browser serves `pages`."""
    from httpx import ASGITransport, AsyncClient

    clients = []

    def factory(pages):
        scraper, playwright = scraper_factory(pages)
        app = create_app(config, micro_scraper=MicroScraper(config, scraper=scraper))
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client, playwright

    yield factory

    for client in clients:
        await client.aclose()
