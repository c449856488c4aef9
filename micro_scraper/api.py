"""
Micro Scraper HTTP surface.

GET /api/scrape?url=...&ua=...  -> title, meta description and first h1
GET /                           -> liveness text

Status mapping:
- invalid or missing url  -> 400 {"error": "Invalid URL"}
- 20s deadline exceeded   -> 504 {"error": "Timeout"} (sent within the 20s,
                             browser teardown included)
- any other failure       -> 500 {"error": "Scraping failed", "details": ...}
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .errors import DeadlineExceeded, InputError
from .models import ScrapeRequest
from .pipeline import MicroScraper
from .settings import DEFAULT_SCRAPE_CONFIG, ScrapeConfig
from .utils import error_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scrape", tags=["scrape"])


def get_micro_scraper(request: Request) -> MicroScraper:
    return request.app.state.micro_scraper


@router.get("")
async def scrape(
    url: str | None = Query(default=None, description="Absolute http(s) URL to scrape"),
    ua: str | None = Query(default=None, description="Optional User-Agent override"),
    micro_scraper: MicroScraper = Depends(get_micro_scraper),
):
    try:
        scrape_request = ScrapeRequest.from_query(url, ua)
    except InputError:
        return JSONResponse(status_code=400, content={"error": "Invalid URL"})

    try:
        result = await micro_scraper.scrape(scrape_request)
    except DeadlineExceeded:
        logger.error("Scraping timed out for %s", scrape_request.url)
        return JSONResponse(status_code=504, content={"error": "Timeout"})
    except Exception as e:
        details = error_details(e)
        logger.error("Scraper error for %s: %s", scrape_request.url, details)
        return JSONResponse(status_code=500, content={"error": "Scraping failed", "details": details})

    return JSONResponse(status_code=200, content=result.to_response())


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        await app.state.micro_scraper.close()


def create_app(config: ScrapeConfig | None = None, micro_scraper: MicroScraper | None = None) -> FastAPI:
    config = config or DEFAULT_SCRAPE_CONFIG

    app = FastAPI(
        title="Micro Scraper API",
        description="Extracts title, meta description and first h1 from a web page",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.micro_scraper = micro_scraper or MicroScraper(config)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Micro Scraper API is running"

    app.include_router(router)
    return app


app = create_app()
