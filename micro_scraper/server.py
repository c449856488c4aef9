"""
Entry point: `micro-scraper` (or `python -m micro_scraper.server`).

Port comes from the PORT environment variable, then scrape_config.yaml,
then the default (4000).
"""

import logging

import uvicorn

from .logging_config import setup_logging
from .settings import DEFAULT_SCRAPE_CONFIG

logger = logging.getLogger(__name__)


def main() -> None:
    config = DEFAULT_SCRAPE_CONFIG
    setup_logging(config.log_level)
    logger.info("Server is running at http://localhost:%d", config.port)
    uvicorn.run(
        "micro_scraper.api:app",
        host=config.host,
        port=config.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
