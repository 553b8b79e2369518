"""
Download the card catalog.

Run this job before starting the API, and again whenever a new set is
released.
"""

import asyncio
import logging

from tradepool.config import settings
from tradepool.services.card_catalog import download_card_catalog, get_card_catalog

logger = logging.getLogger(__name__)


async def run_download(url: str | None = None) -> None:
    """Download the catalog from the configured URL."""
    url = url or settings.catalog_url
    logger.info("Downloading card catalog from %s...", url)

    try:
        path = await download_card_catalog(url)
        logger.info("Downloaded card catalog to %s", path)
    except Exception as e:
        logger.error("Failed to download card catalog: %s", e)
        raise

    # Next lookup re-reads the new file
    get_card_catalog.cache_clear()


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
