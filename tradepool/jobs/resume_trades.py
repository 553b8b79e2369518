"""
Finish interrupted trades.

Any trade whose proposal retraction was cut short is left in progress.
This job completes them; it is safe to run at any time and as often as
needed. Can be run standalone or from a scheduler.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from tradepool.db.database import async_session_factory
from tradepool.services.trade_executor import resume_pending_trades

logger = logging.getLogger(__name__)


async def run_resume() -> int:
    """
    Complete every in-progress trade.

    Returns:
        Number of trades completed
    """
    try:
        async with async_session_factory() as session:
            results = await resume_pending_trades(session)
    except SQLAlchemyError as e:
        logger.error("Could not read pending trades: %s", e)
        return 0

    logger.info("Resume complete. Trades completed: %d", len(results))
    return len(results)


def main() -> None:
    """CLI entry point for finishing interrupted trades."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_resume())


if __name__ == "__main__":
    main()
