"""
Utility to initialize the database schema.
Creates all tables defined in models.py if they don't already exist.
"""

import asyncio
import logging

# Import models to ensure they are registered with Base.metadata
# pylint: disable=unused-import
from ragcalc.db import models
from ragcalc.db.connection import Base, engine

logger = logging.getLogger(__name__)


async def init_db(retries: int = 5, delay: float = 2):
    """
    Creates all tables in the database asynchronously.
    """
    logger.info("Initializing database at: %s", engine.url)

    # Retry loop for Postgres startup
    for _ in range(retries):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database initialization complete.")
            return
        # pylint: disable=broad-exception-caught
        except Exception as e:
            logger.warning("Database not ready yet, retrying... (%s)", e)
            await asyncio.sleep(delay)

    logger.error("Failed to initialize database after multiple retries.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_db())
