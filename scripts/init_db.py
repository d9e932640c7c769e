"""
Create all tables for the CMS import service.

Usage:
    python -m scripts.init_db
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import create_async_engine
from core.config import settings
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.editor import Editor  # noqa: F401
from models.category import Category  # noqa: F401
from models.article import Article  # noqa: F401
from models.import_run import ImportRun  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database(database_url: str = None):
    logger.info("Connecting to database...")
    engine = create_async_engine(database_url or settings.DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        logger.info("Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")

    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
