"""
Decode HTML entities left in records imported before entity decoding existed.

Usage:
    python -m scripts.decode_existing_entities
"""

import asyncio
import logging
from typing import Dict, Sequence, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import engine, async_session_maker
from core.logging import setup_logging
from models.base import Base
from models.article import Article
from models.category import Category
from models.editor import Editor
from ingestion.transformers.text import decode_html_entities

logger = logging.getLogger(__name__)

# Text columns that may carry encoded entities, per model
DECODED_FIELDS: Dict[Type[Base], Sequence[str]] = {
    Article: (
        "title",
        "content",
        "excerpt",
        "meta_title",
        "meta_description",
        "featured_image_title",
        "featured_image_caption",
        "featured_image_description",
        "featured_image_alt_text",
    ),
    Category: ("name", "description"),
    Editor: ("name", "bio"),
}


def decode_fields(record: Base, fields: Sequence[str]) -> bool:
    """Decode the given attributes in place; True if any changed"""
    changed = False
    for name in fields:
        value = getattr(record, name)
        if not value or "&" not in value:
            continue
        decoded = decode_html_entities(value)
        if decoded != value:
            setattr(record, name, decoded)
            changed = True
    return changed


async def decode_existing_entities(session: AsyncSession) -> Dict[str, int]:
    """
    Re-decode stored text for every article, category and editor.

    Returns:
        Number of updated rows per table
    """
    counts = {}
    for model, fields in DECODED_FIELDS.items():
        logger.info(f"Updating {model.__tablename__}...")
        result = await session.execute(select(model).order_by(model.id))
        updated = 0
        for record in result.scalars().all():
            if decode_fields(record, fields):
                updated += 1
        await session.commit()
        counts[model.__tablename__] = updated
        logger.info(f"Updated {updated} {model.__tablename__}")
    return counts


async def main():
    try:
        async with async_session_maker() as session:
            counts = await decode_existing_entities(session)
        logger.info(f"Entity decoding complete: {counts}")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
