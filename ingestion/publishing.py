"""
Scheduled publishing of imported "future" articles
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from models.article import Article
from core.exceptions import DatabaseError
import logging

logger = logging.getLogger(__name__)


def _due(now: datetime):
    return (
        select(Article)
        .where(
            Article.published.is_(False),
            Article.scheduled_at.is_not(None),
            Article.scheduled_at <= now
        )
        .order_by(Article.scheduled_at.asc(), Article.id.asc())
    )


async def list_due_articles(db: AsyncSession, now: Optional[datetime] = None) -> List[Article]:
    """Unpublished articles whose scheduled time has passed, oldest first"""
    result = await db.execute(_due(now or datetime.utcnow()))
    return list(result.scalars().all())


async def publish_due_articles(db: AsyncSession, now: Optional[datetime] = None) -> List[Article]:
    """
    Publish every article that has reached its scheduled time.

    The scheduled time becomes published_at and scheduled_at is cleared, so
    an article is never both published and scheduled.

    Returns:
        The articles that were published
    """
    articles = await list_due_articles(db, now)
    if not articles:
        logger.debug("No scheduled articles due")
        return []

    for article in articles:
        article.published = True
        article.published_at = article.scheduled_at or now or datetime.utcnow()
        article.scheduled_at = None

    article_ids = [a.id for a in articles]
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise DatabaseError(
            "Failed to publish scheduled articles",
            context={
                "operation": "UPDATE",
                "table_name": "articles",
                "article_ids": article_ids
            },
            original_exception=e
        )

    logger.info(f"Published {len(articles)} scheduled article(s): {article_ids}")
    return articles
