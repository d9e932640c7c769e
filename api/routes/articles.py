"""
Scheduled article endpoints
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db
from schemas.api import ScheduledArticleInfo, ScheduledArticlesResponse, PublishScheduledResponse
from ingestion.publishing import list_due_articles, publish_due_articles
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/articles", tags=["Articles"])


@router.get("/scheduled", response_model=ScheduledArticlesResponse)
async def get_scheduled_articles(db: AsyncSession = Depends(get_db)):
    """Unpublished articles whose scheduled time has already passed"""
    articles = await list_due_articles(db)
    return ScheduledArticlesResponse(
        count=len(articles),
        articles=[
            ScheduledArticleInfo(id=a.id, title=a.title, scheduled_at=a.scheduled_at)
            for a in articles
        ]
    )


@router.post("/scheduled/publish", response_model=PublishScheduledResponse)
async def publish_scheduled_articles(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Publish every due scheduled article now.

    The same job runs periodically in the background; this endpoint lets an
    external cron or an admin trigger it on demand.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] POST /api/articles/scheduled/publish")

    due = [
        ScheduledArticleInfo(id=a.id, title=a.title, scheduled_at=a.scheduled_at)
        for a in await list_due_articles(db)
    ]
    if not due:
        return PublishScheduledResponse(message="No articles to publish", published=0)

    published = await publish_due_articles(db)
    published_ids = {a.id for a in published}
    return PublishScheduledResponse(
        message=f"Published {len(published)} article(s)",
        published=len(published),
        articles=[info for info in due if info.id in published_ids]
    )
