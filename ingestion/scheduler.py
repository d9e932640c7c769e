import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import settings
from core.database import async_session_maker
from ingestion.publishing import publish_due_articles

logger = logging.getLogger(__name__)


class ArticlePublishScheduler:
    """Publishes due scheduled articles on a fixed interval"""

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker] = None,
        interval_minutes: Optional[int] = None
    ):
        self.scheduler = AsyncIOScheduler()
        self.SessionLocal = session_maker or async_session_maker
        self.interval_minutes = interval_minutes or settings.SCHEDULER_INTERVAL_MINUTES

    async def publish_job(self) -> int:
        """Job to publish scheduled articles"""
        logger.info("Scheduler: Checking for scheduled articles")
        async with self.SessionLocal() as session:
            try:
                published = await publish_due_articles(session)
                return len(published)
            except Exception as e:
                await session.rollback()
                logger.error(f"Scheduler: publish job failed - {e}")
                return 0

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.publish_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="publish_scheduled_articles",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Article publish scheduler started (every {self.interval_minutes} min)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Article publish scheduler stopped")
