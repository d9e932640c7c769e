"""
Integration tests for scheduled publishing
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.exc import OperationalError
from ingestion.loaders.content_loader import ContentLoader
from ingestion.publishing import list_due_articles, publish_due_articles
from ingestion.scheduler import ArticlePublishScheduler
from schemas.normalized import ArticleData, EditorData
from core.exceptions import DatabaseError

NOW = datetime(2024, 6, 1, 12, 0)


async def create_article(loader: ContentLoader, slug: str, **fields):
    category = await loader.get_or_create_default_category()
    editor = await loader.find_editor(email="jane@x.com") or await loader.create_editor(
        EditorData(name="Jane", email="jane@x.com", slug="jane")
    )
    data = ArticleData(title=slug.title(), slug=slug, content="<p>Body text here</p>", **fields)
    return await loader.create_article(data, category.id, editor.id)


@pytest.fixture
def loader(db_session):
    return ContentLoader(db_session)


class TestPublishDueArticles:

    @pytest.mark.asyncio
    async def test_publishes_only_due_articles(self, db_session, loader):
        due = await create_article(loader, "due", scheduled_at=NOW - timedelta(hours=1))
        later = await create_article(loader, "later", scheduled_at=NOW + timedelta(days=1))
        live = await create_article(loader, "live", published=True, published_at=NOW - timedelta(days=3))

        published = await publish_due_articles(db_session, now=NOW)

        assert [a.id for a in published] == [due.id]
        assert due.published is True
        assert due.published_at == NOW - timedelta(hours=1)
        assert due.scheduled_at is None
        assert later.published is False
        assert later.scheduled_at == NOW + timedelta(days=1)
        assert live.published_at == NOW - timedelta(days=3)

    @pytest.mark.asyncio
    async def test_due_articles_oldest_first(self, db_session, loader):
        newer = await create_article(loader, "newer", scheduled_at=NOW - timedelta(minutes=5))
        older = await create_article(loader, "older", scheduled_at=NOW - timedelta(days=2))

        due = await list_due_articles(db_session, now=NOW)

        assert [a.id for a in due] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_second_pass_publishes_nothing(self, db_session, loader):
        await create_article(loader, "due", scheduled_at=NOW - timedelta(hours=1))

        assert len(await publish_due_articles(db_session, now=NOW)) == 1
        assert await publish_due_articles(db_session, now=NOW) == []
        assert await list_due_articles(db_session, now=NOW) == []

    @pytest.mark.asyncio
    async def test_commit_failure_raises_database_error(self, db_session, loader, monkeypatch):
        due_id = (await create_article(loader, "due", scheduled_at=NOW - timedelta(hours=1))).id

        async def failing_commit():
            raise OperationalError("UPDATE articles", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(DatabaseError) as exc_info:
            await publish_due_articles(db_session, now=NOW)

        assert exc_info.value.context["article_ids"] == [due_id]
        assert exc_info.value.context["table_name"] == "articles"


class TestArticlePublishScheduler:

    @pytest.mark.asyncio
    async def test_publish_job_uses_own_session(self, db_session, session_maker, loader):
        article = await create_article(loader, "due", scheduled_at=datetime.utcnow() - timedelta(minutes=1))

        published = await ArticlePublishScheduler(session_maker=session_maker).publish_job()

        await db_session.refresh(article)
        assert published == 1
        assert article.published is True
        assert article.scheduled_at is None

    @pytest.mark.asyncio
    async def test_publish_job_with_nothing_due(self, session_maker):
        assert await ArticlePublishScheduler(session_maker=session_maker).publish_job() == 0

    @pytest.mark.asyncio
    async def test_start_registers_interval_job(self, session_maker):
        scheduler = ArticlePublishScheduler(session_maker=session_maker, interval_minutes=15)

        scheduler.start()
        try:
            job = scheduler.scheduler.get_job("publish_scheduled_articles")
            assert job is not None
            assert job.trigger.interval == timedelta(minutes=15)
        finally:
            scheduler.stop()
