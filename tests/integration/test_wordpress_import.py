"""
Integration tests for the WordPress REST import pipeline
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy import select, func
from ingestion.runner import WordPressImportRunner
from models.editor import Editor
from models.category import Category
from models.article import Article
from models.import_run import ImportRun
from models.base import ImportSourceType, ImportStatus
from core.exceptions import ConnectionTestError, APIExtractionError, UpsertError
from ingestion.loaders.content_loader import ContentLoader
from wordpress_fakes import wp_user, wp_category, wp_post


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


async def run_import(session, client, **kwargs):
    kwargs.setdefault("media_delay", 0)
    runner = WordPressImportRunner(session, client, **kwargs)
    return await runner.run()


@pytest.fixture
def blog(fake_wordpress):
    """One author, one category, one published post"""
    fake_wordpress.users = [wp_user(1, "Jane Doe", email="jane@x.com")]
    fake_wordpress.categories = [wp_category(5, "Tech")]
    fake_wordpress.posts = [wp_post(10, "Hello &amp; Welcome", "hello", categories=[5], author=1)]
    return fake_wordpress


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_creates_editor_category_and_article(self, db_session, make_client, blog):
        report = await run_import(db_session, make_client())

        summary = report.summary
        assert (summary.users.created, summary.categories.created, summary.articles.created) == (1, 1, 1)
        assert report.failed_count == 0

        editor = await db_session.scalar(select(Editor))
        category = await db_session.scalar(select(Category))
        article = await db_session.scalar(select(Article))

        assert editor.email == "jane@x.com"
        assert category.slug == "tech"
        assert article.title == "Hello & Welcome"
        assert article.slug == "hello"
        assert article.published is True
        assert article.published_at == datetime(2024, 1, 1)
        assert article.scheduled_at is None
        assert article.category_id == category.id
        assert article.editor_id == editor.id

    @pytest.mark.asyncio
    async def test_outcomes_in_processing_order(self, db_session, make_client, blog):
        report = await run_import(db_session, make_client())

        assert [(o.type, o.external_id) for o in report.outcomes] == [
            ("user", 1), ("category", 5), ("article", 10)
        ]
        assert report.results.articles[0].slug == "hello"

    @pytest.mark.asyncio
    async def test_records_import_run(self, db_session, make_client, blog):
        await run_import(db_session, make_client())

        run = await db_session.scalar(select(ImportRun))
        assert run.source_type == ImportSourceType.WORDPRESS_REST
        assert run.source_name == "https://blog.test/wp-json"
        assert run.status == ImportStatus.SUCCESS
        assert run.items_total == 3
        assert run.items_failed == 0
        assert run.summary["articles"]["created"] == 1
        assert run.completed_at is not None


class TestIdempotence:

    @pytest.mark.asyncio
    async def test_second_run_updates_in_place(self, db_session, make_client, blog):
        await run_import(db_session, make_client())

        blog.users[0]["name"] = "Jane D."
        blog.posts[0]["title"] = {"rendered": "Hello again"}
        report = await run_import(db_session, make_client())

        assert report.summary.users.updated == 1
        assert report.summary.categories.updated == 1
        assert report.summary.articles.updated == 1
        assert await count(db_session, Editor) == 1
        assert await count(db_session, Category) == 1
        assert await count(db_session, Article) == 1

        editor = await db_session.scalar(select(Editor))
        article = await db_session.scalar(select(Article))
        assert editor.name == "Jane D."
        assert article.title == "Hello again"
        assert article.slug == "hello"

    @pytest.mark.asyncio
    async def test_placeholder_email_matches_on_rerun(self, db_session, make_client, fake_wordpress):
        fake_wordpress.users = [wp_user(1, "No Email")]

        await run_import(db_session, make_client())
        await run_import(db_session, make_client())

        editor = await db_session.scalar(select(Editor))
        assert editor.email == "no-email@wordpress-migrated.local"
        assert await count(db_session, Editor) == 1

    @pytest.mark.asyncio
    async def test_skip_existing_leaves_records_untouched(self, db_session, make_client, blog):
        await run_import(db_session, make_client())

        blog.posts[0]["title"] = {"rendered": "Changed title"}
        report = await run_import(db_session, make_client(), skip_existing=True)

        assert [o.action for o in report.outcomes] == ["skipped", "skipped", "skipped"]
        assert all(o.success for o in report.outcomes)
        assert report.summary.articles.successful == 1
        assert report.summary.articles.updated == 0

        article = await db_session.scalar(select(Article))
        assert article.title == "Hello & Welcome"


class TestArticleResolution:

    @pytest.mark.asyncio
    async def test_missing_author_fails_article(self, db_session, make_client, blog):
        blog.posts[0]["author"] = 99

        report = await run_import(db_session, make_client())

        outcome = report.results.articles[0]
        assert outcome.success is False
        assert outcome.errors == ["Author with WordPress ID 99 not found"]
        assert await count(db_session, Article) == 0

        run = await db_session.scalar(select(ImportRun))
        assert run.status == ImportStatus.PARTIAL
        assert run.items_failed == 1

    @pytest.mark.asyncio
    async def test_uncategorized_posts_share_general(self, db_session, make_client, fake_wordpress):
        fake_wordpress.users = [wp_user(1, "Jane Doe")]
        fake_wordpress.posts = [
            wp_post(10, "First post", "first"),
            wp_post(11, "Second post", "second", categories=[77]),
        ]

        await run_import(db_session, make_client())

        categories = (await db_session.scalars(select(Category))).all()
        assert [c.name for c in categories] == ["General"]
        articles = (await db_session.scalars(select(Article))).all()
        assert {a.category_id for a in articles} == {categories[0].id}

    @pytest.mark.asyncio
    async def test_first_mapped_category_wins(self, db_session, make_client, blog):
        blog.categories.append(wp_category(6, "News"))
        blog.posts[0]["categories"] = [42, 6, 5]

        await run_import(db_session, make_client())

        article = await db_session.scalar(select(Article))
        news = await db_session.scalar(select(Category).where(Category.slug == "news"))
        assert article.category_id == news.id

    @pytest.mark.asyncio
    async def test_invalid_post_is_reported(self, db_session, make_client, blog):
        blog.posts.append(wp_post(11, "Tiny", "tiny", content="<p>Hi</p>"))

        report = await run_import(db_session, make_client())

        failed = [o for o in report.outcomes if not o.success]
        assert len(failed) == 1
        assert failed[0].external_id == 11
        assert failed[0].errors == ["Post content is too short (minimum 10 characters)"]
        assert report.summary.articles.created == 1

    @pytest.mark.asyncio
    async def test_invalid_user_is_reported(self, db_session, make_client, blog):
        blog.users.append(wp_user(2, "", slug="blank"))

        report = await run_import(db_session, make_client())

        assert report.summary.users.failed == 1
        assert report.results.users[1].errors == ["User name is required"]

    @pytest.mark.asyncio
    async def test_future_post_is_scheduled(self, db_session, make_client, blog):
        when = (datetime.utcnow() + timedelta(days=30)).replace(microsecond=0)
        blog.posts[0].update(status="future", date=when.strftime("%Y-%m-%dT%H:%M:%S"))

        await run_import(db_session, make_client())

        article = await db_session.scalar(select(Article))
        assert article.published is False
        assert article.published_at is None
        assert article.scheduled_at == when

    @pytest.mark.asyncio
    async def test_sticky_post_is_featured(self, db_session, make_client, blog):
        blog.posts[0]["sticky"] = True

        await run_import(db_session, make_client())

        article = await db_session.scalar(select(Article))
        assert article.featured is True


class TestPerItemFailures:

    @pytest.mark.asyncio
    async def test_malformed_user_does_not_stop_phase(self, db_session, make_client, blog):
        # PHP serializes an empty map as []
        blog.users.append(wp_user(2, "Broken", email="broken@x.com", avatar_urls=[]))
        blog.users.append(wp_user(3, "After", email="after@x.com"))

        report = await run_import(db_session, make_client())

        failed = [o for o in report.results.users if not o.success]
        assert [o.external_id for o in failed] == [2]
        assert failed[0].title == "Broken"
        assert failed[0].errors[0].startswith("Invalid avatar_urls")
        assert report.summary.users.created == 2
        assert report.summary.articles.created == 1

        run = await db_session.scalar(select(ImportRun))
        assert run.status == ImportStatus.PARTIAL
        assert (run.items_total, run.items_failed) == (5, 1)

    @pytest.mark.asyncio
    async def test_malformed_post_does_not_stop_phase(self, db_session, make_client, blog):
        blog.posts.append(wp_post(11, "Broken", "broken", sticky=None))
        blog.posts.append(wp_post(12, "After", "after"))

        report = await run_import(db_session, make_client())

        failed = [o for o in report.outcomes if not o.success]
        assert [o.external_id for o in failed] == [11]
        assert failed[0].errors[0].startswith("Invalid sticky")
        assert report.summary.articles.created == 2
        assert report.summary.articles.failed == 1
        assert await db_session.scalar(select(Article).where(Article.slug == "after")) is not None

    @pytest.mark.asyncio
    async def test_save_error_is_isolated_to_its_post(self, db_session, make_client, blog, monkeypatch):
        blog.posts.append(wp_post(11, "Broken", "broken"))
        blog.posts.append(wp_post(12, "After", "after"))
        create_article = ContentLoader.create_article

        async def failing_create(self, data, category_id, editor_id):
            if data.slug == "broken":
                raise UpsertError("Failed to save articles 'broken': IntegrityError")
            return await create_article(self, data, category_id, editor_id)

        monkeypatch.setattr(ContentLoader, "create_article", failing_create)

        report = await run_import(db_session, make_client())

        failed = [o for o in report.outcomes if not o.success]
        assert [o.external_id for o in failed] == [11]
        assert failed[0].errors == ["Failed to save articles 'broken': IntegrityError"]
        slugs = set(await db_session.scalars(select(Article.slug)))
        assert slugs == {"hello", "after"}

    @pytest.mark.asyncio
    async def test_unexpected_error_still_completes_run(self, db_session, make_client, blog, monkeypatch):
        async def explode(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(WordPressImportRunner, "import_categories", explode)

        with pytest.raises(RuntimeError):
            await run_import(db_session, make_client())

        run = await db_session.scalar(select(ImportRun))
        assert run.status == ImportStatus.FAILED
        assert run.error_message == "boom"
        assert run.completed_at is not None


class TestFeaturedMedia:

    @pytest.mark.asyncio
    async def test_media_fields_copied(self, db_session, make_client, blog):
        blog.posts[0]["featured_media"] = 42
        blog.media[42] = {
            "id": 42,
            "source_url": "https://blog.test/uploads/hero.jpg",
            "alt_text": "Hero",
            "title": {"rendered": "Hero image"},
            "caption": {"rendered": "<p>A caption</p>"},
            "description": {"rendered": ""},
        }

        await run_import(db_session, make_client())

        article = await db_session.scalar(select(Article))
        assert article.featured_image == "https://blog.test/uploads/hero.jpg"
        assert article.featured_image_alt_text == "Hero"
        assert article.featured_image_caption == "A caption"

    @pytest.mark.asyncio
    async def test_missing_media_drops_image(self, db_session, make_client, blog):
        blog.posts[0]["featured_media"] = 99

        report = await run_import(db_session, make_client())

        article = await db_session.scalar(select(Article))
        assert report.failed_count == 0
        assert article.featured_image is None

    @pytest.mark.asyncio
    async def test_media_error_does_not_fail_article(self, db_session, make_client, blog):
        blog.posts[0]["featured_media"] = 7
        blog.failing_paths["/wp/v2/media/7"] = 500

        report = await run_import(db_session, make_client())

        assert report.summary.articles.created == 1
        assert (await db_session.scalar(select(Article))).featured_image is None


class TestAbortedRuns:

    @pytest.mark.asyncio
    async def test_connection_failure_writes_nothing(self, db_session, make_client, blog):
        blog.failing_paths["/wp/v2/posts"] = 401
        blog.failing_paths["/wp/v2"] = 401

        with pytest.raises(ConnectionTestError, match="Connection failed: 401 Unauthorized"):
            await run_import(db_session, make_client())

        assert await count(db_session, ImportRun) == 0
        assert await count(db_session, Editor) == 0
        assert await count(db_session, Category) == 0

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_run_failed(self, db_session, make_client, blog):
        # Connection test falls back to /wp/v2, so the failure surfaces in the posts phase
        blog.failing_paths["/wp/v2/posts"] = 500

        with pytest.raises(APIExtractionError):
            await run_import(db_session, make_client())

        run = await db_session.scalar(select(ImportRun))
        assert run.status == ImportStatus.FAILED
        assert run.error_message.startswith("WordPress API error: 500")
        assert run.items_total == 2
        assert await count(db_session, Editor) == 1
        assert await count(db_session, Article) == 0
