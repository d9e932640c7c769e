# ============================================================================
# File: ingestion/runner.py
# Description: WordPress REST import orchestrator
# ============================================================================
"""
WordPress import runner - connection test, then users, categories, articles.

This module provides the REST import pipeline with:
- A fail-fast connection test before anything is written
- Strictly sequential phases (articles need the user and category id maps)
- Per-item error isolation: one bad record becomes a failed outcome and the
  loop continues
- An ImportRun audit row per run
"""

from functools import partial
from typing import Any, Dict, List, Optional, Sequence, Awaitable, Callable
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError as PydanticValidationError
import asyncio
import logging

from ingestion.base import ImportRunTracker, status_for
from ingestion.extractors.wordpress_client import WordPressClient
from ingestion.loaders.content_loader import ContentLoader
from ingestion.transformers.text import strip_html
from ingestion.transformers.validators import validate_user, validate_category, validate_post
from ingestion.transformers.wordpress_mapper import (
    map_user_to_editor,
    map_category_to_category,
    map_post_to_article
)
from schemas.wordpress import WordPressUser, WordPressCategory, WordPressPost, WordPressMedia
from schemas.api import ImportOutcome, ImportReport, ImportItemType, ImportAction
from models.base import ImportSourceType, ImportStatus
from core.config import settings
from core.exceptions import ImporterException, ConnectionTestError, ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_STATUSES = ("publish", "future")


def record_id(record: Any) -> int:
    """External id of a raw record, 0 when missing or not numeric"""
    value = record.get("id") if isinstance(record, dict) else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def record_title(record: Any, key: str, fallback: str) -> str:
    """Display title of a raw record; rendered HTML fields are stripped"""
    value = record.get(key) if isinstance(record, dict) else None
    if isinstance(value, dict):
        value = strip_html(value.get("rendered") or "")
    return value if isinstance(value, str) and value else fallback


def parse_errors(error: PydanticValidationError) -> List[str]:
    """One "Invalid <field>: <message>" line per pydantic error"""
    errors = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "record"
        errors.append(f"Invalid {field}: {err['msg']}")
    return errors


class WordPressImportRunner:
    """
    Orchestrates one WordPress REST import.

    Responsibilities:
    - Resolve post authors and categories through per-run id maps
    - Upsert editors, categories and articles by natural key
    - Produce an ImportReport with one outcome per external record
    - Record the run in import_runs
    """

    def __init__(
        self,
        db_session: AsyncSession,
        client: WordPressClient,
        skip_existing: bool = False,
        import_statuses: Optional[Sequence[str]] = None,
        media_delay: Optional[float] = None
    ):
        self.db = db_session
        self.client = client
        self.skip_existing = skip_existing
        self.import_statuses = list(import_statuses or DEFAULT_IMPORT_STATUSES)
        self.media_delay = settings.WORDPRESS_MEDIA_DELAY if media_delay is None else media_delay

        self.loader = ContentLoader(db_session)
        self.report = ImportReport()

        # External id -> internal id, valid for this run only
        self.editor_ids: Dict[int, int] = {}
        self.category_ids: Dict[int, int] = {}
        self._default_category_id: Optional[int] = None

    async def run(self) -> ImportReport:
        """
        Run the full import.

        Returns:
            ImportReport with every per-item outcome

        Raises:
            ConnectionTestError: If the site does not answer; nothing is written
            ExtractionError: If fetching a collection fails mid-run
        """
        success, message = await self.client.test_connection()
        if not success:
            logger.error(f"Connection test failed for {self.client.base_url}: {message}")
            raise ConnectionTestError(
                f"Connection failed: {message}",
                context={"api_url": self.client.base_url}
            )

        tracker = ImportRunTracker(self.db, ImportSourceType.WORDPRESS_REST, self.client.base_url)
        await tracker.start()

        try:
            await self.import_users()
            await self.import_categories()
            await self.import_articles()
        except Exception as e:
            detail = e.describe() if isinstance(e, ImporterException) else f"{type(e).__name__}: {e}"
            logger.error(f"WordPress import aborted: {detail}")
            await self.db.rollback()
            await tracker.complete(
                ImportStatus.FAILED,
                items_total=len(self.report.outcomes),
                items_failed=self.report.failed_count,
                summary=self.report.summary.model_dump(),
                error_message=str(e)
            )
            raise

        await tracker.complete(
            status_for(len(self.report.outcomes), self.report.failed_count),
            items_total=len(self.report.outcomes),
            items_failed=self.report.failed_count,
            summary=self.report.summary.model_dump()
        )
        return self.report

    async def _process(
        self,
        item_type: ImportItemType,
        external_id: int,
        title: str,
        step: Callable[[], Awaitable[ImportOutcome]]
    ) -> ImportOutcome:
        """Run one item's import step; any exception becomes a failed outcome"""
        try:
            outcome = await step()
        except Exception as e:
            await self.db.rollback()
            if isinstance(e, PydanticValidationError):
                errors = parse_errors(e)
            else:
                errors = [str(e) or type(e).__name__]
            logger.error(f"Failed to import {item_type.value} {external_id}: {'; '.join(errors)}")
            outcome = self._failed(item_type, external_id, title, errors)

        if not outcome.success:
            logger.warning(f"Skipped {item_type.value} {external_id}: {'; '.join(outcome.errors or [])}")
        return self.report.add(outcome)

    @staticmethod
    def _failed(item_type: ImportItemType, external_id: int, title: str, errors) -> ImportOutcome:
        return ImportOutcome(
            type=item_type,
            external_id=external_id,
            title=title,
            success=False,
            action=ImportAction.SKIPPED,
            errors=list(errors)
        )

    def _existing_action(self) -> ImportAction:
        return ImportAction.SKIPPED if self.skip_existing else ImportAction.UPDATED

    # --------------------------------------------------
    # PHASE 1: USERS -> EDITORS
    # --------------------------------------------------

    async def import_users(self):
        logger.info("Fetching WordPress users...")
        users = await self.client.fetch_users()
        logger.info(f"Found {len(users)} users")

        for record in users:
            external_id = record_id(record)
            title = record_title(record, "name", f"User {external_id}")
            await self._process(ImportItemType.USER, external_id, title, partial(self._import_user, record))

        summary = self.report.summary.users
        logger.info(f"Users: {summary.created} created, {summary.updated} updated, {summary.failed} failed")

    async def _import_user(self, record: Dict[str, Any]) -> ImportOutcome:
        user = WordPressUser.model_validate(record)
        validation = validate_user(user)
        if not validation.valid:
            return self._failed(ImportItemType.USER, user.id, user.name or f"User {user.id}", validation.errors)

        data = map_user_to_editor(user)
        editor = await self.loader.find_editor(email=data.email, name=data.name)

        if editor:
            if not self.skip_existing:
                editor = await self.loader.update_editor(editor, data)
            action = self._existing_action()
        else:
            editor = await self.loader.create_editor(data)
            action = ImportAction.CREATED

        self.editor_ids[user.id] = editor.id
        return ImportOutcome(
            type=ImportItemType.USER,
            external_id=user.id,
            title=data.name,
            success=True,
            action=action,
            slug=editor.slug
        )

    # --------------------------------------------------
    # PHASE 2: CATEGORIES
    # --------------------------------------------------

    async def import_categories(self):
        logger.info("Fetching WordPress categories...")
        categories = await self.client.fetch_categories()
        logger.info(f"Found {len(categories)} categories")

        for record in categories:
            external_id = record_id(record)
            title = record_title(record, "name", f"Category {external_id}")
            await self._process(
                ImportItemType.CATEGORY, external_id, title, partial(self._import_category, record)
            )

        summary = self.report.summary.categories
        logger.info(
            f"Categories: {summary.created} created, {summary.updated} updated, {summary.failed} failed"
        )

    async def _import_category(self, record: Dict[str, Any]) -> ImportOutcome:
        wp_category = WordPressCategory.model_validate(record)
        validation = validate_category(wp_category)
        if not validation.valid:
            title = wp_category.name or f"Category {wp_category.id}"
            return self._failed(ImportItemType.CATEGORY, wp_category.id, title, validation.errors)

        data = map_category_to_category(wp_category)
        category = await self.loader.find_category(slug=data.slug, name=data.name)

        if category:
            if not self.skip_existing:
                category = await self.loader.update_category(category, data)
            action = self._existing_action()
        else:
            category = await self.loader.create_category(data)
            action = ImportAction.CREATED

        self.category_ids[wp_category.id] = category.id
        return ImportOutcome(
            type=ImportItemType.CATEGORY,
            external_id=wp_category.id,
            title=data.name,
            success=True,
            action=action,
            slug=category.slug
        )

    # --------------------------------------------------
    # PHASE 3: POSTS -> ARTICLES
    # --------------------------------------------------

    async def import_articles(self):
        logger.info(f"Fetching WordPress posts (statuses: {', '.join(self.import_statuses)})...")
        posts = await self.client.fetch_posts(self.import_statuses)
        logger.info(f"Found {len(posts)} posts")

        for record in posts:
            external_id = record_id(record)
            title = record_title(record, "title", f"Post {external_id}")
            await self._process(ImportItemType.ARTICLE, external_id, title, partial(self._import_post, record))

        summary = self.report.summary.articles
        logger.info(f"Articles: {summary.created} created, {summary.updated} updated, {summary.failed} failed")

    async def _resolve_category_id(self, post: WordPressPost) -> int:
        """First mapped category of the post, else the default category"""
        for external_id in post.categories:
            if external_id in self.category_ids:
                return self.category_ids[external_id]

        if self._default_category_id is None:
            category = await self.loader.get_or_create_default_category()
            self._default_category_id = category.id
        return self._default_category_id

    async def _fetch_media(self, media_id: int) -> Optional[WordPressMedia]:
        """Best effort; a failed fetch only drops the featured image"""
        if not media_id or media_id <= 0:
            return None
        try:
            return await self.client.fetch_media(media_id)
        except (ExtractionError, PydanticValidationError) as e:
            logger.warning(f"Failed to fetch media {media_id}: {e}")
            return None
        finally:
            await asyncio.sleep(self.media_delay)

    async def _import_post(self, record: Dict[str, Any]) -> ImportOutcome:
        post = WordPressPost.model_validate(record)
        title = strip_html(post.title_text) or f"Post {post.id}"

        validation = validate_post(post)
        if not validation.valid:
            return self._failed(ImportItemType.ARTICLE, post.id, title, validation.errors)

        editor_id = self.editor_ids.get(post.author)
        if editor_id is None:
            return self._failed(
                ImportItemType.ARTICLE, post.id, title,
                [f"Author with WordPress ID {post.author} not found"]
            )

        category_id = await self._resolve_category_id(post)
        media = await self._fetch_media(post.featured_media)
        data = map_post_to_article(post, media)

        article = await self.loader.find_article_by_slug(data.slug)
        if article:
            if not self.skip_existing:
                article = await self.loader.update_article(article, data, category_id, editor_id)
            action = self._existing_action()
        else:
            article = await self.loader.create_article(data, category_id, editor_id)
            action = ImportAction.CREATED

        return ImportOutcome(
            type=ImportItemType.ARTICLE,
            external_id=post.id,
            title=data.title,
            success=True,
            action=action,
            slug=article.slug
        )
