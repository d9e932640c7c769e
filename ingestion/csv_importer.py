"""
CSV import driver.

Runs every parsed row through validation and the same natural-key upserts
as the REST importer. Categories and editors are resolved by lookup or
created on the spot since a CSV row carries no source-system ids.
"""

import time
from datetime import datetime
from typing import List, Optional
from dataclasses import dataclass, field
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.base import ImportRunTracker, status_for
from ingestion.extractors.csv_parser import parse_csv, extract_row_data, CSVRow
from ingestion.loaders.content_loader import ContentLoader
from ingestion.transformers.text import to_slug, calculate_read_time
from ingestion.transformers.dates import parse_datetime
from ingestion.transformers.validators import validate_csv_row, first_category_name
from schemas.normalized import CSVRowData, ArticleData, CategoryData, EditorData
from schemas.api import ImportAction, CSVImportResponse
from models.base import ImportSourceType
from core.config import settings

logger = logging.getLogger(__name__)

PUBLISHED_STATUS = "publish"

# Kept on update when the row leaves them blank
PRESERVED_ON_UPDATE = (
    "featured_image_title",
    "featured_image_caption",
    "featured_image_description",
    "featured_image_alt_text",
    "meta_title",
    "meta_description",
    "featured",
)


@dataclass
class CSVRowResult:
    row_number: int
    title: str
    success: bool
    action: ImportAction
    slug: Optional[str] = None
    errors: List[str] = field(default_factory=list)


@dataclass
class CSVImportReport:
    results: List[CSVRowResult] = field(default_factory=list)
    max_errors: int = 20

    @property
    def success(self) -> int:
        return len([r for r in self.results if r.success])

    @property
    def failed(self) -> int:
        return len([r for r in self.results if not r.success])

    @property
    def created(self) -> int:
        return len([r for r in self.results if r.success and r.action == ImportAction.CREATED])

    @property
    def updated(self) -> int:
        return len([r for r in self.results if r.success and r.action == ImportAction.UPDATED])

    @property
    def errors(self) -> List[str]:
        """First max_errors failures as "Row {n}: {message}" """
        messages = [
            f"Row {r.row_number}: {'; '.join(r.errors)}"
            for r in self.results if not r.success
        ]
        return messages[:self.max_errors]

    def to_response(self) -> CSVImportResponse:
        return CSVImportResponse(
            success=self.success,
            failed=self.failed,
            created=self.created,
            updated=self.updated,
            errors=self.errors
        )


class CSVImporter:
    """
    Import articles from a WordPress-style CSV export.

    Usage:
        report = await CSVImporter(session).import_text(text, source_name="posts.csv")
    """

    def __init__(self, db_session: AsyncSession, max_errors: Optional[int] = None):
        self.db = db_session
        self.loader = ContentLoader(db_session)
        self.max_errors = max_errors or settings.CSV_MAX_REPORTED_ERRORS

    async def import_text(self, text: str, source_name: str = "upload.csv") -> CSVImportReport:
        """
        Import every row of the CSV text.

        Raises:
            CSVExtractionError: If the text is empty
        """
        document = parse_csv(text)
        report = CSVImportReport(max_errors=self.max_errors)

        tracker = ImportRunTracker(self.db, ImportSourceType.CSV, source_name)
        await tracker.start()

        for row in document.rows:
            report.results.append(await self._process_row(row))

        await tracker.complete(
            status_for(len(report.results), report.failed),
            items_total=len(report.results),
            items_failed=report.failed,
            summary={
                "success": report.success,
                "failed": report.failed,
                "created": report.created,
                "updated": report.updated
            }
        )
        logger.info(
            f"CSV import finished: {report.created} created, {report.updated} updated, "
            f"{report.failed} failed"
        )
        return report

    async def _process_row(self, row: CSVRow) -> CSVRowResult:
        data = extract_row_data(row)
        title = data.title or f"Row {row.row_number}"

        validation = validate_csv_row(data)
        if not validation.valid:
            logger.warning(f"Row {row.row_number} failed validation: {'; '.join(validation.errors)}")
            return CSVRowResult(
                row_number=row.row_number,
                title=title,
                success=False,
                action=ImportAction.SKIPPED,
                errors=validation.errors
            )

        try:
            action, slug = await self._import_row(data)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to import row {row.row_number}: {e}")
            return CSVRowResult(
                row_number=row.row_number,
                title=title,
                success=False,
                action=ImportAction.SKIPPED,
                errors=[f"Import error: {e}"]
            )

        return CSVRowResult(
            row_number=row.row_number,
            title=data.title,
            success=True,
            action=action,
            slug=slug
        )

    async def _resolve_category_id(self, data: CSVRowData) -> int:
        name = first_category_name(data.category_raw or settings.DEFAULT_CATEGORY_NAME)
        slug = to_slug(name) or settings.DEFAULT_CATEGORY_SLUG
        name = name or settings.DEFAULT_CATEGORY_NAME

        category = await self.loader.find_category(slug=slug, name=name)
        if category is None:
            category = await self.loader.create_category(CategoryData(name=name, slug=slug))
        return category.id

    async def _resolve_editor_id(self, data: CSVRowData) -> int:
        """By email when the row has one, then by display name, else create"""
        name = data.editor_name
        username = data.author_username
        email = (
            data.author_email
            or f"{(username or 'admin').lower()}@{settings.CSV_PLACEHOLDER_EMAIL_DOMAIN}"
        ).strip()

        editor = await self.loader.find_editor(
            email=email if data.author_email else None,
            name=name
        )
        if editor is None:
            slug = (
                to_slug(name)
                or to_slug(username or "admin")
                or f"editor-{int(time.time() * 1000)}"
            )
            editor = await self.loader.create_editor(
                EditorData(name=name, email=email, slug=slug),
                fallback_domain=settings.CSV_PLACEHOLDER_EMAIL_DOMAIN
            )
        return editor.id

    async def _import_row(self, data: CSVRowData):
        category_id = await self._resolve_category_id(data)
        editor_id = await self._resolve_editor_id(data)

        base_slug = to_slug(data.final_slug or data.title) or "article"
        published = data.status.lower() == PUBLISHED_STATUS
        row_date = parse_datetime(data.date)

        existing = await self.loader.find_article_by_slug(base_slug)

        published_at = None
        if published:
            previous = existing.published_at if existing else None
            published_at = row_date or previous or datetime.utcnow()

        article_data = ArticleData(
            title=data.title.strip(),
            slug=base_slug,
            excerpt=data.excerpt or None,
            content=data.content,
            published=published,
            published_at=published_at,
            scheduled_at=None,
            featured_image=data.image_url or None,
            featured_image_title=data.image_title or None,
            featured_image_caption=data.image_caption or None,
            featured_image_description=data.image_description or None,
            featured_image_alt_text=data.image_alt_text or None,
            meta_title=data.meta_title or None,
            meta_description=data.meta_description or None,
            read_time=calculate_read_time(data.content),
        )

        if existing:
            preserve = PRESERVED_ON_UPDATE if published else PRESERVED_ON_UPDATE + ("scheduled_at",)
            article = await self.loader.update_article(
                existing, article_data, category_id, editor_id, preserve=preserve
            )
            return ImportAction.UPDATED, article.slug

        article = await self.loader.create_article(article_data, category_id, editor_id)
        return ImportAction.CREATED, article.slug
