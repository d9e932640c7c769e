"""
Create-or-update persistence for editors, categories and articles.

Both importers match on natural keys (email, slug, name) rather than on any
source-system id, so re-running an import updates rows in place.
"""

import time
from typing import Optional, Sequence, Type
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from models.base import Base
from models.editor import Editor
from models.category import Category
from models.article import Article
from schemas.normalized import EditorData, CategoryData, ArticleData
from core.config import settings
from core.exceptions import UpsertError
import logging

logger = logging.getLogger(__name__)


class ContentLoader:
    """
    Natural-key upserts shared by the REST and CSV importers.

    Ensures:
    - Unique slugs on create via a numeric suffix (-1, -2, ...)
    - Unique editor emails on create via a timestamped local part
    - Slugs of existing articles are never renamed
    - One commit per write, so a failed item never undoes earlier items
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _first(self, stmt):
        result = await self.db.execute(stmt.limit(1))
        return result.scalars().first()

    async def find_editor(self, email: Optional[str] = None, name: Optional[str] = None) -> Optional[Editor]:
        """Find an editor by email, falling back to display name"""
        if email:
            editor = await self._first(select(Editor).where(Editor.email == email))
            if editor:
                return editor
        if name:
            return await self._first(select(Editor).where(Editor.name == name).order_by(Editor.id))
        return None

    async def find_category(self, slug: Optional[str] = None, name: Optional[str] = None) -> Optional[Category]:
        """Find a category by slug, falling back to name"""
        if slug:
            category = await self._first(select(Category).where(Category.slug == slug))
            if category:
                return category
        if name:
            return await self._first(select(Category).where(Category.name == name).order_by(Category.id))
        return None

    async def find_article_by_slug(self, slug: str) -> Optional[Article]:
        return await self._first(select(Article).where(Article.slug == slug))

    async def _slug_taken(self, model: Type[Base], slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(model.id).where(model.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        return await self._first(stmt) is not None

    async def unique_slug(self, model: Type[Base], base_slug: str) -> str:
        """base_slug, or base_slug-1, base_slug-2, ... whichever is free first"""
        candidate = base_slug
        counter = 1
        while await self._slug_taken(model, candidate):
            candidate = f"{base_slug}-{counter}"
            counter += 1
        return candidate

    async def unique_email(self, email: str, fallback_domain: str) -> str:
        """The email itself if unused, else local-{epoch millis}@domain"""
        if await self._first(select(Editor.id).where(Editor.email == email)) is None:
            return email
        local, _, domain = email.partition("@")
        return f"{local}-{int(time.time() * 1000)}@{domain or fallback_domain}"

    async def _commit(self, instance: Base, natural_key: str):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                f"Failed to save {instance.__tablename__} '{natural_key}': {e.__class__.__name__}",
                context={"natural_key": natural_key, "table_name": instance.__tablename__},
                original_exception=e
            )
        await self.db.refresh(instance)

    # ------------------------------------------------------------------
    # Editors
    # ------------------------------------------------------------------

    async def create_editor(
        self,
        data: EditorData,
        fallback_domain: Optional[str] = None
    ) -> Editor:
        editor = Editor(
            name=data.name,
            email=await self.unique_email(
                data.email, fallback_domain or settings.WORDPRESS_PLACEHOLDER_EMAIL_DOMAIN
            ),
            slug=await self.unique_slug(Editor, data.slug),
            bio=data.bio or None,
            avatar=data.avatar or None,
        )
        self.db.add(editor)
        await self._commit(editor, data.email)
        logger.debug(f"Created editor {editor.id} ({editor.slug})")
        return editor

    async def update_editor(self, editor: Editor, data: EditorData) -> Editor:
        """Refresh name, bio, avatar, and slug when the new slug is free"""
        editor.name = data.name
        editor.bio = data.bio or None
        editor.avatar = data.avatar or None
        if data.slug and data.slug != editor.slug:
            if await self._slug_taken(Editor, data.slug, exclude_id=editor.id):
                logger.warning(f"Keeping slug {editor.slug} for editor {editor.id}; {data.slug} is taken")
            else:
                editor.slug = data.slug
        await self._commit(editor, editor.email)
        return editor

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def create_category(self, data: CategoryData) -> Category:
        category = Category(
            name=data.name,
            slug=await self.unique_slug(Category, data.slug),
            description=data.description or None,
        )
        self.db.add(category)
        await self._commit(category, data.slug)
        logger.debug(f"Created category {category.id} ({category.slug})")
        return category

    async def update_category(self, category: Category, data: CategoryData) -> Category:
        category.name = data.name
        category.description = data.description or None
        if data.slug and data.slug != category.slug:
            if await self._slug_taken(Category, data.slug, exclude_id=category.id):
                logger.warning(f"Keeping slug {category.slug} for category {category.id}; {data.slug} is taken")
            else:
                category.slug = data.slug
        await self._commit(category, category.slug)
        return category

    async def get_or_create_default_category(self) -> Category:
        """The fallback "General" category, created on first use"""
        category = await self.find_category(slug=settings.DEFAULT_CATEGORY_SLUG)
        if category:
            return category
        logger.info(f"Creating default category '{settings.DEFAULT_CATEGORY_NAME}'")
        return await self.create_category(
            CategoryData(name=settings.DEFAULT_CATEGORY_NAME, slug=settings.DEFAULT_CATEGORY_SLUG)
        )

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def create_article(self, data: ArticleData, category_id: int, editor_id: int) -> Article:
        fields = data.model_dump(exclude={"slug"})
        article = Article(
            slug=await self.unique_slug(Article, data.slug),
            category_id=category_id,
            editor_id=editor_id,
            **fields
        )
        self.db.add(article)
        await self._commit(article, data.slug)
        logger.debug(f"Created article {article.id} ({article.slug})")
        return article

    async def update_article(
        self,
        article: Article,
        data: ArticleData,
        category_id: int,
        editor_id: int,
        preserve: Sequence[str] = ()
    ) -> Article:
        """
        Overwrite an article's fields in place; the slug is never changed.

        Args:
            preserve: Fields left untouched when their new value is None
        """
        for name, value in data.model_dump(exclude={"slug"}).items():
            if value is None and name in preserve:
                continue
            setattr(article, name, value)
        article.category_id = category_id
        article.editor_id = editor_id
        await self._commit(article, article.slug)
        return article
