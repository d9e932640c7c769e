"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (ImportSourceType, ImportStatus)
    editor: Article authors
    category: Article categories
    article: Articles with publication, image and SEO fields
    import_run: Audit trail of import executions

Natural Keys:
    Importers never store source-system ids. Records are matched on
    business keys instead:

    - Editor: email, then name
    - Category: slug, then name
    - Article: slug

Usage:
    from models.article import Article
    from models.base import ImportSourceType, ImportStatus

Relationships:
    - Category → Article (one-to-many)
    - Editor → Article (one-to-many)
"""

__all__ = [
    "Base",
    "ImportSourceType",
    "ImportStatus",
    "Editor",
    "Category",
    "Article",
    "ImportRun",
]
