"""
Pydantic schemas for data validation and serialization.

Schemas:
    wordpress: Records returned by the WordPress REST API
    normalized: Records mapped into the CMS shape (editor, category, article)
    api: API endpoint request/response schemas and import outcomes

Features:
    - Lenient parsing of external payloads
    - camelCase aliases on the import endpoints
    - OpenAPI schema generation for FastAPI

Usage:
    from schemas.wordpress import WordPressPost
    from schemas.normalized import ArticleData, ValidationResult
    from schemas.api import ImportOutcome, ImportReport

Example:
    post = WordPressPost.model_validate(raw_post)
    result = validate_post(post)

    if not result.valid:
        print(result.errors)
"""

__all__ = [
    "WordPressUser",
    "WordPressCategory",
    "WordPressPost",
    "WordPressMedia",
    "EditorData",
    "CategoryData",
    "ArticleData",
    "CSVRowData",
    "ValidationResult",
    "ImportOutcome",
    "ImportReport",
    "WordPressImportRequest",
    "CSVImportResponse",
]
