"""
Advisory validation for imported records.

Validators collect every problem they find and return a ValidationResult;
they never raise. Invalid records are skipped and reported by the caller.
"""

import re
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse
from schemas.wordpress import WordPressUser, WordPressCategory, WordPressPost
from schemas.normalized import ValidationResult, CSVRowData
from ingestion.transformers.text import strip_html
from ingestion.transformers.dates import parse_datetime, one_year_from
from ingestion.transformers.wordpress_mapper import SEO_TITLE_KEY, SEO_DESCRIPTION_KEY

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

USER_NAME_MAX = 200
CATEGORY_NAME_MAX = 100
TITLE_MAX = 500
CONTENT_MIN = 10
CONTENT_MAX = 1_000_000
SLUG_MAX = 200
EXCERPT_MAX = 500
META_TITLE_MAX = 60
META_DESCRIPTION_MAX = 160

CSV_STATUSES = ("publish", "draft", "pending", "private")


def _check_date(value: str, errors: List[str], now: Optional[datetime] = None, hint: str = ""):
    parsed = parse_datetime(value)
    if parsed is None:
        errors.append(f"Invalid date format: {value}{hint}")
        return
    if parsed > one_year_from(now or datetime.utcnow()):
        errors.append(f"Date is too far in the future: {value}")


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def validate_user(user: WordPressUser) -> ValidationResult:
    errors = []

    if not user.name or not user.name.strip():
        errors.append("User name is required")

    if user.name and len(user.name) > USER_NAME_MAX:
        errors.append(f"User name is too long (max {USER_NAME_MAX} characters)")

    if user.email and not EMAIL_PATTERN.match(user.email):
        errors.append("Invalid email format")

    return ValidationResult.from_errors(errors)


def validate_category(category: WordPressCategory) -> ValidationResult:
    errors = []

    if not category.name or not category.name.strip():
        errors.append("Category name is required")

    if category.name and len(category.name) > CATEGORY_NAME_MAX:
        errors.append(f"Category name is too long (max {CATEGORY_NAME_MAX} characters)")

    return ValidationResult.from_errors(errors)


def validate_post(post: WordPressPost, now: Optional[datetime] = None) -> ValidationResult:
    """
    Validate a WordPress post before mapping.

    Length limits apply to the tag-stripped text except for the raw content
    ceiling, which guards the stored HTML size.
    """
    errors = []

    title = strip_html(post.title_text)
    if not title.strip():
        errors.append("Post title is required")
    elif len(title) > TITLE_MAX:
        errors.append(f"Post title is too long (max {TITLE_MAX} characters)")

    content = post.content_html
    if not content.strip():
        errors.append("Post content is required")
    else:
        if len(strip_html(content)) < CONTENT_MIN:
            errors.append(f"Post content is too short (minimum {CONTENT_MIN} characters)")
        if len(content) > CONTENT_MAX:
            errors.append("Post content is too long (max 1,000,000 characters)")

    if not post.slug or not post.slug.strip():
        errors.append("Post slug is required")
    elif len(post.slug) > SLUG_MAX:
        errors.append(f"Post slug is too long (max {SLUG_MAX} characters)")

    if post.excerpt_html and len(strip_html(post.excerpt_html)) > EXCERPT_MAX:
        errors.append(f"Post excerpt is too long (max {EXCERPT_MAX} characters)")

    meta_title = post.meta_value(SEO_TITLE_KEY)
    if meta_title and len(strip_html(meta_title)) > META_TITLE_MAX:
        errors.append(f"Meta title is too long (max {META_TITLE_MAX} characters recommended)")

    meta_description = post.meta_value(SEO_DESCRIPTION_KEY)
    if meta_description and len(strip_html(meta_description)) > META_DESCRIPTION_MAX:
        errors.append(f"Meta description is too long (max {META_DESCRIPTION_MAX} characters recommended)")

    if post.date:
        _check_date(post.date, errors, now)

    return ValidationResult.from_errors(errors)


def validate_csv_row(data: CSVRowData, now: Optional[datetime] = None) -> ValidationResult:
    """Validate one CSV row; content limits apply to the raw cell text"""
    errors = []

    title = data.title.strip()
    if not title:
        errors.append("Title is required")
    elif len(title) > TITLE_MAX:
        errors.append(f"Title is too long (max {TITLE_MAX} characters)")

    content = data.content.strip()
    if not content:
        errors.append("Content is required")
    else:
        if len(content) < CONTENT_MIN:
            errors.append(f"Content is too short (minimum {CONTENT_MIN} characters)")
        if len(content) > CONTENT_MAX:
            errors.append("Content is too long (max 1,000,000 characters)")

    if data.excerpt.strip() and len(data.excerpt.strip()) > EXCERPT_MAX:
        errors.append(f'Excerpt is too long (max {EXCERPT_MAX} characters): "{data.excerpt[:50]}..."')

    if data.date:
        _check_date(data.date, errors, now, hint=". Expected ISO format (YYYY-MM-DD)")

    if data.author_email.strip() and not EMAIL_PATTERN.match(data.author_email.strip()):
        errors.append(f'Invalid email format: "{data.author_email}"')

    if data.image_url.strip() and not _is_absolute_url(data.image_url.strip()):
        errors.append(f'Invalid image URL format: "{data.image_url}"')

    permalink = data.permalink.strip()
    if permalink and not _is_absolute_url(permalink) and not permalink.startswith("/"):
        errors.append(f'Invalid permalink format: "{data.permalink}"')

    if data.status and data.status.lower() not in CSV_STATUSES:
        errors.append(f'Invalid status: "{data.status}". Valid values are: {", ".join(CSV_STATUSES)}')

    if data.final_slug.strip() and len(data.final_slug.strip()) > SLUG_MAX:
        errors.append(f'Slug is too long (max {SLUG_MAX} characters): "{data.final_slug}"')

    if data.category_raw.strip():
        category_name = first_category_name(data.category_raw)
        if len(category_name) > CATEGORY_NAME_MAX:
            errors.append(f'Category name is too long (max {CATEGORY_NAME_MAX} characters): "{category_name}"')

    if len(data.editor_name) > USER_NAME_MAX:
        errors.append(f'Editor name is too long (max {USER_NAME_MAX} characters): "{data.editor_name}"')

    if data.meta_title.strip() and len(data.meta_title.strip()) > META_TITLE_MAX:
        errors.append(f'Meta title is too long (max {META_TITLE_MAX} characters recommended for SEO): "{data.meta_title}"')

    if data.meta_description.strip() and len(data.meta_description.strip()) > META_DESCRIPTION_MAX:
        errors.append(
            f'Meta description is too long (max {META_DESCRIPTION_MAX} characters recommended for SEO): '
            f'"{data.meta_description[:50]}..."'
        )

    return ValidationResult.from_errors(errors)


def first_category_name(category_raw: str) -> str:
    """First of several ;, | or , separated category names"""
    return re.split(r"[;|,]", category_raw.replace("&amp;", "&"))[0].strip()
