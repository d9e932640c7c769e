"""
Map WordPress REST API records onto the CMS schema
"""

from typing import Optional
from core.config import settings
from schemas.wordpress import WordPressUser, WordPressCategory, WordPressPost, WordPressMedia
from schemas.normalized import EditorData, CategoryData, ArticleData
from ingestion.transformers.text import to_slug, decode_html_entities, strip_html, calculate_read_time
from ingestion.transformers.dates import parse_datetime

PUBLISHED_STATUS = "publish"
SCHEDULED_STATUS = "future"

SEO_TITLE_KEY = "_yoast_wpseo_title"
SEO_DESCRIPTION_KEY = "_yoast_wpseo_metadesc"

EXCERPT_MAX_LENGTH = 500

# Largest avatar first
AVATAR_SIZES = ("96", "48", "24")


def map_user_to_editor(user: WordPressUser) -> EditorData:
    """
    Map a WordPress user to editor fields.

    WordPress hides email addresses from unauthenticated requests, so a
    placeholder address is derived from the slug when it is missing.
    """
    slug = user.slug or to_slug(user.name or "") or f"user-{user.id}"
    email = user.email or f"{slug}@{settings.WORDPRESS_PLACEHOLDER_EMAIL_DOMAIN}"

    avatar_urls = user.avatar_urls or {}
    avatar = next((avatar_urls[size] for size in AVATAR_SIZES if avatar_urls.get(size)), None)

    return EditorData(
        name=decode_html_entities(user.name or ""),
        email=email,
        slug=slug,
        bio=decode_html_entities(user.description) if user.description else None,
        avatar=avatar,
    )


def map_category_to_category(category: WordPressCategory) -> CategoryData:
    decoded_name = decode_html_entities(category.name or "")
    return CategoryData(
        name=decoded_name,
        slug=category.slug or to_slug(decoded_name),
        description=decode_html_entities(category.description) if category.description else None,
    )


def _rendered_text(field) -> Optional[str]:
    if field is None or not field.rendered:
        return None
    return strip_html(field.rendered) or None


def map_post_to_article(post: WordPressPost, media: Optional[WordPressMedia] = None) -> ArticleData:
    """
    Map a WordPress post (and its featured media, if fetched) to article fields.

    A "future" post carries its scheduled publish time in its own date field,
    so the same date feeds either published_at or scheduled_at.
    """
    is_published = post.status == PUBLISHED_STATUS
    is_scheduled = post.status == SCHEDULED_STATUS
    post_date = parse_datetime(post.date)

    excerpt = strip_html(post.excerpt_html)[:EXCERPT_MAX_LENGTH]
    content = decode_html_entities(post.content_html)

    meta_title = post.meta_value(SEO_TITLE_KEY)
    meta_description = post.meta_value(SEO_DESCRIPTION_KEY)

    return ArticleData(
        title=strip_html(post.title_text),
        slug=post.slug or "",
        excerpt=excerpt or None,
        content=content,
        published=is_published,
        published_at=post_date if is_published else None,
        scheduled_at=post_date if is_scheduled else None,
        featured_image=(media.source_url or None) if media else None,
        featured_image_title=_rendered_text(media.title) if media else None,
        featured_image_caption=_rendered_text(media.caption) if media else None,
        featured_image_description=_rendered_text(media.description) if media else None,
        featured_image_alt_text=decode_html_entities(media.alt_text) if media and media.alt_text else None,
        meta_title=decode_html_entities(meta_title) if meta_title else None,
        meta_description=decode_html_entities(meta_description) if meta_description else None,
        read_time=calculate_read_time(content),
        featured=post.sticky is True,
    )
