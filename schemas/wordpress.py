"""
Pydantic schemas for records returned by the WordPress REST API (wp/v2)

Only the fields the importer reads are declared; everything else in the
payload is ignored. Fields are lenient (mostly optional) so that a bad record
reaches the validators and is reported instead of failing to parse.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any


class Rendered(BaseModel):
    """WordPress wraps HTML fields as {"rendered": "..."}"""
    rendered: Optional[str] = None


class WordPressUser(BaseModel):
    id: int
    name: Optional[str] = None
    slug: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    avatar_urls: Optional[Dict[str, str]] = None


class WordPressCategory(BaseModel):
    id: int
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None


class WordPressMedia(BaseModel):
    id: int
    source_url: Optional[str] = None
    alt_text: Optional[str] = None
    title: Optional[Rendered] = None
    caption: Optional[Rendered] = None
    description: Optional[Rendered] = None


class WordPressPost(BaseModel):
    id: int
    title: Optional[Rendered] = None
    slug: Optional[str] = None
    excerpt: Optional[Rendered] = None
    content: Optional[Rendered] = None
    status: Optional[str] = None
    date: Optional[str] = None
    date_gmt: Optional[str] = None
    modified: Optional[str] = None
    featured_media: int = 0
    categories: List[int] = []
    author: int = 0
    meta: Dict[str, Any] = {}
    sticky: bool = False

    @field_validator("meta", mode="before")
    @classmethod
    def clean_meta(cls, v):
        """WordPress sends an empty list when a post has no registered meta"""
        if not isinstance(v, dict):
            return {}
        return v

    @field_validator("categories", mode="before")
    @classmethod
    def clean_categories(cls, v):
        if v is None:
            return []
        return v

    @field_validator("featured_media", "author", mode="before")
    @classmethod
    def clean_ids(cls, v):
        if v is None or v == "":
            return 0
        return v

    @property
    def title_text(self) -> str:
        return (self.title.rendered if self.title else None) or ""

    @property
    def excerpt_html(self) -> str:
        return (self.excerpt.rendered if self.excerpt else None) or ""

    @property
    def content_html(self) -> str:
        return (self.content.rendered if self.content else None) or ""

    def meta_value(self, key: str) -> Optional[str]:
        value = self.meta.get(key)
        if value is None or value == "":
            return None
        return str(value)
