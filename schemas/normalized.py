"""
Pydantic schemas for records mapped into the CMS shape
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ValidationResult(BaseModel):
    """Outcome of an advisory validation pass; validators never raise."""
    valid: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


class EditorData(BaseModel):
    name: str
    email: str
    slug: str
    bio: Optional[str] = None
    avatar: Optional[str] = None


class CategoryData(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None


class ArticleData(BaseModel):
    """
    Article fields produced by the mappers.

    Ensures:
    - published and scheduled_at are never both set
    - read_time is at least one minute
    """
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    published: bool = False
    published_at: Optional[datetime] = None
    scheduled_at: Optional[datetime] = None
    featured_image: Optional[str] = None
    featured_image_title: Optional[str] = None
    featured_image_caption: Optional[str] = None
    featured_image_description: Optional[str] = None
    featured_image_alt_text: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    read_time: int = Field(1, ge=1)
    featured: Optional[bool] = None


class CSVRowData(BaseModel):
    """Canonical fields pulled out of one CSV row through the alias table"""
    title: str = ""
    content: str = ""
    excerpt: str = ""
    date: str = ""
    category_raw: str = ""
    image_url: str = ""
    image_title: str = ""
    image_caption: str = ""
    image_description: str = ""
    image_alt_text: str = ""
    status: str = ""
    author_first: str = ""
    author_last: str = ""
    author_username: str = ""
    author_email: str = ""
    permalink: str = ""
    slug_provided: str = ""
    meta_title: str = ""
    meta_description: str = ""
    final_slug: str = ""

    @property
    def editor_name(self) -> str:
        full_name = " ".join(p for p in [self.author_first, self.author_last] if p).strip()
        return full_name or self.author_username or "Admin"
