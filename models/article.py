from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base


class Article(Base):
    """
    Published or scheduled article.

    Field Mapping Strategy:

    WordPress REST post:
    - title.rendered -> title (tags stripped, entities decoded)
    - excerpt.rendered -> excerpt (stripped, max 500 chars)
    - content.rendered -> content (HTML kept, entities decoded)
    - status "publish" -> published + published_at
    - status "future" -> scheduled_at
    - sticky -> featured
    - meta._yoast_wpseo_title / _yoast_wpseo_metadesc -> meta_title / meta_description
    - featured_media -> featured_image_* (from the media resource)

    CSV row:
    - title / post_title -> title
    - content / post_content -> content
    - image url -> featured_image
    - status "publish" -> published
    - featured is left to the admin UI
    """
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core fields
    title = Column(String(500), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)

    # Publication lifecycle
    published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime, nullable=True)
    scheduled_at = Column(DateTime, nullable=True)

    # Featured image
    featured_image = Column(String(2048), nullable=True)
    featured_image_title = Column(String(500), nullable=True)
    featured_image_caption = Column(Text, nullable=True)
    featured_image_description = Column(Text, nullable=True)
    featured_image_alt_text = Column(String(500), nullable=True)

    # SEO
    meta_title = Column(String(200), nullable=True)
    meta_description = Column(String(500), nullable=True)

    read_time = Column(Integer, nullable=False, default=1)
    featured = Column(Boolean, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    editor_id = Column(Integer, ForeignKey("editors.id"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="articles")
    editor = relationship("Editor", back_populates="articles")

    __table_args__ = (
        Index("idx_article_scheduled", "published", "scheduled_at"),
    )
