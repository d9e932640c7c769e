from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base


class Editor(Base):
    """
    Article author.

    Matched on import by email first, then by name. Email and slug are
    unique; the importers synthesize a new value on collision.
    """
    __tablename__ = "editors"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(200), nullable=False, index=True)
    email = Column(String(320), nullable=False, unique=True)
    slug = Column(String(200), nullable=False, unique=True)
    bio = Column(Text, nullable=True)
    avatar = Column(String(2048), nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    articles = relationship("Article", back_populates="editor")
