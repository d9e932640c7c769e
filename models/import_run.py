from sqlalchemy import Column, Integer, String, Enum, DateTime, Float, Text, Index, JSON, Uuid
from datetime import datetime
import uuid
from models.base import Base, ImportSourceType, ImportStatus


class ImportRun(Base):
    """
    Audit record for each import execution.

    Purpose:
    - Trail of REST and CSV imports
    - Summary counts per run for the admin UI
    - Error tracking when a run aborts

    Nothing here is read back by an import; each run starts fresh.
    """
    __tablename__ = "import_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False, index=True)

    # Source identification
    source_type = Column(Enum(ImportSourceType), nullable=False, index=True)
    source_name = Column(String(500), nullable=False)

    status = Column(Enum(ImportStatus), default=ImportStatus.RUNNING, nullable=False, index=True)

    # Timestamps
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Statistics
    items_total = Column(Integer, default=0)
    items_failed = Column(Integer, default=0)
    summary = Column(JSON, nullable=True)

    # Error tracking
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_import_run_source_started", "source_type", "started_at"),
    )
