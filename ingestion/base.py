"""
Import run audit tracking shared by the REST and CSV importers
"""

from typing import Dict, Any, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from models.import_run import ImportRun
from models.base import ImportSourceType, ImportStatus
import logging
import uuid

logger = logging.getLogger(__name__)


class ImportRunTracker:
    """
    Writes one ImportRun row per import execution.

    The row is committed as soon as the run starts so a crashed run is still
    visible as "running". Item-level rollbacks expire it, so it is refreshed
    before being completed.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        source_type: ImportSourceType,
        source_name: str
    ):
        self.db = db_session
        self.source_type = source_type
        self.source_name = source_name
        self.import_run: Optional[ImportRun] = None

    async def start(self) -> ImportRun:
        """Create the import run record"""
        self.import_run = ImportRun(
            run_id=uuid.uuid4(),
            source_type=self.source_type,
            source_name=self.source_name[:500],
            status=ImportStatus.RUNNING,
            started_at=datetime.utcnow()
        )
        self.db.add(self.import_run)
        await self.db.commit()
        await self.db.refresh(self.import_run)
        logger.info(f"Started {self.source_type.value} import run {self.import_run.run_id}")
        return self.import_run

    async def complete(
        self,
        status: ImportStatus,
        items_total: int = 0,
        items_failed: int = 0,
        summary: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None
    ) -> Optional[ImportRun]:
        """Complete the import run with statistics"""
        if self.import_run is None:
            return None

        await self.db.refresh(self.import_run)
        self.import_run.status = status
        self.import_run.completed_at = datetime.utcnow()
        self.import_run.duration_seconds = (
            self.import_run.completed_at - self.import_run.started_at
        ).total_seconds()
        self.import_run.items_total = items_total
        self.import_run.items_failed = items_failed
        self.import_run.summary = summary
        self.import_run.error_message = error_message

        await self.db.commit()
        logger.info(
            f"Import run {self.import_run.run_id} finished with status {status.value} "
            f"({items_failed}/{items_total} failed, {self.import_run.duration_seconds:.2f}s)"
        )
        return self.import_run


def status_for(items_total: int, items_failed: int) -> ImportStatus:
    """SUCCESS when nothing failed, FAILED when everything did, else PARTIAL"""
    if items_failed == 0:
        return ImportStatus.SUCCESS
    if items_failed >= items_total:
        return ImportStatus.FAILED
    return ImportStatus.PARTIAL
