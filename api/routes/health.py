"""
Health check endpoint with database and last import status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, ImportRunResponse
from models.import_run import ImportRun
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - The most recent import run, if any
    """

    # Check database connectivity
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    last_import = None

    if db_connected:
        try:
            result = await db.execute(
                select(ImportRun).order_by(ImportRun.started_at.desc(), ImportRun.id.desc()).limit(1)
            )
            run = result.scalars().first()
            if run:
                last_import = ImportRunResponse.from_orm(run)
        except Exception as e:
            logger.error(f"Failed to fetch last import run: {str(e)}")

    return HealthCheckResponse(
        status="healthy" if db_connected else "unhealthy",
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        last_import=last_import
    )
