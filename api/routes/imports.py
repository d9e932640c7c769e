"""
Import endpoints: WordPress REST, CSV upload, and the import run history
"""

from typing import Optional, Union
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from api.dependencies import get_db
from schemas.api import (
    WordPressImportRequest,
    WordPressImportResponse,
    ConnectionTestResponse,
    CSVImportResponse,
    ImportRunResponse,
    ImportRunListResponse,
    ErrorResponse
)
from models.import_run import ImportRun
from core.config import settings
from ingestion.extractors.wordpress_client import WordPressClient, WordPressConfig, normalize_wordpress_url
from ingestion.csv_importer import CSVImporter
from ingestion.runner import WordPressImportRunner
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/import", tags=["Import"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")


def build_client(body: WordPressImportRequest) -> WordPressClient:
    """WordPress client for the site named in the request body"""
    config = WordPressConfig(
        base_url=normalize_wordpress_url(body.source_url),
        username=body.username or None,
        password=body.password or None,
        timeout=settings.WORDPRESS_TIMEOUT
    )
    return WordPressClient(config)


def get_client_factory():
    """Dependency returning the client constructor, overridable per app"""
    return build_client


@router.post(
    "/wordpress-rest",
    response_model=Union[WordPressImportResponse, ConnectionTestResponse],
    responses=ERROR_RESPONSES
)
async def import_wordpress_rest(
    request: Request,
    body: WordPressImportRequest,
    db: AsyncSession = Depends(get_db),
    client_factory=Depends(get_client_factory)
):
    """
    Import users, categories and posts from a WordPress site.

    With testOnly set, only the connection test runs. A failed connection
    test returns 400 before anything is written.
    """
    request_id = _request_id(request)
    logger.info(f"[{request_id}] POST /api/import/wordpress-rest - source={body.source_url}")

    async with client_factory(body) as client:
        if body.test_only:
            success, message = await client.test_connection()
            if not success:
                return JSONResponse(status_code=400, content={"error": f"Connection failed: {message}"})
            return ConnectionTestResponse(success=True, message=message)

        runner = WordPressImportRunner(
            db_session=db,
            client=client,
            skip_existing=body.skip_existing,
            import_statuses=body.import_statuses
        )
        report = await runner.run()

    logger.info(f"[{request_id}] WordPress import finished with {report.failed_count} failed item(s)")
    return WordPressImportResponse(
        success=True,
        summary=report.summary,
        results=report.results
    )


@router.post("/csv", response_model=CSVImportResponse, responses=ERROR_RESPONSES)
async def import_csv(
    request: Request,
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db)
):
    """Import articles from an uploaded CSV (or tab-separated) export"""
    request_id = _request_id(request)

    if file is None:
        return JSONResponse(status_code=400, content={"error": "No file provided"})

    raw = await file.read()
    text = raw.decode("utf-8", errors="replace")
    if not text.strip():
        return JSONResponse(status_code=400, content={"error": "Empty file"})

    logger.info(f"[{request_id}] POST /api/import/csv - file={file.filename} ({len(raw)} bytes)")

    report = await CSVImporter(db).import_text(text, source_name=file.filename or "upload.csv")
    return report.to_response()


@router.get("/runs", response_model=ImportRunListResponse)
async def list_import_runs(
    limit: int = Query(10, ge=1, le=100, description="Number of recent runs to return"),
    db: AsyncSession = Depends(get_db)
):
    """Recent import runs, newest first"""
    result = await db.execute(
        select(ImportRun).order_by(ImportRun.started_at.desc(), ImportRun.id.desc()).limit(limit)
    )
    runs = [ImportRunResponse.from_orm(run) for run in result.scalars().all()]
    return ImportRunListResponse(runs=runs, count=len(runs))
