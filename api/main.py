"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from api.routes import health, imports, articles
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
from core.exceptions import ImporterException, ConnectionTestError, CSVExtractionError
from ingestion.scheduler import ArticlePublishScheduler
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CMS Content Import API",
    description="WordPress REST and CSV content import with scheduled publishing",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = ArticlePublishScheduler()


# Include routers
app.include_router(health.router)
app.include_router(imports.router)
app.include_router(articles.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing request input"""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "message": details})


@app.exception_handler(ImporterException)
async def importer_exception_handler(request: Request, exc: ImporterException):
    """Import failures that abort a whole request"""
    if isinstance(exc, (ConnectionTestError, CSVExtractionError)):
        logger.warning(f"Import rejected: {exc.describe()}")
        return JSONResponse(status_code=400, content={"error": exc.message})

    logger.error(f"Import failed: {exc.describe()}")
    return JSONResponse(status_code=500, content={"error": "Import failed", "message": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting CMS Content Import API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down CMS Content Import API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "CMS Content Import API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "wordpress_import": "/api/import/wordpress-rest",
            "csv_import": "/api/import/csv",
            "import_runs": "/api/import/runs",
            "scheduled_articles": "/api/articles/scheduled"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
