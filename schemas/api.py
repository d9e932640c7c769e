"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import ImportSourceType, ImportStatus
import enum


# ============================================================================
# Import Outcome Schemas
# ============================================================================

class ImportItemType(str, enum.Enum):
    USER = "user"
    CATEGORY = "category"
    ARTICLE = "article"


class ImportAction(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class ImportOutcome(BaseModel):
    """Result of importing one external record"""
    type: ImportItemType
    external_id: int = Field(..., alias="externalId")
    title: str
    success: bool
    action: ImportAction
    slug: Optional[str] = None
    errors: Optional[List[str]] = None

    class Config:
        populate_by_name = True
        use_enum_values = True


class PhaseSummary(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    created: int = 0
    updated: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: List[ImportOutcome]) -> "PhaseSummary":
        successful = [o for o in outcomes if o.success]
        return cls(
            total=len(outcomes),
            successful=len(successful),
            failed=len(outcomes) - len(successful),
            created=len([o for o in successful if o.action == ImportAction.CREATED]),
            updated=len([o for o in successful if o.action == ImportAction.UPDATED]),
        )


class ImportSummary(BaseModel):
    users: PhaseSummary
    categories: PhaseSummary
    articles: PhaseSummary


class ImportResults(BaseModel):
    users: List[ImportOutcome] = Field(default_factory=list)
    categories: List[ImportOutcome] = Field(default_factory=list)
    articles: List[ImportOutcome] = Field(default_factory=list)


class ImportReport(BaseModel):
    """
    Outcomes of one REST import run, in processing order.

    Summary counts are derived by filtering the outcome list.
    """
    outcomes: List[ImportOutcome] = Field(default_factory=list)

    def add(self, outcome: ImportOutcome) -> ImportOutcome:
        self.outcomes.append(outcome)
        return outcome

    def of_type(self, item_type: ImportItemType) -> List[ImportOutcome]:
        return [o for o in self.outcomes if o.type == item_type]

    @property
    def results(self) -> ImportResults:
        return ImportResults(
            users=self.of_type(ImportItemType.USER),
            categories=self.of_type(ImportItemType.CATEGORY),
            articles=self.of_type(ImportItemType.ARTICLE),
        )

    @property
    def summary(self) -> ImportSummary:
        return ImportSummary(
            users=PhaseSummary.from_outcomes(self.of_type(ImportItemType.USER)),
            categories=PhaseSummary.from_outcomes(self.of_type(ImportItemType.CATEGORY)),
            articles=PhaseSummary.from_outcomes(self.of_type(ImportItemType.ARTICLE)),
        )

    @property
    def failed_count(self) -> int:
        return len([o for o in self.outcomes if not o.success])


# ============================================================================
# WordPress REST Import Schemas
# ============================================================================

class WordPressImportRequest(BaseModel):
    """Body of POST /api/import/wordpress-rest"""
    source_url: str = Field(..., alias="sourceUrl", min_length=1)
    username: Optional[str] = None
    password: Optional[str] = None
    import_statuses: List[str] = Field(default_factory=lambda: ["publish", "future"], alias="importStatuses")
    skip_existing: bool = Field(False, alias="skipExisting")
    test_only: bool = Field(False, alias="testOnly")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "sourceUrl": "https://blog.example.com",
                "username": "admin",
                "password": "abcd efgh ijkl mnop",
                "importStatuses": ["publish", "future"],
                "skipExisting": False,
                "testOnly": False
            }
        }


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str


class WordPressImportResponse(BaseModel):
    success: bool
    summary: ImportSummary
    results: ImportResults


# ============================================================================
# CSV Import Schemas
# ============================================================================

class CSVImportResponse(BaseModel):
    """Counts plus the first errors as "Row {n}: {message}" strings"""
    success: int
    failed: int
    created: int = 0
    updated: int = 0
    errors: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "success": 41,
                "failed": 2,
                "created": 30,
                "updated": 11,
                "errors": [
                    "Row 7: Title is required",
                    "Row 19: Import error: duplicate key"
                ]
            }
        }


# ============================================================================
# Import Run Schemas
# ============================================================================

class ImportRunResponse(BaseModel):
    run_id: str
    source_type: ImportSourceType
    source_name: str
    status: ImportStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    items_total: int = 0
    items_failed: int = 0
    summary: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None

    @classmethod
    def from_orm(cls, run):
        """Custom from_orm to explicitly convert UUID to string"""
        return cls(
            run_id=str(run.run_id),
            source_type=run.source_type,
            source_name=run.source_name,
            status=run.status,
            started_at=run.started_at,
            completed_at=run.completed_at,
            duration_seconds=run.duration_seconds,
            items_total=run.items_total or 0,
            items_failed=run.items_failed or 0,
            summary=run.summary,
            error_message=run.error_message,
        )

    class Config:
        use_enum_values = True


class ImportRunListResponse(BaseModel):
    runs: List[ImportRunResponse]
    count: int


# ============================================================================
# Scheduled Publishing Schemas
# ============================================================================

class ScheduledArticleInfo(BaseModel):
    id: int
    title: str
    scheduled_at: Optional[datetime] = Field(None, alias="scheduledAt")

    class Config:
        populate_by_name = True


class ScheduledArticlesResponse(BaseModel):
    count: int
    articles: List[ScheduledArticleInfo] = Field(default_factory=list)


class PublishScheduledResponse(BaseModel):
    message: str
    published: int
    articles: List[ScheduledArticleInfo] = Field(default_factory=list)


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    last_import: Optional[ImportRunResponse] = None


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Connection failed: 401 Unauthorized",
                "message": None
            }
        }
