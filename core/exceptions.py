"""
Custom exceptions for the content import pipeline with structured error context.

This module provides the exception hierarchy used by the WordPress REST
importer and the CSV importer. Each exception includes context information
for debugging and for the error payloads returned by the API.

Exception Hierarchy:
    ImporterException (base)
    ├── ExtractionError
    │   ├── APIExtractionError
    │   │   ├── NetworkError
    │   │   ├── AuthenticationError
    │   │   └── ResourceNotFoundError
    │   ├── ConnectionTestError
    │   └── CSVExtractionError
    └── LoadError
        ├── DatabaseError
        └── UpsertError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class ImporterException(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (url, external id, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Plain message; context is available through to_dict()."""
        return self.message

    def describe(self) -> str:
        """Format error message with context for log lines."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ImporterException):
    """Base exception for failures while reading the import source."""
    pass


class APIExtractionError(ExtractionError):
    """
    Exception raised when a WordPress REST API request fails.

    Context should include:
        - api_url: The API endpoint that failed
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated)
    """
    pass


class NetworkError(APIExtractionError):
    """Timeouts and transport failures talking to the remote site."""
    pass


class AuthenticationError(APIExtractionError):
    """Authentication failures (HTTP 401, 403)."""
    pass


class ResourceNotFoundError(APIExtractionError):
    """Resource not found (HTTP 404) where a missing resource is an error."""
    pass


class ConnectionTestError(ExtractionError):
    """
    Raised when the pre-import connection test fails.

    Aborts the run before anything is written.
    """
    pass


class CSVExtractionError(ExtractionError):
    """
    Exception raised when an uploaded CSV file cannot be read.

    Context should include:
        - filename: Name of the uploaded file
        - line_number: Line number where error occurred (if applicable)
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ImporterException):
    """Base exception for persistence failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when database operations fail.

    Context should include:
        - operation: Type of database operation (SELECT, INSERT, UPDATE)
        - table_name: Name of the table
    """
    pass


class UpsertError(LoadError):
    """
    Exception raised when a create-or-update fails.

    Context should include:
        - natural_key: The email or slug used for matching
        - table_name: Name of the table
    """
    pass
