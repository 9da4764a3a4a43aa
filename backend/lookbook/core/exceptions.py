"""
Centralized exception handling for the lookbook backend.
Provides consistent error responses for the library API and HTTP endpoints.
"""
import logging
import traceback
from typing import Any, Dict, Optional
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exception Classes
# =============================================================================

class LookbookException(Exception):
    """Base exception for outfit generation errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(message)


class ValidationError(LookbookException):
    """Input validation failed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {}
        )


class ExternalServiceError(LookbookException):
    """Completion service (OpenAI, Gemini) failed or is not configured."""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"{service} service error: {message}",
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_SERVICE_ERROR",
            details={"service": service}
        )


class CompletionFormatError(LookbookException):
    """Completion text was not a usable outfit batch."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            message=f"Malformed completion: {message}",
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="MALFORMED_COMPLETION",
            details=details
        )


class CatalogError(LookbookException):
    """Product catalog query failed."""

    def __init__(self, message: str = "Catalog query failed", category: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="CATALOG_ERROR",
            details={"category": category} if category else {}
        )


# =============================================================================
# Error Response Model
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response format."""
    success: bool = False
    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None


# =============================================================================
# Exception Handlers for FastAPI
# =============================================================================

async def lookbook_exception_handler(request: Request, exc: LookbookException) -> JSONResponse:
    """Handle lookbook exceptions."""
    logger.error(f"LookbookException: {exc.error_code} - {exc.message}", extra={"details": exc.details})

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None
        ).model_dump(exclude_none=True)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPExceptions with consistent format."""
    error_code = "HTTP_ERROR"
    if exc.status_code == 400:
        error_code = "BAD_REQUEST"
    elif exc.status_code == 404:
        error_code = "NOT_FOUND"
    elif exc.status_code == 422:
        error_code = "VALIDATION_ERROR"
    elif exc.status_code >= 500:
        error_code = "SERVER_ERROR"

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=error_code,
            message=str(exc.detail)
        ).model_dump(exclude_none=True)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with logging."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method}
    )

    # Internal details only leave the process in development
    from lookbook.config import settings

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=str(exc) if settings.is_dev else "An unexpected error occurred",
            details={"traceback": traceback.format_exc()} if settings.is_dev else None
        ).model_dump(exclude_none=True)
    )


# =============================================================================
# Library-level error payload
# =============================================================================

def error_payload(exc: LookbookException) -> Dict[str, Any]:
    """Shape a failure the way the outfit generation function returns it."""
    return {
        "success": False,
        "error": "Outfit generation failed",
        "details": exc.message,
        "error_code": exc.error_code,
    }
