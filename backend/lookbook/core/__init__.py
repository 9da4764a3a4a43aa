"""
Core module for the lookbook backend.
Contains exception handling shared by the pipeline and the API.
"""
from .exceptions import (
    LookbookException,
    ValidationError,
    ExternalServiceError,
    CompletionFormatError,
    CatalogError,
    ErrorResponse,
    lookbook_exception_handler,
    http_exception_handler,
    generic_exception_handler,
    error_payload,
)

__all__ = [
    "LookbookException",
    "ValidationError",
    "ExternalServiceError",
    "CompletionFormatError",
    "CatalogError",
    "ErrorResponse",
    "lookbook_exception_handler",
    "http_exception_handler",
    "generic_exception_handler",
    "error_payload",
]
