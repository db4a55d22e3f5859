"""API middleware: error types, JSON error handlers and request logging."""

from api.middleware.error_handler import register_error_handlers, register_request_logging
from api.middleware.exceptions import (
    APIError,
    ConflictError,
    NotFoundError,
    ValidationError,
    format_error_response,
)

__all__ = [
    "APIError",
    "ConflictError",
    "NotFoundError",
    "ValidationError",
    "format_error_response",
    "register_error_handlers",
    "register_request_logging",
]
