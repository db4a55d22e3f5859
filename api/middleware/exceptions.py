"""API error types.

Routes raise these; the handlers in ``api.middleware.error_handler`` turn
them into JSON bodies of the form::

    {"error": {"code": "NOT_FOUND", "message": "...", "details": {...}}}

Nothing here imports Flask.
"""

from typing import Any, Dict, Optional

from core.extraction.errors import ExtractionError


def format_error_response(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the error body shared by every failing endpoint."""
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


class APIError(Exception):
    """Base class for errors with an HTTP status and a machine-readable code."""

    code = "API_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        return format_error_response(self.code, self.message, self.details or None)


class ValidationError(APIError):
    """The request body or a rule in it is invalid (400)."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)

    @classmethod
    def from_extraction_error(cls, error: ExtractionError) -> "ValidationError":
        """Wrap a rule decoding or selector error raised by the engine."""
        return cls(error.message, details=error.details)


class NotFoundError(APIError):
    """A rule, job, result or document does not exist (404)."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(message, details={"resource": resource, "identifier": identifier})


class ConflictError(APIError):
    """The request does not fit the resource's current state (409)."""

    code = "CONFLICT"
    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
