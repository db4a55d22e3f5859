"""JSON error handlers and request logging for the Flask app.

Usage:
    from api.middleware.error_handler import register_error_handlers

    app = Flask(__name__)
    register_error_handlers(app)
"""

import logging
import time
import traceback

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from api.middleware.exceptions import APIError, ValidationError, format_error_response
from core.extraction.errors import ExtractionError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_SERVER_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _request_context() -> str:
    return f"{request.method} {request.path} from {request.remote_addr}"


def _api_error_response(error: APIError):
    # 4xx are expected, no traceback
    if error.status_code >= 500:
        logger.error(f"Error handling {_request_context()}", exc_info=error)
    else:
        logger.warning(f"{error.code} on {_request_context()}: {error.message}")
    return jsonify(error.to_response()), error.status_code


def register_error_handlers(app: Flask) -> None:
    """
    Render every error raised while handling a request as JSON.

    Engine errors (bad rule JSON, bad selectors) become 400
    VALIDATION_ERROR responses so routes can let them propagate.
    """

    @app.errorhandler(APIError)
    def handle_api_error(error):
        return _api_error_response(error)

    @app.errorhandler(ExtractionError)
    def handle_extraction_error(error):
        return _api_error_response(ValidationError.from_extraction_error(error))

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        if error.code >= 500:
            logger.error(f"Error handling {_request_context()}", exc_info=error)
        code = HTTP_ERROR_CODES.get(error.code, f"HTTP_{error.code}")
        return jsonify(format_error_response(code, error.description or str(error))), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.error(f"Unhandled error on {_request_context()}", exc_info=error)

        if current_app.debug:
            body = format_error_response(
                "INTERNAL_ERROR", str(error), {"traceback": traceback.format_exc()},
            )
        else:
            body = format_error_response(
                "INTERNAL_ERROR", "An unexpected error occurred. Please try again later.",
            )
        return jsonify(body), 500


def register_request_logging(app: Flask, log_level: int = logging.INFO) -> None:
    """Log method, path, status and duration of each request."""

    @app.before_request
    def start_timer():
        request._start_time = time.time()

    @app.after_request
    def log_request(response):
        duration_ms = int((time.time() - getattr(request, "_start_time", time.time())) * 1000)
        message = f"{request.method} {request.path} - {response.status_code} ({duration_ms}ms)"

        if response.status_code >= 400:
            logger.warning(message)
        else:
            logger.log(log_level, message)
        return response
