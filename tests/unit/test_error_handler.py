"""Unit tests for error handling middleware."""

import pytest
from flask import Flask

from api.middleware.exceptions import (
    APIError,
    ValidationError,
    NotFoundError,
    ConflictError,
    format_error_response,
)
from api.middleware.error_handler import register_error_handlers
from core.extraction.errors import RuleFormatError, SelectorSyntaxError


class TestAPIError:
    """Tests for the base APIError class."""

    def test_default_values(self):
        error = APIError("Something went wrong")

        assert error.message == "Something went wrong"
        assert error.code == "API_ERROR"
        assert error.status_code == 500
        assert error.details == {}

    def test_custom_values(self):
        error = APIError(message="Custom error", code="CUSTOM_CODE", status_code=418, details={"foo": "bar"})

        assert error.code == "CUSTOM_CODE"
        assert error.status_code == 418
        assert error.details == {"foo": "bar"}

    def test_str_representation(self):
        assert str(APIError("Test message")) == "Test message"


class TestSubclasses:
    """Tests for the concrete API errors."""

    def test_validation_error(self):
        error = ValidationError("Invalid input", details={"field": "emails"})
        assert error.code == "VALIDATION_ERROR"
        assert error.status_code == 400
        assert error.details == {"field": "emails"}

    def test_not_found_with_identifier(self):
        error = NotFoundError("Rule", "abc")
        assert error.status_code == 404
        assert error.message == "Rule with id 'abc' not found"
        assert error.details == {"resource": "Rule", "identifier": "abc"}

    def test_not_found_without_identifier(self):
        assert NotFoundError("Job").message == "Job not found"

    def test_conflict(self):
        error = ConflictError("Job is not running")
        assert error.code == "CONFLICT"
        assert error.status_code == 409

    @pytest.mark.parametrize("cls", [ValidationError, NotFoundError, ConflictError])
    def test_all_are_api_errors(self, cls):
        assert issubclass(cls, APIError)


class TestFormatErrorResponse:

    def test_without_details(self):
        assert format_error_response("X", "msg") == {"error": {"code": "X", "message": "msg"}}

    def test_with_details(self):
        response = format_error_response("X", "msg", {"a": 1})
        assert response["error"]["details"] == {"a": 1}


class TestRegisteredHandlers:
    """Tests for the Flask error handlers."""

    @pytest.fixture
    def client(self):
        app = Flask(__name__)
        register_error_handlers(app)

        @app.route("/api-error")
        def api_error():
            raise NotFoundError("Rule", "r1")

        @app.route("/rule-error")
        def rule_error():
            raise RuleFormatError("Field 0 is missing 'name'", details={"key": "name"})

        @app.route("/selector-error")
        def selector_error():
            raise SelectorSyntaxError("div[[", "Expected ']'")

        @app.route("/crash")
        def crash():
            raise RuntimeError("boom")

        return app.test_client()

    def test_api_error(self, client):
        response = client.get("/api-error")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"

    def test_rule_format_error_is_validation_error(self, client):
        response = client.get("/rule-error")
        assert response.status_code == 400
        body = response.get_json()["error"]
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"] == {"key": "name"}

    def test_selector_error_is_validation_error(self, client):
        response = client.get("/selector-error")
        assert response.status_code == 400
        assert response.get_json()["error"]["details"]["selector"] == "div[["

    def test_http_exception(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"

    def test_unexpected_exception_hidden(self, client):
        response = client.get("/crash")
        assert response.status_code == 500
        body = response.get_json()["error"]
        assert body["code"] == "INTERNAL_ERROR"
        assert "boom" not in body["message"]
