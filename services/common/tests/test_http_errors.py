"""
Unit tests for HTTP error handling.

Tests request ID correlation, the error classes and their status codes,
HTTPException detail handling and the registered FastAPI handlers.
"""

import re

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from services.common.http_errors import (
    CadenceAPIException,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
    ValidationError,
    exception_to_response,
    register_cadence_exception_handlers,
)
from services.common.logging_config import request_id_var

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class TestRequestIDCorrelation:
    """Test request ID correlation across exception handlers."""

    def setup_method(self):
        """Reset request_id_var before each test."""
        request_id_var.set("uninitialized")

    def test_request_id_from_context(self):
        request_id_var.set("test-request-123")

        response = exception_to_response(
            HTTPException(status_code=422, detail={"message": "Validation failed"})
        )
        assert response.request_id == "test-request-123"

        assert NotFoundError("Booking").request_id == "test-request-123"

    def test_request_id_generation_outside_context(self):
        """Outside a request a fresh UUID is generated instead of 'uninitialized'."""
        test_cases = [
            HTTPException(status_code=422, detail="Validation failed"),
            ValueError("Something went wrong"),
            ValidationError("Bad input"),
        ]

        for exc in test_cases:
            response = exception_to_response(exc)
            assert response.request_id != "uninitialized"
            assert UUID_PATTERN.match(
                response.request_id
            ), f"Invalid UUID format: {response.request_id}"


class TestErrorClasses:
    """Test status codes, types and details of the error classes."""

    @pytest.mark.parametrize(
        "exc, status_code, error_type, code",
        [
            (ValidationError("bad"), 422, "validation_error", "VALIDATION_FAILED"),
            (NotFoundError("Booking"), 404, "not_found", "NOT_FOUND"),
            (ForbiddenError("no"), 403, "forbidden", "ACCESS_DENIED"),
            (InvalidStateError("no"), 409, "invalid_state", "INVALID_STATE"),
            (ConflictError("dup"), 409, "conflict", "ALREADY_EXISTS"),
            (ServiceError("down"), 502, "service_error", "SERVICE_ERROR"),
        ],
    )
    def test_defaults(self, exc, status_code, error_type, code):
        assert isinstance(exc, CadenceAPIException)
        assert exc.status_code == status_code
        assert exc.error_type == error_type
        assert exc.code == code

    def test_validation_error_details(self):
        exc = ValidationError(
            "Cannot book in the past",
            field="start_time",
            value=123,
            details={"hint": "pick a later slot"},
            code=ErrorCode.BOOKING_IN_PAST,
        )

        response = exc.to_error_response()

        assert response.type == "validation_error"
        assert response.message == "Cannot book in the past"
        assert response.details == {
            "hint": "pick a later slot",
            "field": "start_time",
            "value": "123",
            "code": "BOOKING_IN_PAST",
        }

    def test_not_found_message(self):
        assert NotFoundError("Booking", "b1c2").message == "Booking b1c2 not found"
        assert NotFoundError("Event type").message == "Event type not found"

    def test_not_found_details(self):
        response = exception_to_response(NotFoundError("User", "user-123"))

        assert response.type == "not_found"
        assert response.message == "User user-123 not found"
        assert response.details["resource"] == "User"
        assert response.details["identifier"] == "user-123"
        assert response.details["code"] == "NOT_FOUND"

    def test_custom_codes(self):
        exc = InvalidStateError(
            "Booking is already cancelled", code=ErrorCode.BOOKING_ALREADY_CANCELLED
        )
        assert exc.code == "BOOKING_ALREADY_CANCELLED"
        assert exc.status_code == 409

        exc = ServiceError("Database operation failed", code=ErrorCode.DATABASE_ERROR)
        assert exc.to_error_response().details == {"code": "DATABASE_ERROR"}

    def test_exception_message(self):
        assert str(ConflictError("Username is already taken")) == (
            "Username is already taken"
        )


class TestHTTPExceptionDetailHandling:
    """Test HTTPException detail field handling."""

    def test_dict_detail_with_message_field(self):
        response = exception_to_response(
            HTTPException(
                status_code=422,
                detail={"message": "Validation failed", "field": "email"},
            )
        )

        assert response.type == "http_error"
        assert response.message == "Validation failed"
        assert response.details["field"] == "email"

    def test_dict_detail_without_message(self):
        response = exception_to_response(
            HTTPException(status_code=400, detail={"code": "INVALID_INPUT"})
        )
        assert response.message == "HTTP error"
        assert response.details == {"code": "INVALID_INPUT"}

    def test_string_detail(self):
        response = exception_to_response(
            HTTPException(status_code=404, detail="Resource not found")
        )
        assert response.message == "Resource not found"
        assert response.details == {"message": "Resource not found"}

    def test_generic_exception_hides_message(self):
        response = exception_to_response(RuntimeError("password=hunter2"))

        assert response.type == "internal_error"
        assert response.message == "Internal server error"
        assert response.details == {"error_type": "RuntimeError"}


class TestExceptionHandlers:
    """Test the FastAPI handlers registered for Cadence errors."""

    def setup_method(self):
        request_id_var.set("uninitialized")
        app = FastAPI()
        register_cadence_exception_handlers(app)

        @app.get("/not-found")
        async def not_found():
            raise NotFoundError("Booking", "b1")

        @app.get("/http")
        async def http_error():
            raise HTTPException(status_code=400, detail="Missing X-User-Id header")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        self.client = TestClient(app, raise_server_exceptions=False)

    def test_cadence_exception(self):
        response = self.client.get("/not-found")

        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "not_found"
        assert body["message"] == "Booking b1 not found"
        assert body["details"]["code"] == "NOT_FOUND"
        assert body["timestamp"]
        assert body["request_id"]

    def test_http_exception(self):
        response = self.client.get("/http")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing X-User-Id header"

    def test_unhandled_exception(self):
        response = self.client.get("/boom")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"
