"""
Shared HTTP error classes and utilities for Cadence services.

Provides:
- Base exception class for API errors carrying a specific error code
- Common subclasses (Validation, NotFound, Forbidden, InvalidState, Conflict, Service)
- Shared error response model
- Utility to convert exceptions to error responses
- FastAPI exception handler registration

Usage:
>>> from services.common.http_errors import ErrorCode, ValidationError
>>>
>>> raise ValidationError(
...     "Cannot book in the past",
...     code=ErrorCode.BOOKING_IN_PAST,
...     field="start_time",
... )

Error Code Taxonomy:
===================
- VALIDATION_* and booking rule codes : input or rule violations (422)
- NOT_FOUND : resource not found (404)
- ACCESS_DENIED, BOOKER_EMAIL_MISMATCH : ownership failures (403)
- INVALID_STATE, *_ALREADY_*, EVENT_TYPE_* : state conflicts (409)
- ALREADY_EXISTS : uniqueness conflicts (409)
- SERVICE_*, DATABASE_ERROR : internal failures (5xx)
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from services.common.logging_config import get_logger, request_id_var

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """Error codes shared by all Cadence services."""

    # General
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    ACCESS_DENIED = "ACCESS_DENIED"
    INVALID_STATE = "INVALID_STATE"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Schedules and event types
    INVALID_TIMEZONE = "INVALID_TIMEZONE"
    INVALID_SCHEDULE_SLOTS = "INVALID_SCHEDULE_SLOTS"
    DURATION_DOES_NOT_FIT = "DURATION_DOES_NOT_FIT"
    EVENT_TYPE_INACTIVE = "EVENT_TYPE_INACTIVE"
    EVENT_TYPE_NO_SCHEDULE = "EVENT_TYPE_NO_SCHEDULE"
    EVENT_TYPE_HAS_UPCOMING_BOOKINGS = "EVENT_TYPE_HAS_UPCOMING_BOOKINGS"

    # Booking rules
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    BOOKING_IN_PAST = "BOOKING_IN_PAST"
    DURATION_MISMATCH = "DURATION_MISMATCH"
    NO_AVAILABILITY_ON_DAY = "NO_AVAILABILITY_ON_DAY"
    OUTSIDE_AVAILABILITY = "OUTSIDE_AVAILABILITY"
    SLOT_ALREADY_BOOKED = "SLOT_ALREADY_BOOKED"
    MAX_BOOKINGS_PER_DAY = "MAX_BOOKINGS_PER_DAY"
    BUFFER_CONFLICT = "BUFFER_CONFLICT"
    LOCATION_REQUIRED = "LOCATION_REQUIRED"

    # Booking lifecycle
    BOOKING_ALREADY_CANCELLED = "BOOKING_ALREADY_CANCELLED"
    BOOKING_ALREADY_STARTED = "BOOKING_ALREADY_STARTED"
    BOOKER_EMAIL_MISMATCH = "BOOKER_EMAIL_MISMATCH"

    # Service
    SERVICE_ERROR = "SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorResponse(BaseModel):
    """
    Standardized error response body.

    Attributes:
        type: Error category (e.g. "validation_error", "not_found")
        message: Human-readable reason, specific enough to show to the end user
        details: Additional context, including the error ``code``
        timestamp: ISO 8601 timestamp of when the error occurred
        request_id: Identifier used to correlate the error with logs
    """

    type: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str
    request_id: str


def _current_request_id() -> str:
    request_id = request_id_var.get()
    if request_id and request_id != "uninitialized":
        return request_id
    return str(uuid.uuid4())


class CadenceAPIException(Exception):
    """
    Base exception class for all Cadence API errors.

    Args:
        message: The error message to display to users
        details: Optional dictionary with additional error context
        error_type: Error category string
        error_code: Specific error code from ErrorCode
        status_code: HTTP status code
        request_id: Optional request ID (taken from the logging context if omitted)
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_type: str = "internal_error",
        error_code: Optional[ErrorCode] = None,
        status_code: int = 500,
        request_id: Optional[str] = None,
    ):
        self.message = message
        self.details = details or {}
        self.error_type = error_type
        self.error_code = error_code
        self.status_code = status_code
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.request_id = request_id or _current_request_id()
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return (self.error_code or ErrorCode.INTERNAL_ERROR).value

    def to_error_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse, adding the error code to details."""
        details = {
            **self.details,
            **({"code": self.error_code.value} if self.error_code else {}),
        }
        return ErrorResponse(
            type=self.error_type,
            message=self.message,
            details=details if details else None,
            timestamp=self.timestamp,
            request_id=self.request_id,
        )


class ValidationError(CadenceAPIException):
    """
    Input or business-rule validation failure (HTTP 422).

    Examples:
        >>> ValidationError("Invalid time range", field="end_time")
        >>> ValidationError(
        ...     "Booking duration must be 30 minutes",
        ...     code=ErrorCode.DURATION_MISMATCH,
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED,
    ):
        validation_details = details or {}
        if field:
            validation_details["field"] = field
        if value is not None:
            validation_details["value"] = str(value)
        super().__init__(
            message=message,
            details=validation_details,
            error_type="validation_error",
            error_code=code,
            status_code=422,
        )
        self.field = field
        self.value = value


class NotFoundError(CadenceAPIException):
    """
    Resource not found (HTTP 404).

    Examples:
        >>> NotFoundError("Booking", "b1c2").message
        'Booking b1c2 not found'
        >>> NotFoundError("Event type").message
        'Event type not found'
    """

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if identifier:
            message = f"{resource} {identifier} not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            message=message,
            details={**(details or {}), "resource": resource, "identifier": identifier},
            error_type="not_found",
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
        )
        self.resource = resource
        self.identifier = identifier


class ForbiddenError(CadenceAPIException):
    """Caller is not allowed to act on the resource (HTTP 403)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.ACCESS_DENIED,
    ):
        super().__init__(
            message=message,
            details=details,
            error_type="forbidden",
            error_code=code,
            status_code=403,
        )


class InvalidStateError(CadenceAPIException):
    """Resource is in a state that does not allow the operation (HTTP 409)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.INVALID_STATE,
    ):
        super().__init__(
            message=message,
            details=details,
            error_type="invalid_state",
            error_code=code,
            status_code=409,
        )


class ConflictError(CadenceAPIException):
    """Uniqueness conflict, such as a duplicate slug (HTTP 409)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.ALREADY_EXISTS,
    ):
        super().__init__(
            message=message,
            details=details,
            error_type="conflict",
            error_code=code,
            status_code=409,
        )


class ServiceError(CadenceAPIException):
    """Internal service failure such as a database error (HTTP 502)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.SERVICE_ERROR,
        status_code: int = 502,
    ):
        super().__init__(
            message=message,
            details=details,
            error_type="service_error",
            error_code=code,
            status_code=status_code,
        )


def exception_to_response(exc: Exception) -> ErrorResponse:
    """
    Convert any exception to a standardized ErrorResponse.

    CadenceAPIException uses its own conversion, HTTPException keeps its detail,
    and anything else becomes a generic internal error that only exposes the
    exception class name.
    """
    if isinstance(exc, CadenceAPIException):
        return exc.to_error_response()
    if isinstance(exc, HTTPException):
        detail = (
            exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
        )
        return ErrorResponse(
            type="http_error",
            message=detail.get("message", "HTTP error"),
            details=detail,
            timestamp=datetime.now(timezone.utc).isoformat(),
            request_id=_current_request_id(),
        )
    return ErrorResponse(
        type="internal_error",
        message="Internal server error",
        details={"error_type": type(exc).__name__},
        timestamp=datetime.now(timezone.utc).isoformat(),
        request_id=_current_request_id(),
    )


def register_cadence_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers that render every error as an ErrorResponse.

    Call once while building the application, before serving requests.
    """
    from fastapi import Request
    from fastapi.responses import JSONResponse

    @app.exception_handler(CadenceAPIException)
    async def cadence_api_exception_handler(
        request: Request, exc: CadenceAPIException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"HTTP {exc.status_code} {exc.error_type}: {exc.message}",
            path=request.url.path,
            code=exc.code,
        )
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_error_response().model_dump()
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exception_to_response(exc).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled exception", path=request.url.path)
        return JSONResponse(
            status_code=500, content=exception_to_response(exc).model_dump()
        )
