"""
Centralized logging configuration for Cadence services.

Provides:
- Structured logging through structlog (JSON or human-readable text)
- Request ID and user ID propagation via context variables
- HTTP request/response logging middleware for FastAPI

Usage:
    from services.common.logging_config import setup_service_logging

    setup_service_logging(
        service_name="scheduling",
        log_level="INFO",
        log_format="json",
    )
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Callable

import structlog
from fastapi import Request, Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="uninitialized")
user_id_var: ContextVar[str] = ContextVar("user_id", default="anonymous")

_CONTEXT_KEYS = ("timestamp", "level", "logger", "event", "service", "request_id", "user_id")


def add_request_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Attach the current request and user IDs to the log entry."""
    request_id = request_id_var.get()
    user_id = user_id_var.get()
    if request_id and request_id != "uninitialized":
        event_dict["request_id"] = request_id
    if user_id and user_id != "anonymous":
        event_dict["user_id"] = user_id
    return event_dict


def add_service_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Derive the service name from loggers named like ``services.<name>.*``."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith("services."):
        parts = logger_name.split(".")
        if len(parts) >= 2:
            event_dict.setdefault("service", parts[1])
    return event_dict


class TextRenderer:
    """Single-line renderer used when LOG_FORMAT=text."""

    def __init__(self, service_name: str):
        self.service_name = service_name

    def __call__(
        self,
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> str:
        level = str(event_dict.get("level", "info")).upper()
        service = event_dict.get("service", self.service_name)
        logger_name = str(event_dict.get("logger", ""))
        if logger_name.startswith("services."):
            logger_name = logger_name[len("services.") :]

        request_id = event_dict.get("request_id", "")
        request_tag = f"[{request_id[-4:]}]" if request_id else ""

        parts = [
            str(event_dict.get("timestamp", "")),
            f"[{service}]",
            f"[{level}]",
            request_tag,
            logger_name,
            f"- {event_dict.get('event', '')}",
        ]

        user_id = event_dict.get("user_id")
        if user_id:
            parts.append(f"| User: {user_id}")

        extra = []
        for key, value in event_dict.items():
            if key in _CONTEXT_KEYS:
                continue
            if isinstance(value, (str, int, float, bool)) or value is None:
                extra.append(f"{key}={value}")
            else:
                extra.append(f"{key}={str(value)[:150]}")
        if extra:
            parts.append(f"| {', '.join(extra)}")

        return " ".join(part for part in parts if part)


def setup_service_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
) -> None:
    """
    Configure structlog and the stdlib root logger for a service.

    Args:
        service_name: Name of the service (e.g., "scheduling")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" or "text"
    """
    processors: list = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_request_context,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(TextRenderer(service_name))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    # Noisy third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    get_logger(__name__).info(
        "Logging configured",
        service=service_name,
        log_level=log_level,
        log_format=log_format,
    )


def create_request_logging_middleware() -> Callable:
    """
    Create HTTP request logging middleware for FastAPI.

    Returns:
        Async middleware function for ``app.middleware("http")``
    """

    async def log_requests(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request_id_var.set(request_id)
        user_id_var.set(request.headers.get("X-User-Id") or "anonymous")

        logger = get_logger("http.requests")
        start_time = time.time()
        logger.info(
            f"→ {request.method} {request.url.path}",
            method=request.method,
            query_params=str(request.query_params) if request.query_params else None,
            client_ip=request.client.host if request.client else "unknown",
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} → {response.status_code} "
            f"({process_time:.3f}s)",
            status_code=response.status_code,
            process_time=process_time,
        )
        response.headers["X-Request-Id"] = request_id
        return response

    return log_requests


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


def log_service_startup(service_name: str, **kwargs: Any) -> None:
    """Log service startup with configuration details."""
    get_logger("startup").info(f"Starting {service_name}", service=service_name, **kwargs)


def log_service_shutdown(service_name: str) -> None:
    """Log service shutdown event."""
    get_logger(__name__).info(f"Service {service_name} shutting down")
