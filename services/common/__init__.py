"""
Common utilities shared by Cadence services: logging, HTTP errors and settings.
"""

from services.common.http_errors import (
    CadenceAPIException,
    ErrorCode,
    register_cadence_exception_handlers,
)
from services.common.logging_config import get_logger, setup_service_logging

__all__ = [
    "CadenceAPIException",
    "ErrorCode",
    "get_logger",
    "register_cadence_exception_handlers",
    "setup_service_logging",
]
