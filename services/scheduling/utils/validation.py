"""
Input validation helpers for the scheduling service.
"""

import re
from typing import Set

import pytz

from services.common.http_errors import ErrorCode, ValidationError

VALID_TIMEZONES: Set[str] = set(pytz.all_timezones)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

MIN_EVENT_DURATION = 15
MAX_EVENT_DURATION = 480


def validate_timezone(timezone_str: str) -> str:
    """
    Validate an IANA timezone name.

    Args:
        timezone_str: Timezone string to validate

    Returns:
        The timezone string unchanged

    Raises:
        ValidationError: If the timezone is unknown
    """
    if not timezone_str or timezone_str not in VALID_TIMEZONES:
        raise ValidationError(
            "Invalid timezone",
            field="timezone",
            value=timezone_str,
            code=ErrorCode.INVALID_TIMEZONE,
        )
    return timezone_str


def validate_slug(slug: str) -> str:
    if not slug or not SLUG_PATTERN.match(slug):
        raise ValidationError(
            "Slug can only contain lowercase letters, numbers, and hyphens",
            field="slug",
            value=slug,
        )
    return slug


def validate_duration(duration: int) -> int:
    if duration < MIN_EVENT_DURATION or duration > MAX_EVENT_DURATION:
        raise ValidationError(
            f"Duration must be between {MIN_EVENT_DURATION} and "
            f"{MAX_EVENT_DURATION} minutes",
            field="duration",
            value=duration,
        )
    return duration
