"""
Settings and configuration for the Scheduling Service.
"""

from typing import Optional

from services.common.settings import (
    AliasChoices,
    BaseSettings,
    Field,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    db_url_scheduling: str = Field(
        default=...,
        description="Database connection string for the scheduling service",
        validation_alias=AliasChoices("DB_URL_SCHEDULING"),
    )

    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for the booking cache; in-memory cache when unset",
        validation_alias=AliasChoices("REDIS_URL"),
    )
    cache_ttl_seconds: int = Field(
        default=60,
        description="TTL for cached booking lists",
        validation_alias=AliasChoices("CACHE_TTL_SECONDS"),
    )

    # Slot computation
    slot_step_minutes: int = Field(
        default=15,
        description="Granularity of generated slot start times",
        validation_alias=AliasChoices("SLOT_STEP_MINUTES"),
    )
    duration_tolerance_minutes: int = Field(
        default=1,
        description="Allowed difference between booking length and event duration",
        validation_alias=AliasChoices("DURATION_TOLERANCE_MINUTES"),
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
        validation_alias=AliasChoices("LOG_FORMAT"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
