"""Configuration system for the budget engine.

Pydantic Settings-based configuration with environment variable support and
sensible defaults. The engine functions themselves are pure and take every
input as a parameter; configuration only feeds the reporting boundary
(``BudgetReportBuilder``) and logging.

Usage:
    from budget_core.config import configure_logging, load_config

    # BUDGET_* environment variables, then .env
    config = load_config()
    configure_logging(config)

    print(config.timezone)
    print(config.reminder_horizon_days)
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from budget_core.exceptions import ConfigurationError

ENVIRONMENTS = ("development", "staging", "production", "test")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EngineConfig(BaseSettings):
    """Root configuration for the budget engine.

    Environment Variables:
        BUDGET_ENV: Environment name (development, staging, production, test)
        BUDGET_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        BUDGET_TIMEZONE: IANA zone used to resolve "today" when a report is
            built without an explicit reference date
        BUDGET_UNCATEGORIZED_LABEL: Bucket name for missing/unknown categories
        BUDGET_REMINDER_HORIZON_DAYS: How far ahead bill reminders look
        BUDGET_DEFAULT_REMINDER_DAYS: Lead time for bills without their own

    Example:
        config = EngineConfig(timezone="America/Los_Angeles", log_level="debug")
    """

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="structlog level filter",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to resolve today's date at the boundary",
    )
    uncategorized_label: str = Field(
        default="Uncategorized",
        description="Bucket name for occurrences without a known category",
    )
    reminder_horizon_days: int = Field(
        default=30,
        ge=0,
        le=366,
        description="Reminders falling within this many days are reported",
    )
    default_reminder_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Lead time for bills that do not set their own",
    )

    @field_validator("env", "log_level")
    @classmethod
    def normalize_choice(cls, v: str, info: ValidationInfo) -> str:
        """Match env and log level case-insensitively against their allowed names."""
        if info.field_name == "env":
            choice, allowed = v.strip().lower(), ENVIRONMENTS
        else:
            choice, allowed = v.strip().upper(), LOG_LEVELS
        if choice not in allowed:
            raise ValueError(f"{info.field_name} must be one of {', '.join(allowed)}; got {v!r}")
        return choice

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Timezone must be a known IANA name."""
        v = v.strip()
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("uncategorized_label")
    @classmethod
    def validate_uncategorized_label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("uncategorized_label cannot be empty")
        return v

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def configure_logging(config: EngineConfig) -> None:
    """Filter structlog output at the configured level."""
    level = logging.getLevelName(config.log_level)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def load_config(**overrides) -> EngineConfig:
    """Load configuration, raising ConfigurationError on invalid settings.

    Keyword overrides take precedence over environment variables.
    """
    try:
        return EngineConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = str(first["loc"][0]) if first["loc"] else ""
        raise ConfigurationError(
            f"Invalid engine configuration: {first['msg']}",
            config_key=f"BUDGET_{key.upper()}" if key else None,
            expected=first.get("type"),
            actual=first.get("input"),
        ) from e
