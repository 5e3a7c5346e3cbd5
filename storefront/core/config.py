"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.domain.models import RateLimitConfig


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


DEFAULT_LIMIT_PER_PRODUCT = 1
DEFAULT_WINDOW_SECONDS = 60


def _positive_int_or_default(value: Any, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on anything else.

    Examples:
        >>> _positive_int_or_default("5", 1)
        5
        >>> _positive_int_or_default("  ", 1)
        1
        >>> _positive_int_or_default("-3", 60)
        60
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated 'api_key:user_id' pairs identifying callers",
    )
    default_user_id: int = Field(
        1,
        description="User every request acts as when API keys are not required",
        ge=1,
    )

    throttle_enabled: bool = Field(
        True,
        description="Enable the coarse per-client request throttle",
    )
    throttle_requests: int = Field(
        100,
        description="Maximum number of requests allowed per throttle window (per client)",
        ge=1,
    )
    throttle_window_seconds: int = Field(
        900,
        description="Throttle window size in seconds",
        ge=1,
    )
    throttle_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Database connection and bootstrap configuration."""

    url: str = Field(
        "sqlite:///./data.sqlite3",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(False, description="Log every SQL statement")
    skip_initial_product_seed: bool = Field(
        False,
        validation_alias="SKIP_INITIAL_PRODUCT_SEED",
        description="Do not seed the demo catalog into an empty products table",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
    )


class PurchaseLimitSettings(BaseSettings):
    """Per-product purchase limit.

    Read from ``PURCHASE_RATE_LIMIT_PER_PRODUCT`` and
    ``PURCHASE_RATE_LIMIT_WINDOW_SECONDS``. Invalid or missing values fall
    back to the defaults without raising.
    """

    per_product: int = Field(
        DEFAULT_LIMIT_PER_PRODUCT,
        description="Units of one product a user may buy within the window",
    )
    window_seconds: int = Field(
        DEFAULT_WINDOW_SECONDS,
        description="Sliding window length in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="PURCHASE_RATE_LIMIT_",
        case_sensitive=False,
    )

    @field_validator("per_product", mode="before")
    @classmethod
    def _parse_per_product(cls, value: Any) -> int:
        return _positive_int_or_default(value, DEFAULT_LIMIT_PER_PRODUCT)

    @field_validator("window_seconds", mode="before")
    @classmethod
    def _parse_window_seconds(cls, value: Any) -> int:
        return _positive_int_or_default(value, DEFAULT_WINDOW_SECONDS)

    def to_config(self) -> RateLimitConfig:
        return RateLimitConfig(
            limit_per_product=self.per_product,
            window_seconds=self.window_seconds,
        )


def _build_app_settings() -> AppSettings:
    return AppSettings()


def _build_log_settings() -> LogSettings:
    return LogSettings()


def _build_database_settings() -> DatabaseSettings:
    return DatabaseSettings()


def _build_purchase_limit_settings() -> PurchaseLimitSettings:
    return PurchaseLimitSettings()


class Settings(BaseSettings):
    """Main application settings container.

    Composed from domain-specific settings, each reading its own env prefix.
    Nested settings are created via default_factory so env loading works.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    database: DatabaseSettings = Field(default_factory=_build_database_settings)
    purchase_limit: PurchaseLimitSettings = Field(
        default_factory=_build_purchase_limit_settings
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
