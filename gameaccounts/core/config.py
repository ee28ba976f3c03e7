"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    title: str = Field(
        "Educational Game Accounts API",
        description="Title shown in the OpenAPI docs",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Account store connection settings."""

    url: str = Field(
        "sqlite:///./accounts.db",
        description="SQLAlchemy database URL for the account store",
    )
    echo: bool = Field(
        False,
        description="Echo SQL statements (debugging only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
    )


class SecuritySettings(BaseSettings):
    """Password hashing and API key settings."""

    bcrypt_rounds: int = Field(
        12,
        description="bcrypt cost factor (log2 of the work rounds)",
        ge=4,
        le=31,
    )
    min_password_length: int = Field(
        6,
        description="Minimum password length in characters",
        ge=1,
    )
    import_placeholder_password: str = Field(
        "imported123",
        description="Password assigned to imported accounts that carry none",
    )
    api_key_required: bool = Field(
        False,
        description="Reject requests that do not present an X-API-Key header",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys",
    )

    model_config = SettingsConfigDict(
        env_prefix="SECURITY_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Token-bucket rate limiting per client address."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    requests_per_second: float = Field(
        100.0,
        description="Token refill rate for general API routes",
        gt=0,
    )
    burst: int = Field(
        20,
        description="Bucket capacity for general API routes",
        ge=1,
    )
    export_requests_per_second: float = Field(
        10.0,
        description="Token refill rate for export/import routes",
        gt=0,
    )
    export_burst: int = Field(
        2,
        description="Bucket capacity for export/import routes",
        ge=1,
    )
    max_keys: int = Field(
        10_000,
        description="Maximum number of tracked client buckets per limiter",
        ge=1,
    )
    reclaim_interval_seconds: float = Field(
        60.0,
        description="How often fully refilled buckets are dropped (0 disables)",
        ge=0,
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance, used when no explicit Settings is passed to the app factory
settings = Settings()
