"""Client configuration using Pydantic Settings.

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

# Map environments to their respective .env files (relative to PROJECT_ROOT)
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


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_registry_settings() -> "RegistrySettings":
    return RegistrySettings()


def _build_rate_limit_settings() -> "RateLimitSettings":
    return RateLimitSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class RegistrySettings(BaseSettings):
    """Remote registration API endpoint configuration."""

    base_url: str = Field(
        "https://ismp.crpt.ru",
        description="Scheme and host of the registration API",
    )
    create_document_path: str = Field(
        "/api/v3/lk/documents/create",
        description="Path of the create-document endpoint",
    )
    signature_header: str = Field(
        "Signature",
        description="Header carrying the document signature",
    )
    timeout_seconds: float = Field(
        30.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Outbound admission control configuration.

    ``request_limit`` permits are granted per ``window_seconds``; the pool is
    reset to full at the end of every window.
    """

    request_limit: int = Field(
        10,
        description="Maximum number of outbound requests per window",
        ge=1,
    )
    window_seconds: float = Field(
        1.0,
        description="Refill window in seconds",
        gt=0,
    )
    acquire_timeout_seconds: float | None = Field(
        None,
        description="How long a submission may wait for a permit (None waits forever)",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on import if a configured value is invalid.
    """

    app_env: str = APP_ENV
    registry: RegistrySettings = Field(default_factory=_build_registry_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
