"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

from pydantic import Field, StringConstraints, model_validator
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

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


LANGUAGE_CODE_PATTERN = r"^[a-z]{2}$"

LanguageCodeStr = Annotated[str, StringConstraints(pattern=LANGUAGE_CODE_PATTERN)]

REFERENCE_LANGUAGES: tuple[str, ...] = ("en", "es", "fr", "de", "it", "pt", "ru", "ja", "zh")


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return LogSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    See _build_log_settings() for rationale about the type ignore.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_greeting_settings() -> "GreetingSettings":
    """Build greeting settings from environment."""

    return GreetingSettings()  # type: ignore[call-arg]


class LogSettings(BaseSettings):
    """Logging configuration (format, destination and correlation header)."""

    level: str = Field(
        "INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    format: str = Field(
        "json",
        description="Log format: 'json' for structured output or 'plain' for text",
    )
    output: str = Field(
        "stdout",
        description="Log destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        0,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_requests_per_second: int = Field(
        100,
        description="Tokens replenished per second by the global rate limiter",
        ge=1,
        le=10000,
    )
    rate_limit_burst: int = Field(
        1,
        description="Maximum number of tokens the global rate limiter can hold",
        ge=1,
        le=10000,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class GreetingSettings(BaseSettings):
    """Greeting dictionary, resolution latency and worker pool configuration."""

    default_language: LanguageCodeStr = Field(
        "en",
        description="Language used when the requested one is not supported",
    )
    supported_languages: list[LanguageCodeStr] = Field(
        default_factory=lambda: list(REFERENCE_LANGUAGES),
        description="Language codes served by the greeting dictionary",
        min_length=1,
        max_length=20,
    )
    lookup_latency_ms: int = Field(
        100,
        description="Simulated backing-lookup latency for a single greeting",
        ge=0,
    )
    all_languages_latency_ms: int = Field(
        50,
        description="Simulated backing-lookup latency for the full dictionary",
        ge=0,
    )
    cache_ttl_seconds: int | None = Field(
        None,
        description="Optional cache entry lifetime; entries never expire when unset",
        ge=1,
    )
    async_max_workers: int = Field(
        4,
        description="Size of the worker pool used by the async greeting endpoint",
        ge=1,
        le=64,
    )

    model_config = SettingsConfigDict(
        env_prefix="GREETING_",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _default_must_be_supported(self) -> "GreetingSettings":
        if self.default_language not in self.supported_languages:
            raise ValueError(
                f"default_language '{self.default_language}' must be one of supported_languages"
            )
        # Supported codes without a greeting are dropped from the dictionary,
        # so the default must also be a reference language.
        if self.default_language not in REFERENCE_LANGUAGES:
            raise ValueError(
                f"default_language '{self.default_language}' has no greeting; "
                f"choose one of {', '.join(REFERENCE_LANGUAGES)}"
            )
        return self


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    greeting: GreetingSettings = Field(default_factory=_build_greeting_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
