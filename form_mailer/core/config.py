"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

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


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-caller rate limiting on form submissions",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of submissions allowed per window (per caller)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        3600,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_backend: Literal["memory", "redis"] = Field(
        "memory",
        description="Storage backend for rate limit windows",
    )
    redis_url: str | None = Field(
        None,
        description="Redis connection URL (required when rate_limit_backend=redis)",
    )
    redis_timeout_seconds: float = Field(
        2.0,
        description="Connect and socket timeout for Redis calls in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ResendSettings(BaseSettings):
    """Email provider (Resend) configuration."""

    api_key: str | None = Field(
        None,
        description="Resend API key",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Upper bound for a single send call in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RESEND_",
        case_sensitive=False,
    )


class ContactFormSettings(BaseSettings):
    """Contact form email settings."""

    recipient_email: str | None = Field(
        None,
        description="Operator address receiving contact submissions",
    )
    from_email: str = Field(
        "noreply@icodewith.ai",
        description="Sender address for contact notifications",
    )
    subject: str = Field(
        "New Contact Form Submission - iCodeWith.ai",
        description="Subject line for contact notifications",
    )

    model_config = SettingsConfigDict(
        env_prefix="CONTACT_",
        case_sensitive=False,
    )


class ReminderFormSettings(BaseSettings):
    """Reminder form email settings."""

    admin_email: str | None = Field(
        None,
        description="Admin address blind-copied on every reminder confirmation",
    )
    from_email: str = Field(
        "contact@send.icodewith.ai",
        description="Sender address for reminder confirmations",
    )
    subject: str = Field(
        "Your iCodeWith.ai reminder is set!",
        description="Subject line for reminder confirmations",
    )

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        case_sensitive=False,
    )


class FormSettings(BaseSettings):
    """Settings shared by both form handlers."""

    timezone: str = Field(
        "America/Los_Angeles",
        description="IANA time zone used for the submission timestamp in emails",
    )

    model_config = SettingsConfigDict(
        env_prefix="FORM_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read/propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Nested settings are created via default_factory so each group reads its
    own prefixed environment variables.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    resend: ResendSettings = Field(default_factory=ResendSettings)
    contact: ContactFormSettings = Field(default_factory=ContactFormSettings)
    reminder: ReminderFormSettings = Field(default_factory=ReminderFormSettings)
    form: FormSettings = Field(default_factory=FormSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
