"""Application-level exception types.

This module defines the error taxonomy shared by the form handlers, enabling
consistent error handling, logging, and API responses:

- ClientAppError family: the caller sent something we refuse (4xx).
- EmailAppError: the email provider failed (500, never retried).
- Anything else is unexpected and handled by the outermost boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged but never returned to clients.
    """

    code: str
    hint: str
    method: str
    missing_fields: list[str]
    required_fields: list[str]
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    provider: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable, client-safe error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ClientAppError(AppError):
    """Raised when the request itself is at fault (4xx)."""

    status_code = 400


class ValidationAppError(ClientAppError):
    """Raised when the submitted payload fails validation."""

    status_code = 400


class MethodNotAllowedAppError(ClientAppError):
    """Raised when a form endpoint receives a method other than POST/OPTIONS."""

    status_code = 405


class RateLimitedAppError(ClientAppError):
    """Raised when the caller exceeded its submission budget."""

    status_code = 429


class EmailAppError(AppError):
    """Raised when the email provider call fails or cannot be attempted."""
