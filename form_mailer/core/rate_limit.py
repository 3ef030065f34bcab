"""Rate limiting wiring for the form endpoints.

This module connects the rate limiting adapters to the HTTP layer.

Design goals:
- Minimal coupling: routes receive the limiter through a dependency function,
  so tests can override it.
- Swap-friendly: the storage backend (memory or Redis) is chosen by settings.

Rate limiting strategy:
- Fixed window per form and caller, opened by the caller's first request.
- Caller identity: ``client-ip`` header, then ``x-forwarded-for``, then the
  literal ``"unknown"`` (callers without either header share one bucket).
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping

from form_mailer.adapters.rate_limit.base import AbstractRateLimiter
from form_mailer.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from form_mailer.core.config import settings
from form_mailer.core.errors import RateLimitedAppError
from form_mailer.core.logging import hash_identifier

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please wait before submitting again."
UNKNOWN_CALLER = "unknown"

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[str, int, int] | None = None
_limiter_lock = threading.Lock()


def _build_limiter() -> AbstractRateLimiter:
    if settings.app.rate_limit_backend == "redis":
        if not settings.app.redis_url:
            raise ValueError("APP_REDIS_URL is required when APP_RATE_LIMIT_BACKEND=redis")
        from form_mailer.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter

        return RedisFixedWindowRateLimiter.from_url(
            settings.app.redis_url,
            timeout_seconds=settings.app.redis_timeout_seconds,
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
        )

    return InMemoryFixedWindowRateLimiter(
        limit=settings.app.rate_limit_requests,
        window_seconds=settings.app.rate_limit_window_seconds,
    )


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    FastAPI resolves sync dependencies in the threadpool, so the build is
    serialized: concurrent first requests all get the same instance.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_backend,
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
    )

    with _limiter_lock:
        if _limiter is None or _limiter_config != config:
            _limiter = _build_limiter()
            _limiter_config = config
        return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next request starts with empty windows."""

    global _limiter, _limiter_config
    with _limiter_lock:
        _limiter = None
        _limiter_config = None


def resolve_caller_identity(headers: Mapping[str, str]) -> str:
    """Derive the rate limit key from request headers.

    Args:
        headers: Request headers (case-insensitive mapping).

    Returns:
        str: The caller identity used to key rate limit windows.
    """

    return (
        headers.get("client-ip")
        or headers.get("x-forwarded-for")
        or UNKNOWN_CALLER
    )


def enforce_rate_limit(
    limiter: AbstractRateLimiter,
    identity: str,
    *,
    form: str,
) -> None:
    """Consume one attempt from the caller's budget.

    Args:
        limiter: Rate limiter instance.
        identity: Caller identity from ``resolve_caller_identity``.
        form: Form name; budgets are kept per form and caller.

    Raises:
        RateLimitedAppError: When the caller exceeded the configured rate.
    """

    if not settings.app.rate_limit_enabled:
        return

    # Each form keeps its own budget per caller
    key = f"{form}:{identity}"
    key_hash = hash_identifier(key)
    result = limiter.check(key)
    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "form": form,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "form": form,
            "key_hash": key_hash,
            "limit": result.limit,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitedAppError(
        code="rate_limited",
        message=RATE_LIMITED_MESSAGE,
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        },
    )
