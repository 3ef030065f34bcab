"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
storage backend can be swapped (in-process memory, Redis) without touching
the form handlers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Decision returned by a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the caller's window expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-caller fixed-window rate limiters.

    A caller's window opens with its first request. Within the window, at most
    ``limit`` requests are allowed; rejected requests do not count. Once the
    window has elapsed, the next request opens a fresh window.
    """

    @abstractmethod
    def check(self, key: str, now: float | None = None) -> RateLimitResult:
        """Record an attempt for ``key`` and decide whether it may proceed.

        Args:
            key: Caller identity (e.g., client IP).
            now: UNIX time in seconds; defaults to the limiter's clock.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
