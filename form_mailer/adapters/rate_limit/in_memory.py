"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: state is lost on restart and each worker process keeps
  its own registry, so the effective limit scales with the number of workers.
- Thread-safe: the read-decide-write step runs under a lock.
- No eviction: one small entry per caller for the lifetime of the process.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from form_mailer.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class RateWindow:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping one fixed window per caller in a dict.

    Windows are anchored at each caller's first request (not at wall-clock
    boundaries): a caller gets ``limit`` requests in the ``window_seconds``
    following the request that opened its window.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed requests per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._windows: dict[str, RateWindow] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def get_window(self, key: str) -> RateWindow | None:
        """Return a copy of the caller's current window, if any."""
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return None
            return RateWindow(window_start=window.window_start, count=window.count)

    def _open_window(self, key: str, now: float) -> RateLimitResult:
        self._windows[key] = RateWindow(window_start=now, count=1)
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=self._limit - 1,
            reset_at=int(now + self._window_seconds),
            retry_after_seconds=None,
        )

    def check(self, key: str, now: float | None = None) -> RateLimitResult:
        """Record an attempt for ``key`` and decide whether it may proceed.

        Args:
            key: Caller identity.
            now: UNIX time in seconds; defaults to the configured clock.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._lock:
            window = self._windows.get(key)

            if window is None or now - window.window_start >= self._window_seconds:
                return self._open_window(key, now)

            reset_at = window.window_start + self._window_seconds

            if window.count < self._limit:
                window.count += 1
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - window.count,
                    reset_at=int(reset_at),
                    retry_after_seconds=None,
                )

            # Rejected attempts leave the window untouched
            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=0,
                reset_at=int(reset_at),
                retry_after_seconds=max(0, int(math.ceil(reset_at - now))),
            )
