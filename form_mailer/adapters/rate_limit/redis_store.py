"""Redis-backed fixed-window rate limiter.

Shares windows across processes and instances, so the configured limit holds
under horizontal scale-out. Each caller window is a single counter key whose
expiry marks the end of the window; the read-decide-write step runs as one
Lua script, which Redis executes atomically.

When Redis is unreachable the limiter fails open: the request is allowed and
a warning is logged.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from redis import Redis
from redis.exceptions import RedisError

from form_mailer.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from form_mailer.core.logging import hash_identifier

logger = logging.getLogger(__name__)

# KEYS[1] = window key, ARGV[1] = limit, ARGV[2] = window length in ms
# Returns {allowed (0/1), count, remaining ttl in ms}
_CHECK_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    redis.call('SET', KEYS[1], 1, 'PX', ARGV[2])
    return {1, 1, tonumber(ARGV[2])}
end
local count = tonumber(current)
local ttl = redis.call('PTTL', KEYS[1])
if count >= tonumber(ARGV[1]) then
    return {0, count, ttl}
end
redis.call('INCR', KEYS[1])
return {1, count + 1, ttl}
"""


class RedisFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter storing per-caller windows in Redis."""

    def __init__(
        self,
        client: Redis,
        *,
        limit: int,
        window_seconds: int,
        key_prefix: str = "form_mailer:rate",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._client = client
        self._limit = limit
        self._window_seconds = window_seconds
        self._key_prefix = key_prefix
        self._clock = clock
        self._script = client.register_script(_CHECK_SCRIPT)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        timeout_seconds: float | None = None,
        **kwargs,
    ) -> "RedisFixedWindowRateLimiter":
        """Connect to ``url``; ``timeout_seconds`` bounds both connect and reads."""
        client = Redis.from_url(
            url,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, **kwargs)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def check(self, key: str, now: float | None = None) -> RateLimitResult:
        """Record an attempt for ``key`` in Redis and decide whether it may proceed.

        Args:
            key: Caller identity.
            now: UNIX time in seconds, used only to compute ``reset_at``.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        window_ms = self._window_seconds * 1000
        try:
            raw = self._script(keys=[self._key(key)], args=[self._limit, window_ms])
        except RedisError as exc:
            logger.warning(
                "rate_limit.backend_unavailable",
                extra={"key_hash": hash_identifier(key), "error_msg": str(exc)},
            )
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit,
                reset_at=int(now + self._window_seconds),
                retry_after_seconds=None,
            )

        allowed, count, ttl_ms = (int(value) for value in raw)
        if ttl_ms < 0:
            ttl_ms = window_ms
        ttl_seconds = ttl_ms / 1000
        reset_at = int(now + ttl_seconds)

        if allowed:
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=max(0, self._limit - count),
                reset_at=reset_at,
                retry_after_seconds=None,
            )

        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=max(0, int(math.ceil(ttl_seconds))),
        )
