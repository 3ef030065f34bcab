"""Tests for rate limit wiring: caller identity, enforcement, limiter selection."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, Mock, patch

import pytest
from starlette.datastructures import Headers

from form_mailer.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from form_mailer.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter
from form_mailer.core import rate_limit
from form_mailer.core.errors import RateLimitedAppError
from form_mailer.core.rate_limit import (
    enforce_rate_limit,
    get_rate_limiter,
    reset_rate_limiter,
    resolve_caller_identity,
)


class TestResolveCallerIdentity:
    def test_prefers_client_ip_header(self) -> None:
        headers = Headers({"Client-IP": "198.51.100.1", "X-Forwarded-For": "203.0.113.5"})
        assert resolve_caller_identity(headers) == "198.51.100.1"

    def test_falls_back_to_forwarded_for(self) -> None:
        headers = Headers({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})
        assert resolve_caller_identity(headers) == "203.0.113.5, 10.0.0.1"

    def test_falls_back_to_unknown(self) -> None:
        assert resolve_caller_identity(Headers({})) == "unknown"

    def test_empty_header_is_ignored(self) -> None:
        headers = Headers({"Client-IP": "", "X-Forwarded-For": "203.0.113.5"})
        assert resolve_caller_identity(headers) == "203.0.113.5"


class TestEnforceRateLimit:
    def test_allows_within_budget(self) -> None:
        limiter = InMemoryFixedWindowRateLimiter(limit=2, window_seconds=60)

        enforce_rate_limit(limiter, "k", form="contact")
        enforce_rate_limit(limiter, "k", form="contact")

    def test_raises_with_details_when_exceeded(self) -> None:
        limiter = InMemoryFixedWindowRateLimiter(
            limit=1, window_seconds=60, clock=Mock(return_value=100.0)
        )
        enforce_rate_limit(limiter, "k", form="contact")

        with pytest.raises(RateLimitedAppError) as exc_info:
            enforce_rate_limit(limiter, "k", form="contact")

        error = exc_info.value
        assert error.status_code == 429
        assert error.message == "Too many requests. Please wait before submitting again."
        assert error.details["retry_after"] == 60
        assert error.details["limit"] == 1

    def test_disabled_never_consults_limiter(self) -> None:
        limiter = MagicMock()

        with patch("form_mailer.core.rate_limit.settings") as mock_settings:
            mock_settings.app.rate_limit_enabled = False
            enforce_rate_limit(limiter, "k", form="reminder")

        limiter.check.assert_not_called()


class TestGetRateLimiter:
    def setup_method(self) -> None:
        reset_rate_limiter()

    def teardown_method(self) -> None:
        reset_rate_limiter()

    def test_returns_process_wide_in_memory_instance(self) -> None:
        first = get_rate_limiter()
        second = get_rate_limiter()

        assert isinstance(first, InMemoryFixedWindowRateLimiter)
        assert first is second
        assert first.limit == 5
        assert first.window_seconds == 3600

    def test_concurrent_first_calls_share_one_instance(self) -> None:
        workers = 8
        barrier = threading.Barrier(workers)

        def slow_build():
            time.sleep(0.05)
            return InMemoryFixedWindowRateLimiter(limit=5, window_seconds=3600)

        def first_call(_: int):
            barrier.wait()
            return get_rate_limiter()

        with patch.object(rate_limit, "_build_limiter", side_effect=slow_build) as build:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                limiters = list(pool.map(first_call, range(workers)))

        assert build.call_count == 1
        assert all(limiter is limiters[0] for limiter in limiters)

    def test_rebuilds_when_config_changes(self) -> None:
        first = get_rate_limiter()

        with patch.object(rate_limit.settings.app, "rate_limit_requests", 7):
            second = get_rate_limiter()

        assert second is not first
        assert second.limit == 7

    def test_redis_backend_requires_url(self) -> None:
        with patch.object(rate_limit.settings.app, "rate_limit_backend", "redis"), patch.object(
            rate_limit.settings.app, "redis_url", None
        ):
            with pytest.raises(ValueError, match="APP_REDIS_URL"):
                get_rate_limiter()

    def test_redis_backend_selected(self) -> None:
        with patch.object(rate_limit.settings.app, "rate_limit_backend", "redis"), patch.object(
            rate_limit.settings.app, "redis_url", "redis://localhost:6379/0"
        ), patch("form_mailer.adapters.rate_limit.redis_store.Redis") as mock_redis:
            limiter = get_rate_limiter()

        assert isinstance(limiter, RedisFixedWindowRateLimiter)
        mock_redis.from_url.assert_called_once_with(
            "redis://localhost:6379/0",
            socket_timeout=2.0,
            socket_connect_timeout=2.0,
        )
