"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import of ``form_mailer`` so the
global settings object is built from them.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("RESEND_API_KEY", "re_test_key_123")
os.environ.setdefault("CONTACT_RECIPIENT_EMAIL", "operator@example.com")
os.environ.setdefault("REMINDER_ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from form_mailer.adapters.email.factory import get_email_client
from form_mailer.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from form_mailer.core.rate_limit import get_rate_limiter
from form_mailer.main import app


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX clock for the rate limiter."""
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    """Fresh limiter with production defaults (5 per hour)."""
    return InMemoryFixedWindowRateLimiter(limit=5, window_seconds=3600, clock=clock)


@pytest.fixture
def email_client() -> AsyncMock:
    """Email client double returning a provider id."""
    client = AsyncMock()
    client.send.return_value = "email-id-123"
    return client


@pytest.fixture
def client(limiter: InMemoryFixedWindowRateLimiter, email_client: AsyncMock):
    """Test client with limiter and email client overridden."""
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_email_client] = lambda: email_client
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
