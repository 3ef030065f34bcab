"""Rate limiting adapters.

This package provides a small abstraction layer so the service runs with an
in-memory limiter by default and can switch to Redis for a limit shared by
every instance, without changing the API layer.
"""

from form_mailer.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from form_mailer.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
]
