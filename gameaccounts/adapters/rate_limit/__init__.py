"""Per-client rate limiting adapters.

Routes depend on AbstractRateLimiter only; the in-memory token bucket is the
single backend today and keeps its state per process.
"""

from gameaccounts.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from gameaccounts.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryTokenBucketRateLimiter",
    "RateLimitResult",
]
