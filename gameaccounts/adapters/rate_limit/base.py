"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Bucket capacity (burst) for this key.
        remaining: Whole tokens left after this decision.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-key rate limiters."""

    @abstractmethod
    def consume(
        self,
        key: str,
        *,
        rate_per_second: float | None = None,
        burst: int | None = None,
    ) -> RateLimitResult:
        """Spend one unit of budget for a key.

        Args:
            key: Unique identifier (e.g., client address).
            rate_per_second: Refill rate used if the key has no bucket yet.
            burst: Capacity used if the key has no bucket yet.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Discard all per-key state."""
        raise NotImplementedError

    @abstractmethod
    def reclaim(self) -> int:
        """Drop per-key state that no longer affects decisions; return how many keys."""
        raise NotImplementedError

    def allow(
        self,
        key: str,
        rate_per_second: float | None = None,
        burst: int | None = None,
    ) -> bool:
        """Return True if a request for ``key`` is admitted."""
        return self.consume(key, rate_per_second=rate_per_second, burst=burst).allowed
