"""In-memory token-bucket rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Bounded: at most ``max_keys`` buckets are tracked, least recently used
  buckets are dropped first.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from gameaccounts.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    rate_per_second: float
    burst: int
    tokens: float
    last_refill: float

    def refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(float(self.burst), self.tokens + elapsed * self.rate_per_second)
        self.last_refill = now

    def is_full(self, now: float) -> bool:
        elapsed = max(0.0, now - self.last_refill)
        return self.tokens + elapsed * self.rate_per_second >= self.burst


class InMemoryTokenBucketRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping one token bucket per key.

    A key accrues ``rate_per_second`` tokens up to ``burst`` and each admitted
    request spends one. New keys start with a full bucket.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        rate_per_second: float,
        burst: int,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            rate_per_second: Default refill rate for new buckets.
            burst: Default capacity for new buckets.
            max_keys: Maximum number of buckets kept in memory.
            clock: Monotonic time source returning seconds.

        Raises:
            ValueError: If any limit is invalid.
        """
        _validate_policy(rate_per_second, burst)
        if max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._rate_per_second = rate_per_second
        self._burst = burst
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: OrderedDict[str, _Bucket] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    @property
    def rate_per_second(self) -> float:
        return self._rate_per_second

    @property
    def burst(self) -> int:
        return self._burst

    @property
    def max_keys(self) -> int:
        return self._max_keys

    def _get_or_create_bucket(self, key: str, now: float, rate_per_second: float, burst: int) -> _Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(
                rate_per_second=rate_per_second,
                burst=burst,
                tokens=float(burst),
                last_refill=now,
            )
            self._buckets[key] = bucket
            self._evict_if_over_capacity_locked()
        else:
            self._buckets.move_to_end(key)
        return bucket

    def _evict_if_over_capacity_locked(self) -> None:
        while len(self._buckets) > self._max_keys:
            # popitem(last=False) removes the least recently used bucket
            self._buckets.popitem(last=False)

    def consume(
        self,
        key: str,
        *,
        rate_per_second: float | None = None,
        burst: int | None = None,
    ) -> RateLimitResult:
        """Spend one token for the provided key.

        Args:
            key: Unique identifier for rate limiting (e.g., client address).
            rate_per_second: Refill rate for a bucket created by this call.
            burst: Capacity for a bucket created by this call.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or the policy is invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        rate = self._rate_per_second if rate_per_second is None else rate_per_second
        capacity = self._burst if burst is None else burst
        _validate_policy(rate, capacity)

        with self._lock:
            now = self._clock()
            bucket = self._get_or_create_bucket(key, now, rate, capacity)
            bucket.refill(now)

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return RateLimitResult(
                    allowed=True,
                    limit=bucket.burst,
                    remaining=int(bucket.tokens),
                    retry_after_seconds=None,
                )

            missing = 1.0 - bucket.tokens
            retry_after = max(1, int(math.ceil(missing / bucket.rate_per_second)))
            return RateLimitResult(
                allowed=False,
                limit=bucket.burst,
                remaining=0,
                retry_after_seconds=retry_after,
            )

    def reset(self) -> None:
        """Drop every bucket at once.

        Clients lose any unspent burst credit and start again from a full bucket.
        """
        with self._lock:
            dropped = len(self._buckets)
            self._buckets.clear()

        logger.info("rate_limit.reset", extra={"dropped_keys": dropped})

    def reclaim(self) -> int:
        """Drop buckets that have refilled to capacity.

        A full bucket behaves exactly like a freshly created one, so removing
        it frees memory without changing any future admission decision.

        Returns:
            Number of buckets removed.
        """
        with self._lock:
            now = self._clock()
            idle_keys = [key for key, bucket in self._buckets.items() if bucket.is_full(now)]
            for key in idle_keys:
                del self._buckets[key]
            remaining = len(self._buckets)

        if idle_keys:
            logger.debug(
                "rate_limit.reclaimed",
                extra={"dropped_keys": len(idle_keys), "tracked_keys": remaining},
            )
        return len(idle_keys)


def _validate_policy(rate_per_second: float, burst: int) -> None:
    if rate_per_second <= 0:
        raise ValueError("rate_per_second must be > 0")
    if burst < 1:
        raise ValueError("burst must be >= 1")
