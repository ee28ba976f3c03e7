"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Token bucket per client address.
- General routes and export/import routes use separate limiter instances,
  so the stricter export policy never shares buckets with normal traffic.
- Limiters live on the app's ServiceContainer, not in module globals.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import HTTPException, Request, status

from gameaccounts.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)


def _build_rate_limit_key(request: Request) -> str:
    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def _enforce(request: Request, limiter: AbstractRateLimiter, policy: str) -> None:
    """Consume one token for the requesting client or raise HTTP 429.

    Args:
        request: FastAPI request.
        limiter: Limiter instance for this route class.
        policy: Policy name used in logs ("default" or "export").

    Raises:
        HTTPException: 429 Too Many Requests when the bucket is empty.
    """

    rate_cfg = request.app.state.container.settings.rate_limit
    if not rate_cfg.enabled:
        return

    key = _build_rate_limit_key(request)
    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "policy": policy,
                "key_hash": _hash_limiter_key(key),
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 1
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "policy": policy,
            "key_hash": _hash_limiter_key(key),
            "limit": result.limit,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if rate_cfg.include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Too many requests, please try again later.",
        headers=headers or None,
    )


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency applying the default per-client policy."""

    _enforce(request, request.app.state.container.limiter, "default")


async def enforce_export_rate_limit(request: Request) -> None:
    """FastAPI dependency applying the stricter export/import policy."""

    _enforce(request, request.app.state.container.export_limiter, "export")
