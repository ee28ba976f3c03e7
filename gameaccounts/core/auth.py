"""API key checks for the HTTP layer.

Keys are validated against a comma-separated list from configuration.
Requests without a key are public unless ``SECURITY_API_KEY_REQUIRED`` is
set; a key that is present but unknown is always rejected.

This is client (application) authentication only. Student logins go
through AccountService.authenticate.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Header, Request

from gameaccounts.core.config import SecuritySettings
from gameaccounts.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def _hash_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def validate_api_key(provided_key: str | None, security: SecuritySettings) -> None:
    """Validate an optional API key against configuration.

    Args:
        provided_key: Value of the X-API-Key header, if any.
        security: Security settings holding the key list and policy.

    Raises:
        AuthenticationAppError: If the key is missing while required, unknown,
            or required but no keys are configured.
    """
    if not provided_key:
        if security.api_key_required:
            logger.warning("auth.missing_key", extra={"auth_required": True})
            raise AuthenticationAppError(
                code="missing_api_key",
                message="Missing API key. Provide X-API-Key header.",
            )
        return

    valid_keys = parse_api_keys(security.api_keys)
    if not valid_keys and security.api_key_required:
        logger.error(
            "api_key_validation_failed",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set SECURITY_API_KEYS or disable auth with SECURITY_API_KEY_REQUIRED=false"},
        )

    if provided_key not in valid_keys:
        logger.warning(
            "api_key_validation_failed",
            extra={"reason": "invalid_api_key", "api_key_hash": _hash_key(provided_key)},
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid API key",
        )


async def verify_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency for API key authentication.

    Usage:
        @router.get("/accounts", dependencies=[Depends(verify_api_key)])

    Raises:
        AuthenticationAppError: Rendered as 403 by the exception handlers.
    """
    container = request.app.state.container
    validate_api_key(x_api_key, container.settings.security)
