"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Every error here is
recoverable by the caller; storage engine failures are deliberately not
wrapped and propagate as raised by SQLAlchemy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    field: str
    account_id: int
    min_length: int
    actual_length: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class WeakInputError(ValidationAppError):
    """Raised when a password is shorter than the configured minimum."""

    def __init__(self, min_length: int, actual_length: int) -> None:
        super().__init__(
            code="weak_password",
            message=f"Password must be at least {min_length} characters long",
            details={"min_length": min_length, "actual_length": actual_length},
        )


class DuplicateError(AppError):
    """Raised when a username or email is already taken.

    Attributes:
        field: Name of the conflicting field ("username" or "email").
    """

    def __init__(self, field: str) -> None:
        super().__init__(
            code=f"duplicate_{field}",
            message=f"An account with this {field} already exists",
            details={"field": field},
        )
        self.field = field


class NotFoundError(AppError):
    """Raised when no account matches the requested id or username."""

    def __init__(self, account_id: int | None = None) -> None:
        super().__init__(
            code="account_not_found",
            message="Account not found",
            details={"account_id": account_id} if account_id is not None else None,
        )
        self.account_id = account_id


class AuthError(AppError):
    """Raised on a failed login.

    Unknown usernames and wrong passwords produce the same error so callers
    cannot tell which usernames exist.
    """

    def __init__(self) -> None:
        super().__init__(
            code="invalid_credentials",
            message="Invalid username or password",
        )


class CorruptHashError(AppError):
    """Raised when a stored password hash cannot be parsed."""

    def __init__(self) -> None:
        super().__init__(
            code="corrupt_password_hash",
            message="Stored credentials are unreadable",
        )


class AuthenticationAppError(AppError):
    """Raised when API key authentication fails."""
