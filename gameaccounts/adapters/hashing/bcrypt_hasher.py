"""bcrypt password hasher.

Notes:
- Cost is tunable; every +1 round doubles hashing time.
- bcrypt only reads the first 72 bytes of input. Passwords are truncated to
  that limit explicitly, identically in hash and verify.
"""

from __future__ import annotations

import logging

import bcrypt

from gameaccounts.adapters.hashing.base import AbstractPasswordHasher
from gameaccounts.core.errors import CorruptHashError, WeakInputError

logger = logging.getLogger(__name__)

BCRYPT_MAX_INPUT_BYTES = 72
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
_DUMMY_PASSWORD = b"timing-equalizer-password"


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_INPUT_BYTES]


class BcryptPasswordHasher(AbstractPasswordHasher):
    """Salted, deliberately slow password hashing using bcrypt."""

    def __init__(self, *, rounds: int = 12, min_length: int = 6) -> None:
        """Initialize the hasher.

        Args:
            rounds: bcrypt cost factor (4..31).
            min_length: Minimum password length in characters.

        Raises:
            ValueError: If rounds or min_length are invalid.
        """
        if not 4 <= rounds <= 31:
            raise ValueError("rounds must be between 4 and 31")
        if min_length < 1:
            raise ValueError("min_length must be >= 1")

        self._rounds = rounds
        self._min_length = min_length

    @property
    def rounds(self) -> int:
        return self._rounds

    @property
    def min_length(self) -> int:
        return self._min_length

    def hash(self, password: str) -> str:
        if len(password) < self._min_length:
            raise WeakInputError(min_length=self._min_length, actual_length=len(password))

        hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("ascii")

    def dummy_hash(self) -> str:
        return bcrypt.hashpw(_DUMMY_PASSWORD, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    def verify(self, password: str, hash_value: str) -> bool:
        if not isinstance(hash_value, str) or not hash_value.startswith(_BCRYPT_PREFIXES):
            logger.error("password_hash.corrupt", extra={"reason": "unknown_prefix"})
            raise CorruptHashError()

        try:
            return bcrypt.checkpw(_encode(password), hash_value.encode("ascii"))
        except ValueError as exc:
            logger.error("password_hash.corrupt", extra={"reason": "invalid_salt"})
            raise CorruptHashError() from exc
