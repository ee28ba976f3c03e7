"""Password hasher interface.

Services depend on this abstraction so the hashing scheme (and its cost)
can change without touching the account logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractPasswordHasher(ABC):
    """One-way password hashing with salted output."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Two calls with the same password return different values; both verify.

        Args:
            password: Plaintext password.

        Returns:
            Opaque hash string safe to persist.

        Raises:
            WeakInputError: If the password is shorter than the minimum length.
        """
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, hash_value: str) -> bool:
        """Check a plaintext password against a stored hash.

        Args:
            password: Plaintext password to check.
            hash_value: Hash previously returned by ``hash``.

        Returns:
            True if the password produced the hash, False otherwise.

        Raises:
            CorruptHashError: If ``hash_value`` is not a valid hash.
        """
        raise NotImplementedError

    @abstractmethod
    def dummy_hash(self) -> str:
        """Return a valid hash of a fixed throwaway password.

        Used to spend one verification on logins for unknown usernames. Not
        subject to the password length policy.
        """
        raise NotImplementedError
