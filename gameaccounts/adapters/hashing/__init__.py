"""Password hashing adapters."""

from gameaccounts.adapters.hashing.base import AbstractPasswordHasher
from gameaccounts.adapters.hashing.bcrypt_hasher import BcryptPasswordHasher

__all__ = [
    "AbstractPasswordHasher",
    "BcryptPasswordHasher",
]
