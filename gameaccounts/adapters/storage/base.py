"""Account storage abstractions used by the account services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class AccountRecord:
    id: int
    username: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    grade: int
    school: str
    game_level: int
    experience: int
    created_at: datetime
    updated_at: datetime
    is_active: bool


@dataclass(slots=True)
class NewAccount:
    """Fields supplied by the caller on creation; the rest is store-assigned."""

    username: str
    email: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    grade: int = 0
    school: str = ""


@dataclass(slots=True)
class AccountChanges:
    """Full replacement of the mutable account fields."""

    first_name: str
    last_name: str
    grade: int
    school: str
    game_level: int
    experience: int
    is_active: bool


@dataclass(frozen=True, slots=True)
class AccountStats:
    total_accounts: int
    active_accounts: int
    average_game_level: float
    total_experience: int


class AbstractAccountStore(ABC):
    """Persistent account storage with unique usernames and emails."""

    @abstractmethod
    def create(self, account: NewAccount) -> AccountRecord:
        """Insert a new account.

        Raises:
            DuplicateError: If the username or email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, account_id: int) -> AccountRecord:
        """Raises NotFoundError if no account has this id."""
        raise NotImplementedError

    @abstractmethod
    def get_by_username(self, username: str) -> AccountRecord:
        """Raises NotFoundError if no account has this username."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[AccountRecord]:
        """Return every account, newest first."""
        raise NotImplementedError

    @abstractmethod
    def update(self, account_id: int, changes: AccountChanges) -> AccountRecord:
        """Overwrite the mutable fields of an account.

        Raises:
            NotFoundError: If no account has this id.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, account_id: int) -> None:
        """Raises NotFoundError if no account has this id."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> AccountStats:
        raise NotImplementedError

    def close(self) -> None:
        """Release any held resources."""
