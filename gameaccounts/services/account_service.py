"""Account service orchestrating the account store and the password hasher.

This is the single entry point the HTTP layer uses for account operations.
It is where password policy meets storage policy:
- Plaintext passwords are hashed before they reach the store and are never
  persisted or logged
- Login failures are reported with one error regardless of cause
"""

from __future__ import annotations

import logging
from functools import cached_property

from gameaccounts.adapters.hashing.base import AbstractPasswordHasher
from gameaccounts.adapters.storage.base import (
    AbstractAccountStore,
    AccountChanges,
    AccountRecord,
    AccountStats,
    NewAccount,
)
from gameaccounts.core.errors import AuthError, NotFoundError
from gameaccounts.schemas.account import AccountCreate, AccountUpdate

logger = logging.getLogger(__name__)


class AccountService:
    """Operations on student accounts.

    Attributes:
        store: Persistent account store.
        hasher: One-way password hasher.
    """

    def __init__(self, store: AbstractAccountStore, hasher: AbstractPasswordHasher) -> None:
        self.store = store
        self.hasher = hasher

    @cached_property
    def _dummy_hash(self) -> str:
        # unknown usernames verify against this so both failure paths cost one hash check
        return self.hasher.dummy_hash()

    def create_account(self, request: AccountCreate) -> AccountRecord:
        """Create an account, storing only the hash of its password.

        Args:
            request: Validated creation payload.

        Returns:
            The stored account including server-assigned fields.

        Raises:
            WeakInputError: If the password is too short.
            DuplicateError: If the username or email is taken.
        """
        password_hash = self.hasher.hash(request.password)
        account = self.store.create(
            NewAccount(
                username=request.username,
                email=str(request.email),
                password_hash=password_hash,
                first_name=request.first_name,
                last_name=request.last_name,
                grade=request.grade,
                school=request.school,
            )
        )

        logger.info("account.created", extra={"account_id": account.id})
        return account

    def get_account(self, account_id: int) -> AccountRecord:
        return self.store.get_by_id(account_id)

    def get_account_by_username(self, username: str) -> AccountRecord:
        return self.store.get_by_username(username.strip())

    def list_accounts(self) -> list[AccountRecord]:
        return self.store.list_all()

    def update_account(self, account_id: int, request: AccountUpdate) -> AccountRecord:
        account = self.store.update(
            account_id,
            AccountChanges(
                first_name=request.first_name,
                last_name=request.last_name,
                grade=request.grade,
                school=request.school,
                game_level=request.game_level,
                experience=request.experience,
                is_active=request.is_active,
            ),
        )

        logger.info("account.updated", extra={"account_id": account_id})
        return account

    def delete_account(self, account_id: int) -> None:
        self.store.delete(account_id)
        logger.info("account.deleted", extra={"account_id": account_id})

    def get_stats(self) -> AccountStats:
        return self.store.stats()

    def authenticate(self, username: str, password: str) -> AccountRecord:
        """Verify a username/password pair.

        Args:
            username: Login name.
            password: Plaintext password.

        Returns:
            The matching account.

        Raises:
            AuthError: If the user is unknown or the password is wrong.
            CorruptHashError: If the stored hash cannot be read.
        """
        try:
            account = self.store.get_by_username(username.strip())
        except NotFoundError:
            self.hasher.verify(password, self._dummy_hash)
            logger.warning("auth.failed", extra={"reason": "invalid_credentials"})
            raise AuthError() from None

        if not self.hasher.verify(password, account.password_hash):
            logger.warning("auth.failed", extra={"reason": "invalid_credentials"})
            raise AuthError()

        logger.info("auth.success", extra={"account_id": account.id})
        return account
