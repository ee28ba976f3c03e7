"""Account storage backends."""

from gameaccounts.adapters.storage.base import (
    AbstractAccountStore,
    AccountChanges,
    AccountRecord,
    AccountStats,
    NewAccount,
)
from gameaccounts.adapters.storage.sqlalchemy import SQLAlchemyAccountStore

__all__ = [
    "AbstractAccountStore",
    "AccountChanges",
    "AccountRecord",
    "AccountStats",
    "NewAccount",
    "SQLAlchemyAccountStore",
]
