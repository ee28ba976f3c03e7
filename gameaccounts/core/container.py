"""Explicitly constructed service container.

Owns every piece of shared state (store connection, hasher, limiter buckets)
so that nothing lives in module globals. The app factory attaches one
container to ``app.state``; tests build isolated containers of their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gameaccounts.adapters.hashing.base import AbstractPasswordHasher
from gameaccounts.adapters.hashing.bcrypt_hasher import BcryptPasswordHasher
from gameaccounts.adapters.rate_limit.base import AbstractRateLimiter
from gameaccounts.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from gameaccounts.adapters.storage.base import AbstractAccountStore
from gameaccounts.adapters.storage.sqlalchemy import SQLAlchemyAccountStore
from gameaccounts.core.config import Settings
from gameaccounts.services.account_service import AccountService
from gameaccounts.services.transfer_service import TransferService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Bundle of collaborators shared by all requests of one app instance.

    Attributes:
        settings: Resolved configuration.
        store: Account store.
        hasher: Password hasher.
        accounts: Account operations.
        transfer: Bulk export/import operations.
        limiter: Rate limiter for general API routes.
        export_limiter: Stricter rate limiter for export/import routes.
    """

    settings: Settings
    store: AbstractAccountStore
    hasher: AbstractPasswordHasher
    accounts: AccountService
    transfer: TransferService
    limiter: AbstractRateLimiter
    export_limiter: AbstractRateLimiter

    def limiters(self) -> tuple[AbstractRateLimiter, ...]:
        return (self.limiter, self.export_limiter)

    def close(self) -> None:
        self.store.close()


def build_container(
    settings: Settings,
    *,
    store: AbstractAccountStore | None = None,
    hasher: AbstractPasswordHasher | None = None,
) -> ServiceContainer:
    """Build a container from settings.

    Args:
        settings: Configuration to build from.
        store: Optional pre-built store (tables must already exist).
        hasher: Optional pre-built hasher.

    Returns:
        Fully wired ServiceContainer.
    """
    if store is None:
        sql_store = SQLAlchemyAccountStore(settings.database.url, echo=settings.database.echo)
        sql_store.init_models()
        store = sql_store

    if hasher is None:
        hasher = BcryptPasswordHasher(
            rounds=settings.security.bcrypt_rounds,
            min_length=settings.security.min_password_length,
        )

    accounts = AccountService(store=store, hasher=hasher)
    transfer = TransferService(
        accounts,
        placeholder_password=settings.security.import_placeholder_password,
    )

    rate_cfg = settings.rate_limit
    container = ServiceContainer(
        settings=settings,
        store=store,
        hasher=hasher,
        accounts=accounts,
        transfer=transfer,
        limiter=InMemoryTokenBucketRateLimiter(
            rate_per_second=rate_cfg.requests_per_second,
            burst=rate_cfg.burst,
            max_keys=rate_cfg.max_keys,
        ),
        export_limiter=InMemoryTokenBucketRateLimiter(
            rate_per_second=rate_cfg.export_requests_per_second,
            burst=rate_cfg.export_burst,
            max_keys=rate_cfg.max_keys,
        ),
    )

    logger.info(
        "container.built",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": rate_cfg.enabled,
            "bcrypt_rounds": settings.security.bcrypt_rounds,
        },
    )
    return container
