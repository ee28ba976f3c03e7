"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports the settings module,
so the global Settings instance never points at a developer database.
"""

import os
from pathlib import Path
from typing import Any, Iterator

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("SECURITY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from gameaccounts.adapters.hashing.bcrypt_hasher import BcryptPasswordHasher
from gameaccounts.adapters.storage.sqlalchemy import SQLAlchemyAccountStore
from gameaccounts.core.app_factory import create_app
from gameaccounts.core.config import (
    DatabaseSettings,
    LogSettings,
    RateLimitSettings,
    SecuritySettings,
    Settings,
)
from gameaccounts.core.container import ServiceContainer, build_container
from gameaccounts.schemas.account import AccountCreate
from gameaccounts.services.account_service import AccountService


def make_settings(db_path: Path, **overrides: Any) -> Settings:
    """Build isolated settings: file database, cheap bcrypt, generous limits."""

    values: dict[str, Any] = {
        "database": DatabaseSettings(url=f"sqlite:///{db_path}"),
        "security": SecuritySettings(bcrypt_rounds=4),
        "rate_limit": RateLimitSettings(
            burst=1000,
            export_burst=1000,
            reclaim_interval_seconds=0,
        ),
        "log": LogSettings(level="WARNING"),
    }
    values.update(overrides)
    return Settings(**values)


def make_account(**overrides: Any) -> AccountCreate:
    payload: dict[str, Any] = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123",
        "first_name": "Alice",
        "last_name": "Liddell",
        "grade": 5,
        "school": "Wonderland Elementary",
    }
    payload.update(overrides)
    return AccountCreate(**payload)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "accounts.db"


@pytest.fixture
def store(db_path: Path) -> Iterator[SQLAlchemyAccountStore]:
    account_store = SQLAlchemyAccountStore(f"sqlite:///{db_path}")
    account_store.init_models()
    yield account_store
    account_store.close()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def service(store: SQLAlchemyAccountStore, hasher: BcryptPasswordHasher) -> AccountService:
    return AccountService(store=store, hasher=hasher)


@pytest.fixture
def test_settings(db_path: Path) -> Settings:
    return make_settings(db_path)


@pytest.fixture
def container(test_settings: Settings) -> Iterator[ServiceContainer]:
    services = build_container(test_settings)
    yield services
    services.close()


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    return TestClient(create_app(container=container))
