"""Tests for AccountService: hashing on create and login semantics."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from gameaccounts.adapters.hashing.base import AbstractPasswordHasher
from gameaccounts.adapters.hashing.bcrypt_hasher import BcryptPasswordHasher
from gameaccounts.adapters.storage.base import AbstractAccountStore, AccountRecord
from gameaccounts.core.errors import (
    AuthError,
    CorruptHashError,
    DuplicateError,
    NotFoundError,
    WeakInputError,
)
from gameaccounts.schemas.account import AccountUpdate
from gameaccounts.services.account_service import AccountService

from tests.conftest import make_account


def _record(**overrides) -> AccountRecord:
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    values = {
        "id": 1,
        "username": "alice",
        "email": "alice@example.com",
        "password_hash": "$2b$04$abcdefghijklmnopqrstuu",
        "first_name": "Alice",
        "last_name": "Liddell",
        "grade": 5,
        "school": "Wonderland Elementary",
        "game_level": 1,
        "experience": 0,
        "created_at": now,
        "updated_at": now,
        "is_active": True,
    }
    values.update(overrides)
    return AccountRecord(**values)


class TestCreateAccount:
    def test_stores_hash_not_plaintext(self, service: AccountService) -> None:
        account = service.create_account(make_account(password="hunter22"))

        stored = service.store.get_by_id(account.id)
        assert stored.password_hash != "hunter22"
        assert "hunter22" not in stored.password_hash
        assert service.hasher.verify("hunter22", stored.password_hash)

    def test_weak_password_stores_nothing(self, service: AccountService) -> None:
        with pytest.raises(WeakInputError):
            service.create_account(make_account(password="abc"))

        assert service.list_accounts() == []

    def test_duplicate_username(self, service: AccountService) -> None:
        service.create_account(make_account())

        with pytest.raises(DuplicateError) as exc_info:
            service.create_account(make_account(email="second@example.com"))

        assert exc_info.value.field == "username"

    def test_username_is_trimmed(self, service: AccountService) -> None:
        account = service.create_account(make_account(username="  alice  "))

        assert account.username == "alice"
        assert service.get_account_by_username("alice").id == account.id

    def test_concurrent_creates_with_same_username(self, service: AccountService) -> None:
        attempts = 6

        def _attempt(i: int) -> bool:
            try:
                service.create_account(make_account(email=f"alice{i}@example.com"))
            except DuplicateError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            results = list(pool.map(_attempt, range(attempts)))

        assert results.count(True) == 1
        assert len(service.list_accounts()) == 1


class TestUpdateAndDelete:
    def test_update_keeps_credentials(self, service: AccountService) -> None:
        created = service.create_account(make_account())

        updated = service.update_account(
            created.id,
            AccountUpdate(
                first_name="Al",
                last_name="L",
                grade=6,
                school="Looking Glass High",
                game_level=3,
                experience=42,
                is_active=True,
            ),
        )

        assert updated.username == "alice"
        assert updated.updated_at > created.updated_at
        assert service.authenticate("alice", "secret123").id == created.id

    def test_delete_then_get(self, service: AccountService) -> None:
        created = service.create_account(make_account())

        service.delete_account(created.id)

        with pytest.raises(NotFoundError):
            service.get_account(created.id)

    def test_stats_on_empty_store(self, service: AccountService) -> None:
        stats = service.get_stats()

        assert (stats.total_accounts, stats.active_accounts) == (0, 0)
        assert stats.average_game_level == 0.0
        assert stats.total_experience == 0


class TestAuthenticate:
    def test_correct_password(self, service: AccountService) -> None:
        created = service.create_account(make_account())

        account = service.authenticate("alice", "secret123")

        assert account.id == created.id

    def test_unknown_user_and_wrong_password_are_indistinguishable(
        self, service: AccountService
    ) -> None:
        service.create_account(make_account())

        with pytest.raises(AuthError) as unknown:
            service.authenticate("nobody", "secret123")
        with pytest.raises(AuthError) as wrong:
            service.authenticate("alice", "wrong-password")

        assert type(unknown.value) is type(wrong.value)
        assert unknown.value.code == wrong.value.code == "invalid_credentials"
        assert unknown.value.message == wrong.value.message
        assert unknown.value.details == wrong.value.details
        assert unknown.value.__cause__ is None

    def test_failures_match_when_minimum_length_exceeds_dummy_password(
        self, store: AbstractAccountStore
    ) -> None:
        strict = AccountService(store=store, hasher=BcryptPasswordHasher(rounds=4, min_length=30))
        strict.create_account(make_account(password="p" * 30))

        with pytest.raises(AuthError) as unknown:
            strict.authenticate("nobody", "anything")
        with pytest.raises(AuthError) as wrong:
            strict.authenticate("alice", "q" * 30)

        assert unknown.value.code == wrong.value.code == "invalid_credentials"

    def test_username_is_trimmed_on_login_and_lookup(self, service: AccountService) -> None:
        created = service.create_account(make_account())

        assert service.authenticate("  alice ", "secret123").id == created.id
        assert service.get_account_by_username(" alice").id == created.id

    def test_unknown_user_still_verifies_a_hash(self) -> None:
        store = Mock(spec=AbstractAccountStore)
        store.get_by_username.side_effect = NotFoundError()
        hasher = Mock(spec=AbstractPasswordHasher)
        hasher.dummy_hash.return_value = "dummy-hash"
        hasher.verify.return_value = False
        service = AccountService(store=store, hasher=hasher)

        with pytest.raises(AuthError):
            service.authenticate("ghost", "whatever1")

        hasher.verify.assert_called_once_with("whatever1", "dummy-hash")

    def test_dummy_hash_is_computed_once(self) -> None:
        store = Mock(spec=AbstractAccountStore)
        store.get_by_username.side_effect = NotFoundError()
        hasher = Mock(spec=AbstractPasswordHasher)
        hasher.dummy_hash.return_value = "dummy-hash"
        hasher.verify.return_value = False
        service = AccountService(store=store, hasher=hasher)

        for _ in range(3):
            with pytest.raises(AuthError):
                service.authenticate("ghost", "whatever1")

        hasher.dummy_hash.assert_called_once()
        hasher.hash.assert_not_called()
        assert hasher.verify.call_count == 3

    def test_corrupt_stored_hash_propagates(self) -> None:
        store = Mock(spec=AbstractAccountStore)
        store.get_by_username.return_value = _record(password_hash="not-a-bcrypt-hash")
        service = AccountService(store=store, hasher=BcryptPasswordHasher(rounds=4))

        with pytest.raises(CorruptHashError):
            service.authenticate("alice", "secret123")
