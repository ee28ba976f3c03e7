"""Tests for bulk export and import."""

import pytest
from pydantic import ValidationError

from gameaccounts.schemas.account import AccountUpdate
from gameaccounts.schemas.transfer import AccountImportRecord
from gameaccounts.services.account_service import AccountService
from gameaccounts.services.transfer_service import TransferService

from tests.conftest import make_account


@pytest.fixture
def transfer(service: AccountService) -> TransferService:
    return TransferService(service, placeholder_password="imported123")


def _import_record(username: str, **overrides) -> AccountImportRecord:
    values = {
        "username": username,
        "email": f"{username}@example.com",
        "first_name": username.title(),
        "grade": 3,
        "school": "Northside",
    }
    values.update(overrides)
    return AccountImportRecord(**values)


def test_export_empty(transfer: TransferService) -> None:
    export = transfer.export_accounts()

    assert export.count == 0
    assert export.accounts == []
    assert export.exported_at.tzinfo is not None


def test_export_lists_accounts_without_hashes(
    transfer: TransferService, service: AccountService
) -> None:
    service.create_account(make_account())
    service.create_account(make_account(username="bob", email="bob@example.com"))

    export = transfer.export_accounts()

    assert export.count == 2
    assert [a.username for a in export.accounts] == ["bob", "alice"]
    assert "password_hash" not in export.model_dump_json()


def test_export_stats(transfer: TransferService, service: AccountService) -> None:
    created = service.create_account(make_account())
    service.update_account(
        created.id,
        AccountUpdate(
            first_name="Alice",
            last_name="Liddell",
            grade=5,
            school="Wonderland Elementary",
            game_level=3,
            experience=90,
            is_active=True,
        ),
    )

    stats = transfer.export_stats().stats

    assert stats.total_accounts == 1
    assert stats.active_accounts == 1
    assert stats.average_game_level == pytest.approx(3.0)
    assert stats.total_experience == 90


def test_import_applies_progress_fields(
    transfer: TransferService, service: AccountService
) -> None:
    result = transfer.import_accounts(
        [_import_record("carol", game_level=4, experience=300, is_active=False)]
    )

    assert result.imported == 1
    assert result.failed == []

    account = service.get_account_by_username("carol")
    assert account.game_level == 4
    assert account.experience == 300
    assert account.is_active is False
    assert account.school == "Northside"


def test_import_without_password_uses_placeholder(
    transfer: TransferService, service: AccountService
) -> None:
    transfer.import_accounts([_import_record("dave")])

    assert service.authenticate("dave", "imported123").username == "dave"


def test_import_with_password(transfer: TransferService, service: AccountService) -> None:
    transfer.import_accounts([_import_record("erin", password="erin-pass")])

    assert service.authenticate("erin", "erin-pass").username == "erin"


def test_import_skips_failures_and_continues(
    transfer: TransferService, service: AccountService
) -> None:
    service.create_account(make_account())

    result = transfer.import_accounts(
        [
            _import_record("alice", email="other-alice@example.com"),
            _import_record("frank", password="123"),
            _import_record("grace"),
        ]
    )

    assert result.imported == 1
    assert [(f.username, f.code) for f in result.failed] == [
        ("alice", "duplicate_username"),
        ("frank", "weak_password"),
    ]
    assert {a.username for a in service.list_accounts()} == {"alice", "grace"}


def test_import_reports_invalid_record_mid_batch(
    transfer: TransferService, service: AccountService
) -> None:
    # bypasses field validation the way an unchecked caller could
    too_long = AccountImportRecord.model_construct(
        username="long",
        email="long@example.com",
        first_name="x" * 101,
    )

    result = transfer.import_accounts([_import_record("ok1"), too_long, _import_record("ok2")])

    assert result.imported == 2
    assert len(result.failed) == 1
    failure = result.failed[0]
    assert failure.username == "long"
    assert failure.code == "invalid_record"
    assert "first_name" in failure.message
    assert {a.username for a in service.list_accounts()} == {"ok1", "ok2"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"first_name": "x" * 101},
        {"last_name": "x" * 101},
        {"school": "s" * 256},
    ],
)
def test_import_record_enforces_create_limits(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        _import_record("limits", **overrides)
