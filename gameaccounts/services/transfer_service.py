"""Bulk export and import of accounts.

Works purely through AccountService, so imports obey the same uniqueness and
password rules as single creates. A failing record is reported and skipped;
it never aborts the rest of the batch.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from pydantic import ValidationError

from gameaccounts.core.errors import DuplicateError, ValidationAppError
from gameaccounts.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountStatsResponse,
    AccountUpdate,
)
from gameaccounts.schemas.transfer import (
    AccountExport,
    AccountImportRecord,
    ImportFailure,
    ImportResult,
    StatsExport,
)
from gameaccounts.services.account_service import AccountService

logger = logging.getLogger(__name__)


class TransferService:
    """Export account snapshots and import account batches."""

    def __init__(self, accounts: AccountService, *, placeholder_password: str) -> None:
        self.accounts = accounts
        self.placeholder_password = placeholder_password

    def export_accounts(self) -> AccountExport:
        records = self.accounts.list_accounts()
        logger.info("transfer.exported", extra={"count": len(records)})
        return AccountExport(
            exported_at=datetime.now(timezone.utc),
            count=len(records),
            accounts=[AccountResponse.model_validate(record) for record in records],
        )

    def export_stats(self) -> StatsExport:
        stats = self.accounts.get_stats()
        return StatsExport(
            exported_at=datetime.now(timezone.utc),
            stats=AccountStatsResponse.model_validate(stats),
        )

    def _creation_request(self, record: AccountImportRecord) -> AccountCreate:
        """Build the create payload for a record.

        Raises:
            ValidationAppError: If the record does not satisfy the create schema.
        """
        try:
            return AccountCreate(
                username=record.username,
                email=record.email,
                password=record.password or self.placeholder_password,
                first_name=record.first_name,
                last_name=record.last_name,
                grade=record.grade,
                school=record.school,
            )
        except ValidationError as exc:
            # field locations and messages only; input values may hold a password
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
            )
            raise ValidationAppError(
                code="invalid_record",
                message=f"Invalid account record: {problems}",
            ) from exc

    def import_accounts(self, records: Iterable[AccountImportRecord]) -> ImportResult:
        """Create one account per record, then apply its game progress.

        Args:
            records: Accounts to import.

        Returns:
            ImportResult with the number imported and the rejected records.
        """
        result = ImportResult()

        for record in records:
            try:
                created = self.accounts.create_account(self._creation_request(record))
            except (DuplicateError, ValidationAppError) as exc:
                logger.warning(
                    "transfer.import_skipped",
                    extra={"error_code": exc.code},
                )
                result.failed.append(
                    ImportFailure(username=record.username, code=exc.code, message=exc.message)
                )
                continue

            # Progress fields are not part of creation
            self.accounts.update_account(
                created.id,
                AccountUpdate(
                    first_name=created.first_name,
                    last_name=created.last_name,
                    grade=created.grade,
                    school=created.school,
                    game_level=record.game_level,
                    experience=record.experience,
                    is_active=record.is_active,
                ),
            )
            result.imported += 1

        logger.info(
            "transfer.imported",
            extra={"imported": result.imported, "failed": len(result.failed)},
        )
        return result
