"""Bulk export/import endpoints.

Guarded by the stricter export limiter; a full export reads every row.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from gameaccounts.api.deps import get_transfer_service
from gameaccounts.core.auth import verify_api_key
from gameaccounts.core.rate_limit import enforce_export_rate_limit
from gameaccounts.schemas.transfer import (
    AccountExport,
    AccountImportRequest,
    ImportResult,
    StatsExport,
)
from gameaccounts.services.transfer_service import TransferService

router = APIRouter(
    prefix="/export",
    tags=["Transfer"],
    dependencies=[Depends(verify_api_key), Depends(enforce_export_rate_limit)],
)

Transfer = Annotated[TransferService, Depends(get_transfer_service)]


@router.get("/json", response_model=AccountExport)
def export_accounts(response: Response, transfer: Transfer) -> AccountExport:
    export = transfer.export_accounts()
    filename = f"accounts_export_{export.exported_at:%Y-%m-%d_%H-%M-%S}.json"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return export


@router.get("/stats", response_model=StatsExport)
def export_stats(transfer: Transfer) -> StatsExport:
    return transfer.export_stats()


@router.post("/json", response_model=ImportResult)
def import_accounts(payload: AccountImportRequest, transfer: Transfer) -> ImportResult:
    """Import accounts; records that fail are listed in ``failed``."""
    return transfer.import_accounts(payload.accounts)
