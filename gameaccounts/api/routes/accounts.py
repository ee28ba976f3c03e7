"""Account CRUD and statistics endpoints.

Handlers are plain ``def`` functions: FastAPI runs them in its threadpool,
which keeps bcrypt hashing and database I/O off the event loop.
"""

from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status

from gameaccounts.api.deps import get_account_service
from gameaccounts.core.auth import verify_api_key
from gameaccounts.core.rate_limit import enforce_rate_limit
from gameaccounts.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountStatsResponse,
    AccountUpdate,
    MessageResponse,
)
from gameaccounts.services.account_service import AccountService

router = APIRouter(
    tags=["Accounts"],
    dependencies=[Depends(verify_api_key), Depends(enforce_rate_limit)],
)

Service = Annotated[AccountService, Depends(get_account_service)]
AccountId = Annotated[int, Path(ge=1, description="Store-assigned account id.")]


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_account(payload: AccountCreate, service: Service) -> AccountResponse:
    """Create a student account.

    Errors:
        400 weak_password, 409 duplicate_username / duplicate_email.
    """
    return AccountResponse.model_validate(service.create_account(payload))


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(service: Service) -> List[AccountResponse]:
    """List all accounts, newest first."""
    return [AccountResponse.model_validate(record) for record in service.list_accounts()]


@router.get("/accounts/by-username/{username}", response_model=AccountResponse)
def get_account_by_username(username: str, service: Service) -> AccountResponse:
    return AccountResponse.model_validate(service.get_account_by_username(username))


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(account_id: AccountId, service: Service) -> AccountResponse:
    return AccountResponse.model_validate(service.get_account(account_id))


@router.put("/accounts/{account_id}", response_model=AccountResponse)
def update_account(account_id: AccountId, payload: AccountUpdate, service: Service) -> AccountResponse:
    """Replace the mutable fields of an account.

    Every mutable field must be sent; username, email and password are
    not changeable through this endpoint.
    """
    return AccountResponse.model_validate(service.update_account(account_id, payload))


@router.delete("/accounts/{account_id}", response_model=MessageResponse)
def delete_account(account_id: AccountId, service: Service) -> MessageResponse:
    service.delete_account(account_id)
    return MessageResponse(message="Account deleted successfully")


@router.get("/stats", response_model=AccountStatsResponse)
def get_stats(service: Service) -> AccountStatsResponse:
    """Aggregate statistics, recomputed on every call."""
    return AccountStatsResponse.model_validate(service.get_stats())
