from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from gameaccounts.api.deps import get_account_service
from gameaccounts.core.auth import verify_api_key
from gameaccounts.core.rate_limit import enforce_rate_limit
from gameaccounts.schemas.account import AccountResponse, LoginRequest, LoginResponse
from gameaccounts.services.account_service import AccountService

router = APIRouter(
    tags=["Auth"],
    dependencies=[Depends(verify_api_key), Depends(enforce_rate_limit)],
)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> LoginResponse:
    """Verify a student's username and password.

    Unknown usernames and wrong passwords both return 401 invalid_credentials.
    """
    account = service.authenticate(payload.username, payload.password)
    return LoginResponse(account=AccountResponse.model_validate(account))
