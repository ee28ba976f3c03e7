"""FastAPI dependencies resolving collaborators from the app's container."""

from __future__ import annotations

from fastapi import Request

from gameaccounts.core.container import ServiceContainer
from gameaccounts.services.account_service import AccountService
from gameaccounts.services.transfer_service import TransferService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_account_service(request: Request) -> AccountService:
    return get_container(request).accounts


def get_transfer_service(request: Request) -> TransferService:
    return get_container(request).transfer
