from __future__ import annotations

from gameaccounts.api.routes.accounts import router as accounts_router
from gameaccounts.api.routes.health import router as health_router
from gameaccounts.api.routes.login import router as login_router
from gameaccounts.api.routes.transfer import router as transfer_router

__all__ = ["accounts_router", "health_router", "login_router", "transfer_router"]
