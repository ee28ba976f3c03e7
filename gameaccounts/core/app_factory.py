"""Application factory for the FastAPI app.

Centralizes app construction (container, middleware, handlers, routers,
lifespan) so tests can build isolated app instances.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from gameaccounts.api.routes import accounts_router, health_router, login_router, transfer_router
from gameaccounts.core.config import Settings, settings as default_settings
from gameaccounts.core.container import ServiceContainer, build_container
from gameaccounts.core.exception_handlers import setup_exception_handlers
from gameaccounts.core.logging import configure_logging
from gameaccounts.core.middleware import request_id_middleware, security_headers_middleware
from gameaccounts.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


async def reclaim_rate_limit_buckets(container: ServiceContainer, interval_seconds: float) -> None:
    """Periodically drop fully refilled buckets from every limiter."""

    while True:
        await asyncio.sleep(interval_seconds)
        for limiter in container.limiters():
            limiter.reclaim()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    container: ServiceContainer = app.state.container
    interval = container.settings.rate_limit.reclaim_interval_seconds

    task: asyncio.Task | None = None
    if interval > 0:
        task = asyncio.create_task(reclaim_rate_limit_buckets(container, interval))

    logger.info("app.started", extra={"reclaim_interval_s": interval})
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        container.close()
        logger.info("app.stopped")


def create_app(
    app_settings: Settings | None = None,
    *,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the global settings.
        container: Pre-built container (tests); built from settings otherwise.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = container.settings if container is not None else (app_settings or default_settings)

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title=cfg.app.title,
        description=(
            "Student account management for the educational game: accounts, "
            "statistics, login and bulk export/import. Per-client token-bucket "
            "rate limiting, request correlation and redacted structured logs."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.container = container or build_container(cfg)

    # Middleware (last registered runs first)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(accounts_router, prefix="/api")
    app.include_router(login_router, prefix="/api")
    app.include_router(transfer_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
