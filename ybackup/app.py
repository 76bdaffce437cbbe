"""ybackup — FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    from .services.orchestrator import BackupOrchestrator

    init_db()
    orchestrator = BackupOrchestrator.from_settings(settings)
    app.state.orchestrator = orchestrator
    logger.info("Backup categories: %s", ", ".join(orchestrator.resolver.categories()) or "none")
    yield
    await orchestrator.gateway.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Full and incremental database backups through YugabyteDB Anywhere",
        lifespan=lifespan,
    )

    # API key auth (when YBACKUP_API_KEY is set)
    from .middleware import ApiKeyMiddleware, RequestIdMiddleware
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestIdMiddleware)

    from .api.errors import register_exception_handlers
    register_exception_handlers(app)

    # Register routers
    from .api.health import router as health_router
    from .api.backup import router as backup_router
    from .api.errors import router as errors_router
    app.include_router(health_router)
    app.include_router(backup_router, prefix="/api")
    app.include_router(errors_router, prefix="/api")

    return app


app = create_app()
