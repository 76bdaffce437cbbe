"""Health endpoint — status database and backup configuration."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ..config import settings
from ..db import check_database

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    """Report ``ok`` only when the database answers and categories are loaded."""
    db_ok = check_database()

    orchestrator = getattr(request.app.state, "orchestrator", None)
    categories = len(orchestrator.resolver) if orchestrator is not None else 0
    gateway = orchestrator.gateway.gateway_type if orchestrator is not None else None

    return {
        "status": "ok" if db_ok and categories else "degraded",
        "service": settings.app_name,
        "version": settings.app_version,
        "checks": {
            "database": "ok" if db_ok else "unreachable",
            "configuration": "ok" if categories else "no categories",
        },
        "categories": categories,
        "gateway": gateway,
    }
