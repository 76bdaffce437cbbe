"""Error handling for the API — acknowledgment mapping and the error log endpoint."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import BackupError, ValidationError
from ..services.orchestrator import BatchStartResponse
from ..services.resilience import error_tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/errors", tags=["errors"])


@router.get("")
def list_errors(source: str | None = None, limit: int = 50):
    """Return recent errors, optionally filtered by source prefix."""
    return {
        "errors": error_tracker.get_errors(source=source, limit=limit),
        "total": error_tracker.count,
    }


@router.delete("", status_code=204)
def clear_errors():
    """Clear all tracked errors."""
    error_tracker.clear()


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected backup request: %s", exc)
    ack = BatchStartResponse.failed(str(exc))
    return JSONResponse(status_code=400, content=asdict(ack))


async def backup_error_handler(request: Request, exc: BackupError) -> JSONResponse:
    """Any other workflow failure becomes a generic FAILED acknowledgment."""
    logger.error("Backup process failed due to technical error: %s", exc, exc_info=exc)
    error_tracker.record(source="api.backup", error=exc, context={"path": request.url.path})
    return JSONResponse(status_code=200, content=asdict(BatchStartResponse.failed()))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(BackupError, backup_error_handler)
