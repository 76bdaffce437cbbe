"""Backup API — trigger a backup workflow and list backup attempts."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import BackupError
from ..models.backup_attempt import BackupAttempt
from ..services.orchestrator import BackupOrchestrator
from .schemas import BackupAttemptOut, BackupRequest, BatchStartResponseOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


def get_orchestrator(request: Request) -> BackupOrchestrator:
    """FastAPI dependency — the orchestrator built at startup."""
    return request.app.state.orchestrator


@router.post("/process", response_model=BatchStartResponseOut)
async def process_backup(
    body: BackupRequest,
    orchestrator: BackupOrchestrator = Depends(get_orchestrator),
):
    """Run the backup workflow for one batch and return its acknowledgment."""
    logger.info("Backup request received for batch %s, category %s", body.batch_id, body.category_code)
    started = time.monotonic()
    try:
        response = await orchestrator.run(body.model_dump(exclude_none=True))
    except BackupError:
        raise
    except Exception as e:
        logger.exception("Backup process failed for batch %s", body.batch_id)
        raise BackupError("Error occurred during backup process") from e
    logger.info("Backup request for batch %s finished in %.2fs", body.batch_id, time.monotonic() - started)
    return asdict(response)


@router.get("/attempts", response_model=list[BackupAttemptOut])
def list_attempts(
    batch_id: Optional[str] = Query(None),
    category_code: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List backup attempts, newest first."""
    q = db.query(BackupAttempt)
    if batch_id:
        q = q.filter(BackupAttempt.batch_id == batch_id)
    if category_code:
        q = q.filter(func.upper(BackupAttempt.category_code) == category_code.upper())
    if status:
        q = q.filter(BackupAttempt.status == status.upper())
    return q.order_by(BackupAttempt.start_time.desc()).limit(limit).all()
