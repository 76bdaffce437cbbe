"""Orchestrator — runs one backup workflow for a (batch, category) request.

Steps:
1. Validate the batch parameters (no side effects on failure)
2. Resolve the category's backup configuration (no side effects on failure)
3. Record the IN_PROGRESS attempt (failure aborts before any API call)
4. Decide and submit the full or incremental backup
5. Record the terminal outcome in both status stores
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import Session

from ..common import log_context, normalize_business_date, today_business_date
from ..config import Settings
from ..errors import ConfigNotFound
from ..providers.base import BackupGateway
from .batch_executions import BATCH_COMPLETED_STATUS, BATCH_FAILED_STATUS, BatchExecutionStore
from .engine import decide
from .reconciler import ERROR_MESSAGE, StatusReconciler
from .resolver import ConfigResolver
from .validation import BatchRequest, validate_backup_config, validate_batch_params

logger = logging.getLogger(__name__)

BACKUP_RESPONSE = "backup_response"
FAILURE_REASON = "failure_reason"
ERROR_DETAIL = "Technical Error"


@dataclass
class BatchStartResponse:
    """Acknowledgment returned to the batch trigger."""

    execution_status: str
    extension_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failed(cls, message: str = ERROR_DETAIL, **extra: Any) -> "BatchStartResponse":
        return cls(execution_status=BATCH_FAILED_STATUS, extension_fields={ERROR_MESSAGE: message, **extra})


class BackupOrchestrator:
    def __init__(
        self,
        resolver: ConfigResolver,
        gateway: BackupGateway,
        reconciler: StatusReconciler,
        batch_executions: BatchExecutionStore,
        timezone: str = "Asia/Kolkata",
    ) -> None:
        self.resolver = resolver
        self.gateway = gateway
        self.reconciler = reconciler
        self.batch_executions = batch_executions
        self.timezone = timezone

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: Optional[Callable[[], Session]] = None,
        gateway: Optional[BackupGateway] = None,
    ) -> "BackupOrchestrator":
        """Wire the production components; tests pass their own factory/gateway."""
        if session_factory is None:
            from ..db import SessionLocal
            session_factory = SessionLocal
        if gateway is None:
            from ..providers.yba.client import YbaGateway
            gateway = YbaGateway.from_settings(settings)
        batch_executions = BatchExecutionStore(session_factory)
        return cls(
            resolver=ConfigResolver.from_settings(settings),
            gateway=gateway,
            reconciler=StatusReconciler(
                session_factory,
                batch_executions=batch_executions,
                max_attempts=settings.max_retry_attempts,
            ),
            batch_executions=batch_executions,
            timezone=settings.timezone,
        )

    async def run(self, params: Optional[Mapping[str, Any]]) -> BatchStartResponse:
        """Run the workflow for one batch parameter bundle.

        Raises ValidationError for bad input and PersistenceError when the
        start record cannot be written; every other expected outcome is
        reported in the returned acknowledgment. An unexpected error from the
        decision step marks the attempt FAILED and is then re-raised.
        """
        request = validate_batch_params(params)

        with log_context(request.batch_id, request.category_code):
            try:
                config = self.resolver.resolve(request.category_code)
            except ConfigNotFound as e:
                logger.error("%s", e)
                return BatchStartResponse.failed(str(e))
            validate_backup_config(config, request.category_code)

            business_date = await asyncio.to_thread(self._business_date, request)
            logger.info(
                "Starting %s backup for batch %s (business date %s)",
                config.category_type.lower(), request.batch_id, business_date,
            )

            category_type = config.parsed_category_type
            backup_type = category_type.value if category_type else config.category_type
            attempt_id = await asyncio.to_thread(
                self.reconciler.record_start,
                request.batch_id, request.category_code, backup_type, business_date,
            )

            try:
                outcome = await decide(config, self.gateway)
            except Exception as e:
                # Close the attempt row, then let the error reach the caller
                await asyncio.to_thread(
                    self.reconciler.record_failure,
                    request.batch_id, business_date, f"{type(e).__name__}: {e}",
                    request.category_code, attempt_id,
                )
                raise

            if outcome.ok:
                await asyncio.to_thread(
                    self.reconciler.record_success,
                    request.batch_id, business_date, outcome.message,
                    request.category_code, attempt_id,
                )
                return BatchStartResponse(
                    execution_status=BATCH_COMPLETED_STATUS,
                    extension_fields={
                        BACKUP_RESPONSE: outcome.handle.model_dump(by_alias=True, exclude_none=True),
                    },
                )

            await asyncio.to_thread(
                self.reconciler.record_failure,
                request.batch_id, business_date, outcome.message,
                request.category_code, attempt_id,
            )
            return BatchStartResponse.failed(
                outcome.message, **{FAILURE_REASON: outcome.reason.value}
            )

    def _business_date(self, request: BatchRequest) -> str:
        """Request date, else the batch record's execution date, else today."""
        if request.business_date:
            return request.business_date
        record = self.batch_executions.get(request.batch_id)
        if record is not None and record.execution_date:
            try:
                return normalize_business_date(record.execution_date)
            except ValueError:
                logger.warning(
                    "Ignoring malformed execution date %r on batch %s",
                    record.execution_date, request.batch_id,
                )
        return today_business_date(self.timezone)
