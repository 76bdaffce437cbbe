"""Status reconciler — records backup attempt lifecycle in both status stores.

``record_start`` must succeed before any backup API call and raises
``PersistenceError`` on failure. The terminal writes are best effort: each
store is retried a bounded number of times, then the failure is logged,
tracked and dropped so the backup outcome itself is never masked.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceError
from ..models.backup_attempt import BackupAttempt
from .batch_executions import (
    BATCH_COMPLETED_STATUS,
    BATCH_FAILED_STATUS,
    BatchExecutionStore,
)
from .resilience import error_tracker, retry

logger = logging.getLogger(__name__)

BACKUP_INPROGRESS_STATUS = "IN_PROGRESS"
BACKUP_SUCCESS_STATUS = "SUCCESS"
BACKUP_FAILED_STATUS = "FAILED"

ERROR_MESSAGE = "error_message"


class StatusReconciler:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        batch_executions: BatchExecutionStore | None = None,
        max_attempts: int = 3,
        retry_delay: float = 0.5,
    ) -> None:
        self._session_factory = session_factory
        self._batches = batch_executions or BatchExecutionStore(session_factory)
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay

    # -- Start ---------------------------------------------------------------

    def record_start(
        self,
        batch_id: str,
        category_code: str,
        backup_type: str,
        business_date: str = "",
    ) -> str:
        """Insert the IN_PROGRESS attempt row. Returns the attempt id."""
        logger.info("Inserting backup attempt for batch %s", batch_id)
        try:
            with self._session_factory() as db:
                attempt = BackupAttempt(
                    batch_id=batch_id,
                    category_code=category_code,
                    backup_type=backup_type,
                    status=BACKUP_INPROGRESS_STATUS,
                    business_date=business_date,
                    start_time=datetime.now(timezone.utc),
                )
                db.add(attempt)
                db.commit()
                return attempt.id
        except SQLAlchemyError as e:
            logger.error("Unable to insert backup attempt for batch %s: %s", batch_id, e)
            raise PersistenceError(f"Unable to insert backup attempt for batch {batch_id}") from e

    # -- Terminal states -----------------------------------------------------

    def record_success(
        self,
        batch_id: str,
        business_date: str,
        external_response_text: str,
        category_code: str = "",
        attempt_id: Optional[str] = None,
    ) -> None:
        self._attempt_best_effort(
            "backup attempt", batch_id,
            self._update_attempt, batch_id, business_date,
            BACKUP_SUCCESS_STATUS, external_response_text, category_code, attempt_id,
        )
        self._attempt_best_effort(
            "batch execution", batch_id,
            self._batches.update_status, batch_id, BATCH_COMPLETED_STATUS, {},
            category_code,
        )
        logger.info("Backup completed successfully for batch %s", batch_id)

    def record_failure(
        self,
        batch_id: str,
        business_date: str,
        error_text: str,
        category_code: str = "",
        attempt_id: Optional[str] = None,
    ) -> None:
        logger.error("Backup failed for batch %s: %s", batch_id, error_text)
        self._attempt_best_effort(
            "backup attempt", batch_id,
            self._update_attempt, batch_id, business_date,
            BACKUP_FAILED_STATUS, error_text, category_code, attempt_id,
        )
        self._attempt_best_effort(
            "batch execution", batch_id,
            self._batches.update_status, batch_id, BATCH_FAILED_STATUS,
            {ERROR_MESSAGE: error_text}, category_code, error_text,
        )

    # -- Internal ------------------------------------------------------------

    def _update_attempt(
        self,
        batch_id: str,
        business_date: str,
        status: str,
        response_text: str,
        category_code: str = "",
        attempt_id: Optional[str] = None,
    ) -> None:
        """Close the attempt row opened by ``record_start``.

        With *attempt_id* that exact row is updated. Otherwise the newest
        IN_PROGRESS row for (batch, category) is used; the category filter is
        skipped only when no category code is given.
        """
        with self._session_factory() as db:
            if attempt_id is not None:
                attempt = db.get(BackupAttempt, attempt_id)
                if attempt is not None and attempt.status != BACKUP_INPROGRESS_STATUS:
                    attempt = None
            else:
                q = db.query(BackupAttempt).filter(
                    BackupAttempt.batch_id == batch_id,
                    BackupAttempt.status == BACKUP_INPROGRESS_STATUS,
                )
                if category_code:
                    q = q.filter(BackupAttempt.category_code == category_code)
                attempt = q.order_by(BackupAttempt.start_time.desc()).first()
            if attempt is None:
                raise PersistenceError(
                    f"No in-progress backup attempt for batch {batch_id} "
                    f"(category {category_code or '-'})"
                )
            attempt.status = status
            attempt.external_response = response_text
            if business_date:
                attempt.business_date = business_date
            attempt.end_time = datetime.now(timezone.utc)
            db.commit()
        logger.info("Backup attempt for batch %s marked %s", batch_id, status)

    def _attempt_best_effort(self, store: str, batch_id: str, func: Callable, *args) -> bool:
        """Run a terminal write with retry; log and track instead of raising."""
        write = retry(
            max_attempts=self._max_attempts,
            base_delay=self._retry_delay,
            retryable_exceptions=(SQLAlchemyError,),
        )(func)
        try:
            write(*args)
            return True
        except (SQLAlchemyError, PersistenceError) as e:
            logger.error(
                "Unable to update %s for batch %s; attempt may stay IN_PROGRESS: %s",
                store, batch_id, e,
            )
            error_tracker.record(
                source=f"reconciler.{store.replace(' ', '_')}",
                error=e,
                context={"batch_id": batch_id},
            )
            return False
