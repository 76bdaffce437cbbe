"""Batch execution store — read/update contract for the batch framework's records.

The batch framework owns these rows. The backup workflow only reads the
execution date and writes terminal status, extension fields and exception
details.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from ..models.batch_execution import BatchExecution

logger = logging.getLogger(__name__)

BATCH_COMPLETED_STATUS = "COMPLETED"
BATCH_FAILED_STATUS = "FAILED"


class BatchExecutionStore:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, batch_id: str) -> Optional[BatchExecution]:
        with self._session_factory() as db:
            record = db.get(BatchExecution, batch_id)
            if record is not None:
                db.expunge(record)
            return record

    def register(self, batch_id: str, category_code: str, execution_date: str = "") -> BatchExecution:
        """Create the record if the framework has not already done so."""
        with self._session_factory() as db:
            record = db.get(BatchExecution, batch_id)
            if record is None:
                record = BatchExecution(
                    batch_id=batch_id,
                    category_code=category_code,
                    execution_date=execution_date,
                )
                db.add(record)
                db.commit()
                db.refresh(record)
            db.expunge(record)
            return record

    def update_status(
        self,
        batch_id: str,
        status: str,
        extension_fields: dict[str, Any],
        category_code: str = "",
        exception_details: str = "",
    ) -> None:
        """Set the terminal status of *batch_id*, creating the row if missing."""
        with self._session_factory() as db:
            record = db.get(BatchExecution, batch_id)
            if record is None:
                logger.warning("No batch execution for %s, creating one", batch_id)
                record = BatchExecution(batch_id=batch_id, category_code=category_code)
                db.add(record)
            record.status = status
            record.extension_fields = dict(extension_fields)
            if exception_details:
                record.exception_details = exception_details
            db.commit()
        logger.info("Batch %s marked %s", batch_id, status)
