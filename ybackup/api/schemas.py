"""Pydantic schemas for API request/response — decoupled from SQLAlchemy models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field


# ---------------------------------------------------------------------------
# Backup trigger
# ---------------------------------------------------------------------------


class BackupRequest(BaseModel):
    """Batch parameters. Required fields are checked by the validation gate."""

    batch_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("batch_id", "batchId"),
    )
    category_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("category_code", "batchCategoryCode", "categoryCode"),
        description="Backup category, e.g. 'HWA_EPR_DB_BACKUP_FULL'",
    )
    business_date: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("business_date", "businessDate"),
        description="YYYYMMDD or YYYY-MM-DD; defaults to the batch execution date",
    )


class BatchStartResponseOut(BaseModel):
    execution_status: str = Field(..., description="COMPLETED | FAILED")
    extension_fields: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Backup history
# ---------------------------------------------------------------------------


class BackupAttemptOut(BaseModel):
    id: str
    batch_id: str
    category_code: str
    backup_type: str
    status: str
    business_date: str
    start_time: datetime
    end_time: Optional[datetime] = None
    external_response: str

    model_config = {"from_attributes": True}
