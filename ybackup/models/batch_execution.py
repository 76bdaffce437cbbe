"""Batch execution model — the batch framework's record of a running job."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


class BatchExecution(Base):
    __tablename__ = "batch_executions"

    batch_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    category_code: Mapped[str] = mapped_column(String(64), nullable=False)
    execution_date: Mapped[str] = mapped_column(String(10), default="")  # "2024-01-01"
    status: Mapped[str] = mapped_column(
        String(16), default="STARTED"
    )  # STARTED, COMPLETED, FAILED
    extension_fields: Mapped[dict] = mapped_column(JSON, default=dict)
    exception_details: Mapped[str] = mapped_column(Text, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
