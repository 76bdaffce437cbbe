"""Backup attempt model — one audit row per (batch, category) backup invocation."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


class BackupAttempt(Base):
    __tablename__ = "backup_attempts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    batch_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    category_code: Mapped[str] = mapped_column(String(64), nullable=False)
    backup_type: Mapped[str] = mapped_column(String(32), nullable=False)  # FULL, INCREMENTAL
    status: Mapped[str] = mapped_column(
        String(16), default="IN_PROGRESS"
    )  # IN_PROGRESS, SUCCESS, FAILED
    business_date: Mapped[str] = mapped_column(String(8), default="")  # "20240101"
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    external_response: Mapped[str] = mapped_column(Text, default="")
