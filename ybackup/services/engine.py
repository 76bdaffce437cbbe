"""Backup decision engine — picks full or incremental and drives the gateway.

    RESOLVED --FULL--------> SUBMIT_FULL -----------------------------------> DONE
    RESOLVED --INCREMENTAL-> FETCH_LAST -> EXTRACT_BASE -> SUBMIT_INCREMENTAL -> DONE

Expected failures come back as a failed ``BackupOutcome`` rather than an
exception. The engine never writes state and never retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import (
    BackupError,
    GatewayError,
    MissingBaseBackupId,
    NoPriorBackup,
    UnsupportedBackupType,
)
from ..providers.base import BackupGateway
from ..providers.yba.schemas import BackupHandle, BackupPage
from .resilience import error_tracker
from .resolver import BackupConfiguration, CategoryType

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    GATEWAY_ERROR = "GATEWAY_ERROR"
    NO_PRIOR_BACKUP = "NO_PRIOR_BACKUP"
    MISSING_BASE_BACKUP_ID = "MISSING_BASE_BACKUP_ID"
    UNSUPPORTED_BACKUP_TYPE = "UNSUPPORTED_BACKUP_TYPE"


_REASONS: dict[type[BackupError], FailureReason] = {
    GatewayError: FailureReason.GATEWAY_ERROR,
    NoPriorBackup: FailureReason.NO_PRIOR_BACKUP,
    MissingBaseBackupId: FailureReason.MISSING_BASE_BACKUP_ID,
    UnsupportedBackupType: FailureReason.UNSUPPORTED_BACKUP_TYPE,
}


@dataclass(frozen=True)
class BackupOutcome:
    """Tagged result of one decision run: either ``handle`` or ``error`` is set."""

    category_type: Optional[CategoryType]
    handle: Optional[BackupHandle] = None
    error: Optional[BackupError] = None
    base_backup_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> Optional[FailureReason]:
        if self.error is None:
            return None
        return _REASONS.get(type(self.error), FailureReason.GATEWAY_ERROR)

    @property
    def message(self) -> str:
        if self.error is not None:
            return str(self.error)
        return self.handle.to_json() if self.handle is not None else ""


def extract_base_backup_id(page: BackupPage) -> str:
    """Return the base backup id of the most recent backup in *page*.

    Raises NoPriorBackup for an empty page and MissingBaseBackupId when the
    latest backup has no base id (null, absent, or an empty string).
    """
    latest = page.latest
    if latest is None:
        raise NoPriorBackup("No previous backups found; incremental backup needs a base backup")
    info = latest.common_backup_info
    if info is None or not info.base_backup_uuid:
        raise MissingBaseBackupId("Base backup UUID missing from the latest backup")
    return info.base_backup_uuid


async def decide(config: BackupConfiguration, gateway: BackupGateway) -> BackupOutcome:
    """Run the full/incremental state machine for one resolved configuration."""
    category_type = config.parsed_category_type
    if category_type is None:
        error = UnsupportedBackupType(f"Unsupported backup type: {config.category_type}")
        logger.error("%s", error)
        return BackupOutcome(category_type=None, error=error)

    base_backup_id: Optional[str] = None
    try:
        if category_type == CategoryType.FULL:
            logger.info("Submitting full backup of keyspace %s", config.database_name)
            handle = await gateway.submit_full_backup(config)
        else:
            page = await gateway.fetch_last_backup(config)
            base_backup_id = extract_base_backup_id(page)
            logger.info(
                "Submitting incremental backup of keyspace %s on base %s",
                config.database_name, base_backup_id,
            )
            handle = await gateway.submit_incremental_backup(config, base_backup_id)
    except (GatewayError, NoPriorBackup, MissingBaseBackupId) as e:
        logger.error("Backup decision failed (%s): %s", type(e).__name__, e)
        if isinstance(e, GatewayError):
            error_tracker.record(
                source=f"gateway.{gateway.gateway_type}",
                error=e,
                context={"database": config.database_name, "category_type": category_type.value},
            )
        return BackupOutcome(category_type=category_type, error=e, base_backup_id=base_backup_id)

    logger.info("Backup submitted: task %s", handle.task_uuid)
    return BackupOutcome(category_type=category_type, handle=handle, base_backup_id=base_backup_id)
