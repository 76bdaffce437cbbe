"""Exception hierarchy for the backup workflow."""

from __future__ import annotations


class BackupError(Exception):
    """Base class for all backup workflow errors."""


class ValidationError(BackupError):
    """Malformed or incomplete batch request. Raised before any side effect."""


class ConfigNotFound(BackupError):
    """No backup configuration exists for the requested category code."""

    def __init__(self, category_code: str) -> None:
        super().__init__(f"No configuration found for category: {category_code}")
        self.category_code = category_code


class GatewayError(BackupError):
    """Network, HTTP or response-decoding failure from the backup API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoPriorBackup(BackupError):
    """Incremental backup requested but the target has no previous backup."""


class MissingBaseBackupId(BackupError):
    """The latest backup carries no base backup identifier."""


class UnsupportedBackupType(BackupError):
    """Configured category type is neither full nor incremental."""


class PersistenceError(BackupError):
    """A write to the backup-attempt or batch-execution store failed."""
