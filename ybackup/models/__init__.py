"""ybackup data models — re-export all models for convenient imports."""

from .backup_attempt import BackupAttempt
from .batch_execution import BatchExecution

__all__ = [
    "BackupAttempt",
    "BatchExecution",
]
