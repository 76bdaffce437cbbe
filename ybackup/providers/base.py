"""Abstract base class for backup-management API gateways."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..services.resolver import BackupConfiguration
from .yba.schemas import BackupHandle, BackupPage


class BackupGateway(ABC):
    """Interface for the three backup API operations the workflow needs.

    Implementations raise ``GatewayError`` for every transport, HTTP or
    decoding failure and never retry; retry policy belongs to the caller.
    """

    @property
    @abstractmethod
    def gateway_type(self) -> str:
        """Return the gateway identifier (e.g. 'yba')."""
        ...

    @abstractmethod
    async def fetch_last_backup(self, config: BackupConfiguration) -> BackupPage:
        """Return the most recent backup of the configured universe (at most one)."""
        ...

    @abstractmethod
    async def submit_full_backup(self, config: BackupConfiguration) -> BackupHandle:
        """Submit a full backup of the configured keyspace."""
        ...

    @abstractmethod
    async def submit_incremental_backup(
        self, config: BackupConfiguration, base_backup_id: str
    ) -> BackupHandle:
        """Submit an incremental backup chained to *base_backup_id*."""
        ...

    async def aclose(self) -> None:
        """Release network resources. Default does nothing."""
        return None
