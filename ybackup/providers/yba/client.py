"""YugabyteDB Anywhere gateway — backup submission and lookup over the YBA REST API.

Authentication uses the per-category API token in the ``X-AUTH-YW-API-TOKEN``
header. Endpoint URLs come fully formed from the category configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from ...errors import GatewayError
from ...services.resolver import BackupConfiguration
from ..base import BackupGateway
from .schemas import BackupHandle, BackupPage

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-AUTH-YW-API-TOKEN"
BACKUP_CATEGORY = "YB_CONTROLLER"
EXPIRY_TIME_UNIT = "MILLISECONDS"

_ERROR_BODY_LIMIT = 500

T = TypeVar("T", bound=BaseModel)


class YbaGateway(BackupGateway):
    """YBA backup API client on a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        connect_timeout_ms: int = 30000,
        read_timeout_ms: int = 60000,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(read_timeout_ms / 1000, connect=connect_timeout_ms / 1000),
        )

    @classmethod
    def from_settings(cls, settings: Any) -> "YbaGateway":
        return cls(
            connect_timeout_ms=settings.connect_timeout_ms,
            read_timeout_ms=settings.read_timeout_ms,
        )

    @property
    def gateway_type(self) -> str:
        return "yba"

    # ── Payloads ──────────────────────────────────────────────────────────

    @staticmethod
    def _base_payload(config: BackupConfiguration) -> dict[str, Any]:
        return {
            "storageConfigUUID": config.storage_config_id,
            "sse": False,
            "backupType": config.backup_type,
            "backupCategory": BACKUP_CATEGORY,
        }

    @classmethod
    def last_backup_payload(cls, config: BackupConfiguration) -> dict[str, Any]:
        payload = cls._base_payload(config)
        payload.update({
            "direction": "DESC",
            "sortBy": "createTime",
            "timeBeforeDelete": config.expiry_millis,
            "expiryTimeUnit": EXPIRY_TIME_UNIT,
            "filter": {"universeUUIDList": [config.universe_id]},
            "limit": 1,
        })
        return payload

    @classmethod
    def full_backup_payload(cls, config: BackupConfiguration) -> dict[str, Any]:
        payload = cls._base_payload(config)
        payload.update({
            "universeUUID": config.universe_id,
            "timeBeforeDelete": config.expiry_millis,
            "expiryTimeUnit": EXPIRY_TIME_UNIT,
            "keyspaceTableList": [{"keyspace": config.database_name}],
        })
        return payload

    @classmethod
    def incremental_backup_payload(
        cls, config: BackupConfiguration, base_backup_id: str
    ) -> dict[str, Any]:
        # Incremental backups inherit expiry from their base backup
        payload = cls._base_payload(config)
        payload.update({
            "universeUUID": config.universe_id,
            "baseBackupUUID": base_backup_id,
            "keyspaceTableList": [{"keyspace": config.database_name}],
        })
        return payload

    # ── Operations ────────────────────────────────────────────────────────

    async def fetch_last_backup(self, config: BackupConfiguration) -> BackupPage:
        return await self._post(
            config.last_backup_endpoint, config, self.last_backup_payload(config), BackupPage
        )

    async def submit_full_backup(self, config: BackupConfiguration) -> BackupHandle:
        return await self._post(
            config.full_backup_endpoint, config, self.full_backup_payload(config), BackupHandle
        )

    async def submit_incremental_backup(
        self, config: BackupConfiguration, base_backup_id: str
    ) -> BackupHandle:
        return await self._post(
            config.incremental_backup_endpoint,
            config,
            self.incremental_backup_payload(config, base_backup_id),
            BackupHandle,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── Internal ──────────────────────────────────────────────────────────

    async def _post(
        self,
        url: str,
        config: BackupConfiguration,
        payload: dict[str, Any],
        schema: type[T],
    ) -> T:
        if not url:
            raise GatewayError("Backup API endpoint is not configured")

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            AUTH_HEADER: config.api_token,
        }
        logger.debug("Request: POST %s", url)
        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise GatewayError(f"Backup API timed out: POST {url}: {e}") from e
        except httpx.InvalidURL as e:
            raise GatewayError(f"Backup API endpoint is invalid: {url!r}: {e}") from e
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise GatewayError(f"Backup API request failed: POST {url}: {e}") from e

        logger.debug("Response Status: %d", resp.status_code)
        if resp.is_error:
            body = resp.text[:_ERROR_BODY_LIMIT]
            raise GatewayError(
                f"Backup API returned HTTP {resp.status_code}: {body}",
                status_code=resp.status_code,
            )

        try:
            return schema.model_validate(resp.json())
        except (ValueError, SchemaError) as e:
            raise GatewayError(f"Malformed backup API response from {url}: {e}") from e
