"""Config resolver — maps a category code to its immutable backup configuration."""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel

from ..config import DatabaseSettings, Settings
from ..errors import ConfigNotFound

logger = logging.getLogger(__name__)


class CategoryType(str, Enum):
    FULL = "FULL"
    INCREMENTAL = "INCREMENTAL"

    @classmethod
    def parse(cls, value: str) -> Optional["CategoryType"]:
        """Accept ``full``/``FULL``/``full_backup`` style spellings; None if unknown."""
        normalized = (value or "").strip().upper()
        if normalized.endswith("_BACKUP"):
            normalized = normalized[: -len("_BACKUP")]
        try:
            return cls(normalized)
        except ValueError:
            return None


class BackupConfiguration(BaseModel):
    """Resolved backup settings for one category. Frozen after load."""

    api_token: str
    universe_id: str
    customer_id: str = ""
    storage_config_id: str
    full_backup_endpoint: str = ""
    incremental_backup_endpoint: str = ""
    last_backup_endpoint: str = ""
    expiry_millis: int = 0
    backup_type: str
    database_name: str
    category_type: str
    parent_category: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, raw: DatabaseSettings) -> "BackupConfiguration":
        return cls(
            api_token=raw.api_token,
            universe_id=raw.universe_uuid,
            customer_id=raw.customer_uuid,
            storage_config_id=raw.storage_config_uuid,
            full_backup_endpoint=raw.full_backup_url,
            incremental_backup_endpoint=raw.incremental_backup_url,
            last_backup_endpoint=raw.last_backup_url,
            expiry_millis=raw.expiry_ms,
            backup_type=raw.backup_type,
            database_name=raw.db_name,
            category_type=raw.backup_category_type,
            parent_category=raw.parent_category,
        )

    @property
    def parsed_category_type(self) -> Optional[CategoryType]:
        return CategoryType.parse(self.category_type)


class ConfigResolver:
    """Read-only lookup of backup configurations by category code.

    The mapping is built once and never mutated, so concurrent workflows can
    read it without locking.
    """

    def __init__(self, configs: Mapping[str, BackupConfiguration]) -> None:
        self._configs: Mapping[str, BackupConfiguration] = MappingProxyType(
            {key.upper(): cfg for key, cfg in configs.items()}
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfigResolver":
        raw = settings.load_databases()
        configs = {key: BackupConfiguration.from_settings(db) for key, db in raw.items()}
        logger.info("Loaded backup configuration for %d categories", len(configs))
        return cls(configs)

    def resolve(self, category_code: str) -> BackupConfiguration:
        """Return the configuration for *category_code* (any casing)."""
        config = self._configs.get((category_code or "").upper())
        if config is None:
            raise ConfigNotFound(category_code)
        return config

    def categories(self) -> list[str]:
        return sorted(self._configs)

    def __len__(self) -> int:
        return len(self._configs)
