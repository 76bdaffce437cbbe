"""ybackup configuration — loads from environment, .env and a databases file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


def _find_repo_root() -> Path:
    """Walk up from this file to find the repo root (where pyproject.toml lives)."""
    p = Path(__file__).resolve().parent
    while p != p.parent:
        if (p / "pyproject.toml").exists():
            return p
        p = p.parent
    return Path(__file__).resolve().parent.parent


class DatabaseSettings(BaseModel):
    """Raw backup settings for one category, as written in configuration."""

    api_token: str = ""
    universe_uuid: str = ""
    customer_uuid: str = ""
    storage_config_uuid: str = ""
    full_backup_url: str = ""
    incremental_backup_url: str = ""
    last_backup_url: str = ""
    expiry_ms: int = 0
    backup_type: str = ""
    db_name: str = ""
    backup_category_type: str = ""
    parent_category: Optional[str] = None


class Settings(BaseSettings):
    """Application settings — populated from env vars or .env file."""

    # App
    app_name: str = "ybackup"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Auth: set YBACKUP_API_KEY to enable API key auth
    api_key: Optional[str] = None

    # Backup API client
    connect_timeout_ms: int = 30000
    read_timeout_ms: int = 60000
    max_retry_attempts: int = 3

    # Business dates are computed in this zone when the batch record has none
    timezone: str = "Asia/Kolkata"

    # Per-category backup settings, keyed by category code
    databases: dict[str, DatabaseSettings] = {}
    databases_file: Optional[Path] = None

    # Paths
    repo_root: Path = _find_repo_root()

    model_config = {"env_prefix": "YBACKUP_", "env_file": ".env"}

    @property
    def local_dir(self) -> Path:
        return self.repo_root / "local"

    @property
    def data_dir(self) -> Path:
        d = self.local_dir / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def effective_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'ybackup.db'}"

    def load_databases(self) -> dict[str, DatabaseSettings]:
        """Merge ``databases`` with the JSON file at ``databases_file``.

        Entries from the file win over same-named inline entries.
        """
        merged: dict[str, DatabaseSettings] = dict(self.databases)
        if self.databases_file is not None:
            path = Path(self.databases_file).expanduser()
            raw: dict[str, Any] = json.loads(path.read_text())
            for key, value in raw.items():
                merged[key] = DatabaseSettings.model_validate(value)
        return merged


settings = Settings()
