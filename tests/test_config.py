"""Tests for config.py — environment settings and the databases file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ybackup.config import DatabaseSettings, Settings


def test_defaults() -> None:
    s = Settings(_env_file=None)
    assert s.connect_timeout_ms == 30000
    assert s.read_timeout_ms == 60000
    assert s.max_retry_attempts == 3
    assert s.timezone == "Asia/Kolkata"
    assert s.load_databases() == {}


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YBACKUP_READ_TIMEOUT_MS", "5000")
    monkeypatch.setenv("YBACKUP_DATABASES", json.dumps({
        "HWA_FULL": {"api_token": "t", "universe_uuid": "u", "backup_category_type": "FULL"},
    }))
    s = Settings(_env_file=None)
    assert s.read_timeout_ms == 5000
    assert s.databases["HWA_FULL"].universe_uuid == "u"


def test_database_url_fallback(tmp_path: Path) -> None:
    s = Settings(_env_file=None, database_url="", repo_root=tmp_path)
    assert s.effective_database_url == f"sqlite:///{tmp_path / 'local' / 'data' / 'ybackup.db'}"
    assert (tmp_path / "local" / "data").is_dir()

    s = Settings(_env_file=None, database_url="postgresql://db/backups")
    assert s.effective_database_url == "postgresql://db/backups"


def test_databases_file_overrides_inline(tmp_path: Path) -> None:
    db_file = tmp_path / "databases.json"
    db_file.write_text(json.dumps({
        "HWA_FULL": {"api_token": "from-file", "universe_uuid": "u2"},
        "HWA_INCR": {"api_token": "t3", "backup_category_type": "INCREMENTAL"},
    }))
    s = Settings(
        _env_file=None,
        databases={
            "HWA_FULL": DatabaseSettings(api_token="inline", universe_uuid="u1"),
            "HWA_OTHER": DatabaseSettings(api_token="t4"),
        },
        databases_file=db_file,
    )

    merged = s.load_databases()
    assert set(merged) == {"HWA_FULL", "HWA_INCR", "HWA_OTHER"}
    assert merged["HWA_FULL"].api_token == "from-file"
    assert merged["HWA_INCR"].backup_category_type == "INCREMENTAL"


def test_missing_databases_file_raises(tmp_path: Path) -> None:
    s = Settings(_env_file=None, databases_file=tmp_path / "missing.json")
    with pytest.raises(FileNotFoundError):
        s.load_databases()
