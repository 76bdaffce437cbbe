"""Tests for the ybackup CLI."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ybackup.cli.main import cli
from ybackup.config import DatabaseSettings, settings
from ybackup.services.orchestrator import BackupOrchestrator


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def cli_orchestrator(monkeypatch, tmp_path, orchestrator):
    """Route `ybackup run` to the in-memory orchestrator and a temp log dir."""
    monkeypatch.setattr(BackupOrchestrator, "from_settings", classmethod(lambda cls, s: orchestrator))
    monkeypatch.setattr("ybackup.common.init_logging", lambda prefix: tmp_path / f"{prefix}.log")
    return orchestrator


def test_status_without_categories(runner, monkeypatch):
    monkeypatch.setattr(settings, "databases", {})
    monkeypatch.setattr(settings, "databases_file", None)

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0
    assert "No backup categories configured" in result.output


def test_status_lists_categories(runner, monkeypatch):
    monkeypatch.setattr(settings, "databases", {
        "hwa_full": DatabaseSettings(
            api_token="t", universe_uuid="u", db_name="epricing",
            backup_type="YSQL", backup_category_type="FULL",
        ),
    })
    monkeypatch.setattr(settings, "databases_file", None)

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0
    assert "HWA_FULL" in result.output
    assert "epricing" in result.output


def test_run_full_backup(runner, cli_orchestrator):
    result = runner.invoke(cli, ["run", "--batch-id", "B1", "--category-code", "HWA_FULL"])

    assert result.exit_code == 0
    assert "Backup submitted for batch B1" in result.output
    assert cli_orchestrator.gateway.call_names() == ["submit_full_backup"]


def test_run_failure_exits_nonzero(runner, cli_orchestrator):
    result = runner.invoke(cli, ["run", "--batch-id", "B2", "--category-code", "HWA_INCR"])

    assert result.exit_code == 1
    assert "Backup failed for batch B2" in result.output
    assert "NO_PRIOR_BACKUP" in result.output


def test_run_rejects_bad_business_date(runner, cli_orchestrator):
    result = runner.invoke(cli, [
        "run", "--batch-id", "B3", "--category-code", "HWA_FULL", "--business-date", "2024-13-01",
    ])

    assert result.exit_code == 1
    assert "Invalid business date" in result.output
    assert cli_orchestrator.gateway.calls == []
