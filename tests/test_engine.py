"""Tests for the backup decision engine."""

from __future__ import annotations

import pytest

from conftest import FakeGateway, make_config
from ybackup.errors import GatewayError
from ybackup.providers.yba.schemas import BackupPage
from ybackup.services.engine import FailureReason, decide, extract_base_backup_id
from ybackup.services.resilience import error_tracker
from ybackup.services.resolver import CategoryType


def _page(*entities) -> BackupPage:
    return BackupPage.model_validate({"entities": list(entities)})


class TestExtractBaseBackupId:
    def test_returns_first_entity_base_id(self):
        page = _page(
            {"commonBackupInfo": {"baseBackupUUID": "uuid-123"}},
            {"commonBackupInfo": {"baseBackupUUID": "uuid-older"}},
        )
        assert extract_base_backup_id(page) == "uuid-123"

    def test_empty_page(self):
        from ybackup.errors import NoPriorBackup
        with pytest.raises(NoPriorBackup):
            extract_base_backup_id(_page())

    @pytest.mark.parametrize("entity", [
        {"commonBackupInfo": {"baseBackupUUID": None}},
        {"commonBackupInfo": {"baseBackupUUID": ""}},
        {"commonBackupInfo": {}},
        {},
    ])
    def test_missing_base_id(self, entity):
        from ybackup.errors import MissingBaseBackupId
        with pytest.raises(MissingBaseBackupId):
            extract_base_backup_id(_page(entity))


@pytest.mark.asyncio
async def test_full_submits_once_without_lookup():
    gw = FakeGateway()
    outcome = await decide(make_config("FULL"), gw)

    assert outcome.ok
    assert outcome.category_type == CategoryType.FULL
    assert gw.call_names() == ["submit_full_backup"]
    assert outcome.handle.task_uuid == "task-1"


@pytest.mark.asyncio
async def test_incremental_uses_fetched_base_id():
    gw = FakeGateway(last_backup={"entities": [{"commonBackupInfo": {"baseBackupUUID": "uuid-123"}}]})
    outcome = await decide(make_config("INCREMENTAL"), gw)

    assert outcome.ok
    assert gw.calls == [
        ("fetch_last_backup", "uni-1"),
        ("submit_incremental_backup", "uuid-123"),
    ]
    assert outcome.base_backup_id == "uuid-123"


@pytest.mark.asyncio
async def test_incremental_queries_last_backup_every_time():
    gw = FakeGateway(last_backup={"entities": [{"commonBackupInfo": {"baseBackupUUID": "a"}}]})
    cfg = make_config("INCREMENTAL")
    await decide(cfg, gw)
    gw.last_backup = {"entities": [{"commonBackupInfo": {"baseBackupUUID": "b"}}]}
    await decide(cfg, gw)

    assert gw.calls[1] == ("submit_incremental_backup", "a")
    assert gw.calls[3] == ("submit_incremental_backup", "b")
    assert gw.call_names().count("fetch_last_backup") == 2


@pytest.mark.asyncio
async def test_incremental_without_prior_backup_fails():
    gw = FakeGateway(last_backup={"entities": []})
    outcome = await decide(make_config("INCREMENTAL"), gw)

    assert not outcome.ok
    assert outcome.reason == FailureReason.NO_PRIOR_BACKUP
    assert "No previous backups" in outcome.message
    assert "submit_incremental_backup" not in gw.call_names()


@pytest.mark.asyncio
async def test_incremental_with_null_base_id_fails():
    gw = FakeGateway(last_backup={"entities": [{"commonBackupInfo": {"baseBackupUUID": None}}]})
    outcome = await decide(make_config("INCREMENTAL"), gw)

    assert outcome.reason == FailureReason.MISSING_BASE_BACKUP_ID
    assert gw.call_names() == ["fetch_last_backup"]


@pytest.mark.asyncio
async def test_unsupported_type_makes_no_calls():
    gw = FakeGateway()
    outcome = await decide(make_config("DIFFERENTIAL"), gw)

    assert outcome.reason == FailureReason.UNSUPPORTED_BACKUP_TYPE
    assert outcome.category_type is None
    assert gw.calls == []


@pytest.mark.asyncio
async def test_gateway_error_is_returned_and_tracked():
    gw = FakeGateway(fail_with=GatewayError("Backup API returned HTTP 503: down", status_code=503))
    outcome = await decide(make_config("FULL"), gw)

    assert not outcome.ok
    assert outcome.reason == FailureReason.GATEWAY_ERROR
    assert "HTTP 503" in outcome.message
    errors = error_tracker.get_errors(source="gateway")
    assert len(errors) == 1
    assert errors[0]["context"]["category_type"] == "FULL"


@pytest.mark.asyncio
async def test_programming_errors_propagate():
    class BrokenGateway(FakeGateway):
        async def submit_full_backup(self, config):
            raise TypeError("bug")

    with pytest.raises(TypeError):
        await decide(make_config("FULL"), BrokenGateway())
