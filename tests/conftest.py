"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Keep the module-level engine off the developer's local database
os.environ.setdefault("YBACKUP_DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from ybackup.db import Base
from ybackup.errors import GatewayError
from ybackup.providers.base import BackupGateway
from ybackup.providers.yba.schemas import BackupHandle, BackupPage
from ybackup.services.batch_executions import BatchExecutionStore
from ybackup.services.orchestrator import BackupOrchestrator
from ybackup.services.reconciler import StatusReconciler
from ybackup.services.resilience import error_tracker
from ybackup.services.resolver import BackupConfiguration, ConfigResolver


def make_config(category_type: str = "FULL", **overrides) -> BackupConfiguration:
    fields = dict(
        api_token="token-abc",
        universe_id="uni-1",
        customer_id="cust-1",
        storage_config_id="storage-1",
        full_backup_endpoint="https://yba.test/api/v1/customers/cust-1/backups",
        incremental_backup_endpoint="https://yba.test/api/v1/customers/cust-1/backups",
        last_backup_endpoint="https://yba.test/api/v1/customers/cust-1/backups/page",
        expiry_millis=604800000,
        backup_type="PGSQL_TABLE_TYPE",
        database_name="epricing",
        category_type=category_type,
    )
    fields.update(overrides)
    return BackupConfiguration(**fields)


class FakeGateway(BackupGateway):
    """Records every call in order; responses are set per test."""

    gateway_type = "fake"

    def __init__(
        self,
        last_backup: dict | None = None,
        handle: dict | None = None,
        fail_with: GatewayError | None = None,
    ) -> None:
        self.calls: list[tuple] = []
        self.last_backup = last_backup if last_backup is not None else {"entities": []}
        self.handle = handle or {"taskUUID": "task-1", "resourceUUID": "uni-1"}
        self.fail_with = fail_with

    async def fetch_last_backup(self, config):
        self.calls.append(("fetch_last_backup", config.universe_id))
        if self.fail_with:
            raise self.fail_with
        return BackupPage.model_validate(self.last_backup)

    async def submit_full_backup(self, config):
        self.calls.append(("submit_full_backup", config.database_name))
        if self.fail_with:
            raise self.fail_with
        return BackupHandle.model_validate(self.handle)

    async def submit_incremental_backup(self, config, base_backup_id):
        self.calls.append(("submit_incremental_backup", base_backup_id))
        if self.fail_with:
            raise self.fail_with
        return BackupHandle.model_validate(self.handle)

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    finally:
        engine.dispose()


@pytest.fixture()
def resolver() -> ConfigResolver:
    return ConfigResolver({
        "HWA_FULL": make_config("FULL"),
        "hwa_incr": make_config("INCREMENTAL", database_name="epricing_incr"),
        "HWA_ODD": make_config("DIFFERENTIAL"),
    })


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def orchestrator(resolver, gateway, session_factory) -> BackupOrchestrator:
    batches = BatchExecutionStore(session_factory)
    return BackupOrchestrator(
        resolver=resolver,
        gateway=gateway,
        reconciler=StatusReconciler(session_factory, batch_executions=batches, max_attempts=1),
        batch_executions=batches,
    )


@pytest.fixture(autouse=True)
def clean_error_tracker():
    error_tracker.clear()
    yield
    error_tracker.clear()
