"""Tests for shared helpers — business dates and the logging context."""

from __future__ import annotations

import asyncio
import logging

import pytest

from ybackup.common import (
    LogContextFilter,
    init_logging,
    log_context,
    normalize_business_date,
    today_business_date,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("ybackup.test", logging.INFO, __file__, 1, "msg", None, None)


class TestBusinessDates:
    @pytest.mark.parametrize("raw,expected", [
        ("20240101", "20240101"),
        ("2024-01-01", "20240101"),
        (" 2024-02-29 ", "20240229"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_business_date(raw) == expected

    @pytest.mark.parametrize("raw", ["2023-02-29", "2024/01/01", "yesterday", ""])
    def test_normalize_rejects(self, raw):
        with pytest.raises(ValueError):
            normalize_business_date(raw)

    def test_today_is_compact(self):
        today = today_business_date("Asia/Kolkata")
        assert len(today) == 8
        assert normalize_business_date(today) == today


class TestLogContext:
    def test_defaults_outside_workflow(self):
        record = _record()
        LogContextFilter().filter(record)
        assert record.batch_id == "-"
        assert record.category_code == "-"

    def test_binds_and_restores(self):
        with log_context("BATCH_001", "HWA_FULL"):
            inner = _record()
            LogContextFilter().filter(inner)
        outer = _record()
        LogContextFilter().filter(outer)

        assert (inner.batch_id, inner.category_code) == ("BATCH_001", "HWA_FULL")
        assert outer.batch_id == "-"

    @pytest.mark.asyncio
    async def test_follows_worker_threads(self):
        def stamp():
            record = _record()
            LogContextFilter().filter(record)
            return record.batch_id

        with log_context("B7", "HWA_INCR"):
            assert await asyncio.to_thread(stamp) == "B7"

    @pytest.mark.asyncio
    async def test_concurrent_workflows_stay_separate(self):
        async def workflow(batch_id):
            with log_context(batch_id, "HWA_FULL"):
                await asyncio.sleep(0)
                record = _record()
                LogContextFilter().filter(record)
                return record.batch_id

        assert await asyncio.gather(workflow("A"), workflow("B")) == ["A", "B"]


def test_init_logging_writes_context(tmp_path):
    logger = logging.getLogger("ybackup")
    before = list(logger.handlers)
    try:
        log_file = init_logging("unit", log_dir=tmp_path, level=logging.CRITICAL)
        with log_context("B9", "HWA_FULL"):
            logging.getLogger("ybackup.services.test").info("hello")
        for h in logger.handlers:
            h.flush()

        assert log_file.parent == tmp_path
        assert "[B9/HWA_FULL]" in log_file.read_text()
    finally:
        for h in list(logger.handlers):
            if h not in before:
                logger.removeHandler(h)
                h.close()
