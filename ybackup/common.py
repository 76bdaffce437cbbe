"""Shared utilities — console output, logging context, business dates.

Providers and services should import from here, not duplicate these functions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from rich.console import Console

# ---------------------------------------------------------------------------
# Console singleton
# ---------------------------------------------------------------------------
console = Console()

# ---------------------------------------------------------------------------
# Timestamp for log file naming
# ---------------------------------------------------------------------------
TIMESTAMP = datetime.now().strftime("%Y-%m-%d-%H%M%S")

BUSINESS_DATE_FORMAT = "%Y%m%d"

# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def print_success(msg: str) -> None:
    console.print(f"[bold green]✔ {msg}[/bold green]")

def print_warning(msg: str) -> None:
    console.print(f"[bold yellow]⚠ {msg}[/bold yellow]")

def print_error(msg: str) -> None:
    console.print(f"[bold red]✖ {msg}[/bold red]")

def print_detail(msg: str) -> None:
    console.print(f"  {msg}")

# ---------------------------------------------------------------------------
# Logging context: batch/category stamped onto every record of a workflow
# ---------------------------------------------------------------------------

_batch_id: ContextVar[str] = ContextVar("batch_id", default="-")
_category_code: ContextVar[str] = ContextVar("category_code", default="-")

class LogContextFilter(logging.Filter):
    """Copy the current workflow's batch id and category code onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.batch_id = _batch_id.get()
        record.category_code = _category_code.get()
        return True

@contextmanager
def log_context(batch_id: str, category_code: str) -> Iterator[None]:
    """Bind *batch_id* and *category_code* for the duration of the block.

    Context variables follow asyncio tasks and ``asyncio.to_thread``, so
    store calls made from worker threads keep the same context.
    """
    batch_token = _batch_id.set(batch_id)
    category_token = _category_code.set(category_code)
    try:
        yield
    finally:
        _category_code.reset(category_token)
        _batch_id.reset(batch_token)

# ---------------------------------------------------------------------------
# File-based logging
# ---------------------------------------------------------------------------

_log_file: Optional[Path] = None

LOG_FORMAT = "%(asctime)s %(levelname)s [%(batch_id)s/%(category_code)s] %(name)s %(message)s"

def init_logging(prefix: str = "ybackup", log_dir: Optional[Path] = None, level: int = logging.INFO) -> Path:
    """Initialise file and console logging for the ``ybackup`` logger tree.

    Returns the log file path.
    """
    global _log_file

    if log_dir is None:
        from .config import settings
        log_dir = settings.local_dir / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)
    _log_file = log_dir / f"{prefix}-{TIMESTAMP}.log"

    logger = logging.getLogger("ybackup")
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    fh = logging.FileHandler(_log_file)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    fh.addFilter(LogContextFilter())
    logger.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(formatter)
    sh.addFilter(LogContextFilter())
    logger.addHandler(sh)
    return _log_file

def get_log_file() -> Optional[Path]:
    return _log_file

# ---------------------------------------------------------------------------
# Business dates
# ---------------------------------------------------------------------------

def normalize_business_date(value: str) -> str:
    """Return *value* (``YYYYMMDD`` or ``YYYY-MM-DD``) as ``YYYYMMDD``.

    Raises ValueError when the result is not a real calendar date.
    """
    compact = value.strip().replace("-", "")
    datetime.strptime(compact, BUSINESS_DATE_FORMAT)
    return compact

def today_business_date(tz_name: str) -> str:
    return datetime.now(ZoneInfo(tz_name)).strftime(BUSINESS_DATE_FORMAT)
