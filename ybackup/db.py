"""Database engine, session factory, and base model.

Both status stores (``backup_attempts`` and ``batch_executions``) live in the
database named by ``YBACKUP_DATABASE_URL``. Sessions are opened per call from
worker threads, so the engine must be safe to share across threads.
"""

from __future__ import annotations

import logging

from sqlalchemy import StaticPool, create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

_db_url = make_url(settings.effective_database_url)
_is_sqlite = _db_url.get_backend_name() == "sqlite"

_engine_kwargs: dict = {"echo": settings.debug}
if _is_sqlite:
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
    if _db_url.database in (None, "", ":memory:"):
        # One shared connection, or each worker thread sees an empty database
        _engine_kwargs["poolclass"] = StaticPool
else:
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10
    _engine_kwargs["pool_pre_ping"] = True

engine = create_engine(_db_url, **_engine_kwargs)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def get_db():
    """FastAPI dependency — yields a DB session, auto-closes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create both status tables (for development — use Alembic in production)."""
    from . import models  # noqa: F401  register models on Base.metadata

    Base.metadata.create_all(bind=engine)


def check_database() -> bool:
    """Return True when the status database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Status database unreachable: %s", e)
        return False
    return True
