"""
Engine and session plumbing for the expense API.

SQLite is the default store. `build_engine` turns on SQLite foreign-key
enforcement so deleting a user cascades to its expenses and budgets.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

DB_URL_ENV_VAR = "SPENDWISE_DB_URL"
DEFAULT_DB_PATH = Path(__file__).resolve().parents[2] / "data" / "spendwise.db"

_engine: Engine | None = None


def get_database_url() -> str:
    configured = os.getenv(DB_URL_ENV_VAR, "").strip()
    return configured or f"sqlite:///{DEFAULT_DB_PATH}"


def _ensure_sqlite_directory(url: URL) -> None:
    database = url.database
    if not database or database == ":memory:":
        return
    db_path = Path(database)
    if not db_path.is_absolute():
        db_path = (Path.cwd() / db_path).resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> Engine:
    """Create an engine for `database_url`, preparing SQLite files and pragmas."""
    parsed_url = make_url(database_url)
    if not parsed_url.drivername.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    _ensure_sqlite_directory(parsed_url)
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_database_url())
    return _engine


SessionLocal = sessionmaker(
    bind=get_engine(),
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    from . import models  # noqa: WPS433

    models.Base.metadata.create_all(bind=engine or get_engine())
