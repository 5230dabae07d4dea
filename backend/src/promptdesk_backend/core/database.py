from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from .config import settings


log = logging.getLogger("promptdesk.core.database")


class Base(DeclarativeBase):
    """Base declarative class for SQLAlchemy models."""


def _build_engine(url: str) -> Engine:
    connect_args: dict = {}
    if url.startswith("sqlite"):
        # FastAPI serves sync routes from a thread pool
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


engine = _build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_database() -> None:
    """Create schema if it does not exist."""
    # Import models so SQLAlchemy is aware of them before creating tables.
    from .. import models  # noqa: F401

    _ensure_sqlite_directory()
    Base.metadata.create_all(bind=engine)
    tables = sorted(inspect(engine).get_table_names())
    log.info("Database initialized (tables ensured: %s).", ", ".join(tables))


def _ensure_sqlite_directory() -> None:
    if engine.url.get_backend_name() != "sqlite":
        return
    database = engine.url.database
    if not database or database == ":memory:":
        return
    parent = Path(database).expanduser().resolve().parent
    if not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)
        log.info("Created SQLite data directory: %s", parent)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a session."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

