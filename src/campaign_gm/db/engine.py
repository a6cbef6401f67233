"""Database engine helpers for campaign_gm."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from campaign_gm.config import get_db_path


def _enable_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON;")
    cursor.close()


def get_engine(db_path: str | None = None) -> Engine:
    """Create a SQLite engine for the configured database path."""
    resolved_path = Path(db_path or get_db_path()).expanduser().resolve()
    resolved_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{resolved_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _enable_sqlite_pragmas)
    return engine


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables if they do not already exist."""
    from campaign_gm import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
