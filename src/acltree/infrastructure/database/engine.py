"""Database engine setup.

SQLite is the default persistence layer: WAL mode for concurrent reads,
foreign keys on, ACID transactions for every join/leave. Any other
SQLAlchemy URL is accepted as-is.

SQLAlchemy Core (not ORM) is used: collections carry their own identity
and the strategies emit Core clauses, so an identity map adds nothing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get WAL and foreign keys."""
    parsed = make_url(url)
    engine = create_engine(url, echo=echo)

    if parsed.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            if parsed.database and parsed.database != ":memory:":
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(url: str, metadata: MetaData, *, echo: bool = False) -> Engine:
    """Create the engine and every table on *metadata*.

    For file-backed SQLite the parent directory is created first.
    Idempotent — safe to call on an existing database.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(url, echo=echo)
    metadata.create_all(engine)
    return engine
