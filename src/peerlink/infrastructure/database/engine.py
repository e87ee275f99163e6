"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode for concurrent reads, ACID
transactions spanning the request, pair-index, and connection tables.
The DB is stored at ``{root}/.peerlink/{filename}``.

Every transaction starts with ``BEGIN IMMEDIATE``. pysqlite's default
deferred transactions let two writers read the same snapshot and then
fail on upgrade; taking the write lock up front makes concurrent writers
queue behind ``busy_timeout`` so the compare-and-swap and uniqueness
checks see committed state.

SQLAlchemy Core (not ORM) is used: operations are short, explicit
transactions with no need for an identity map.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from peerlink.infrastructure.database.schema import metadata

DATA_DIRNAME = ".peerlink"
DEFAULT_DB_FILENAME = "peerlink.db"

# Execution option marking a connection that never writes; it opens a
# deferred transaction and does not queue behind writers.
READ_ONLY_OPTION = "peerlink_read_only"


def create_db_engine(db_path: Path, *, busy_timeout: float = 5.0) -> Engine:
    """Create a SQLite engine with WAL mode, foreign keys, and immediate transactions."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Hand transaction control to the "begin" listener below.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        if conn.get_execution_options().get(READ_ONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(
    root: Path,
    *,
    filename: str = DEFAULT_DB_FILENAME,
    busy_timeout: float = 5.0,
) -> Engine:
    """Initialize the peerlink database at ``{root}/.peerlink/{filename}``.

    Creates the ``.peerlink/`` directory and all tables from
    :data:`schema.metadata`. Idempotent — safe to call on an existing store.

    Returns the engine ready for use.
    """
    data_dir = root / DATA_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(data_dir / filename, busy_timeout=busy_timeout)
    metadata.create_all(engine)
    return engine
