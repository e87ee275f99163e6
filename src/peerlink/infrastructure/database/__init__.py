"""SQLite database engine and schema via SQLAlchemy Core."""

from peerlink.infrastructure.database.engine import create_db_engine, init_database
from peerlink.infrastructure.database.schema import (
    connection_requests,
    connections,
    event_wal,
    metadata,
    notifications,
    pending_pair_index,
    users,
)

__all__ = [
    "connection_requests",
    "connections",
    "create_db_engine",
    "event_wal",
    "init_database",
    "metadata",
    "notifications",
    "pending_pair_index",
    "users",
]
