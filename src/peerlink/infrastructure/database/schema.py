"""SQLAlchemy Core table definitions for the peerlink database.

Three tables carry the connection graph (``connection_requests``,
``connections``, ``pending_pair_index``). ``users`` backs the identity
lookup, ``notifications`` the built-in inbox plugin, and ``event_wal``
the plugin event bus.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

metadata = MetaData()

connection_requests = Table(
    "connection_requests",
    metadata,
    Column("id", Text, primary_key=True),
    Column("from_user_id", Text, nullable=False),
    Column("to_user_id", Text, nullable=False),
    Column("pair_key", Text, nullable=False),
    Column("status", Text, nullable=False),  # pending | accepted | rejected
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

# Two rows per undirected edge; the composite key makes re-writes no-ops.
connections = Table(
    "connections",
    metadata,
    Column("id", Text, nullable=False, unique=True),
    Column("user_id", Text, nullable=False),
    Column("peer_id", Text, nullable=False),
    Column("request_id", Text, ForeignKey("connection_requests.id")),
    Column("created_at", Text, nullable=False),
    PrimaryKeyConstraint("user_id", "peer_id"),
)

# One row per open request. The primary key is the at-most-one-pending
# constraint; rows are removed in the same transaction that resolves the request.
pending_pair_index = Table(
    "pending_pair_index",
    metadata,
    Column("pair_key", Text, primary_key=True),
    Column("request_id", Text, ForeignKey("connection_requests.id"), nullable=False),
    Column("created_at", Text, nullable=False),
)

users = Table(
    "users",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("role", Text, nullable=False, default="user", server_default="user"),
    Column("department", Text),
    Column("created_at", Text, nullable=False),
)

notifications = Table(
    "notifications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Text, nullable=False),
    Column("kind", Text, nullable=False),
    Column("related_user_id", Text, nullable=False),
    Column("related_user_name", Text, nullable=False),
    Column("request_id", Text),
    Column("message", Text, nullable=False),
    Column("read", Integer, default=0, server_default="0"),
    Column("created_at", Text, nullable=False),
)

event_wal = Table(
    "event_wal",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_requests_to_status", connection_requests.c.to_user_id, connection_requests.c.status)
Index("ix_requests_from_status", connection_requests.c.from_user_id, connection_requests.c.status)
Index("ix_requests_pair_key", connection_requests.c.pair_key)
Index("ix_connections_peer", connections.c.peer_id)
Index("ix_notifications_user", notifications.c.user_id, notifications.c.read)
Index("ix_event_wal_status", event_wal.c.status)
