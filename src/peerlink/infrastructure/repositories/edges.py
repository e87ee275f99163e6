"""EdgeWriter — the two directed rows behind each undirected connection.

``(A, B)`` and ``(B, A)`` are always written or removed together inside
the caller's transaction. Writes use ``ON CONFLICT DO NOTHING`` against
the ``(user_id, peer_id)`` primary key so replaying an accept can never
produce a second edge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from peerlink.domain.ids import generate_connection_id
from peerlink.domain.models import Connection
from peerlink.infrastructure.database.schema import connections

if TYPE_CHECKING:
    from sqlalchemy import Connection as DbConnection


class EdgeWriter:
    """Encapsulates SQL for the ``connections`` table."""

    def write_pair(
        self,
        conn: DbConnection,
        a: str,
        b: str,
        *,
        request_id: str | None,
        now: str,
    ) -> int:
        """Write both directions of the edge ``{a, b}``.

        Returns the number of rows actually inserted (2 for a new edge,
        0 when both directions already existed).
        """
        written = 0
        for user_id, peer_id in ((a, b), (b, a)):
            result = conn.execute(
                sqlite_insert(connections)
                .values(
                    id=generate_connection_id(),
                    user_id=user_id,
                    peer_id=peer_id,
                    request_id=request_id,
                    created_at=now,
                )
                .on_conflict_do_nothing(index_elements=["user_id", "peer_id"])
            )
            written += result.rowcount
        return written

    def are_connected(self, conn: DbConnection, a: str, b: str) -> bool:
        row = conn.execute(
            select(connections.c.id).where(
                connections.c.user_id == a,
                connections.c.peer_id == b,
            )
        ).first()
        return row is not None

    def list_for_user(self, conn: DbConnection, user_id: str) -> list[Connection]:
        """Directed rows owned by *user_id*; one row per peer, no join needed."""
        rows = conn.execute(
            select(connections)
            .where(connections.c.user_id == user_id)
            .order_by(connections.c.created_at, connections.c.peer_id)
        ).fetchall()
        return [
            Connection(
                id=row.id,
                user_id=row.user_id,
                peer_id=row.peer_id,
                request_id=row.request_id,
                created_at=row.created_at,
            )
            for row in rows
        ]

    def remove_pair(self, conn: DbConnection, a: str, b: str) -> int:
        """Delete both directions of ``{a, b}``. Returns rows removed."""
        result = conn.execute(
            delete(connections).where(
                or_(
                    (connections.c.user_id == a) & (connections.c.peer_id == b),
                    (connections.c.user_id == b) & (connections.c.peer_id == a),
                )
            )
        )
        return result.rowcount
