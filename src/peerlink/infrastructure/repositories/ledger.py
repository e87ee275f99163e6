"""RequestLedger — durable store of connection requests and their lifecycle.

Every method takes the caller's ``Connection`` so ledger writes join the
surrounding transaction; commit and rollback belong to the caller.

Two mechanisms carry the invariants:

- ``create`` inserts the request together with its ``pending_pair_index``
  row. A second pending request for the same unordered pair violates the
  index's primary key and surfaces as :class:`PendingPairConflict`.
- ``transition`` is a compare-and-swap on ``status``: the ``UPDATE`` only
  matches while the row still holds the expected status, so at most one
  of several racing resolutions wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError

from peerlink.domain.ids import generate_request_id
from peerlink.domain.lifecycle import RequestStatus, is_valid_transition
from peerlink.domain.models import ConnectionRequest
from peerlink.domain.pairs import pair_key
from peerlink.infrastructure.database.schema import connection_requests, pending_pair_index

if TYPE_CHECKING:
    from sqlalchemy import Connection

Direction = Literal["incoming", "outgoing"]


class PendingPairConflict(Exception):
    """Another pending request already holds the pair's index slot."""

    def __init__(self, key: str) -> None:
        super().__init__(f"pending request already exists for pair {key}")
        self.pair_key = key


class RequestLedger:
    """Encapsulates SQL for the ``connection_requests`` lifecycle."""

    def create(
        self,
        conn: Connection,
        from_user_id: str,
        to_user_id: str,
        now: str,
    ) -> ConnectionRequest:
        """Insert a pending request and claim the pair's index slot.

        Raises:
            PendingPairConflict: The pair already has a pending request.
        """
        request_id = generate_request_id()
        key = pair_key(from_user_id, to_user_id)

        conn.execute(
            insert(connection_requests).values(
                id=request_id,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                pair_key=key,
                status=RequestStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )
        )
        try:
            conn.execute(
                insert(pending_pair_index).values(
                    pair_key=key,
                    request_id=request_id,
                    created_at=now,
                )
            )
        except IntegrityError as exc:
            raise PendingPairConflict(key) from exc

        return ConnectionRequest(
            id=request_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            status=RequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def get(self, conn: Connection, request_id: str) -> ConnectionRequest | None:
        row = conn.execute(
            select(connection_requests).where(connection_requests.c.id == request_id)
        ).first()
        return ConnectionRequest.from_row(row) if row is not None else None

    def find_pending(self, conn: Connection, a: str, b: str) -> ConnectionRequest | None:
        """Return the pending request between *a* and *b* in either direction."""
        row = conn.execute(
            select(connection_requests).where(
                connection_requests.c.status == RequestStatus.PENDING.value,
                or_(
                    (connection_requests.c.from_user_id == a)
                    & (connection_requests.c.to_user_id == b),
                    (connection_requests.c.from_user_id == b)
                    & (connection_requests.c.to_user_id == a),
                ),
            )
        ).first()
        return ConnectionRequest.from_row(row) if row is not None else None

    def transition(
        self,
        conn: Connection,
        request_id: str,
        *,
        expected: RequestStatus,
        target: RequestStatus,
        now: str,
    ) -> bool:
        """Compare-and-swap ``status`` from *expected* to *target*.

        Returns True if this call performed the swap, False if the stored
        status no longer matched *expected*. Leaving ``pending`` releases
        the pair's index slot in the same transaction.

        Raises:
            ValueError: *expected* → *target* is not a lifecycle transition.
        """
        if not is_valid_transition(expected.value, target.value):
            msg = f"Invalid request transition: {expected.value} -> {target.value}"
            raise ValueError(msg)

        result = conn.execute(
            update(connection_requests)
            .where(
                connection_requests.c.id == request_id,
                connection_requests.c.status == expected.value,
            )
            .values(status=target.value, updated_at=now)
        )
        if result.rowcount != 1:
            return False

        if expected == RequestStatus.PENDING:
            conn.execute(
                delete(pending_pair_index).where(pending_pair_index.c.request_id == request_id)
            )
        return True

    def list_pending(
        self,
        conn: Connection,
        user_id: str,
        direction: Direction,
    ) -> list[ConnectionRequest]:
        """Pending requests addressed to (``incoming``) or sent by (``outgoing``) *user_id*."""
        column = (
            connection_requests.c.to_user_id
            if direction == "incoming"
            else connection_requests.c.from_user_id
        )
        rows = conn.execute(
            select(connection_requests)
            .where(column == user_id, connection_requests.c.status == RequestStatus.PENDING.value)
            .order_by(connection_requests.c.created_at, connection_requests.c.id)
        ).fetchall()
        return [ConnectionRequest.from_row(row) for row in rows]

    def list_for_user(
        self,
        conn: Connection,
        user_id: str,
        *,
        status: RequestStatus | None = None,
    ) -> list[ConnectionRequest]:
        """Every request *user_id* is party to, newest first."""
        stmt = select(connection_requests).where(
            or_(
                connection_requests.c.from_user_id == user_id,
                connection_requests.c.to_user_id == user_id,
            )
        )
        if status is not None:
            stmt = stmt.where(connection_requests.c.status == status.value)
        rows = conn.execute(
            stmt.order_by(connection_requests.c.created_at.desc(), connection_requests.c.id)
        ).fetchall()
        return [ConnectionRequest.from_row(row) for row in rows]
