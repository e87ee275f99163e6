"""DuplicateGuard — fast, friendly detection of an open request for a pair.

The guard is advisory. It lets ``send`` return ``DUPLICATE_REQUEST``
without attempting a write, but two concurrent senders can both pass it;
the ``pending_pair_index`` primary key is what actually rejects the loser
(see :class:`~peerlink.infrastructure.repositories.ledger.PendingPairConflict`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from peerlink.infrastructure.repositories.ledger import RequestLedger

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from peerlink.domain.models import ConnectionRequest


class DuplicateGuard:
    def __init__(self, ledger: RequestLedger | None = None) -> None:
        self._ledger = ledger or RequestLedger()

    def exists(self, conn: Connection, a: str, b: str) -> bool:
        """Whether a pending request exists between *a* and *b* in either direction."""
        return self.find(conn, a, b) is not None

    def find(self, conn: Connection, a: str, b: str) -> ConnectionRequest | None:
        return self._ledger.find_pending(conn, a, b)
