"""ConnectionService — send, accept, and reject connection requests.

Pipeline per mutation: VALIDATE → TRANSACT → NOTIFY → RESPOND

- VALIDATE runs before any I/O.
- TRANSACT is one store transaction. Send claims the pair's pending
  slot; accept/reject compare-and-swap the request's status, and accept
  writes both directed edges inside the same transaction.
- NOTIFY runs after commit and is fire-and-forget: a failure becomes a
  warning on the result and is never surfaced as an error.

Store lock/IO failures map to ``TRANSIENT_STORE``. Nothing is retried
here; every operation degrades to a defined error when replayed, so the
caller can retry the whole call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import OperationalError

from peerlink.domain.ids import validate_id
from peerlink.domain.lifecycle import RequestStatus, is_terminal
from peerlink.domain.models import (
    ConnectionRequest,
    NotificationEvent,
    NotificationKind,
    UserProfile,
)
from peerlink.domain.pairs import validate_pair
from peerlink.infrastructure.repositories.ledger import PendingPairConflict
from peerlink.services._helpers import now_iso
from peerlink.services.base import BaseService
from peerlink.services.contracts import (
    ListConnectionsResultData,
    PendingRequestsResultData,
    RequestHistoryResultData,
    ResolveResultData,
    SendResultData,
    dump_validated,
)
from peerlink.services.guard import DuplicateGuard
from peerlink.services.notifier import EventBusNotifier
from peerlink.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from peerlink.infrastructure.repositories.directory import IdentityLookup
    from peerlink.infrastructure.store import Store
    from peerlink.services.notifier import Notifier

logger = logging.getLogger(__name__)


class ConnectionService(BaseService):
    """Façade over the request ledger, duplicate guard, edge writer, and notifier."""

    def __init__(
        self,
        store: Store,
        *,
        notifier: Notifier | None = None,
        directory: IdentityLookup | None = None,
        guard: DuplicateGuard | None = None,
    ) -> None:
        super().__init__(store)
        self._notifier: Notifier = notifier if notifier is not None else EventBusNotifier(store)
        self._directory: IdentityLookup = directory if directory is not None else store.directory
        self._guard = guard or DuplicateGuard()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def send(
        self,
        from_user_id: str,
        to_user_id: str,
        *,
        caller_id: str | None = None,
    ) -> ServiceResult:
        """Open a pending request from *from_user_id* to *to_user_id*.

        *caller_id*, when given, is the authenticated identity and must
        equal *from_user_id*.
        """
        op = "send_request"

        errors = validate_pair(from_user_id, to_user_id)
        if errors:
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "; ".join(errors))
        if caller_id is not None and caller_id != from_user_id:
            return ServiceResult.failure(
                op,
                ErrorCode.FORBIDDEN,
                f"{caller_id} cannot send a request on behalf of {from_user_id}",
            )

        now = now_iso()
        with structlog.contextvars.bound_contextvars(op=op):
            try:
                with self._store.transaction() as txn:
                    if txn.edges.are_connected(txn.conn, from_user_id, to_user_id):
                        return ServiceResult.failure(
                            op,
                            ErrorCode.ALREADY_CONNECTED,
                            f"{from_user_id} and {to_user_id} are already connected",
                        )

                    existing = self._guard.find(txn.conn, from_user_id, to_user_id)
                    if existing is not None:
                        return self._duplicate(op, from_user_id, to_user_id, existing.id)

                    request = txn.ledger.create(txn.conn, from_user_id, to_user_id, now)
            except PendingPairConflict:
                # Lost the race to a concurrent send for the same pair.
                logger.info("Pending slot taken for %s/%s at insert", from_user_id, to_user_id)
                return self._duplicate(op, from_user_id, to_user_id, None)
            except OperationalError as exc:
                return self._transient(op, exc)

            logger.info("Request %s sent: %s -> %s", request.id, from_user_id, to_user_id)

            warnings: list[str] = []
            self._notify(
                to_user_id,
                NotificationKind.CONNECTION_REQUEST,
                actor_id=from_user_id,
                request_id=request.id,
                warnings=warnings,
            )

        data = dump_validated(
            SendResultData,
            {
                "request_id": request.id,
                "status": request.status.value,
                "from_user_id": request.from_user_id,
                "to_user_id": request.to_user_id,
                "created_at": request.created_at,
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def accept(self, request_id: str, caller_id: str) -> ServiceResult:
        """Accept a pending request. Only the recipient may accept."""
        return self._resolve("accept_request", request_id, caller_id, RequestStatus.ACCEPTED)

    def reject(self, request_id: str, caller_id: str) -> ServiceResult:
        """Reject a pending request. Only the recipient may reject."""
        return self._resolve("reject_request", request_id, caller_id, RequestStatus.REJECTED)

    def remove_connection(
        self,
        user_id: str,
        peer_id: str,
        *,
        caller_id: str | None = None,
    ) -> ServiceResult:
        """Remove both directions of the edge between *user_id* and *peer_id*.

        Request history is untouched; the pair may send a new request afterwards.
        """
        op = "remove_connection"

        errors = validate_pair(user_id, peer_id)
        if errors:
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "; ".join(errors))
        if caller_id is not None and caller_id not in (user_id, peer_id):
            return ServiceResult.failure(
                op,
                ErrorCode.FORBIDDEN,
                f"{caller_id} is not a party to this connection",
            )

        try:
            with self._store.transaction() as txn:
                removed = txn.edges.remove_pair(txn.conn, user_id, peer_id)
        except OperationalError as exc:
            return self._transient(op, exc)

        if removed == 0:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_CONNECTED,
                f"{user_id} and {peer_id} are not connected",
            )

        logger.info("Connection removed: %s <-> %s", user_id, peer_id)
        warnings: list[str] = []
        self._dispatch_event(
            "post_connection_removed",
            {"user_id": user_id, "peer_id": peer_id},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"user_id": user_id, "peer_id": peer_id, "edges_removed": removed},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_request(self, request_id: str) -> ServiceResult:
        op = "get_request"
        if not validate_id(request_id, "request"):
            return self._not_found(op, request_id)
        try:
            with self._store.reader() as txn:
                request = txn.ledger.get(txn.conn, request_id)
        except OperationalError as exc:
            return self._transient(op, exc)

        if request is None:
            return self._not_found(op, request_id)

        data: dict[str, Any] = request.model_dump(mode="json")
        data["sender"] = self._lookup(request.from_user_id).summary()
        data["recipient"] = self._lookup(request.to_user_id).summary()
        return ServiceResult(ok=True, op=op, data=data)

    def list_connections(self, user_id: str) -> ServiceResult:
        """Peers of *user_id* with resolved display names."""
        op = "list_connections"
        if not user_id or not user_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "user id is required")

        try:
            with self._store.reader() as txn:
                rows = txn.edges.list_for_user(txn.conn, user_id)
        except OperationalError as exc:
            return self._transient(op, exc)

        items: list[dict[str, Any]] = []
        for row in rows:
            peer = self._lookup(row.peer_id)
            items.append(
                {
                    "peer_id": row.peer_id,
                    "created_at": row.created_at,
                    "name": peer.name,
                    "role": peer.role,
                }
            )

        data = dump_validated(
            ListConnectionsResultData,
            {"user_id": user_id, "count": len(items), "items": items},
        )
        return ServiceResult(ok=True, op=op, data=data)

    def list_pending_requests(self, user_id: str) -> ServiceResult:
        """Incoming and outgoing pending requests, each with the counterpart's identity."""
        op = "list_requests"
        if not user_id or not user_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "user id is required")

        try:
            with self._store.reader() as txn:
                incoming = txn.ledger.list_pending(txn.conn, user_id, "incoming")
                outgoing = txn.ledger.list_pending(txn.conn, user_id, "outgoing")
        except OperationalError as exc:
            return self._transient(op, exc)

        data = dump_validated(
            PendingRequestsResultData,
            {
                "user_id": user_id,
                "incoming": [
                    {
                        **r.model_dump(mode="json"),
                        "sender": self._lookup(r.from_user_id).summary(),
                    }
                    for r in incoming
                ],
                "outgoing": [
                    {
                        **r.model_dump(mode="json"),
                        "recipient": self._lookup(r.to_user_id).summary(),
                    }
                    for r in outgoing
                ],
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    def request_history(self, user_id: str, *, status: str | None = None) -> ServiceResult:
        """Every request *user_id* is party to, newest first (audit trail)."""
        op = "request_history"
        if not user_id or not user_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "user id is required")

        try:
            wanted = RequestStatus(status) if status is not None else None
        except ValueError:
            allowed = ", ".join(s.value for s in RequestStatus)
            return ServiceResult.failure(
                op, ErrorCode.VALIDATION_FAILED, f"Unknown status {status!r}; expected {allowed}"
            )

        try:
            with self._store.reader() as txn:
                requests = txn.ledger.list_for_user(txn.conn, user_id, status=wanted)
        except OperationalError as exc:
            return self._transient(op, exc)

        items = [r.model_dump(mode="json") for r in requests]
        data = dump_validated(
            RequestHistoryResultData,
            {"user_id": user_id, "count": len(items), "items": items},
        )
        return ServiceResult(ok=True, op=op, data=data)

    def are_connected(self, user_id: str, peer_id: str) -> ServiceResult:
        """Connection status of a pair, plus any open request between them."""
        op = "check_connection"

        errors = validate_pair(user_id, peer_id)
        if errors:
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "; ".join(errors))

        try:
            with self._store.reader() as txn:
                connected = txn.edges.are_connected(txn.conn, user_id, peer_id)
                pending = self._guard.find(txn.conn, user_id, peer_id)
        except OperationalError as exc:
            return self._transient(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "user_id": user_id,
                "peer_id": peer_id,
                "connected": connected,
                "pending_request_id": pending.id if pending is not None else None,
            },
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(
        self,
        op: str,
        request_id: str,
        caller_id: str,
        target: RequestStatus,
    ) -> ServiceResult:
        """Shared accept/reject path: authorize, then CAS ``pending → target``."""
        if not caller_id or not caller_id.strip():
            return ServiceResult.failure(op, ErrorCode.VALIDATION_FAILED, "caller id is required")
        if not validate_id(request_id, "request"):
            return self._not_found(op, request_id)

        now = now_iso()
        edges_written = 0
        with structlog.contextvars.bound_contextvars(op=op, request_id=request_id):
            try:
                with self._store.transaction() as txn:
                    request = txn.ledger.get(txn.conn, request_id)
                    if request is None:
                        return self._not_found(op, request_id)
                    if caller_id != request.to_user_id:
                        return ServiceResult.failure(
                            op,
                            ErrorCode.FORBIDDEN,
                            f"Only the recipient ({request.to_user_id}) may resolve {request_id}",
                            request_id=request_id,
                        )
                    if is_terminal(request.status):
                        return self._invalid_state(op, request)

                    won = txn.ledger.transition(
                        txn.conn,
                        request_id,
                        expected=RequestStatus.PENDING,
                        target=target,
                        now=now,
                    )
                    if not won:
                        current = txn.ledger.get(txn.conn, request_id)
                        assert current is not None
                        return self._invalid_state(op, current)

                    if target == RequestStatus.ACCEPTED:
                        edges_written = txn.edges.write_pair(
                            txn.conn,
                            request.from_user_id,
                            request.to_user_id,
                            request_id=request.id,
                            now=now,
                        )
            except OperationalError as exc:
                return self._transient(op, exc)

            logger.info("Request %s %s by %s", request_id, target.value, caller_id)

            warnings: list[str] = []
            if target == RequestStatus.ACCEPTED:
                self._notify(
                    request.from_user_id,
                    NotificationKind.CONNECTION_ACCEPTED,
                    actor_id=request.to_user_id,
                    request_id=request.id,
                    warnings=warnings,
                )
            self._dispatch_event(
                "post_request_resolved",
                {
                    "request_id": request.id,
                    "status": target.value,
                    "from_user_id": request.from_user_id,
                    "to_user_id": request.to_user_id,
                },
                warnings,
            )

        data = dump_validated(
            ResolveResultData,
            {
                "request_id": request.id,
                "status": target.value,
                "from_user_id": request.from_user_id,
                "to_user_id": request.to_user_id,
                "edges_written": edges_written,
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def _notify(
        self,
        user_id: str,
        kind: NotificationKind,
        *,
        actor_id: str,
        request_id: str,
        warnings: list[str],
    ) -> None:
        """Best-effort notification. Failures are logged and become warnings."""
        try:
            actor = self._lookup(actor_id)
            event = NotificationEvent(
                kind=kind,
                related_user_id=actor_id,
                related_user_name=actor.name,
                request_id=request_id,
            )
            self._notifier.notify(user_id, event)
        except Exception:
            logger.warning("Notification %s to %s failed", kind.value, user_id, exc_info=True)
            warnings.append(f"Notification {kind.value} to {user_id} could not be delivered")

    def _lookup(self, user_id: str) -> UserProfile:
        """Resolve a profile; a misbehaving lookup degrades to the placeholder."""
        try:
            return self._directory.get_user(user_id)
        except Exception:
            logger.warning("Identity lookup raised for %s", user_id, exc_info=True)
            return UserProfile.make_placeholder(user_id)

    @staticmethod
    def _duplicate(
        op: str,
        from_user_id: str,
        to_user_id: str,
        existing_id: str | None,
    ) -> ServiceResult:
        detail: dict[str, Any] = {"from_user_id": from_user_id, "to_user_id": to_user_id}
        if existing_id is not None:
            detail["request_id"] = existing_id
        return ServiceResult.failure(
            op,
            ErrorCode.DUPLICATE_REQUEST,
            f"A pending request already exists between {from_user_id} and {to_user_id}",
            **detail,
        )

    @staticmethod
    def _not_found(op: str, request_id: str) -> ServiceResult:
        return ServiceResult.failure(
            op, ErrorCode.NOT_FOUND, f"No such request: {request_id}", request_id=request_id
        )

    @staticmethod
    def _invalid_state(op: str, request: ConnectionRequest) -> ServiceResult:
        return ServiceResult.failure(
            op,
            ErrorCode.INVALID_STATE,
            f"Request {request.id} is already {request.status.value}",
            request_id=request.id,
            status=request.status.value,
        )

    @staticmethod
    def _transient(op: str, exc: OperationalError) -> ServiceResult:
        logger.warning("Store unavailable during %s: %s", op, exc.orig)
        return ServiceResult.failure(
            op,
            ErrorCode.TRANSIENT_STORE,
            "The connection store is temporarily unavailable; retry the operation",
            retryable=True,
        )
