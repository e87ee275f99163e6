"""Tests for notifier adapters and end-to-end inbox delivery."""

from __future__ import annotations

from sqlalchemy import select

from peerlink.domain.models import NotificationEvent, NotificationKind
from peerlink.infrastructure.database.schema import event_wal
from peerlink.infrastructure.store import Store
from peerlink.services.connections import ConnectionService
from peerlink.services.inbox import InboxService
from peerlink.services.notifier import EventBusNotifier, NullNotifier
from tests.conftest import send_request

EVENT = NotificationEvent(
    kind=NotificationKind.CONNECTION_REQUEST,
    related_user_id="alice",
    related_user_name="Alice",
    request_id="req_0123456789abcdef",
)


class TestNullNotifier:
    def test_discards(self) -> None:
        assert NullNotifier().notify("bob", EVENT) is None


class TestEventBusNotifier:
    def test_noop_without_bus(self, store: Store) -> None:
        EventBusNotifier(store).notify("bob", EVENT)
        with store.reader() as txn:
            assert txn.conn.execute(select(event_wal)).fetchall() == []

    def test_dispatches_through_wal(self, bus_store: Store) -> None:
        EventBusNotifier(bus_store).notify("bob", EVENT)
        with bus_store.reader() as txn:
            row = txn.conn.execute(select(event_wal)).one()
        assert row.hook_name == "notify_user"
        assert row.status == "completed"


class TestInboxDelivery:
    def test_send_and_accept_reach_inboxes(self, bus_store: Store) -> None:
        bus_store.directory.add_user("alice", "Alice Moreau", now="t0")
        bus_store.directory.add_user("bob", "Bob Tran", now="t0")
        svc = ConnectionService(bus_store)
        inbox = InboxService(bus_store)

        rid = send_request(svc, "alice", "bob")["request_id"]
        bob = inbox.list_notifications("bob").data["items"]
        assert [n["message"] for n in bob] == ["Alice Moreau sent you a connection request"]
        assert bob[0]["request_id"] == rid
        assert bob[0]["read"] is False

        assert svc.accept(rid, "bob").ok
        alice = inbox.list_notifications("alice").data["items"]
        assert [n["message"] for n in alice] == ["Bob Tran accepted your connection request"]

    def test_reject_sends_nothing_to_sender(self, bus_store: Store) -> None:
        svc = ConnectionService(bus_store)
        rid = send_request(svc, "alice", "bob")["request_id"]
        assert svc.reject(rid, "bob").ok
        assert InboxService(bus_store).list_notifications("alice").data["count"] == 0

    def test_lifecycle_event_recorded(self, bus_store: Store) -> None:
        svc = ConnectionService(bus_store)
        rid = send_request(svc, "alice", "bob")["request_id"]
        svc.reject(rid, "bob")

        with bus_store.reader() as txn:
            hooks = [
                r.hook_name
                for r in txn.conn.execute(select(event_wal).order_by(event_wal.c.id)).fetchall()
            ]
        assert hooks == ["notify_user", "post_request_resolved"]
