"""Race tests — concurrent sends and resolutions against one store.

Each worker uses its own ConnectionService over the shared Store, so the
only coordination is the database's: ``BEGIN IMMEDIATE`` serializes
writers, the pair index rejects a second pending request, and the status
compare-and-swap decides which resolution wins.
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import func, select

from peerlink.infrastructure.database.schema import connection_requests, connections
from peerlink.infrastructure.store import Store
from peerlink.services.connections import ConnectionService
from peerlink.services.notifier import NullNotifier
from peerlink.services.result import ServiceResult
from tests.conftest import pending_count, send_request

WORKERS = 8


def _race(calls: list[Callable[[], ServiceResult]]) -> list[ServiceResult]:
    """Run *calls* on separate threads, released together by a barrier."""
    barrier = threading.Barrier(len(calls))

    def run(call: Callable[[], ServiceResult]) -> ServiceResult:
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(run, calls))


def _codes(results: list[ServiceResult]) -> Counter[str]:
    return Counter(r.error.code if r.error is not None else "ok" for r in results)


def _svc(store: Store) -> ConnectionService:
    return ConnectionService(store, notifier=NullNotifier())


class TestConcurrentSend:
    def test_one_pending_request_per_pair(self, store: Store) -> None:
        calls: list[Callable[[], ServiceResult]] = []
        for i in range(WORKERS):
            a, b = ("alice", "bob") if i % 2 == 0 else ("bob", "alice")
            calls.append(lambda a=a, b=b: _svc(store).send(a, b))

        results = _race(calls)

        assert _codes(results) == Counter({"ok": 1, "DUPLICATE_REQUEST": WORKERS - 1})
        with store.reader() as txn:
            assert pending_count(txn.conn, "alice", "bob") == 1

    def test_distinct_pairs_do_not_interfere(self, store: Store) -> None:
        calls: list[Callable[[], ServiceResult]] = [
            lambda i=i: _svc(store).send("hub", f"user{i}") for i in range(WORKERS)
        ]
        results = _race(calls)
        assert all(r.ok for r in results)


class TestConcurrentResolve:
    def test_racing_accepts_write_one_edge_pair(self, store: Store) -> None:
        rid = send_request(_svc(store), "alice", "bob")["request_id"]

        results = _race([lambda: _svc(store).accept(rid, "bob") for _ in range(WORKERS)])

        assert _codes(results) == Counter({"ok": 1, "INVALID_STATE": WORKERS - 1})
        losers = [r for r in results if not r.ok]
        assert all(r.error is not None and r.error.detail["status"] == "accepted" for r in losers)
        with store.reader() as txn:
            edges = txn.conn.execute(select(func.count()).select_from(connections)).scalar_one()
        assert edges == 2

    def test_accept_reject_race_has_single_outcome(self, store: Store) -> None:
        rid = send_request(_svc(store), "alice", "bob")["request_id"]

        calls: list[Callable[[], ServiceResult]] = []
        for i in range(WORKERS):
            if i % 2 == 0:
                calls.append(lambda: _svc(store).accept(rid, "bob"))
            else:
                calls.append(lambda: _svc(store).reject(rid, "bob"))
        results = _race(calls)

        winners = [r for r in results if r.ok]
        assert len(winners) == 1
        final = winners[0].data["status"]
        assert all(
            r.error is not None and r.error.detail["status"] == final
            for r in results
            if not r.ok
        )

        with store.reader() as txn:
            status = txn.conn.execute(
                select(connection_requests.c.status).where(connection_requests.c.id == rid)
            ).scalar_one()
            connected = txn.edges.are_connected(txn.conn, "alice", "bob")
        assert status == final
        assert connected is (final == "accepted")
