"""Notification delivery through pluggy, journaled in ``event_wal``.

Every hook call is first recorded as a ``pending`` row. Delivery then
runs inline (``sync=True``) or on a small thread pool, and the row moves
to ``completed``, ``failed`` or, after ``max_retries`` failed attempts,
``dead_letter``. ``drain()`` re-delivers whatever is still pending or
failed until it completes or is dead-lettered; ``Store.close`` drains
before shutting down, so an event lost to a flaky plugin is retried by
the bus and never by the connection service.

INVARIANT: A plugin exception is logged and journaled. It never reaches
the caller of ``dispatch``.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from peerlink.infrastructure.database.engine import READ_ONLY_OPTION
from peerlink.infrastructure.database.schema import event_wal
from peerlink.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from peerlink.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class DeliveryState(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


_RETRYABLE = (DeliveryState.PENDING, DeliveryState.FAILED)


class EventBus:
    """Dispatch hooks to registered plugins with an on-disk delivery journal.

    Parameters:
        engine: Engine whose database holds ``event_wal``.
        plugin_manager: Manager whose hook relay receives the calls.
        sync: Deliver on the calling thread (tests, ``--sync``).
        max_retries: Failed attempts before an event is dead-lettered.
        max_workers: Size of the delivery thread pool.
        timeout: Seconds ``shutdown``/``drain`` wait on each in-flight delivery.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
        timeout: float = 10.0,
    ) -> None:
        self._engine = engine
        self._plugins = plugin_manager
        self._max_retries = max_retries
        self._timeout = timeout
        self._pool: ThreadPoolExecutor | None = None
        if not sync:
            self._pool = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="peerlink-notify"
            )
        self._in_flight: list[Future[DeliveryState]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._plugins

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Journal one hook call and deliver it. Returns the ``event_wal`` id."""
        event_id = self._journal(hook_name, payload)
        self._in_flight = [f for f in self._in_flight if not f.done()]
        if self._pool is None:
            self._deliver(event_id, hook_name, payload)
        else:
            self._in_flight.append(self._pool.submit(self._deliver, event_id, hook_name, payload))
        return event_id

    def drain(self) -> list[dict[str, Any]]:
        """Wait for in-flight deliveries, then retry pending and failed events inline.

        Each event is retried until it completes or reaches ``max_retries``
        and is dead-lettered. Returns ``{id, hook_name, status}`` with the
        final status of every event retried.
        """
        self._settle()
        with self._engine.connect().execution_options(**{READ_ONLY_OPTION: True}) as conn:
            backlog = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_([s.value for s in _RETRYABLE]))
                .order_by(event_wal.c.id)
            ).all()

        summary: list[dict[str, Any]] = []
        for event in backlog:
            payload = json.loads(event.payload)
            state = self._deliver(event.id, event.hook_name, payload)
            while state == DeliveryState.FAILED:
                state = self._deliver(event.id, event.hook_name, payload)
            summary.append({"id": event.id, "hook_name": event.hook_name, "status": state.value})
        if summary:
            logger.info("Drained %d queued notification event(s)", len(summary))
        return summary

    def shutdown(self) -> None:
        """Let in-flight deliveries finish (bounded by ``timeout``) and stop the pool."""
        self._settle()
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def _journal(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            row_id = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload),
                    status=DeliveryState.PENDING.value,
                    retries=0,
                    created=now_iso(),
                )
            ).inserted_primary_key
        return int(row_id[0])

    def _deliver(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> DeliveryState:
        hook = getattr(self._plugins.hook, hook_name, None)
        if hook is None:
            # No hookspec by that name: nothing can ever consume it.
            return self._record(event_id, error=None)
        try:
            hook(**payload)
        except Exception as exc:
            logger.warning("Plugin hook %s raised for event %d: %s", hook_name, event_id, exc)
            return self._record(event_id, error=str(exc))
        return self._record(event_id, error=None)

    def _record(self, event_id: int, *, error: str | None) -> DeliveryState:
        with self._engine.begin() as conn:
            if error is None:
                conn.execute(
                    update(event_wal)
                    .where(event_wal.c.id == event_id)
                    .values(status=DeliveryState.COMPLETED.value, error=None, completed=now_iso())
                )
                return DeliveryState.COMPLETED

            attempts = 1 + conn.execute(
                select(event_wal.c.retries).where(event_wal.c.id == event_id)
            ).scalar_one()
            exhausted = attempts >= self._max_retries
            state = DeliveryState.DEAD_LETTER if exhausted else DeliveryState.FAILED
            conn.execute(
                update(event_wal)
                .where(event_wal.c.id == event_id)
                .values(
                    status=state.value,
                    error=error,
                    retries=attempts,
                    completed=now_iso() if exhausted else None,
                )
            )
        if exhausted:
            logger.error("Event %d dead-lettered after %d attempts", event_id, attempts)
        return state

    def _settle(self) -> None:
        pending, self._in_flight = self._in_flight, []
        for future in pending:
            try:
                future.result(timeout=self._timeout)
            except TimeoutError:
                logger.warning(
                    "Notification still in flight after %.1fs; it stays queued", self._timeout
                )
            except Exception:
                logger.warning("Notification delivery could not be journaled", exc_info=True)
