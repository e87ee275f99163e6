"""Notifier adapter — fire-and-forget delivery of connection events.

The connection service depends only on the :class:`Notifier` protocol,
so any messaging backend can be substituted without touching the request
state machine. The default :class:`EventBusNotifier` hands events to the
store's WAL-backed event bus, which runs plugins on a worker pool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from peerlink.domain.models import NotificationEvent
    from peerlink.infrastructure.store import Store

NOTIFY_HOOK = "notify_user"


class Notifier(Protocol):
    """Receives events addressed to a user. May raise; callers swallow."""

    def notify(self, user_id: str, event: NotificationEvent) -> None: ...


class NullNotifier:
    """Discards every event."""

    def notify(self, user_id: str, event: NotificationEvent) -> None:
        return None


class EventBusNotifier:
    """Dispatches the ``notify_user`` hook through the store's event bus.

    Does nothing while the bus is not initialized (library use without
    plugins, or ``[notify] enabled = false``).
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def notify(self, user_id: str, event: NotificationEvent) -> None:
        bus = self._store.event_bus
        if bus is None:
            return
        bus.dispatch(
            NOTIFY_HOOK,
            {
                "user_id": user_id,
                "kind": event.kind.value,
                "related_user_id": event.related_user_id,
                "related_user_name": event.related_user_name,
                "request_id": event.request_id,
            },
        )
