"""Store — the single dependency injected into every service.

Owns the database engine, the repositories, and the (optional) plugin
event bus. :meth:`Store.transaction` yields a :class:`StoreTransaction`
whose connection spans the request, pair-index, and connection tables,
so a request's terminal transition and its edge writes commit or roll
back as one unit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from peerlink.infrastructure.database.engine import READ_ONLY_OPTION, init_database
from peerlink.infrastructure.repositories.directory import UserDirectory
from peerlink.infrastructure.repositories.edges import EdgeWriter
from peerlink.infrastructure.repositories.ledger import RequestLedger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from peerlink.config.settings import PeerlinkSettings

logger = logging.getLogger(__name__)


@dataclass
class StoreTransaction:
    """Active transaction: one DB connection plus the repositories bound to it."""

    conn: Connection
    ledger: RequestLedger
    edges: EdgeWriter


class Store:
    """Repository façade over the peerlink database.

    Constructed once per process from :class:`PeerlinkSettings`. Holds
    no per-request state; concurrent callers share only the engine's
    connection pool.
    """

    def __init__(self, settings: PeerlinkSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            self.root,
            filename=settings.store.filename,
            busy_timeout=settings.store.busy_timeout,
        )
        self._ledger = RequestLedger()
        self._edges = EdgeWriter()
        self._directory = UserDirectory(
            self._engine,
            placeholder_name=settings.directory.placeholder_name,
            placeholder_role=settings.directory.placeholder_role,
        )
        self._event_bus: Any | None = None
        self._plugin_manager: Any | None = None

    @property
    def root(self) -> Path:
        """Directory holding ``.peerlink/``."""
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> PeerlinkSettings:
        return self._settings

    @property
    def directory(self) -> UserDirectory:
        """Identity lookup backed by the ``users`` table."""
        return self._directory

    @property
    def event_bus(self) -> Any | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    @property
    def plugin_manager(self) -> Any | None:
        return self._plugin_manager

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point plugins, registers
        the built-in inbox plugin, and wires up the EventBus. No-op when
        ``[notify] enabled = false``.
        """
        notify = self._settings.notify
        if not notify.enabled:
            logger.debug("Notifications disabled; event bus not started")
            return

        from peerlink.plugins.builtins.inbox import InboxPlugin
        from peerlink.plugins.event_bus import EventBus
        from peerlink.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load()
        pm.register_plugin(InboxPlugin(self._engine), name="inbox-builtin")

        self._plugin_manager = pm
        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=sync,
            max_retries=notify.max_retries,
            max_workers=notify.max_workers,
            timeout=notify.timeout_seconds,
        )

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """One atomic unit across all peerlink tables.

        Commits when the block exits normally, rolls back on any exception.

        Usage::

            with store.transaction() as txn:
                if txn.ledger.transition(txn.conn, request_id, ...):
                    txn.edges.write_pair(txn.conn, a, b, ...)
        """
        with self._engine.begin() as conn:
            yield StoreTransaction(conn=conn, ledger=self._ledger, edges=self._edges)

    @contextmanager
    def reader(self) -> Iterator[StoreTransaction]:
        """Read-only access with the same repository bindings."""
        with self._engine.connect() as conn:
            conn.execution_options(**{READ_ONLY_OPTION: True})
            yield StoreTransaction(conn=conn, ledger=self._ledger, edges=self._edges)

    def close(self) -> None:
        """Retry undelivered notifications, stop the event bus, dispose the engine.

        Draining first means a notification whose plugin failed is either
        delivered or dead-lettered before the process exits.
        """
        bus, self._event_bus = self._event_bus, None
        try:
            if bus is not None:
                try:
                    bus.drain()
                finally:
                    bus.shutdown()
        finally:
            self._engine.dispose()
