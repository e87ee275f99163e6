"""Shared pytest fixtures and test helpers for peerlink tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import Connection, func, select
from sqlalchemy.engine import Engine

from peerlink.config.settings import PeerlinkSettings
from peerlink.domain.lifecycle import RequestStatus
from peerlink.domain.pairs import pair_key
from peerlink.infrastructure.database.engine import init_database
from peerlink.infrastructure.database.schema import connection_requests
from peerlink.infrastructure.store import Store
from peerlink.services.connections import ConnectionService


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> PeerlinkSettings:
    return PeerlinkSettings.from_cli(root=tmp_path)


@pytest.fixture
def store(settings: PeerlinkSettings) -> Iterator[Store]:
    """Store on a temp directory, without the event bus."""
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def bus_store(settings: PeerlinkSettings) -> Iterator[Store]:
    """Store with a synchronous event bus and the built-in inbox plugin."""
    s = Store(settings)
    s.init_event_bus(sync=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def service(store: Store) -> ConnectionService:
    return ConnectionService(store)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.delenv("PEERLINK_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def send_request(service: ConnectionService, from_user: str, to_user: str) -> dict[str, Any]:
    """Send a request, asserting success."""
    result = service.send(from_user, to_user)
    assert result.ok, result.error
    return result.data


def pending_count(conn: Connection, a: str, b: str) -> int:
    """Pending requests stored for the unordered pair, in either direction."""
    return conn.execute(
        select(func.count())
        .select_from(connection_requests)
        .where(
            connection_requests.c.pair_key == pair_key(a, b),
            connection_requests.c.status == RequestStatus.PENDING.value,
        )
    ).scalar_one()


def connect(service: ConnectionService, a: str, b: str) -> str:
    """Send from *a* and accept as *b*; returns the request id."""
    request_id = send_request(service, a, b)["request_id"]
    result = service.accept(request_id, b)
    assert result.ok, result.error
    return request_id
