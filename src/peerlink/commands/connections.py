"""Command group: established connections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from peerlink.commands._base import PeerGroup
from peerlink.services.connections import ConnectionService

if TYPE_CHECKING:
    from peerlink.commands._context import AppContext


@click.group(
    cls=PeerGroup,
    examples="""\
  peerlink connections list alice
  peerlink connections check alice bob
  peerlink connections remove alice bob""",
)
def connections() -> None:
    """List, check, and remove connections."""


@connections.command("list")
@click.argument("user_id")
@click.pass_obj
def list_connections(app: AppContext, user_id: str) -> None:
    """List USER_ID's connections with names and roles."""
    app.emit(ConnectionService(app.store).list_connections(user_id))


@connections.command()
@click.argument("user_id")
@click.argument("peer_id")
@click.pass_obj
def check(app: AppContext, user_id: str, peer_id: str) -> None:
    """Report whether two users are connected or have a pending request."""
    app.emit(ConnectionService(app.store).are_connected(user_id, peer_id))


@connections.command(
    examples="""\
  peerlink connections remove alice bob"""
)
@click.argument("user_id")
@click.argument("peer_id")
@click.pass_obj
def remove(app: AppContext, user_id: str, peer_id: str) -> None:
    """Remove the connection between USER_ID and PEER_ID (both directions)."""
    app.emit(ConnectionService(app.store).remove_connection(user_id, peer_id))
