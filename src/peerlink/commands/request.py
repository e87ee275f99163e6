"""Command group: send, resolve, and inspect connection requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from peerlink.commands._base import PeerGroup
from peerlink.services.connections import ConnectionService

if TYPE_CHECKING:
    from peerlink.commands._context import AppContext

_REQUEST_EXAMPLES = """\
  peerlink request send alice bob
  peerlink request accept req_1a2b3c4d5e6f7a8b --as bob
  peerlink request reject req_1a2b3c4d5e6f7a8b --as bob
  peerlink request list bob
  peerlink request history alice --status rejected
  peerlink --json request show req_1a2b3c4d5e6f7a8b"""


@click.group(cls=PeerGroup, examples=_REQUEST_EXAMPLES)
def request() -> None:
    """Send, accept, reject, and list connection requests."""


@request.command(
    examples="""\
  peerlink request send alice bob
  peerlink --json request send alice bob"""
)
@click.argument("from_user")
@click.argument("to_user")
@click.pass_obj
def send(app: AppContext, from_user: str, to_user: str) -> None:
    """Send a connection request from FROM_USER to TO_USER."""
    app.emit(ConnectionService(app.store).send(from_user, to_user))


@request.command(
    examples="""\
  peerlink request accept req_1a2b3c4d5e6f7a8b --as bob"""
)
@click.argument("request_id")
@click.option("--as", "caller", required=True, help="Acting user (must be the recipient).")
@click.pass_obj
def accept(app: AppContext, request_id: str, caller: str) -> None:
    """Accept a pending request addressed to you."""
    app.emit(ConnectionService(app.store).accept(request_id, caller))


@request.command(
    examples="""\
  peerlink request reject req_1a2b3c4d5e6f7a8b --as bob"""
)
@click.argument("request_id")
@click.option("--as", "caller", required=True, help="Acting user (must be the recipient).")
@click.pass_obj
def reject(app: AppContext, request_id: str, caller: str) -> None:
    """Reject a pending request addressed to you."""
    app.emit(ConnectionService(app.store).reject(request_id, caller))


@request.command(
    examples="""\
  peerlink request show req_1a2b3c4d5e6f7a8b"""
)
@click.argument("request_id")
@click.pass_obj
def show(app: AppContext, request_id: str) -> None:
    """Show one request with both parties resolved."""
    app.emit(ConnectionService(app.store).get_request(request_id))


@request.command(
    "list",
    examples="""\
  peerlink request list bob
  peerlink -q request list bob""",
)
@click.argument("user_id")
@click.pass_obj
def list_requests(app: AppContext, user_id: str) -> None:
    """List USER_ID's pending requests, incoming and outgoing."""
    app.emit(ConnectionService(app.store).list_pending_requests(user_id))


@request.command(
    examples="""\
  peerlink request history alice
  peerlink request history alice --status accepted"""
)
@click.argument("user_id")
@click.option(
    "--status",
    type=click.Choice(["pending", "accepted", "rejected"]),
    default=None,
    help="Only requests in this state.",
)
@click.pass_obj
def history(app: AppContext, user_id: str, status: str | None) -> None:
    """Every request USER_ID is party to, newest first."""
    app.emit(ConnectionService(app.store).request_history(user_id, status=status))
