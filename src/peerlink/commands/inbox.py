"""Command group: notifications stored by the built-in inbox plugin."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from peerlink.commands._base import PeerGroup
from peerlink.services.inbox import InboxService

if TYPE_CHECKING:
    from peerlink.commands._context import AppContext


@click.group(
    cls=PeerGroup,
    examples="""\
  peerlink inbox list bob
  peerlink inbox list bob --unread
  peerlink inbox read bob 3""",
)
def inbox() -> None:
    """Read connection notifications."""


@inbox.command("list")
@click.argument("user_id")
@click.option("--unread", is_flag=True, help="Only unread notifications.")
@click.pass_obj
def list_notifications(app: AppContext, user_id: str, unread: bool) -> None:
    """List USER_ID's notifications, newest first."""
    app.emit(InboxService(app.store).list_notifications(user_id, unread_only=unread))


@inbox.command()
@click.argument("user_id")
@click.argument("notification_id", type=int)
@click.pass_obj
def read(app: AppContext, user_id: str, notification_id: int) -> None:
    """Mark one of USER_ID's notifications as read."""
    app.emit(InboxService(app.store).mark_read(user_id, notification_id))
