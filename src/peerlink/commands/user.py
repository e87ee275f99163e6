"""Command group: the user directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from peerlink.commands._base import PeerGroup
from peerlink.services.users import UserService

if TYPE_CHECKING:
    from peerlink.commands._context import AppContext


@click.group(
    cls=PeerGroup,
    examples="""\
  peerlink user add alice --name "Alice Moreau" --role mentor --department CS
  peerlink user show alice
  peerlink user list""",
)
def user() -> None:
    """Register and look up users."""


@user.command()
@click.argument("user_id")
@click.option("--name", required=True, help="Display name.")
@click.option("--role", default="user", show_default=True, help="Role label.")
@click.option("--department", default=None, help="Department (optional).")
@click.pass_obj
def add(app: AppContext, user_id: str, name: str, role: str, department: str | None) -> None:
    """Register USER_ID in the directory."""
    app.emit(UserService(app.store).add_user(user_id, name, role=role, department=department))


@user.command()
@click.argument("user_id")
@click.pass_obj
def show(app: AppContext, user_id: str) -> None:
    """Show a registered user."""
    app.emit(UserService(app.store).get_user(user_id))


@user.command("list")
@click.pass_obj
def list_users(app: AppContext) -> None:
    """List registered users."""
    app.emit(UserService(app.store).list_users())
