"""Subcommand modules for peerlink.

:func:`register_commands` imports each group lazily so ``peerlink --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach the ``request``, ``connections``, ``user`` and ``inbox`` groups."""
    from peerlink.commands.connections import connections
    from peerlink.commands.inbox import inbox
    from peerlink.commands.request import request
    from peerlink.commands.user import user

    cli.add_command(request)
    cli.add_command(connections)
    cli.add_command(user)
    cli.add_command(inbox)
