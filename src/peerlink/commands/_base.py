"""Click base classes that add an eager ``--examples`` flag.

``--help`` stays short; ``peerlink request send --examples`` prints the
usage examples attached to the command and exits.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    """Shared ``examples=`` handling for commands and groups."""

    examples: str | None
    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return

        def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if not value or ctx.resilient_parsing:
                return
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(examples)
            ctx.exit(0)

        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=show_examples,
                help="Show usage examples.",
            )
        )


class PeerCommand(_ExamplesMixin, click.Command):
    """Command accepting ``examples=``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class PeerGroup(_ExamplesMixin, click.Group):
    """Group accepting ``examples=``; subcommands default to :class:`PeerCommand`."""

    command_class = PeerCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
