"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. The store is opened lazily so ``--help`` and
``--version`` never touch the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from peerlink.config.logging import configure_logging
from peerlink.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from peerlink.config.settings import PeerlinkSettings
    from peerlink.infrastructure.store import Store
    from peerlink.services.result import ServiceResult


class AppContext:
    """Settings, the lazily-opened :class:`Store`, and result emission."""

    def __init__(self, settings: PeerlinkSettings) -> None:
        self.settings = settings
        self._store: Store | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> Store:
        """The store (opened on first access, with the event bus started)."""
        if self._store is None:
            from peerlink.infrastructure.store import Store

            self._store = Store(self.settings)
            self._store.init_event_bus(sync=self.settings.sync)
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, normal return. Warnings go to stderr in human
          mode so piped output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            self.close()
            raise SystemExit(1)

    def close(self) -> None:
        """Flush in-flight notifications and release the database."""
        if self._store is not None:
            self._store.close()
            self._store = None
