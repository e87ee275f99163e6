"""Rich Console factory and theme for peerlink output.

Consoles render to a StringIO buffer so ``format_result() -> str`` stays
a pure function. In non-TTY environments (tests, pipes) Rich disables
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PEERLINK_THEME = Theme(
    {
        "peer.ok": "bold green",
        "peer.error": "bold red",
        "peer.warning": "bold yellow",
        "peer.op": "bold cyan",
        "peer.key": "dim",
        "peer.id": "bold blue",
        "peer.name": "bold",
        "peer.status.pending": "yellow",
        "peer.status.accepted": "green",
        "peer.status.rejected": "red",
        "peer.unread": "bold magenta",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "pending": "peer.status.pending",
    "accepted": "peer.status.accepted",
    "rejected": "peer.status.rejected",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=PEERLINK_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a request status."""
    return _STATUS_STYLES.get(status, "")
