"""Locate ``peerlink.toml``.

``PEERLINK_CONFIG`` names the file outright. Without it, the search
starts in the given directory and climbs toward the filesystem root.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "peerlink.toml"
CONFIG_ENV_VAR = "PEERLINK_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``peerlink.toml`` at or above *start*, or None.

    When ``PEERLINK_CONFIG`` is set it is the only candidate, even if the
    file it names does not exist.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
