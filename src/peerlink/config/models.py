"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, peerlink.toml only contains
overrides. A fresh deployment needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    filename: str = "peerlink.db"
    busy_timeout: float = 5.0


class NotifyConfig(BaseModel):
    """[notify] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    max_retries: int = 3
    max_workers: int = 2
    timeout_seconds: float = 10.0


class DirectoryConfig(BaseModel):
    """[directory] section."""

    model_config = {"frozen": True}

    placeholder_name: str = "Unknown User"
    placeholder_role: str = "user"

