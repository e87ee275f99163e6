"""PeerlinkSettings — one frozen object for every tunable.

Sources, strongest first:
  1. keyword arguments (the CLI's global flags)
  2. ``PEERLINK_*`` environment variables, ``__`` between section and key
  3. ``peerlink.toml`` found by :func:`~peerlink.config.discovery.find_config`
  4. defaults on the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from peerlink.config.discovery import find_config
from peerlink.config.models import DirectoryConfig, NotifyConfig, StoreConfig

# The config file for the settings object currently being built.
_active_config: ContextVar[Path | None] = ContextVar("peerlink_active_config", default=None)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over the sections of a ``peerlink.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._sections = _read_toml(path) if path is not None and path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._sections.get(field_name), field_name, field_name in self._sections

    def __call__(self) -> dict[str, Any]:
        return dict(self._sections)


class PeerlinkSettings(BaseSettings):
    """Resolved configuration for one peerlink process.

    ``root`` is the directory that holds ``.peerlink/``: the config
    file's directory when one was found, else the working directory.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="PEERLINK_",
        env_nested_delimiter="__",
    )

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    store: StoreConfig = Field(default_factory=StoreConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # No .env or secrets directory support.
        return init_settings, env_settings, TomlSettingsSource(settings_cls, _active_config.get())

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> PeerlinkSettings:
        """Build settings for a CLI run.

        An explicit *config_path* wins over discovery; a path that does not
        exist means "no config file". *root* defaults to the config file's
        directory.
        """
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path is not None else Path.cwd()

        token = _active_config.set(toml_path)
        try:
            return cls(root=root, config_path=toml_path, **cli_flags)
        finally:
            _active_config.reset(token)
