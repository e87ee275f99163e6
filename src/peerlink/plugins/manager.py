"""Plugin registry for notification sinks and lifecycle listeners.

Third-party packages advertise plugins under the ``peerlink.plugins``
entry-point group. The Store registers the built-in inbox on top of
whatever was discovered.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from peerlink.plugins.hookspecs import PeerlinkHookSpec

PROJECT_NAME = "peerlink"
ENTRY_POINT_GROUP = "peerlink.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with peerlink's hookspecs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PeerlinkHookSpec)
        self._discovered = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        """True once entry points have been scanned."""
        return self._discovered

    def discover_and_load(self) -> list[str]:
        """Import entry-point plugins and return every registered plugin name.

        A broken third-party plugin is logged; the inbox and the rest of
        the service still start.
        """
        try:
            found = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception:
            logger.warning("Skipping entry-point plugins: discovery failed", exc_info=True)
        else:
            logger.debug("Loaded %d entry-point plugin(s)", found)
        for name, cls in self._registered_classes():
            self._instantiate(name, cls)
        self._discovered = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Plugin %s registered", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugin(self, name: str) -> object | None:
        return self._pm.get_plugin(name)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def _registered_classes(self) -> list[tuple[str, type]]:
        # Entry points may point at a class; pluggy registers it unbound.
        return [
            (self._pm.get_name(p) or p.__name__, p)
            for p in self._pm.get_plugins()
            if inspect.isclass(p)
        ]

    def _instantiate(self, name: str, cls: type) -> None:
        self._pm.unregister(cls)
        try:
            instance = cls()
        except Exception:
            logger.warning("Dropping plugin %s: constructor raised", name, exc_info=True)
            return
        self._pm.register(instance, name=name)
