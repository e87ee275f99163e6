"""Extension layer — plugin system via pluggy.

Discovery: entry_points in the ``peerlink.plugins`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from peerlink.plugins.event_bus import EventBus
from peerlink.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
