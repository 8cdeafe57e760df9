"""Extension layer: plugin system via pluggy.

Discovery: entry_points (pip-installed) in the ``envfold.plugins`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from envfold.plugins.manager import PluginManager

__all__ = ["PluginManager"]
