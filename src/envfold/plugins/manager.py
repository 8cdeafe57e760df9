"""Plugin discovery, matcher selection, and hook dispatch."""

from __future__ import annotations

import inspect
import logging

import pluggy

from envfold.domain.matching import PatternMatcher, RegexMatcher
from envfold.plugins.hookspecs import PROJECT_NAME, EnvfoldHookSpec

ENTRY_POINT_GROUP = "envfold.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(EnvfoldHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load plugins from the ``envfold.plugins`` entry-point group.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def pattern_matcher(self, *, cache_size: int | None = None) -> PatternMatcher:
        """Return the plugin-provided matcher, or the default regex matcher.

        A plugin that raises or returns something that is not a
        PatternMatcher is logged and skipped.
        """
        try:
            matcher = self._pm.hook.envfold_pattern_matcher()
        except Exception:
            logger.warning("Pattern matcher plugin failed; using regex matcher", exc_info=True)
            matcher = None
        if matcher is not None and not isinstance(matcher, PatternMatcher):
            logger.warning("Ignoring non-conforming pattern matcher %r", matcher)
            matcher = None
        if matcher is None:
            return RegexMatcher() if cache_size is None else RegexMatcher(cache_size)
        return matcher

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
