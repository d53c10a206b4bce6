"""Strategy discovery via pluggy.

Discovery: the built-in strategies plus entry points published under the
``acltree.strategies`` group by pip-installed packages.
INVARIANT: a broken third-party plugin is a warning, never an error. A
missing strategy only becomes fatal when it is the configured one.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from acltree.strategies.base import Strategy
from acltree.strategies.hookspecs import PROJECT_NAME, AcltreeHookSpec

ENTRY_POINT_GROUP = "acltree.strategies"

logger = logging.getLogger(__name__)


class StrategyManager:
    """Collects strategy classes from every registered plugin."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(AcltreeHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, entry_points: bool = True) -> list[str]:
        """Register the built-ins, then entry-point plugins.

        Returns the names of all registered plugins.
        """
        from acltree.strategies.builtins import BuiltinStrategies

        if self._pm.get_plugin("builtin") is None:
            self._pm.register(BuiltinStrategies(), name="builtin")
        if entry_points:
            try:
                self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
            except Exception:
                logger.warning("Failed to load strategy entry points", exc_info=True)
            self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered strategy plugin: %s", resolved_name)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def strategies(self) -> dict[str, type[Strategy]]:
        """Return ``name -> Strategy subclass`` across all plugins.

        Pluggy calls the most recently registered plugin first, so a
        third-party strategy may shadow a built-in of the same name.
        """
        if not self._loaded:
            self.discover_and_load()

        found: dict[str, type[Strategy]] = {}
        for batch in self._pm.hook.acltree_strategies():
            for candidate in batch or []:
                if not (inspect.isclass(candidate) and issubclass(candidate, Strategy)):
                    logger.warning("Ignoring non-strategy registration %r", candidate)
                    continue
                if candidate.name in found:
                    logger.debug("Strategy %s shadowed by %s", candidate, found[candidate.name])
                    continue
                found[candidate.name] = candidate
        return found

    def get(self, name: str) -> type[Strategy] | None:
        return self.strategies().get(name)

    def _normalize_plugin_instances(self) -> None:
        """Replace plugin classes registered by entry points with instances.

        Hook dispatch against class objects leaves ``self`` unbound.
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
