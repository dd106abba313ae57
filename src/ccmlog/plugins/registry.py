"""Plugin registry — discover, validate, and expose plugins.

Discovery order:
  1. Built-in outputs and the built-in reformatter table.
  2. Entry-points under the "ccmlog.plugins" group (third-party packages).
  3. Plugins explicitly registered at runtime via the register_* methods.
"""
from __future__ import annotations

import importlib.metadata
import logging
from typing import Any

from ..parsers.reformat import ReformatRegistry, default_reformatters
from .base import OutputPlugin, ReformatterPlugin
from .outputs import CsvOutput, JsonLinesOutput

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "ccmlog.plugins"


class PluginRegistry:
    """Central registry for ccmlog output and reformatter plugins.

    Reformatter plugins are written straight into a :class:`ReformatRegistry`
    (the module default unless one is given), which is the table the CMTrace
    parser consults.

    Usage::

        registry = PluginRegistry()
        registry.discover()  # loads entry-point plugins

        output = registry.get_output("csv")
        if output is None:
            raise ValueError("csv output not installed")
    """

    def __init__(self, reformatters: ReformatRegistry | None = None) -> None:
        self._reformatters = reformatters if reformatters is not None else default_reformatters
        self._outputs: dict[str, OutputPlugin] = {}

    @classmethod
    def with_builtins(cls, reformatters: ReformatRegistry | None = None) -> "PluginRegistry":
        registry = cls(reformatters)
        registry.register_output(JsonLinesOutput())
        registry.register_output(CsvOutput())
        return registry

    @property
    def reformatters(self) -> ReformatRegistry:
        return self._reformatters

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_output(self, plugin: OutputPlugin) -> None:
        if not isinstance(plugin, OutputPlugin):
            raise TypeError(f"{plugin!r} does not implement OutputPlugin")
        self._outputs[plugin.name] = plugin
        logger.debug("Registered output plugin: %s", plugin.name)

    def register_reformatter(self, plugin: ReformatterPlugin) -> None:
        if not isinstance(plugin, ReformatterPlugin):
            raise TypeError(f"{plugin!r} does not implement ReformatterPlugin")
        self._reformatters.register(plugin.source, plugin.transform)

    # ------------------------------------------------------------------
    # Discovery via entry-points
    # ------------------------------------------------------------------

    def discover(self) -> int:
        """Load all plugins from the 'ccmlog.plugins' entry-point group.

        Returns the number of plugins successfully loaded.
        """
        loaded = 0
        try:
            eps = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
        except Exception as exc:
            logger.warning("Entry-point discovery failed: %s", exc)
            return 0

        for ep in eps:
            try:
                obj = ep.load()
                instance = obj() if isinstance(obj, type) else obj
                self._auto_register(instance, ep.name)
                loaded += 1
            except Exception as exc:
                logger.warning("Failed to load plugin %r: %s", ep.name, exc)

        return loaded

    def _auto_register(self, instance: Any, ep_name: str) -> None:
        """Register a plugin instance under the correct category."""
        if isinstance(instance, OutputPlugin):
            self.register_output(instance)
        elif isinstance(instance, ReformatterPlugin):
            self.register_reformatter(instance)
        else:
            raise TypeError(f"Plugin {ep_name!r} does not implement any known Protocol")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_output(self, name: str) -> OutputPlugin | None:
        return self._outputs.get(name)

    def list_outputs(self) -> list[str]:
        return sorted(self._outputs)

    def list_reformatters(self) -> list[str]:
        return self._reformatters.list_sources()


# Module-level singleton, shared across the application
default_registry = PluginRegistry.with_builtins()
