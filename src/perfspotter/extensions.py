"""
Registry resolving extension names to factories.

Hierarchy nodes name the detection controller that handles them and the
measurement environment names the adapter of every satellite. Both are looked
up here. Built-in satellites are registered statically; third-party packages
contribute extensions through the `perfspotter.<kind>` entry point groups.
"""

import logging
from importlib.metadata import entry_points
from typing import Callable, Dict, List

from .validation import ExtensionResolutionError

logger = logging.getLogger(__name__)

EXTENSION_KINDS = ("controller", "instrumentation", "measurement", "workload")
ENTRY_POINT_PREFIX = "perfspotter."


class ExtensionRegistry:
    """Maps (kind, extension name) to the factory building the extension."""

    def __init__(self):
        self._factories: Dict[str, Dict[str, Callable]] = {kind: {} for kind in EXTENSION_KINDS}

    def register(self, kind: str, name: str, factory: Callable) -> None:
        if kind not in self._factories:
            raise ValueError(f"Unknown extension kind '{kind}', expected one of {EXTENSION_KINDS}")
        if name in self._factories[kind]:
            logger.warning(f"Replacing {kind} extension '{name}'")
        self._factories[kind][name] = factory
        logger.debug(f"Registered {kind} extension '{name}'")

    def resolve(self, kind: str, name: str) -> Callable:
        """
        Return the factory registered for `name`.

        Raises:
            ExtensionResolutionError: If nothing is registered under `name`
        """
        try:
            return self._factories[kind][name]
        except KeyError:
            raise ExtensionResolutionError(kind, name) from None

    def names(self, kind: str) -> List[str]:
        return sorted(self._factories.get(kind, {}))

    def load_entry_points(self) -> int:
        """Register every extension advertised by installed distributions."""
        loaded = 0
        for kind in EXTENSION_KINDS:
            for entry_point in entry_points(group=f"{ENTRY_POINT_PREFIX}{kind}"):
                try:
                    factory = entry_point.load()
                except Exception as e:
                    logger.error(f"Failed to load {kind} extension '{entry_point.name}': {e}")
                    continue
                self.register(kind, entry_point.name, factory)
                loaded += 1
        if loaded:
            logger.info(f"Loaded {loaded} extension(s) from entry points")
        return loaded


def create_default_registry(load_entry_points: bool = True) -> ExtensionRegistry:
    """Build a registry holding the built-in satellites and installed extensions."""
    from .satellites.builtin import register_builtin_satellites

    registry = ExtensionRegistry()
    register_builtin_satellites(registry)
    if load_entry_points:
        registry.load_entry_points()
    return registry
