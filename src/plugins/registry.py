"""Registry of known plugins and the startup loader.

Plugins are looked up by name in an explicit mapping of factories; there
is no dynamic import by string. Unknown names and failing factories are
reported as warnings and left out of the chain.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from . import devops, docusaurus
from .base import Plugin, PluginChain, PluginOptions
from .errors import PluginLoadError

logger = logging.getLogger(__name__)

PluginFactory = Callable[[PluginOptions], Plugin]

NO_PLUGINS = 'none'


class PluginRegistry:
    """Maps plugin identifiers to factories."""

    def __init__(self, factories: Optional[Dict[str, PluginFactory]] = None):
        self._factories: Dict[str, PluginFactory] = dict(factories or {})

    def register(self, name: str, factory: PluginFactory) -> None:
        self._factories[name] = factory

    @property
    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, name: str, options: PluginOptions) -> Plugin:
        """Build the named plugin.

        Raises:
            PluginLoadError: If the name is unknown or the factory fails
        """
        factory = self._factories.get(name)
        if factory is None:
            raise PluginLoadError(name, f"unknown plugin (available: {', '.join(self.names)})")
        try:
            return factory(options)
        except Exception as e:
            raise PluginLoadError(name, str(e)) from e

    def load(self, names: Iterable[str], options: PluginOptions) -> PluginChain:
        """Build a PluginChain from names, in the given order.

        "none" (or an empty list) yields an empty chain.

        Returns:
            The chain; plugins that failed to load are omitted
        """
        chain = PluginChain()
        for name in parse_plugin_names(names):
            try:
                chain.register(self.create(name, options))
                logger.info(f"Loaded plugin '{name}'")
            except PluginLoadError as e:
                logger.warning(str(e))
        return chain


def parse_plugin_names(names) -> List[str]:
    """Normalize "a,b" or ["a", "b,c"] into ["a", "b", "c"], dropping "none"."""
    if names is None:
        return []
    if isinstance(names, str):
        names = [names]
    result = []
    for entry in names:
        for name in str(entry).split(','):
            name = name.strip()
            if name and name != NO_PLUGINS:
                result.append(name)
    return result


def default_registry() -> PluginRegistry:
    return PluginRegistry({
        'devops': devops.create_plugin,
        'devops-users': devops.create_plugin,
        'docusaurus': docusaurus.create_plugin,
    })
