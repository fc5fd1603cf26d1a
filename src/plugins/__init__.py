"""Pre/post-processing plugins for the import pipeline.

This package provides the plugin contract (Plugin, PluginChain), the
registry used to load plugins by name at startup, and the bundled
plugins (devops, docusaurus).
"""

from .base import (
    HookCapability,
    Plugin,
    PluginChain,
    PluginContext,
    PluginOptions,
)
from .errors import PluginError, PluginLoadError, UploadError, UserLookupError
from .registry import PluginRegistry, default_registry, parse_plugin_names

__all__ = [
    'HookCapability',
    'Plugin',
    'PluginChain',
    'PluginContext',
    'PluginOptions',
    'PluginError',
    'PluginLoadError',
    'UploadError',
    'UserLookupError',
    'PluginRegistry',
    'default_registry',
    'parse_plugin_names',
]
