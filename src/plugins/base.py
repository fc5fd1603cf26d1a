"""Plugin contract and the ordered hook chain.

A plugin declares which hooks it provides by passing them to Plugin; the
resulting capability (NONE, PRE_PARSE, POST_PARSE or BOTH) is what the
chain dispatches on.

Hooks:
    pre_parse(text, context) -> text
        Runs on the raw file text before Markdown conversion.
    post_parse(blocks, api, options, context) -> blocks
        Runs on the converted blocks before table extraction.

Hooks run strictly in registration order, each receiving the previous
hook's output. The chain does not handle hook failures: it records which
plugin failed and re-raises.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.importer.errors import PluginHookError
from src.importer.events import ImportObserver

Blocks = List[Dict[str, Any]]


class HookCapability(Enum):
    NONE = "none"
    PRE_PARSE = "pre_parse"
    POST_PARSE = "post_parse"
    BOTH = "both"


@dataclass
class PluginOptions:
    """Run-wide settings plugins may read.

    Attributes:
        base_path: Directory the imported files are relative to
        images_path: Directory local image references are resolved against
        azure_blob_url: Public URL prefix of the blob container
        azure_blob_account: Storage account name used for uploads
        extra: Any additional keys from the config file
    """
    base_path: str = "."
    images_path: Optional[str] = None
    azure_blob_url: Optional[str] = None
    azure_blob_account: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PluginContext:
    """Per-file information passed to every hook.

    Attributes:
        file_path: File being imported, relative to the base path
        base_path: Import base path
        observer: Event sink for status messages during slow hook I/O
    """
    file_path: str
    base_path: str = "."
    observer: ImportObserver = field(default_factory=ImportObserver)


PreParseHook = Callable[[str, PluginContext], str]
PostParseHook = Callable[[Blocks, Any, PluginOptions, PluginContext], Blocks]


@dataclass
class Plugin:
    """A named bundle of optional hooks."""
    name: str
    pre_parse: Optional[PreParseHook] = None
    post_parse: Optional[PostParseHook] = None

    @property
    def capability(self) -> HookCapability:
        if self.pre_parse and self.post_parse:
            return HookCapability.BOTH
        if self.pre_parse:
            return HookCapability.PRE_PARSE
        if self.post_parse:
            return HookCapability.POST_PARSE
        return HookCapability.NONE


PRE_PARSE_CAPABLE = (HookCapability.PRE_PARSE, HookCapability.BOTH)
POST_PARSE_CAPABLE = (HookCapability.POST_PARSE, HookCapability.BOTH)


class PluginChain:
    """Ordered list of plugins built once per run.

    Example:
        >>> chain = PluginChain([Plugin("upper", pre_parse=lambda t, c: t.upper())])
        >>> chain.run_pre_parse("abc", PluginContext("a.md"))
        'ABC'
    """

    def __init__(self, plugins: Optional[Iterable[Plugin]] = None):
        self.plugins: List[Plugin] = list(plugins or [])

    def __len__(self) -> int:
        return len(self.plugins)

    def __iter__(self):
        return iter(self.plugins)

    @property
    def names(self) -> List[str]:
        return [plugin.name for plugin in self.plugins]

    def register(self, plugin: Plugin) -> None:
        self.plugins.append(plugin)

    def run_pre_parse(self, text: str, context: PluginContext) -> str:
        for plugin in self.plugins:
            if plugin.capability not in PRE_PARSE_CAPABLE:
                continue
            try:
                text = plugin.pre_parse(text, context)
            except Exception as e:
                raise PluginHookError(plugin.name, "pre_parse", str(e)) from e
        return text

    def run_post_parse(
        self,
        blocks: Blocks,
        api: Any,
        options: PluginOptions,
        context: PluginContext,
    ) -> Blocks:
        for plugin in self.plugins:
            if plugin.capability not in POST_PARSE_CAPABLE:
                continue
            try:
                blocks = plugin.post_parse(blocks, api, options, context)
            except Exception as e:
                raise PluginHookError(plugin.name, "post_parse", str(e)) from e
        return blocks
