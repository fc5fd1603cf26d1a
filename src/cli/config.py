"""Import configuration: CLI flags merged with an optional config file.

The config file is a YAML mapping (JSON files parse as YAML too). Keys may
be written in camelCase, as the command-line flags are documented, or in
snake_case. Values from the file take precedence over command-line flags.

Config file structure:
    token: secret_abc
    basePage: Engineering
    basePath: ./wiki
    glob: "**/*.md"
    plugins: [devops, docusaurus]
    skipEmpty: true
    azureBlobUrl: https://account.z13.web.core.windows.net/
    azureBlobAccount: account
    images: ./wiki/.attachments
    rowOrder: reverse
    folderCache: path
    headerFallback: indexed
    timeoutMs: 30000
    errorReportPath: ./import-errors.json
    pluginOptions:
      devops_cache: ./devops-cache.json
"""

import dataclasses
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

import yaml

from src.importer.error_report import DEFAULT_REPORT_PATH
from src.importer.models import FolderCacheMode, HeaderFallback, RowOrder
from src.notion_service.api_wrapper import DEFAULT_TIMEOUT_MS
from src.plugins.base import PluginOptions
from src.plugins.registry import parse_plugin_names

from .errors import ConfigError, ConfigNotFoundError


@dataclass
class ImportConfig:
    """Settings for one import run.

    Attributes:
        token: Notion integration token (falls back to NOTION_TOKEN)
        base_page: Search text for the page to import under
        base_path: Directory the glob and local images are relative to
        glob: Pattern selecting the files to import
        plugins: Plugin names, in chain order
        skip_empty: Also skip whitespace-only files
        azure_blob_url: Public URL prefix for uploaded images
        azure_blob_account: Storage account for uploaded images
        images: Directory local images resolve against (default base_path)
        row_order: Database row creation order
        folder_cache: Folder page cache keying
        header_fallback: Name used for empty table header cells
        timeout_ms: Per-request timeout for the Notion client
        error_report_path: Where the error report is written
        plugin_options: Extra settings passed through to plugins
    """
    token: Optional[str] = None
    base_page: str = ""
    base_path: str = field(default_factory=os.getcwd)
    glob: Optional[str] = None
    plugins: List[str] = field(default_factory=list)
    skip_empty: bool = False
    azure_blob_url: Optional[str] = None
    azure_blob_account: Optional[str] = None
    images: Optional[str] = None
    row_order: RowOrder = RowOrder.FORWARD
    folder_cache: FolderCacheMode = FolderCacheMode.SEGMENT
    header_fallback: HeaderFallback = HeaderFallback.COLUMN
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    error_report_path: str = DEFAULT_REPORT_PATH
    plugin_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def images_path(self) -> str:
        return self.images or self.base_path

    def to_plugin_options(self) -> PluginOptions:
        return PluginOptions(
            base_path=self.base_path,
            images_path=self.images_path,
            azure_blob_url=self.azure_blob_url,
            azure_blob_account=self.azure_blob_account,
            extra=dict(self.plugin_options),
        )


class ConfigLoader:
    """Loads config files and merges them into an ImportConfig."""

    # camelCase spellings accepted in config files
    KEY_ALIASES = {
        'basePage': 'base_page',
        'basePath': 'base_path',
        'skipEmpty': 'skip_empty',
        'azureBlobUrl': 'azure_blob_url',
        'azureBlobAccount': 'azure_blob_account',
        'rowOrder': 'row_order',
        'folderCache': 'folder_cache',
        'headerFallback': 'header_fallback',
        'timeoutMs': 'timeout_ms',
        'timeout': 'timeout_ms',
        'errorReportPath': 'error_report_path',
        'errorReport': 'error_report_path',
        'pluginOptions': 'plugin_options',
    }

    STRING_FIELDS = {
        'token', 'base_page', 'base_path', 'glob',
        'azure_blob_url', 'azure_blob_account', 'images', 'error_report_path',
    }

    ENUM_FIELDS: Dict[str, Type[Enum]] = {
        'row_order': RowOrder,
        'folder_cache': FolderCacheMode,
        'header_fallback': HeaderFallback,
    }

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """Read a config file into validated, snake_case settings.

        Args:
            config_path: Path to a YAML or JSON file

        Returns:
            Dict of ImportConfig field names to parsed values

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigError: If the file is unreadable or invalid
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigNotFoundError(config_path)
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}")

        try:
            raw = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if raw is None:
            return {}

        if not isinstance(raw, dict):
            raise ConfigError(
                f"Configuration must be a mapping, got {type(raw).__name__}"
            )

        return cls.parse(raw)

    @classmethod
    def parse(cls, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a raw mapping and convert its values.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in dataclasses.fields(ImportConfig)}
        settings: Dict[str, Any] = {}

        for key, value in raw.items():
            name = cls.KEY_ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown setting '{key}'")
            settings[name] = cls._convert(name, value)

        return settings

    @classmethod
    def _convert(cls, name: str, value: Any) -> Any:
        if name in cls.ENUM_FIELDS:
            return parse_enum(cls.ENUM_FIELDS[name], value, name)

        if name == 'plugins':
            if value is not None and not isinstance(value, (str, list)):
                raise ConfigError("Must be a string or a list of names", name)
            return parse_plugin_names(value)

        if name == 'skip_empty':
            if not isinstance(value, bool):
                raise ConfigError(f"Must be true or false, got {value!r}", name)
            return value

        if name == 'timeout_ms':
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"Must be a positive integer, got {value!r}", name)
            return value

        if name == 'plugin_options':
            if not isinstance(value, dict):
                raise ConfigError("Must be a mapping", name)
            return dict(value)

        if name in cls.STRING_FIELDS:
            if value is None:
                return None
            if not isinstance(value, (str, int, float)):
                raise ConfigError(f"Must be a string, got {type(value).__name__}", name)
            return str(value)

        return value

    @classmethod
    def apply(cls, config: ImportConfig, settings: Dict[str, Any]) -> ImportConfig:
        """Return a copy of config with settings laid over it."""
        return dataclasses.replace(config, **settings)


def parse_enum(enum_type: Type[Enum], value: Any, config_field: Optional[str] = None) -> Enum:
    """Parse a case-insensitive enum value such as "reverse".

    Raises:
        ConfigError: If the value is not one of the enum's values
    """
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_type)
        raise ConfigError(f"'{value}' is not one of: {allowed}", config_field)
