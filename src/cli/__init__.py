"""Command-line interface for the Markdown to Notion importer.

This package provides the `notionater` CLI tool that imports a directory of
Markdown files into Notion. It wires configuration, credentials, plugins and
the import pipeline together with progress indication and error handling.
"""

from .import_command import ImportCommand
from .config import ConfigLoader, ImportConfig
from .models import ExitCode
from .errors import (
    CLIError,
    ConfigError,
    ConfigNotFoundError,
)

__all__ = [
    'ImportCommand',
    'ConfigLoader',
    'ImportConfig',
    'ExitCode',
    'CLIError',
    'ConfigError',
    'ConfigNotFoundError',
]
