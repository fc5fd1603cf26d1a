"""Notion client library for the Markdown importer.

This package provides Python abstractions over the Notion public API,
enabling clean and typed interactions with pages and databases.
"""

from .errors import (
    NotionaterError,
    NotionError,
    InvalidCredentialsError,
    PageNotFoundError,
    APIUnreachableError,
    APIAccessError,
    ConversionError,
)

__all__ = [
    "NotionaterError",
    "NotionError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "ConversionError",
]
