"""Typed exception hierarchy for Notion-related errors.

This module defines all custom exceptions used by the Notion service layer.
All exceptions inherit from NotionError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class NotionaterError(Exception):
    """Base exception for all notionater errors.

    Use this to catch any application-level error from the importer.
    """
    pass


class NotionError(NotionaterError):
    """Base exception for all Notion-related errors."""
    pass


class InvalidCredentialsError(NotionError):
    """Raised when the integration token is missing or rejected."""

    def __init__(self, reason: Optional[str] = None):
        message = "Notion integration token is invalid"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.reason = reason


class PageNotFoundError(NotionError):
    """Raised when a referenced page or database does not exist or is not shared."""

    def __init__(self, object_id: str):
        super().__init__(f"Object {object_id} not found (is it shared with the integration?)")
        self.object_id = object_id


class APIUnreachableError(NotionError):
    """Raised when the Notion API is not available or the call timed out."""

    def __init__(self, endpoint: str = "api.notion.com"):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(NotionError):
    """Raised when API access fails after retries or the request is rejected."""

    def __init__(self, message: str = "Notion API failure (after 3 retries)"):
        super().__init__(message)


class ConversionError(NotionError):
    """Raised when Markdown cannot be converted to Notion blocks."""

    def __init__(self, message: str):
        super().__init__(message)
