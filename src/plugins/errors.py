"""Typed exception hierarchy for plugin errors."""

from typing import Optional

from src.notion_service.errors import NotionaterError


class PluginError(NotionaterError):
    """Base exception for all plugin errors."""
    pass


class PluginLoadError(PluginError):
    """Raised when a plugin name is unknown or its factory fails."""

    def __init__(self, plugin_name: str, reason: Optional[str] = None):
        message = f"Could not load plugin '{plugin_name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.plugin_name = plugin_name
        self.reason = reason


class ExternalCommandError(PluginError):
    """Raised when an external CLI invoked by a plugin fails."""

    def __init__(self, command: str, reason: Optional[str] = None):
        message = f"Command '{command}' failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.command = command
        self.reason = reason


class UploadError(ExternalCommandError):
    """Raised when an image cannot be uploaded to blob storage."""
    pass


class UserLookupError(ExternalCommandError):
    """Raised when a user mention cannot be resolved."""
    pass
