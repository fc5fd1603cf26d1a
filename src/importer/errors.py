"""Typed exception hierarchy for import pipeline errors.

All exceptions inherit from ImporterError so a file-level handler can
catch any pipeline failure in one place. Each carries the file (or
segment) it concerns.
"""

from typing import Optional

from src.notion_service.errors import NotionaterError


class ImporterError(NotionaterError):
    """Base exception for all import pipeline errors."""
    pass


class FolderCreationError(ImporterError):
    """Raised when a folder page for a path segment cannot be created."""

    def __init__(self, segment: str, reason: Optional[str] = None):
        message = f"Could not create folder page for '{segment}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.segment = segment
        self.reason = reason


class FileReadError(ImporterError):
    """Raised when a source file cannot be read."""

    def __init__(self, file_path: str, reason: Optional[str] = None):
        message = f"Could not read {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.reason = reason


class PageCreationError(ImporterError):
    """Raised when the document page for a file cannot be created."""

    def __init__(self, title: str, reason: Optional[str] = None):
        message = f"Could not create page '{title}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.title = title
        self.reason = reason


class TableMaterializationError(ImporterError):
    """Raised when a table cannot be turned into a database.

    Aborts the remaining rows and tables of the file.
    """

    def __init__(self, ordinal: int, reason: Optional[str] = None, rows_created: int = 0):
        message = f"Database {ordinal} failed after {rows_created} row(s)"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.ordinal = ordinal
        self.reason = reason
        self.rows_created = rows_created


class PluginHookError(ImporterError):
    """Raised when a plugin hook fails while processing a file."""

    def __init__(self, plugin_name: str, hook: str, reason: Optional[str] = None):
        message = f"Plugin '{plugin_name}' failed in {hook}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.plugin_name = plugin_name
        self.hook = hook
        self.reason = reason


class NoFilesFoundError(ImporterError):
    """Raised when the glob matches no files under the base path."""

    def __init__(self, pattern: str, base_path: str):
        super().__init__(
            f"No files found to import for '{pattern}' under {base_path} "
            f"(quote the glob: -g \"folder/**/*.md\")"
        )
        self.pattern = pattern
        self.base_path = base_path


class NoTargetPageError(ImporterError):
    """Raised when the base page search returns nothing."""

    def __init__(self, query: str):
        super().__init__(
            f"No pages found matching '{query}' - try a different base page search?"
        )
        self.query = query


class ReportWriteError(ImporterError):
    """Raised when the error report file cannot be written."""

    def __init__(self, file_path: str, reason: Optional[str] = None):
        message = f"Could not write error report to {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.reason = reason
