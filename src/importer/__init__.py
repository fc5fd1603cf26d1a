"""Markdown directory import pipeline.

This package turns a directory tree of Markdown files into a tree of
Notion pages: folder pages per directory, one page per file, and one
database per Markdown table.
"""

from .errors import (
    ImporterError,
    FolderCreationError,
    FileReadError,
    PageCreationError,
    TableMaterializationError,
    PluginHookError,
    NoFilesFoundError,
    NoTargetPageError,
    ReportWriteError,
)
from .models import (
    FileOutcome,
    FileStatus,
    FolderCacheMode,
    HeaderFallback,
    ImportTarget,
    RowOrder,
    RunResult,
)

__all__ = [
    "ImporterError",
    "FolderCreationError",
    "FileReadError",
    "PageCreationError",
    "TableMaterializationError",
    "PluginHookError",
    "NoFilesFoundError",
    "NoTargetPageError",
    "ReportWriteError",
    "FileOutcome",
    "FileStatus",
    "FolderCacheMode",
    "HeaderFallback",
    "ImportTarget",
    "RowOrder",
    "RunResult",
]
