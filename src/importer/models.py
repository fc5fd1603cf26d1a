"""Data models for the import pipeline.

This module defines all data models used by the importer. All models use
dataclasses (frozen where the value never changes after creation) and enums
for policies, following the patterns of the other packages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.models import Column

# Ordered path segments relative to the import base path
PathKey = Tuple[str, ...]


class RowOrder(Enum):
    """Order in which database rows are created.

    Notion lists new rows most-recent-first by default, so REVERSE makes
    the database read in the same order as the source table.
    """
    FORWARD = "forward"
    REVERSE = "reverse"


class FolderCacheMode(Enum):
    """How folder pages are memoized during a run.

    SEGMENT keys the cache by the bare segment name, so same-named folders
    in different branches (``a/images`` and ``b/images``) share one page.
    PATH keys by the full segment chain and keeps them apart.
    """
    SEGMENT = "segment"
    PATH = "path"


class HeaderFallback(Enum):
    """Column name used for an empty table header cell."""
    COLUMN = "column"
    INDEXED = "indexed"


class FileStatus(Enum):
    """Terminal classification of one processed file."""
    OK = "OK"
    SKIPPED = "Skipped"
    ERROR = "Error"


class FileState(Enum):
    """States of the per-file import state machine, in order."""
    PENDING_ANCESTORS = "pending_ancestors"
    TEXT_LOADED = "text_loaded"
    PRE_PARSED = "pre_parsed"
    CONVERTED = "converted"
    POST_PARSED = "post_parsed"
    TABLES_EXTRACTED = "tables_extracted"
    PAGE_CREATED = "page_created"
    TABLES_MATERIALIZED = "tables_materialized"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ImportTarget:
    """The remote root page everything in a run is nested under.

    Attributes:
        page_id: Notion page ID
        title: Page title as shown in search results
    """
    page_id: str
    title: str = ""


@dataclass(frozen=True)
class FolderPage:
    """A remote page standing for one directory level.

    Attributes:
        segment_name: Raw path segment
        title: Display title derived from the segment
        remote_page_id: Created page ID (None if creation failed)
        parent_remote_page_id: Page the folder was created under
    """
    segment_name: str
    title: str
    remote_page_id: Optional[str]
    parent_remote_page_id: Optional[str]


@dataclass
class DocumentPage:
    """The page created from one Markdown file.

    Attributes:
        source_path: File path relative to the base path
        title: Page title derived from the file name
        parent_page_id: Last folder page in the chain, or the import target
        blocks: Converted blocks with tables replaced by placeholders
        page_id: Remote page ID once created
    """
    source_path: str
    title: str
    parent_page_id: Optional[str]
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    page_id: Optional[str] = None


@dataclass
class ExtractedTable:
    """A Markdown table pulled out of a document.

    Attributes:
        header_row: Column names, in order
        data_rows: Cell text per row, header excluded; rows may be short
        ordinal: 1-based position among the document's tables
    """
    header_row: List[str]
    data_rows: List[List[str]]
    ordinal: int

    def cell(self, row_index: int, column_index: int) -> str:
        """Cell text, or "" when the row is shorter than the header."""
        row = self.data_rows[row_index]
        if column_index < len(row):
            return row[column_index] or ""
        return ""


@dataclass
class RemoteDatabase:
    """A database created from an ExtractedTable.

    Attributes:
        database_id: Notion database ID
        title: Database title
        columns: Ordered schema
        record_ids: Created row IDs, in creation order
    """
    database_id: str
    title: str
    columns: List[Column]
    record_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one file.

    Attributes:
        file: File path relative to the base path
        status: OK, Skipped or Error
        message: Error message (empty unless status is ERROR)
    """
    file: str
    status: FileStatus
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.status is FileStatus.ERROR


@dataclass
class ErrorReport:
    """Ordered list of per-file errors for one run."""
    errors: List[Dict[str, str]] = field(default_factory=list)

    def add(self, file: str, message: str) -> None:
        self.errors.append({"file": file, "message": message})

    def __len__(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": list(self.errors)}


@dataclass
class RunResult:
    """Summary of an ImportRun.

    Attributes:
        target: The page the run imported under (None if not resolved)
        outcomes: One FileOutcome per file, in processing order
        report_path: Where the error report was written, if any
    """
    target: Optional[ImportTarget] = None
    outcomes: List[FileOutcome] = field(default_factory=list)
    report_path: Optional[str] = None

    def count(self, status: FileStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def ok_count(self) -> int:
        return self.count(FileStatus.OK)

    @property
    def skipped_count(self) -> int:
        return self.count(FileStatus.SKIPPED)

    @property
    def error_count(self) -> int:
        return self.count(FileStatus.ERROR)
