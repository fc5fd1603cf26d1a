"""Database schema data models."""

from dataclasses import dataclass
from enum import Enum


class ColumnKind(Enum):
    """Kind of a Notion database property created by the importer.

    Every database has exactly one TITLE column (the first); the rest
    are TEXT (rich_text) columns.
    """
    TITLE = "title"
    TEXT = "rich_text"


@dataclass(frozen=True)
class Column:
    """One column of a database schema.

    Attributes:
        name: Property name shown in Notion
        kind: Property kind
    """
    name: str
    kind: ColumnKind
