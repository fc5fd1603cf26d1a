"""Notion page reference data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PageRef:
    """A page returned by a Notion search.

    Attributes:
        page_id: Notion page ID
        title: Plain-text page title ("invalid page" when it has none)
    """
    page_id: str
    title: str
