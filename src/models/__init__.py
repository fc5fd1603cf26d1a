"""Data models for Notion pages and database schemas."""

from src.models.notion_page import PageRef
from src.models.database_schema import Column, ColumnKind

__all__ = ['PageRef', 'Column', 'ColumnKind']
