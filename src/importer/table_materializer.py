"""Recreates extracted tables as Notion databases."""

import logging
from typing import List, Optional

from src.models import Column, ColumnKind
from src.notion_service.api_wrapper import APIWrapper
from src.notion_service.payloads import rich_text_property, title_property

from .errors import TableMaterializationError
from .events import ImportObserver
from .models import ExtractedTable, RemoteDatabase, RowOrder

logger = logging.getLogger(__name__)


class TableMaterializer:
    """Turns an ExtractedTable into a database plus one row per data row.

    The first column becomes the database's title property; the others
    are text properties. Rows are created one at a time. A failing row is
    not caught here: it aborts the remaining rows and surfaces as an error
    for the whole file, so a half-filled database is never reported as a
    success.

    Example:
        >>> materializer = TableMaterializer(api, row_order=RowOrder.REVERSE)
        >>> db = materializer.materialize(table, page_id, "Release notes")
        >>> db.title
        'Release notes - Database 1'
    """

    def __init__(
        self,
        api: APIWrapper,
        row_order: RowOrder = RowOrder.FORWARD,
        observer: Optional[ImportObserver] = None,
    ):
        """Initialize the materializer.

        Args:
            api: APIWrapper used to create databases and rows
            row_order: Order in which data rows are created
            observer: Receives a status message per table
        """
        self.api = api
        self.row_order = row_order
        self.observer = observer or ImportObserver()

    @staticmethod
    def build_schema(table: ExtractedTable) -> List[Column]:
        return [
            Column(name=name, kind=ColumnKind.TITLE if index == 0 else ColumnKind.TEXT)
            for index, name in enumerate(table.header_row)
        ]

    @staticmethod
    def database_title(parent_title: str, ordinal: int) -> str:
        return f"{parent_title} - Database {ordinal}"

    def materialize(
        self,
        table: ExtractedTable,
        parent_page_id: str,
        parent_title: str,
    ) -> RemoteDatabase:
        """Create the database and its rows.

        Args:
            table: Table to recreate
            parent_page_id: Page the database is embedded in
            parent_title: Title of that page (used in the database title)

        Returns:
            RemoteDatabase with the created row IDs

        Raises:
            TableMaterializationError: If the table has no header, or the
                database or any row cannot be created
        """
        if not table.header_row:
            raise TableMaterializationError(table.ordinal, "table has no header row")

        columns = self.build_schema(table)
        title = self.database_title(parent_title, table.ordinal)

        logger.debug(f"Adding table to '{parent_title}' with {len(table.data_rows)} rows ...")
        self.observer.on_message(f"Creating table {table.ordinal} ...")

        try:
            database_id = self.api.create_database(parent_page_id, title, columns)
        except Exception as e:
            raise TableMaterializationError(table.ordinal, str(e)) from e

        database = RemoteDatabase(database_id=database_id, title=title, columns=columns)

        indices = range(len(table.data_rows))
        if self.row_order is RowOrder.REVERSE:
            indices = reversed(indices)

        for row_index in indices:
            properties = {}
            for column_index, column in enumerate(columns):
                cell = table.cell(row_index, column_index)
                if column.kind is ColumnKind.TITLE:
                    properties[column.name] = title_property(cell)
                else:
                    properties[column.name] = rich_text_property(cell)
            try:
                database.record_ids.append(self.api.create_record(database_id, properties))
            except Exception as e:
                raise TableMaterializationError(
                    table.ordinal, str(e), rows_created=len(database.record_ids)
                ) from e

        logger.info(f"Created '{title}' with {len(database.record_ids)} row(s)")
        return database
