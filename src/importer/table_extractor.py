"""Table extraction from converted block sequences.

Notion pages cannot carry the tables the converter produces as
unsupported blocks, so each table is pulled out of the page body, replaced
by a placeholder paragraph, and later recreated as a linked database.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from src.notion_service.payloads import paragraph_block, plain_text, text_object

from .models import ExtractedTable, HeaderFallback

logger = logging.getLogger(__name__)

PLACEHOLDER_ANNOTATIONS = {"italic": True, "color": "orange"}


def placeholder_text(ordinal: int) -> str:
    return f"Table moved - see linked Database {ordinal}"


def placeholder_block(ordinal: int) -> Dict[str, Any]:
    """Styled paragraph left where table number ordinal used to be."""
    return paragraph_block([text_object(placeholder_text(ordinal), PLACEHOLDER_ANNOTATIONS)])


def is_unsupported(block: Dict[str, Any]) -> bool:
    return block.get("object") == "unsupported"


def is_table(block: Dict[str, Any]) -> bool:
    return is_unsupported(block) and block.get("type") == "table"


@dataclass
class ExtractionResult:
    """Output of TableExtractor.extract.

    Attributes:
        kept_blocks: Blocks to create the page with, placeholders included
        tables: Raw table blocks in encounter order
    """
    kept_blocks: List[Dict[str, Any]] = field(default_factory=list)
    tables: List[Dict[str, Any]] = field(default_factory=list)


class TableExtractor:
    """Splits a block sequence into page content and extracted tables.

    Unsupported table blocks are replaced by a placeholder paragraph that
    names the database they will become ("Database 1", "Database 2", ...
    counted across the whole document). Any other unsupported block is
    dropped. All remaining blocks pass through in their original order.
    """

    def __init__(self, header_fallback: HeaderFallback = HeaderFallback.COLUMN):
        self.header_fallback = header_fallback

    def extract(self, blocks: List[Dict[str, Any]]) -> ExtractionResult:
        result = ExtractionResult()
        for block in blocks:
            if is_table(block):
                result.tables.append(block)
                result.kept_blocks.append(placeholder_block(len(result.tables)))
            elif is_unsupported(block):
                logger.debug(f"Dropping unsupported '{block.get('type')}' block")
            else:
                result.kept_blocks.append(block)
        return result

    def parse_table(self, block: Dict[str, Any], ordinal: int) -> ExtractedTable:
        """Read the cell text of a table block into an ExtractedTable.

        The first row becomes the header. Empty header cells are named by
        the header fallback policy, and repeated names get a numeric suffix
        so every column survives as a distinct database property.

        Args:
            block: A table block produced by the converter
            ordinal: 1-based position of the table in its document
        """
        rows = []
        for row in block.get("table", {}).get("children", []):
            cells = row.get("table_row", {}).get("cells", [])
            rows.append([plain_text(cell).strip() for cell in cells])

        if not rows:
            return ExtractedTable(header_row=[], data_rows=[], ordinal=ordinal)

        header = [self._header_name(cell, index) for index, cell in enumerate(rows[0])]
        return ExtractedTable(
            header_row=self._dedupe(header),
            data_rows=rows[1:],
            ordinal=ordinal,
        )

    def _header_name(self, cell: str, index: int) -> str:
        if cell:
            return cell
        if self.header_fallback is HeaderFallback.INDEXED:
            return f"Header {index}"
        return "Column"

    @staticmethod
    def _dedupe(names: List[str]) -> List[str]:
        seen: Dict[str, int] = {}
        result = []
        for name in names:
            if name in seen:
                seen[name] += 1
                candidate = f"{name} {seen[name]}"
                while candidate in seen:
                    seen[name] += 1
                    candidate = f"{name} {seen[name]}"
                seen[candidate] = 1
                result.append(candidate)
            else:
                seen[name] = 1
                result.append(name)
        return result
