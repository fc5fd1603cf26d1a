"""Per-file import: one Markdown file becomes one Notion page.

Each file moves through a fixed sequence of states:

    PENDING_ANCESTORS → TEXT_LOADED → PRE_PARSED → CONVERTED → POST_PARSED
    → TABLES_EXTRACTED → PAGE_CREATED → TABLES_MATERIALIZED → DONE

An empty file ends in SKIPPED right after TEXT_LOADED. Any failure ends in
FAILED and is reported as an Error outcome for that file only; nothing is
retried and side effects already committed (folder pages, uploads, a page
whose tables failed) are left in place.
"""

import logging
import os
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Tuple

from src.content_converter.markdown_converter import ConversionOptions, MarkdownConverter
from src.notion_service.api_wrapper import APIWrapper
from src.plugins.base import PluginChain, PluginContext, PluginOptions

from .errors import FileReadError, PageCreationError
from .events import ImportObserver
from .models import (
    DocumentPage,
    FileOutcome,
    FileState,
    FileStatus,
    ImportTarget,
    PathKey,
)
from .path_cache import PathKeyCache
from .table_extractor import TableExtractor
from .table_materializer import TableMaterializer
from .titles import document_title

logger = logging.getLogger(__name__)

# States after PENDING_ANCESTORS that every successful file reports
PIPELINE_STATES = [
    FileState.TEXT_LOADED,
    FileState.PRE_PARSED,
    FileState.CONVERTED,
    FileState.POST_PARSED,
    FileState.TABLES_EXTRACTED,
    FileState.PAGE_CREATED,
    FileState.TABLES_MATERIALIZED,
    FileState.DONE,
]


def split_path(relative_path: str) -> Tuple[PathKey, str]:
    """Split "a/b/c.md" into (("a", "b"), "c.md")."""
    parts = PurePosixPath(relative_path.replace('\\', '/')).parts
    return tuple(parts[:-1]), parts[-1]


class FileImporter:
    """Imports a single file under an ImportTarget.

    Example:
        >>> importer = FileImporter(api, converter, PathKeyCache(api), base_path="./wiki")
        >>> importer.import_file("guides/setup.md", target)
        FileOutcome(file='guides/setup.md', status=<FileStatus.OK: 'OK'>, message='')
    """

    def __init__(
        self,
        api: APIWrapper,
        converter: MarkdownConverter,
        path_cache: PathKeyCache,
        base_path: str = ".",
        plugins: Optional[PluginChain] = None,
        plugin_options: Optional[PluginOptions] = None,
        extractor: Optional[TableExtractor] = None,
        materializer: Optional[TableMaterializer] = None,
        observer: Optional[ImportObserver] = None,
        conversion_options: Optional[ConversionOptions] = None,
        skip_empty: bool = False,
    ):
        """Initialize the file importer.

        Args:
            api: APIWrapper for page creation
            converter: Markdown → blocks converter
            path_cache: Folder page cache shared by the whole run
            base_path: Directory file paths are relative to
            plugins: Hook chain (empty if None)
            plugin_options: Options handed to post_parse hooks
            extractor: TableExtractor (default settings if None)
            materializer: TableMaterializer (forward row order if None)
            observer: Progress event sink
            conversion_options: Options for the converter
            skip_empty: Also skip files containing only whitespace
        """
        self.api = api
        self.converter = converter
        self.path_cache = path_cache
        self.base_path = base_path
        self.plugins = plugins or PluginChain()
        self.plugin_options = plugin_options or PluginOptions(base_path=base_path)
        self.observer = observer or ImportObserver()
        self.extractor = extractor or TableExtractor()
        self.materializer = materializer or TableMaterializer(api, observer=self.observer)
        self.conversion_options = conversion_options or ConversionOptions(
            strict_image_urls=False, allow_unsupported=True
        )
        self.skip_empty = skip_empty

    def import_file(self, relative_path: str, import_target: ImportTarget) -> FileOutcome:
        """Run the full pipeline for one file.

        Never raises for per-file problems; they are returned as the
        outcome.

        Args:
            relative_path: File path relative to the base path
            import_target: Root page of the run

        Returns:
            FileOutcome with status OK, Skipped or Error
        """
        path_key, file_name = split_path(relative_path)
        self.observer.on_file_start(relative_path, len(path_key) + len(PIPELINE_STATES))

        state = FileState.PENDING_ANCESTORS
        try:
            parent_id = self._resolve_ancestors(relative_path, path_key, import_target)

            text = self._read_text(relative_path)
            state = self._advance(relative_path, FileState.TEXT_LOADED)

            if self._is_empty(text):
                logger.debug(f"Skipping empty file {file_name}")
                return self._finish(relative_path, FileState.SKIPPED, FileOutcome(relative_path, FileStatus.SKIPPED))

            context = PluginContext(
                file_path=relative_path,
                base_path=self.base_path,
                observer=self.observer,
            )

            text = self.plugins.run_pre_parse(text, context)
            state = self._advance(relative_path, FileState.PRE_PARSED)

            blocks = self.converter.convert(text, self.conversion_options)
            state = self._advance(relative_path, FileState.CONVERTED)

            blocks = self.plugins.run_post_parse(blocks, self.api, self.plugin_options, context)
            state = self._advance(relative_path, FileState.POST_PARSED)

            extraction = self.extractor.extract(blocks)
            state = self._advance(relative_path, FileState.TABLES_EXTRACTED)

            page = DocumentPage(
                source_path=relative_path,
                title=document_title(file_name),
                parent_page_id=parent_id,
                blocks=extraction.kept_blocks,
            )
            page.page_id = self._create_page(page)
            state = self._advance(relative_path, FileState.PAGE_CREATED)

            self._materialize_tables(page, extraction.tables)
            state = self._advance(relative_path, FileState.TABLES_MATERIALIZED)

        except Exception as e:
            logger.debug(f"Import of {relative_path} failed in state {state.value}", exc_info=True)
            logger.info(f"Failed to import {relative_path}: {e}")
            return self._finish(
                relative_path,
                FileState.FAILED,
                FileOutcome(relative_path, FileStatus.ERROR, str(e) or type(e).__name__),
            )

        return self._finish(relative_path, FileState.DONE, FileOutcome(relative_path, FileStatus.OK))

    def _advance(self, relative_path: str, state: FileState) -> FileState:
        self.observer.on_step_complete(relative_path, state)
        return state

    def _finish(self, relative_path: str, state: FileState, outcome: FileOutcome) -> FileOutcome:
        self.observer.on_step_complete(relative_path, state)
        self.observer.on_file_done(relative_path, outcome)
        return outcome

    def _resolve_ancestors(
        self,
        relative_path: str,
        path_key: PathKey,
        import_target: ImportTarget,
    ) -> Optional[str]:
        if not path_key:
            return import_target.page_id

        resolved = self.path_cache.resolve_chain(path_key, import_target)
        for _ in resolved:
            self.observer.on_step_complete(relative_path, FileState.PENDING_ANCESTORS)
        return resolved[-1]

    def _read_text(self, relative_path: str) -> str:
        full_path = os.path.join(self.base_path, relative_path)
        logger.debug(f"Processing markdown file: {relative_path} ...")
        try:
            with open(full_path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(relative_path, str(e)) from e

    def _is_empty(self, text: str) -> bool:
        if not text:
            return True
        return self.skip_empty and not text.strip()

    def _create_page(self, page: DocumentPage) -> str:
        try:
            return self.api.create_page(
                parent_id=page.parent_page_id,
                title=page.title,
                children=page.blocks,
            )
        except Exception as e:
            raise PageCreationError(page.title, str(e)) from e

    def _materialize_tables(self, page: DocumentPage, tables: List[Dict[str, Any]]) -> None:
        for ordinal, block in enumerate(tables, start=1):
            table = self.extractor.parse_table(block, ordinal)
            self.materializer.materialize(table, page.page_id, page.title)
