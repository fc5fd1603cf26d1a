"""One end-to-end import: discover files, pick the target page, import.

ImportRun owns the run-level concerns: target page resolution, sequential
iteration over the discovered files, and the error report written at the
end when something failed.
"""

import logging
from typing import Callable, List, Optional

from src.models import PageRef
from src.notion_service.api_wrapper import APIWrapper

from .error_report import DEFAULT_REPORT_PATH, write_error_report
from .errors import NoFilesFoundError, NoTargetPageError
from .events import ImportObserver
from .file_discovery import discover_files
from .file_importer import FileImporter
from .models import ErrorReport, ImportTarget, RunResult

logger = logging.getLogger(__name__)

# Picks one page out of several search results; None means the user aborted
TargetSelector = Callable[[List[PageRef]], Optional[PageRef]]


class ImportRun:
    """Orchestrates the import of a directory of Markdown files.

    Files are imported strictly one after another. A failed file never
    stops the run; its error is collected into the report.

    Example:
        >>> run = ImportRun(api, importer, base_path="./wiki", pattern="**/*.md")
        >>> target = run.resolve_target("Engineering", selector)
        >>> result = run.run(run.discover(), target)
        >>> result.error_count
        0
    """

    def __init__(
        self,
        api: APIWrapper,
        file_importer: FileImporter,
        base_path: str = ".",
        pattern: str = "**/*.md",
        observer: Optional[ImportObserver] = None,
        error_report_path: str = DEFAULT_REPORT_PATH,
    ):
        """Initialize the run.

        Args:
            api: APIWrapper used for the target page search
            file_importer: Per-file pipeline
            base_path: Directory the glob is relative to
            pattern: Glob selecting the files to import
            observer: Progress event sink
            error_report_path: Where to write the error report
        """
        self.api = api
        self.file_importer = file_importer
        self.base_path = base_path
        self.pattern = pattern
        self.observer = observer or ImportObserver()
        self.error_report_path = error_report_path

    def resolve_target(self, query: str, selector: TargetSelector) -> Optional[ImportTarget]:
        """Find the page to import under.

        A single search hit is used directly. Several hits are handed to
        the selector.

        Args:
            query: Page title search text
            selector: Chooses among several results

        Returns:
            ImportTarget, or None if the user aborted the selection

        Raises:
            NoTargetPageError: If the search returned no pages
        """
        pages = self.api.search_pages(query)
        if not pages:
            raise NoTargetPageError(query)

        if len(pages) == 1:
            chosen = pages[0]
            logger.info(f"Single page found, importing into: {chosen.title}")
        else:
            chosen = selector(pages)
            if chosen is None:
                logger.info("Target page selection aborted")
                return None

        return ImportTarget(page_id=chosen.page_id, title=chosen.title)

    def run(self, files: List[str], import_target: ImportTarget) -> RunResult:
        """Import every file under import_target.

        Args:
            files: Paths relative to the base path, in processing order
            import_target: Root page for the run

        Returns:
            RunResult with one outcome per file

        Raises:
            ReportWriteError: If errors occurred and the report cannot be written
        """
        result = RunResult(target=import_target)
        report = ErrorReport()

        self.observer.on_run_start(len(files))
        logger.info(f"Importing {len(files)} file(s) into '{import_target.title}'")

        for relative_path in files:
            outcome = self.file_importer.import_file(relative_path, import_target)
            result.outcomes.append(outcome)
            if outcome.is_error:
                report.add(outcome.file, outcome.message)
                logger.debug(f"{outcome.file}: {outcome.message}")

        self.observer.on_run_done(list(result.outcomes))

        if len(report) > 0:
            result.report_path = write_error_report(report, self.error_report_path)

        logger.info(
            f"Import finished: {result.ok_count} ok, "
            f"{result.skipped_count} skipped, {result.error_count} error(s)"
        )
        return result

    def discover(self) -> List[str]:
        """List the files matching the glob under the base path.

        Returns:
            Relative POSIX paths in processing order

        Raises:
            NoFilesFoundError: If the glob matched nothing
            ValueError: If the glob is empty or absolute
        """
        files = discover_files(self.base_path, self.pattern)
        if not files:
            raise NoFilesFoundError(self.pattern, self.base_path)
        logger.info(f"Found {len(files)} file(s) matching '{self.pattern}'")
        return files
