"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output
and the ProgressObserver that renders import progress. Supports verbosity
levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from src.importer.events import ImportObserver
from src.importer.models import FileOutcome, FileState, RunResult


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.error("Base page not found")
        >>> with handler.import_progress() as observer:
        ...     run.run(files, target)
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Optional[Console] = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Console to write to (a new one if None)
        """
        self.verbosity = verbosity
        self.console = console or Console(
            no_color=no_color,
            highlight=False,
        )

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message, markup=False)

    @contextmanager
    def import_progress(self) -> Iterator["ProgressObserver"]:
        """Display import progress for the duration of the block.

        Yields:
            ProgressObserver to hand to the import pipeline
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
        )
        with progress:
            yield ProgressObserver(progress, verbosity=self.verbosity)

    def print_summary(self, result: RunResult) -> None:
        """Display the import summary with color coding.

        Args:
            result: Result of the finished run
        """
        self.console.print("\n[bold]Import Summary:[/bold]")
        self.console.print(f"  [green]✓[/green] OK: {result.ok_count} file(s)")

        if result.skipped_count > 0:
            self.console.print(f"  [yellow]⊘[/yellow] Skipped: {result.skipped_count} file(s)")

        if result.error_count > 0:
            self.console.print(f"  [red]✗[/red] Errors: {result.error_count} file(s)")

        if not result.outcomes:
            self.console.print("\n[yellow]No files imported[/yellow]")
        elif result.error_count > 0:
            self.console.print(f"\n[red]Import completed with {result.error_count} error(s)[/red]")
            if result.report_path:
                self.console.print(f"Error details written to {result.report_path}")
        else:
            self.console.print("\n[green]Import completed successfully[/green]")


class ProgressObserver(ImportObserver):
    """Drives a rich Progress from pipeline events.

    One task tracks files across the run; a second tracks the steps of the
    file currently being imported.
    """

    def __init__(self, progress: Progress, verbosity: int = 0):
        self.progress = progress
        self.verbosity = verbosity
        self.run_task: Optional[TaskID] = None
        self.file_task: Optional[TaskID] = None
        self._file_steps = 1

    def on_run_start(self, total_files: int) -> None:
        self.run_task = self.progress.add_task("Importing", total=total_files)
        self.file_task = self.progress.add_task("", total=1, visible=False)

    def on_file_start(self, file: str, total_steps: int) -> None:
        self._file_steps = total_steps
        if self.file_task is None:
            return
        self.progress.reset(self.file_task, total=total_steps, description=escape(file), visible=True)

    def on_step_complete(self, file: str, state: FileState) -> None:
        if self.file_task is not None:
            self.progress.advance(self.file_task)

    def on_file_done(self, file: str, outcome: FileOutcome) -> None:
        if self.file_task is not None:
            self.progress.update(self.file_task, completed=self._file_steps)
        if self.run_task is not None:
            self.progress.advance(self.run_task)
        if outcome.is_error and self.verbosity >= 1:
            self.progress.console.print(f"[red]✗[/red] {escape(file)}: {escape(outcome.message)}")

    def on_message(self, message: str) -> None:
        if self.file_task is not None:
            self.progress.update(self.file_task, description=escape(message))

    def on_run_done(self, outcomes: List[FileOutcome]) -> None:
        if self.file_task is not None:
            self.progress.update(self.file_task, visible=False)
