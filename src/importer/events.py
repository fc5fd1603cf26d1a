"""Observer interface for import progress events.

The pipeline emits events to an ImportObserver and never renders
anything itself. Subclasses override the callbacks they care about; the
base class ignores everything.
"""

from typing import Iterable, List

from .models import FileOutcome, FileState


class ImportObserver:
    """Receives progress events from ImportRun and FileImporter."""

    def on_run_start(self, total_files: int) -> None:
        pass

    def on_file_start(self, file: str, total_steps: int) -> None:
        pass

    def on_step_complete(self, file: str, state: FileState) -> None:
        pass

    def on_file_done(self, file: str, outcome: FileOutcome) -> None:
        pass

    def on_message(self, message: str) -> None:
        """Free-form status text, e.g. from a plugin doing slow I/O."""
        pass

    def on_run_done(self, outcomes: List[FileOutcome]) -> None:
        pass


class CompositeObserver(ImportObserver):
    """Fans every event out to several observers, in order."""

    def __init__(self, observers: Iterable[ImportObserver]):
        self.observers = list(observers)

    def on_run_start(self, total_files: int) -> None:
        for observer in self.observers:
            observer.on_run_start(total_files)

    def on_file_start(self, file: str, total_steps: int) -> None:
        for observer in self.observers:
            observer.on_file_start(file, total_steps)

    def on_step_complete(self, file: str, state: FileState) -> None:
        for observer in self.observers:
            observer.on_step_complete(file, state)

    def on_file_done(self, file: str, outcome: FileOutcome) -> None:
        for observer in self.observers:
            observer.on_file_done(file, outcome)

    def on_message(self, message: str) -> None:
        for observer in self.observers:
            observer.on_message(message)

    def on_run_done(self, outcomes: List[FileOutcome]) -> None:
        for observer in self.observers:
            observer.on_run_done(outcomes)
