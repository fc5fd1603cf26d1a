"""Unit tests for importer.import_run module."""

import json
from itertools import count
from unittest.mock import Mock

import pytest

from src.content_converter.markdown_converter import MarkdownConverter
from src.importer.errors import NoFilesFoundError, NoTargetPageError
from src.importer.file_importer import FileImporter
from src.importer.import_run import ImportRun
from src.importer.models import FileOutcome, FileStatus, ImportTarget
from src.importer.path_cache import PathKeyCache
from src.models import PageRef
from src.notion_service.errors import ConversionError


@pytest.fixture
def target():
    return ImportTarget(page_id="root", title="Root")


def outcome_for(status_by_file):
    """Build a fake import_file returning the given status per file."""
    def import_file(relative_path, import_target):
        status, message = status_by_file[relative_path]
        return FileOutcome(relative_path, status, message)
    return import_file


@pytest.fixture
def importer():
    mock_importer = Mock()
    mock_importer.import_file.side_effect = lambda path, target: FileOutcome(path, FileStatus.OK)
    return mock_importer


class TestResolveTarget:
    """Test cases for ImportRun.resolve_target."""

    def test_single_match_auto_selected(self, importer):
        """A single search result is used without asking the selector."""
        api = Mock()
        api.search_pages.return_value = [PageRef("p1", "Docs")]
        selector = Mock()

        target = ImportRun(api, importer).resolve_target("Docs", selector)

        assert target == ImportTarget(page_id="p1", title="Docs")
        selector.assert_not_called()

    def test_several_matches_use_selector(self, importer):
        """The selector chooses among several results."""
        pages = [PageRef("p1", "Docs"), PageRef("p2", "Docs archive")]
        api = Mock()
        api.search_pages.return_value = pages
        selector = Mock(return_value=pages[1])

        target = ImportRun(api, importer).resolve_target("Docs", selector)

        selector.assert_called_once_with(pages)
        assert target.page_id == "p2"

    def test_selector_abort_returns_none(self, importer):
        """A cancelled selection resolves to None."""
        api = Mock()
        api.search_pages.return_value = [PageRef("p1", "A"), PageRef("p2", "B")]

        assert ImportRun(api, importer).resolve_target("x", Mock(return_value=None)) is None

    def test_no_match_raises(self, importer):
        """An empty search result raises NoTargetPageError."""
        api = Mock()
        api.search_pages.return_value = []

        with pytest.raises(NoTargetPageError):
            ImportRun(api, importer).resolve_target("Nothing", Mock())


class TestRun:
    """Test cases for ImportRun.run."""

    def test_files_processed_in_order(self, importer, target, tmp_path):
        """Files are imported one by one, in the given order."""
        run = ImportRun(Mock(), importer, error_report_path=str(tmp_path / "errors.json"))

        result = run.run(["b.md", "a.md", "c.md"], target)

        processed = [c.args[0] for c in importer.import_file.call_args_list]
        assert processed == ["b.md", "a.md", "c.md"]
        assert [o.file for o in result.outcomes] == ["b.md", "a.md", "c.md"]
        assert result.target == target

    def test_failure_does_not_stop_run(self, target, tmp_path):
        """One failing file leaves the others unaffected."""
        importer = Mock()
        importer.import_file.side_effect = outcome_for({
            "a.md": (FileStatus.OK, ""),
            "b.md": (FileStatus.ERROR, "boom"),
            "c.md": (FileStatus.OK, ""),
        })
        run = ImportRun(Mock(), importer, error_report_path=str(tmp_path / "errors.json"))

        result = run.run(["a.md", "b.md", "c.md"], target)

        assert result.ok_count == 2
        assert result.error_count == 1
        assert importer.import_file.call_count == 3

    def test_counts_each_status(self, target, tmp_path):
        """RunResult counts OK, Skipped and Error outcomes."""
        importer = Mock()
        importer.import_file.side_effect = outcome_for({
            "a.md": (FileStatus.OK, ""),
            "b.md": (FileStatus.SKIPPED, ""),
            "c.md": (FileStatus.ERROR, "bad"),
            "d.md": (FileStatus.OK, ""),
        })
        run = ImportRun(Mock(), importer, error_report_path=str(tmp_path / "errors.json"))

        result = run.run(["a.md", "b.md", "c.md", "d.md"], target)

        assert (result.ok_count, result.skipped_count, result.error_count) == (2, 1, 1)

    def test_error_report_written_on_errors(self, target, tmp_path):
        """Errors are persisted as {"errors": [{file, message}]}."""
        report_path = tmp_path / "errors.json"
        importer = Mock()
        importer.import_file.side_effect = outcome_for({
            "a.md": (FileStatus.ERROR, "first"),
            "b.md": (FileStatus.OK, ""),
            "c.md": (FileStatus.ERROR, "second"),
        })
        run = ImportRun(Mock(), importer, error_report_path=str(report_path))

        result = run.run(["a.md", "b.md", "c.md"], target)

        assert result.report_path == str(report_path)
        data = json.loads(report_path.read_text(encoding="utf-8"))
        assert data == {
            "errors": [
                {"file": "a.md", "message": "first"},
                {"file": "c.md", "message": "second"},
            ]
        }

    def test_no_report_without_errors(self, importer, target, tmp_path):
        """A run without errors writes no report file."""
        report_path = tmp_path / "errors.json"
        run = ImportRun(Mock(), importer, error_report_path=str(report_path))

        result = run.run(["a.md"], target)

        assert result.report_path is None
        assert not report_path.exists()

    def test_observer_notified_of_run(self, importer, target, tmp_path):
        """The observer sees the run start and end."""
        observer = Mock()
        run = ImportRun(Mock(), importer, observer=observer, error_report_path=str(tmp_path / "e.json"))

        run.run(["a.md", "b.md"], target)

        observer.on_run_start.assert_called_once_with(2)
        outcomes = observer.on_run_done.call_args.args[0]
        assert [o.file for o in outcomes] == ["a.md", "b.md"]


class TestDiscover:
    """Test cases for ImportRun.discover."""

    def test_lists_matching_files(self, importer, tmp_path):
        """discover returns every file the glob matches, relative to the base path."""
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "a.md").write_text("A", encoding="utf-8")
        (tmp_path / "b.md").write_text("B", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("C", encoding="utf-8")
        run = ImportRun(Mock(), importer, base_path=str(tmp_path), pattern="**/*.md")

        assert sorted(run.discover()) == ["b.md", "docs/a.md"]

    def test_no_files_raises(self, importer, tmp_path):
        """An empty glob result raises NoFilesFoundError."""
        run = ImportRun(Mock(), importer, base_path=str(tmp_path), pattern="*.md")

        with pytest.raises(NoFilesFoundError):
            run.discover()

    def test_absolute_glob_rejected(self, importer, tmp_path):
        """A glob outside the base path is refused."""
        run = ImportRun(Mock(), importer, base_path=str(tmp_path), pattern="/etc/*.md")

        with pytest.raises(ValueError):
            run.discover()


class TestRunWithFileImporter:
    """Test cases for a run driving the real per-file pipeline."""

    def test_conversion_failure_isolated_to_its_file(self, target, tmp_path):
        """A file that fails to convert is reported; the files around it still import."""
        for name in ("a.md", "b.md", "c.md"):
            (tmp_path / name).write_text(f"Body of {name}\n", encoding="utf-8")
        real_converter = MarkdownConverter()

        def convert(text, options=None):
            if "b.md" in text:
                raise ConversionError("Failed to parse markdown: bad input")
            return real_converter.convert(text, options)

        converter = Mock()
        converter.convert.side_effect = convert
        ids = count(1)
        api = Mock()
        api.create_page.side_effect = lambda parent_id, title, **kwargs: f"page-{next(ids)}"
        file_importer = FileImporter(
            api=api,
            converter=converter,
            path_cache=PathKeyCache(api),
            base_path=str(tmp_path),
        )
        report_path = tmp_path / "errors.json"
        run = ImportRun(api, file_importer, error_report_path=str(report_path))

        result = run.run(["a.md", "b.md", "c.md"], target)

        assert [o.status for o in result.outcomes] == [FileStatus.OK, FileStatus.ERROR, FileStatus.OK]
        titles = [c.kwargs["title"] for c in api.create_page.call_args_list]
        assert titles == ["A", "C"]
        errors = json.loads(report_path.read_text(encoding="utf-8"))["errors"]
        assert len(errors) == 1
        assert errors[0]["file"] == "b.md"
