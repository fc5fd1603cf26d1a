"""Persistence of the end-of-run error report."""

import json
import logging
import os

from .errors import ReportWriteError
from .models import ErrorReport

logger = logging.getLogger(__name__)

DEFAULT_REPORT_PATH = 'notionater-errors.json'


def write_error_report(report: ErrorReport, report_path: str = DEFAULT_REPORT_PATH) -> str:
    """Write the report as JSON: {"errors": [{"file", "message"}, ...]}.

    Args:
        report: Errors collected during the run
        report_path: Destination file (relative paths resolve against cwd)

    Returns:
        The absolute path written

    Raises:
        ReportWriteError: If the file cannot be written
    """
    path = os.path.abspath(report_path)
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
            f.write('\n')
    except OSError as e:
        raise ReportWriteError(path, str(e)) from e

    logger.info(f"Wrote {len(report)} error(s) to {path}")
    return path
