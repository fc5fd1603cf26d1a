"""Data models for CLI operations."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the notionater command.

    - SUCCESS (0): Every file was imported or skipped
    - GENERAL_ERROR (1): Usage, configuration or unexpected error
    - IMPORT_ERRORS (2): The run finished but at least one file failed
    - AUTH_ERROR (3): Missing or rejected Notion token
    - NETWORK_ERROR (4): Notion API unreachable or refusing requests

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    IMPORT_ERRORS = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
