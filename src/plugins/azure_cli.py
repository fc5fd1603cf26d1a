"""Thin runner for the Azure CLI (``az``) used by the devops plugin."""

import json
import logging
import subprocess
from typing import Any, List

from .errors import ExternalCommandError

logger = logging.getLogger(__name__)

AZ_TIMEOUT_SECONDS = 120


def run_az(args: List[str], timeout: int = AZ_TIMEOUT_SECONDS) -> str:
    """Run ``az`` with args and return its stdout.

    Raises:
        ExternalCommandError: If az is missing, times out or exits non-zero
    """
    command = " ".join(["az", *args[:3]])
    try:
        logger.debug(f"Running {command} ...")
        result = subprocess.run(
            ["az", *args],
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
        return result.stdout
    except subprocess.CalledProcessError as e:
        raise ExternalCommandError(command, (e.stderr or "").strip() or f"exit code {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalCommandError(command, f"timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise ExternalCommandError(
            command,
            "az not found - install the Azure CLI "
            "(https://docs.microsoft.com/en-us/cli/azure/install-azure-cli)",
        ) from e


def run_az_json(args: List[str], timeout: int = AZ_TIMEOUT_SECONDS) -> Any:
    """Run ``az`` and parse its stdout as JSON."""
    stdout = run_az(args, timeout=timeout)
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ExternalCommandError(" ".join(["az", *args[:3]]), f"invalid JSON output: {e}") from e
