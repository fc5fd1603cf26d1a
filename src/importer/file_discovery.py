"""Glob-based discovery of the files to import."""

import logging
from pathlib import Path, PurePosixPath
from typing import List

logger = logging.getLogger(__name__)


def _normalize_pattern(pattern: str) -> str:
    # "**.md" style segments are shell shorthand for "*.md"
    parts = []
    for part in PurePosixPath(pattern.replace('\\', '/')).parts:
        if '**' in part and part != '**':
            part = part.replace('**', '*')
        parts.append(part)
    return '/'.join(parts)


def discover_files(base_path: str, pattern: str) -> List[str]:
    """Find files matching a glob pattern relative to base_path.

    Hidden files and files inside hidden directories are skipped.
    Directories are never returned. The order is the order the filesystem
    walk yields; callers must not assume it is sorted.

    Args:
        base_path: Directory the pattern is relative to
        pattern: Glob such as "docs/**/*.md"

    Returns:
        POSIX-style paths relative to base_path

    Raises:
        ValueError: If the pattern is empty or absolute
    """
    if not pattern or not pattern.strip():
        raise ValueError("Glob pattern cannot be empty")
    if PurePosixPath(pattern).is_absolute() or Path(pattern).is_absolute():
        raise ValueError(f"Glob pattern must be relative to the base path: {pattern}")

    base = Path(base_path)
    normalized = _normalize_pattern(pattern.strip())
    logger.debug(f"Globbing '{normalized}' under {base}")

    files = []
    seen = set()
    for match in base.glob(normalized):
        if not match.is_file():
            continue
        relative = match.relative_to(base).as_posix()
        if any(part.startswith('.') for part in relative.split('/')):
            continue
        if relative in seen:
            continue
        seen.add(relative)
        files.append(relative)

    logger.info(f"Found {len(files)} file(s) matching '{pattern}'")
    return files
