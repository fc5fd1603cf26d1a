"""Title derivation for folder and document pages."""

import os
import re
from urllib.parse import unquote

_EDGE_PUNCTUATION = re.compile(r'^[\W_]+|[\W_]+$')
_CAMEL_BOUNDARY = re.compile(r'([a-z0-9])([A-Z])')
_SEPARATORS = re.compile(r'[\W_]+')


def to_sentence_case(text: str) -> str:
    """Normalize text to sentence case.

    Separators (spaces, dashes, underscores, dots, other punctuation) and
    camelCase boundaries become single spaces; only the first letter is
    capitalized.

    Example:
        >>> to_sentence_case("getting-started_GUIDE")
        'Getting started guide'
        >>> to_sentence_case("releaseNotes")
        'Release notes'
    """
    if not text:
        return ""
    cleaned = _EDGE_PUNCTUATION.sub('', text)
    cleaned = _CAMEL_BOUNDARY.sub(r'\1 \2', cleaned)
    cleaned = _SEPARATORS.sub(' ', cleaned).lower()
    return cleaned[:1].upper() + cleaned[1:]


def folder_title(segment: str) -> str:
    """Title for the folder page of a raw path segment."""
    return to_sentence_case(unquote(segment)) or segment


def document_title(file_name: str) -> str:
    """Title for the page created from file_name (extension stripped)."""
    stem, _ = os.path.splitext(unquote(file_name))
    return to_sentence_case(stem) or stem or file_name
