"""Builders for Notion API payload fragments.

Notion caps a single rich text object at 2000 characters and a single
children array at 100 blocks; the helpers here keep payloads inside those
limits.
"""

from typing import Any, Dict, Iterator, List, Optional

MAX_TEXT_LENGTH = 2000
MAX_CHILDREN_PER_REQUEST = 100

FOLDER_ICON = "📁"


def split_text(content: str, limit: int = MAX_TEXT_LENGTH) -> List[str]:
    """Split content into pieces no longer than limit characters."""
    if not content:
        return [""]
    return [content[i:i + limit] for i in range(0, len(content), limit)]


def text_object(
    content: str,
    annotations: Optional[Dict[str, Any]] = None,
    link: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a single rich text object of type "text"."""
    text: Dict[str, Any] = {"content": content}
    if link:
        text["link"] = {"url": link}
    obj: Dict[str, Any] = {"type": "text", "text": text}
    if annotations:
        obj["annotations"] = dict(annotations)
    return obj


def rich_text(
    content: str,
    annotations: Optional[Dict[str, Any]] = None,
    link: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Build a rich text array for content, splitting long strings."""
    return [text_object(piece, annotations, link) for piece in split_text(content)]


def title_property(content: str) -> Dict[str, Any]:
    """Property value for a title-kind database column."""
    return {"title": rich_text(content)}


def rich_text_property(content: str) -> Dict[str, Any]:
    """Property value for a text-kind database column."""
    return {"rich_text": rich_text(content)}


def page_title_properties(title: str) -> Dict[str, Any]:
    """The ``properties`` payload for a page created under another page."""
    return {"title": {"title": rich_text(title)}}


def emoji_icon(emoji: str) -> Dict[str, str]:
    return {"type": "emoji", "emoji": emoji}


def paragraph_block(rich: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": rich},
    }


def chunk_blocks(
    blocks: List[Dict[str, Any]],
    size: int = MAX_CHILDREN_PER_REQUEST,
) -> Iterator[List[Dict[str, Any]]]:
    """Yield consecutive batches of at most size blocks."""
    for i in range(0, len(blocks), size):
        yield blocks[i:i + size]


def plain_text(rich: List[Dict[str, Any]]) -> str:
    """Concatenate the visible text of a rich text array."""
    parts = []
    for item in rich or []:
        if "plain_text" in item:
            parts.append(item.get("plain_text") or "")
        else:
            parts.append((item.get("text") or {}).get("content") or "")
    return "".join(parts)
