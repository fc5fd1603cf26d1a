"""Markdown to Notion block conversion using mistune.

This module parses Markdown into mistune's AST and maps each token to
Notion block objects. Markdown constructs the importer cannot express as a
regular block are emitted as ``{"object": "unsupported", ...}`` markers so
later pipeline stages can decide what to do with them (tables, raw HTML).
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import mistune

from src.notion_service.errors import ConversionError
from src.notion_service.payloads import paragraph_block, split_text, text_object

logger = logging.getLogger(__name__)

# Notion accepts a fixed set of code block languages
NOTION_CODE_LANGUAGES = {
    'bash', 'c', 'c#', 'c++', 'css', 'diff', 'docker', 'go', 'graphql',
    'html', 'java', 'javascript', 'json', 'kotlin', 'makefile', 'markdown',
    'mermaid', 'php', 'plain text', 'powershell', 'python', 'ruby', 'rust',
    'scala', 'shell', 'sql', 'swift', 'typescript', 'xml', 'yaml',
}

LANGUAGE_ALIASES = {
    'sh': 'shell',
    'zsh': 'shell',
    'js': 'javascript',
    'ts': 'typescript',
    'py': 'python',
    'yml': 'yaml',
    'cs': 'c#',
    'csharp': 'c#',
    'cpp': 'c++',
    'dockerfile': 'docker',
    'ps1': 'powershell',
    'text': 'plain text',
    'txt': 'plain text',
}

IMAGE_EXTENSIONS = {
    '.png', '.jpg', '.jpeg', '.gif', '.tif', '.tiff', '.bmp', '.svg', '.heic', '.webp',
}


def _is_web_url(url: str) -> bool:
    # Notion only accepts absolute links; relative wiki links become plain text
    parsed = urlparse(url or '')
    if parsed.scheme == 'mailto':
        return bool(parsed.path)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


FENCE_PATTERN = re.compile(r'^ {0,3}(`{3,}|~{3,})')
DELIMITER_CELL = re.compile(r'^(:?-+:?)?$')


def split_table_row(line: str) -> List[str]:
    """Split a pipe table row into stripped cells (escaped pipes are kept)."""
    text = line.strip()
    if text.startswith('|'):
        text = text[1:]
    if text.endswith('|') and not text.endswith('\\|'):
        text = text[:-1]
    return [cell.strip() for cell in re.split(r'(?<!\\)\|', text)]


def _is_delimiter_row(line: str) -> bool:
    if '|' not in line or '-' not in line:
        return False
    return all(DELIMITER_CELL.match(cell) for cell in split_table_row(line))


def normalize_table_rows(text: str) -> str:
    """Pad short table rows and truncate long ones to the header width.

    mistune rejects a whole table when one body row has a different number
    of cells than the header. GFM tolerates that, so rows are fixed up
    before parsing. Fenced code blocks are left alone.
    """
    lines = text.split('\n')
    result: List[str] = []
    fence: Optional[str] = None
    i = 0
    while i < len(lines):
        line = lines[i]
        fence_match = FENCE_PATTERN.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1).startswith(fence):
                fence = None
            result.append(line)
            i += 1
            continue
        if fence_match:
            fence = fence_match.group(1)
            result.append(line)
            i += 1
            continue

        if ('|' in line and i + 1 < len(lines) and _is_delimiter_row(lines[i + 1])
                and len(split_table_row(line)) == len(split_table_row(lines[i + 1]))):
            width = len(split_table_row(line))
            piped = line.lstrip().startswith('|')
            result.extend([line, lines[i + 1]])
            i += 2
            while i < len(lines) and lines[i].strip() and '|' in lines[i]:
                row = lines[i]
                cells = split_table_row(row)
                if len(cells) != width:
                    cells = (cells + [''] * width)[:width]
                    indent = row[:len(row) - len(row.lstrip())]
                    row = ' | '.join(cells)
                    row = indent + (f'| {row} |' if piped else row)
                result.append(row)
                i += 1
            continue

        result.append(line)
        i += 1
    return '\n'.join(result)


@dataclass
class ConversionOptions:
    """Options controlling Markdown conversion.

    Attributes:
        strict_image_urls: Only emit image blocks for absolute http(s) URLs
            ending in a known image extension; others become links
        allow_unsupported: Emit tables (and raw HTML) as unsupported
            marker blocks instead of native blocks / dropping them
    """
    strict_image_urls: bool = False
    allow_unsupported: bool = True


class MarkdownConverter:
    """Converts Markdown text into an ordered list of Notion blocks.

    Example:
        >>> converter = MarkdownConverter()
        >>> blocks = converter.convert("# Title\\n\\nHello")
        >>> blocks[0]["type"]
        'heading_1'
    """

    def __init__(self):
        self._markdown = mistune.create_markdown(
            renderer='ast',
            plugins=['table', 'strikethrough', 'task_lists', 'url'],
        )

    def convert(
        self,
        text: str,
        options: Optional[ConversionOptions] = None,
    ) -> List[Dict[str, Any]]:
        """Convert Markdown text to Notion blocks.

        Args:
            text: Markdown source
            options: Conversion options (defaults to ConversionOptions())

        Returns:
            Ordered list of block dicts

        Raises:
            ConversionError: If the Markdown cannot be parsed
        """
        options = options or ConversionOptions()
        try:
            tokens = self._markdown(normalize_table_rows(text))
        except Exception as e:
            raise ConversionError(f"Failed to parse markdown: {e}") from e

        blocks: List[Dict[str, Any]] = []
        for token in tokens:
            blocks.extend(self._convert_block(token, options))
        return blocks

    def _convert_block(self, token: Dict[str, Any], options: ConversionOptions) -> List[Dict[str, Any]]:
        token_type = token.get('type')

        if token_type == 'blank_line':
            return []

        if token_type == 'heading':
            level = min(max(token.get('attrs', {}).get('level', 1), 1), 3)
            block_type = f'heading_{level}'
            return [{
                'object': 'block',
                'type': block_type,
                block_type: {'rich_text': self._rich_text(token.get('children', []))},
            }]

        if token_type == 'paragraph':
            return self._convert_paragraph(token.get('children', []), options)

        if token_type == 'block_text':
            return [paragraph_block(self._rich_text(token.get('children', [])))]

        if token_type == 'block_code':
            return [self._code_block(token)]

        if token_type == 'block_quote':
            return [self._quote_block(token, options)]

        if token_type == 'list':
            return self._convert_list(token, options)

        if token_type == 'thematic_break':
            return [{'object': 'block', 'type': 'divider', 'divider': {}}]

        if token_type == 'table':
            return [self._table_block(token, options)]

        if token_type == 'block_html':
            if options.allow_unsupported:
                return [{
                    'object': 'unsupported',
                    'type': 'html',
                    'html': {'raw': token.get('raw', '')},
                }]
            return []

        logger.debug(f"Ignoring markdown token of type '{token_type}'")
        return []

    def _convert_paragraph(self, children: List[Dict[str, Any]], options: ConversionOptions) -> List[Dict[str, Any]]:
        # Images are hoisted out of the paragraph into their own blocks
        blocks: List[Dict[str, Any]] = []
        pending: List[Dict[str, Any]] = []

        def flush():
            rich = self._rich_text(pending)
            if any(item['text']['content'].strip() for item in rich):
                blocks.append(paragraph_block(rich))
            pending.clear()

        for child in children:
            if child.get('type') == 'image':
                url = child.get('attrs', {}).get('url', '')
                if self._is_acceptable_image(url, options):
                    flush()
                    blocks.append(self._image_block(url))
                    continue
                # Degrade to a link carrying the alt text
                pending.append({
                    'type': 'link',
                    'attrs': {'url': url},
                    'children': child.get('children') or [{'type': 'text', 'raw': url}],
                })
                continue
            pending.append(child)
        flush()
        return blocks

    @staticmethod
    def _is_acceptable_image(url: str, options: ConversionOptions) -> bool:
        if not url:
            return False
        if not options.strict_image_urls:
            return True
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return False
        return os.path.splitext(parsed.path)[1].lower() in IMAGE_EXTENSIONS

    @staticmethod
    def _image_block(url: str) -> Dict[str, Any]:
        return {
            'object': 'block',
            'type': 'image',
            'image': {'type': 'external', 'external': {'url': url}},
        }

    def _code_block(self, token: Dict[str, Any]) -> Dict[str, Any]:
        info = (token.get('attrs', {}).get('info') or '').strip().split(' ')[0].lower()
        language = LANGUAGE_ALIASES.get(info, info)
        if language not in NOTION_CODE_LANGUAGES:
            language = 'plain text'
        raw = token.get('raw', '')
        if raw.endswith('\n'):
            raw = raw[:-1]
        return {
            'object': 'block',
            'type': 'code',
            'code': {
                'rich_text': [text_object(piece) for piece in split_text(raw)],
                'language': language,
            },
        }

    def _quote_block(self, token: Dict[str, Any], options: ConversionOptions) -> Dict[str, Any]:
        inner = []
        for child in token.get('children', []):
            inner.extend(self._convert_block(child, options))

        rich: List[Dict[str, Any]] = []
        children: List[Dict[str, Any]] = []
        for block in inner:
            if block.get('type') == 'paragraph' and not children:
                if rich:
                    rich.append(text_object('\n'))
                rich.extend(block['paragraph']['rich_text'])
            else:
                children.append(block)

        quote: Dict[str, Any] = {'rich_text': rich}
        if children:
            quote['children'] = children
        return {'object': 'block', 'type': 'quote', 'quote': quote}

    def _convert_list(self, token: Dict[str, Any], options: ConversionOptions) -> List[Dict[str, Any]]:
        ordered = token.get('attrs', {}).get('ordered', False)
        blocks = []
        for item in token.get('children', []):
            if item.get('type') == 'task_list_item':
                block_type = 'to_do'
            elif ordered:
                block_type = 'numbered_list_item'
            else:
                block_type = 'bulleted_list_item'

            rich: List[Dict[str, Any]] = []
            children: List[Dict[str, Any]] = []
            for child in item.get('children', []):
                if child.get('type') in ('block_text', 'paragraph') and not rich and not children:
                    rich = self._rich_text(child.get('children', []))
                else:
                    children.extend(self._convert_block(child, options))

            body: Dict[str, Any] = {'rich_text': rich}
            if block_type == 'to_do':
                body['checked'] = bool(item.get('attrs', {}).get('checked'))
            if children:
                body['children'] = children
            blocks.append({'object': 'block', 'type': block_type, block_type: body})
        return blocks

    def _table_block(self, token: Dict[str, Any], options: ConversionOptions) -> Dict[str, Any]:
        rows: List[List[Dict[str, Any]]] = []
        for section in token.get('children', []):
            if section.get('type') == 'table_head':
                rows.append(section.get('children', []))
            elif section.get('type') == 'table_body':
                for row in section.get('children', []):
                    rows.append(row.get('children', []))

        width = max((len(cells) for cells in rows), default=0)
        table_rows = []
        for cells in rows:
            table_rows.append({
                'object': 'block',
                'type': 'table_row',
                'table_row': {
                    'cells': [self._rich_text(cell.get('children', [])) for cell in cells],
                },
            })

        return {
            'object': 'unsupported' if options.allow_unsupported else 'block',
            'type': 'table',
            'table': {
                'table_width': width,
                'has_column_header': True,
                'has_row_header': False,
                'children': table_rows,
            },
        }

    def _rich_text(
        self,
        tokens: List[Dict[str, Any]],
        annotations: Optional[Dict[str, Any]] = None,
        link: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        annotations = annotations or {}
        result: List[Dict[str, Any]] = []
        for token in tokens:
            token_type = token.get('type')
            if token_type in ('text', 'inline_html'):
                content = token.get('raw', '')
                for piece in split_text(content):
                    if piece:
                        result.append(text_object(piece, annotations or None, link))
            elif token_type == 'codespan':
                result.append(text_object(token.get('raw', ''), {**annotations, 'code': True}, link))
            elif token_type == 'emphasis':
                result.extend(self._rich_text(token.get('children', []), {**annotations, 'italic': True}, link))
            elif token_type == 'strong':
                result.extend(self._rich_text(token.get('children', []), {**annotations, 'bold': True}, link))
            elif token_type == 'strikethrough':
                result.extend(self._rich_text(token.get('children', []), {**annotations, 'strikethrough': True}, link))
            elif token_type == 'link':
                url = token.get('attrs', {}).get('url', '')
                if not _is_web_url(url):
                    url = None
                result.extend(self._rich_text(token.get('children', []), annotations, url or link))
            elif token_type == 'image':
                # Inline images inside headings, cells and list items stay as text
                alt = token.get('children') or [{'type': 'text', 'raw': token.get('attrs', {}).get('url', '')}]
                result.extend(self._rich_text(alt, annotations, link))
            elif token_type in ('linebreak', 'softbreak'):
                result.append(text_object('\n' if token_type == 'linebreak' else ' ', annotations or None, link))
            elif 'children' in token:
                result.extend(self._rich_text(token['children'], annotations, link))
            elif 'raw' in token:
                result.append(text_object(token['raw'], annotations or None, link))
        return result
