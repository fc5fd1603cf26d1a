"""Content conversion module for Markdown → Notion blocks.

This module provides the MarkdownConverter that parses Markdown with
mistune and produces Notion block objects.
"""

from .markdown_converter import ConversionOptions, MarkdownConverter

__all__ = ['ConversionOptions', 'MarkdownConverter']
