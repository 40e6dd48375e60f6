"""Markup parsers that extract flat text from rich-text fields."""

import logging
import re
import warnings
from abc import ABC, abstractmethod
from typing import List

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, Tag
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction

logger = logging.getLogger('compendium_exporter.converters.markupparser')

# Elements after which a reader would expect a line break
BLOCK_ELEMENTS = frozenset({
    'address', 'article', 'aside', 'blockquote', 'br', 'dd', 'details', 'div',
    'dl', 'dt', 'fieldset', 'figcaption', 'figure', 'footer', 'form',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'header', 'hr', 'li', 'main', 'nav',
    'ol', 'p', 'pre', 'section', 'summary', 'table', 'tbody', 'td', 'tfoot',
    'th', 'thead', 'tr', 'ul'
})

SKIPPED_ELEMENTS = frozenset({'script', 'style', 'template'})

NON_TEXT_NODES = (Comment, Declaration, Doctype, ProcessingInstruction)


class MarkupParser(ABC):
    """Turns a markup string into plain text, before text-level cleanup."""

    name = 'abstract'

    @abstractmethod
    def extract_text(self, markup: str) -> str:
        """
        Extract the text content of a markup string.

        Args:
            markup: Rich-text markup

        Returns:
            Extracted text (not yet whitespace-normalized)
        """
        pass


class SoupMarkupParser(MarkupParser):
    """
    Structural parser backed by BeautifulSoup.

    Block-level elements are separated by a single space rather than a line
    break, so paragraphs run together as one line of prose.
    """

    name = 'structural'

    def __init__(self, features: str = 'lxml'):
        self.features = features

    def extract_text(self, markup: str) -> str:
        with warnings.catch_warnings():
            # Short field values often look like file names or URLs
            warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
            soup = BeautifulSoup(markup, self.features)
        parts: List[str] = []
        self._walk(soup, parts)
        return ''.join(parts)

    def _walk(self, node: Tag, parts: List[str]) -> None:
        """Depth-first traversal appending text nodes to parts."""
        for child in node.children:
            if isinstance(child, Tag):
                if child.name in SKIPPED_ELEMENTS:
                    continue
                is_block = child.name in BLOCK_ELEMENTS
                if is_block:
                    self._separate(parts)
                self._walk(child, parts)
                if is_block:
                    self._separate(parts)
            elif isinstance(child, NavigableString) and not isinstance(child, NON_TEXT_NODES):
                text = str(child)
                if text:
                    parts.append(text)

    @staticmethod
    def _separate(parts: List[str]) -> None:
        if parts and not parts[-1][-1].isspace():
            parts.append(' ')


class RegexMarkupParser(MarkupParser):
    """
    Regex-only fallback used when structural parsing fails.

    Tags are left in place; only the common literal entities are unescaped.
    """

    name = 'regex'

    # &amp; goes last so that "&amp;lt;" becomes "&lt;" and not "<"
    ENTITY_REPLACEMENTS = (
        ('&nbsp;', ' '),
        ('&lt;', '<'),
        ('&gt;', '>'),
        ('&quot;', '"'),
        ('&apos;', "'"),
        ('&amp;', '&'),
    )

    def extract_text(self, markup: str) -> str:
        text = markup
        for entity, replacement in self.ENTITY_REPLACEMENTS:
            text = text.replace(entity, replacement)
        return text


# Reference-link syntaxes: @UUID[...]{label}, @Embed[...], @Compendium[...], &Reference[...]
REFERENCE_LINK_PATTERN = re.compile(r'(?:@(?:UUID|Embed|Compendium)|&Reference)\[.*?\](?:\{[^}]*\})?')
DOUBLE_BRACKET_PATTERN = re.compile(r'\[\[(.*?)\]\]')
HORIZONTAL_WHITESPACE_PATTERN = re.compile(r'[^\S\n]+')
LINE_EDGE_SPACE_PATTERN = re.compile(r' *\n *')
BLANK_LINES_PATTERN = re.compile(r'\n{3,}')


def strip_reference_syntax(text: str) -> str:
    """Remove reference links and collapse doubled brackets."""
    text = text.replace('\u00a0', ' ')
    text = REFERENCE_LINK_PATTERN.sub('', text)
    text = DOUBLE_BRACKET_PATTERN.sub(r'[\1]', text)
    return text


def normalize_whitespace(text: str) -> str:
    """Collapse horizontal whitespace and blank lines, then trim."""
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = HORIZONTAL_WHITESPACE_PATTERN.sub(' ', text)
    text = LINE_EDGE_SPACE_PATTERN.sub('\n', text)
    text = BLANK_LINES_PATTERN.sub('\n\n', text)
    return text.strip()


__all__ = [
    'MarkupParser',
    'SoupMarkupParser',
    'RegexMarkupParser',
    'strip_reference_syntax',
    'normalize_whitespace',
    'REFERENCE_LINK_PATTERN',
    'BLOCK_ELEMENTS'
]
