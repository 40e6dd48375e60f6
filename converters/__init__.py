"""Converters package turning raw document records into human-readable text."""

import logging

from .content_scrubber import ContentScrubber, prune_empty, scrub_record
from .markup_parser import MarkupParser, RegexMarkupParser, SoupMarkupParser
from .readability import ReadabilityClassifier
from .text_converter import TextConverter

logger = logging.getLogger('compendium_exporter.converters')

_default_converter = None


def convert_markup(markup, logger=None):
    """
    Convenience function to convert rich-text markup to plain text.

    This runs the full conversion pipeline:
    1. Structural parsing with BeautifulSoup (regex-only fallback on failure)
    2. Removal of reference links (@UUID[...]{...}, @Embed, @Compendium, &Reference)
    3. Collapse of doubled brackets ([[...]] to [...])
    4. Whitespace normalization

    Args:
        markup: Markup string; non-strings convert to ''
        logger: Optional logger instance (uses a shared converter if not provided)

    Returns:
        str: Converted text

    Example:
        >>> from converters import convert_markup
        >>> convert_markup('<p>@UUID[Actor.abc123]{My Actor} did a thing</p>')
        'did a thing'
    """
    global _default_converter

    if logger is not None:
        return TextConverter(logger=logger).convert(markup)

    if _default_converter is None:
        _default_converter = TextConverter()
    return _default_converter.convert(markup)


__all__ = [
    'convert_markup',
    'TextConverter',
    'MarkupParser',
    'SoupMarkupParser',
    'RegexMarkupParser',
    'ReadabilityClassifier',
    'ContentScrubber',
    'prune_empty',
    'scrub_record'
]
