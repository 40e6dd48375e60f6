"""Markup-to-text conversion for the human-readable export."""

import logging
from typing import Any, Optional

from .markup_parser import (
    MarkupParser,
    RegexMarkupParser,
    SoupMarkupParser,
    normalize_whitespace,
    strip_reference_syntax
)

logger = logging.getLogger('compendium_exporter.converters.textconverter')


class TextConverter:
    """
    Converts rich-text markup into flat, readable text.

    The structural parser is tried first; if it raises, the raw string goes
    through the regex-only parser instead. Either way the result has reference
    links removed and whitespace normalized, so convert() never fails.
    """

    def __init__(
        self,
        parser: Optional[MarkupParser] = None,
        fallback_parser: Optional[MarkupParser] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.parser = parser or SoupMarkupParser()
        self.fallback_parser = fallback_parser or RegexMarkupParser()
        self.logger = logger or logging.getLogger('compendium_exporter.converters.textconverter')
        self.stats = {
            'converted': 0,
            'fallbacks': 0
        }

    def convert(self, markup: Any) -> str:
        """
        Convert markup to normalized plain text.

        Args:
            markup: Markup string; any other type yields an empty string

        Returns:
            Converted text
        """
        if not isinstance(markup, str) or not markup:
            return ''

        try:
            text = self.parser.extract_text(markup)
        except Exception as e:
            self.logger.debug(
                f"{self.parser.name} parser failed ({type(e).__name__}: {e}), "
                f"using {self.fallback_parser.name} fallback"
            )
            self.stats['fallbacks'] += 1
            text = self.fallback_parser.extract_text(markup)

        self.stats['converted'] += 1
        return normalize_whitespace(strip_reference_syntax(text))


__all__ = ['TextConverter']
