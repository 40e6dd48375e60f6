"""Heuristics deciding whether a value belongs in the human-readable export."""

import logging
import math
import re
from typing import Any, Iterable, Optional, Pattern, Tuple

logger = logging.getLogger('compendium_exporter.converters.readability')

MAX_TEXT_LENGTH = 100_000
MAX_NUMBER_MAGNITUDE = 1_000_000_000_000

# Strings shorter than this may not contain any bracket, brace or angle character
SHORT_TEXT_LENGTH = 100
# Unspaced dotted identifiers shorter than this are treated as machine tokens
SHORT_IDENTIFIER_LENGTH = 50

BRACKET_PATTERN = re.compile(r'[\[\]{}<>]')
DOTTED_IDENTIFIER_PATTERN = re.compile(r'[A-Za-z_][\w-]*\.[A-Za-z_][\w-]*')

# (name, pattern) pairs; any match marks a string as machine-oriented
MACHINE_TEXT_PATTERNS: Tuple[Tuple[str, Pattern], ...] = (
    ('reference_link', re.compile(r'@[A-Za-z]+\[|&Reference\[')),
    ('compendium_path', re.compile(r'Compendium\.[\w-]{3,}\.[\w-]{3,}')),
    ('identifier_call', re.compile(r'[a-z]+(?:-[a-z]+)*\.[A-Z][A-Za-z]*\.[A-Za-z0-9]{10,}')),
    ('symbol_run', re.compile(r'[^a-zA-Z0-9\s.,!?;:\'"-]{4,}')),
    ('separator_rule', re.compile(r'-{3,}')),
    ('long_token', re.compile(r'[A-Za-z0-9_]{25,}')),
    ('html_entity', re.compile(r'&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);')),
)


class ReadabilityClassifier:
    """
    Denoising filter separating prose from machine-oriented strings.

    Both is_readable() and is_natural_language() have to pass for a string to
    be kept. False positives are tuned through the excluded substrings list,
    not through the fixed patterns.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('compendium_exporter.converters.readability')

    @staticmethod
    def is_readable(processed_text: Any) -> bool:
        """Check that converted text is non-empty and not excessively long."""
        if not isinstance(processed_text, str):
            return False
        return 0 < len(processed_text) <= MAX_TEXT_LENGTH

    @staticmethod
    def is_readable_number(value: Any) -> bool:
        """Check that a number is finite, nonzero and of a sensible magnitude."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if isinstance(value, float) and not math.isfinite(value):
            return False
        return value != 0 and -MAX_NUMBER_MAGNITUDE <= value <= MAX_NUMBER_MAGNITUDE

    def is_natural_language(self, text: str, excluded_substrings: Iterable[str] = ()) -> bool:
        """
        Check that text reads like prose rather than markup or identifiers.

        Args:
            text: Converted text
            excluded_substrings: Substrings that disqualify the text outright

        Returns:
            True if the text should be kept
        """
        if not text:
            return False

        for substring in excluded_substrings:
            if substring and substring in text:
                self.logger.debug(f"Rejected text containing excluded substring {substring!r}")
                return False

        for name, pattern in MACHINE_TEXT_PATTERNS:
            if pattern.search(text):
                self.logger.debug(f"Rejected text matching {name}: {text[:60]!r}")
                return False

        if len(text) < SHORT_TEXT_LENGTH and BRACKET_PATTERN.search(text):
            return False

        if (len(text) < SHORT_IDENTIFIER_LENGTH
                and not any(c.isspace() for c in text)
                and DOTTED_IDENTIFIER_PATTERN.fullmatch(text)):
            return False

        return True

    def accepts_text(self, text: str, excluded_substrings: Iterable[str] = ()) -> bool:
        """Check both text predicates."""
        return self.is_readable(text) and self.is_natural_language(text, excluded_substrings)


__all__ = ['ReadabilityClassifier', 'MAX_TEXT_LENGTH', 'MAX_NUMBER_MAGNITUDE']
