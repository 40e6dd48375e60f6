"""Scrubbing of nested document records into a human-readable projection."""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from models import ExclusionConfig, ValueKind, value_kind
from .readability import ReadabilityClassifier
from .text_converter import TextConverter

logger = logging.getLogger('compendium_exporter.converters.contentscrubber')

# Field whose nested "value" string holds the rich-text body of a document
DESCRIPTION_KEY = 'description'

_ABSENT = object()


class ContentScrubber:
    """
    Walks a nested record and keeps only human-readable content.

    Excluded keys are dropped at every depth, strings are converted from
    markup and filtered by the readability heuristics, numbers are range
    checked, booleans and nulls are dropped, and containers left with no
    content are removed.

    Records are assumed to be trees; cyclic input is not supported.
    """

    def __init__(
        self,
        exclusions: Optional[ExclusionConfig] = None,
        converter: Optional[TextConverter] = None,
        classifier: Optional[ReadabilityClassifier] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.exclusions = exclusions or ExclusionConfig()
        self.converter = converter or TextConverter()
        self.classifier = classifier or ReadabilityClassifier()
        self.logger = logger or logging.getLogger('compendium_exporter.converters.contentscrubber')

    def scrub(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Scrub a record, keeping its shape minus excluded or unreadable parts.

        Args:
            record: Plain-data mapping of a document

        Returns:
            Scrubbed mapping (possibly empty)
        """
        scrubbed = {}
        for key, value in record.items():
            if self.exclusions.is_excluded_key(key):
                continue

            kept = self._scrub_field(key, value)
            if kept is not _ABSENT:
                scrubbed[key] = kept
        return scrubbed

    def scrub_and_prune(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Scrub a record and sweep any leftover empty containers."""
        return prune_empty(self.scrub(record))

    def _scrub_field(self, key: str, value: Any) -> Any:
        kind = value_kind(value)

        if kind is ValueKind.OBJECT and key == DESCRIPTION_KEY and isinstance(value.get('value'), str):
            return self._scrub_text(value['value'])

        return self._scrub_value(value, kind)

    def _scrub_value(self, value: Any, kind: ValueKind) -> Any:
        if kind is ValueKind.OBJECT:
            nested = self.scrub(value)
            return nested if nested else _ABSENT

        if kind is ValueKind.ARRAY:
            items = []
            for item in value:
                kept = self._scrub_value(item, value_kind(item))
                if kept is not _ABSENT:
                    items.append(kept)
            return items if items else _ABSENT

        if kind is ValueKind.STRING:
            return self._scrub_text(value)

        if kind is ValueKind.NUMBER:
            return value if self.classifier.is_readable_number(value) else _ABSENT

        # NULL and BOOLEAN never carry readable content
        return _ABSENT

    def _scrub_text(self, markup: str) -> Any:
        text = self.converter.convert(markup)
        if self.classifier.accepts_text(text, self.exclusions.excluded_substrings):
            return text
        return _ABSENT


def prune_empty(tree: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Remove empty containers and blank strings from a scrubbed tree.

    Emptiness propagates upward: a mapping whose only field was an empty list
    is removed as well. Applying the function twice gives the same result as
    applying it once.

    Args:
        tree: Mapping to prune

    Returns:
        Pruned mapping; an entirely empty tree becomes {}
    """
    pruned = _prune(tree)
    return {} if pruned is _ABSENT else pruned


def _prune(value: Any) -> Any:
    kind = value_kind(value)

    if kind is ValueKind.OBJECT:
        pruned = {}
        for key, item in value.items():
            kept = _prune(item)
            if kept is not _ABSENT:
                pruned[key] = kept
        return pruned if pruned else _ABSENT

    if kind is ValueKind.ARRAY:
        items = [kept for kept in (_prune(item) for item in value) if kept is not _ABSENT]
        return items if items else _ABSENT

    if kind is ValueKind.STRING:
        return value if value.strip() else _ABSENT

    return value


def scrub_record(
    record: Mapping[str, Any],
    excluded_keys: Iterable[str] = (),
    excluded_substrings: Iterable[str] = ()
) -> Dict[str, Any]:
    """
    Convenience function to scrub and prune one record.

    Example:
        >>> scrub_record({'_id': 'x1', 'name': 'Longsword'}, excluded_keys=['_id'])
        {'name': 'Longsword'}
    """
    exclusions = ExclusionConfig(
        excluded_keys=tuple(excluded_keys),
        excluded_substrings=tuple(excluded_substrings)
    )
    return ContentScrubber(exclusions).scrub_and_prune(record)


__all__ = ['ContentScrubber', 'prune_empty', 'scrub_record', 'DESCRIPTION_KEY']
