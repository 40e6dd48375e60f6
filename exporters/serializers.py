"""YAML, JSON and plain-text serializers for exported documents."""

import json
import logging
from typing import Any, Iterator, List, Mapping, Optional, Tuple

import yaml

from models import Document, ExportFormats

logger = logging.getLogger('compendium_exporter.exporters.serializers')

TXT_INDENT = 2


def dump_yaml(data: Any) -> str:
    """Dump plain data as block-style YAML."""
    return yaml.dump(
        data,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000  # Prevent line wrapping
    )


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def serialize_txt(tree: Mapping[str, Any]) -> str:
    """
    Serialize a scrubbed tree as indented 'key: value' lines.

    Nested mappings appear under a 'key:' line indented by two spaces, list
    items as '- value'. An empty tree serializes to an empty string.

    Args:
        tree: Scrubbed and pruned mapping

    Returns:
        Human-readable text
    """
    return '\n'.join(_txt_lines(tree, 0))


def _txt_lines(data: Any, indent: int) -> Iterator[str]:
    prefix = ' ' * indent
    if isinstance(data, Mapping):
        entries = [(f"{key}:", value) for key, value in data.items()]
    else:
        entries = [('-', value) for value in data]

    for label, value in entries:
        if isinstance(value, (Mapping, list, tuple)):
            yield f"{prefix}{label}"
            yield from _txt_lines(value, indent + TXT_INDENT)
        else:
            first, *rest = _format_scalar(value).split('\n')
            yield f"{prefix}{label} {first}"
            continuation = ' ' * (indent + TXT_INDENT)
            for line in rest:
                yield f"{continuation}{line}" if line else ''


def _format_scalar(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_document(
    document: Document,
    formats: ExportFormats,
    scrubber: Optional[Any] = None
) -> List[Tuple[str, str]]:
    """
    Render a document in each enabled format.

    Args:
        document: Document to render
        formats: Enabled output formats
        scrubber: ContentScrubber, required when TXT output is enabled

    Returns:
        List of (extension, text) pairs in yaml, json, txt order
    """
    rendered = []
    plain_data = document.to_plain_data()

    if formats.yaml:
        rendered.append(('yaml', dump_yaml(plain_data)))

    if formats.json:
        rendered.append(('json', dump_json(plain_data)))

    if formats.txt:
        if scrubber is None:
            raise ValueError("A content scrubber is required for TXT output")
        rendered.append(('txt', serialize_txt(scrubber.scrub_and_prune(plain_data))))

    return rendered


__all__ = ['dump_yaml', 'dump_json', 'serialize_txt', 'render_document']
