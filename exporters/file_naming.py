"""Filename construction for archive entries and batch archives."""

import re
from typing import Optional

MAX_FILENAME_PART_LENGTH = 255
UNNAMED_PLACEHOLDER = 'Unnamed'
UNKNOWN_KIND = 'UnknownType'
UNKNOWN_ID = 'UnknownID'

_UNSAFE_CHARACTERS = re.compile(r'[^A-Za-z0-9_-]')


def sanitize_filename_part(name: Optional[str]) -> str:
    """
    Make a string safe for use inside a filename.

    Every character outside [A-Za-z0-9_-] becomes an underscore and the result
    is truncated to 255 characters. Missing or empty input yields 'Unnamed'.
    """
    sanitized = _UNSAFE_CHARACTERS.sub('_', str(name or UNNAMED_PLACEHOLDER))
    return sanitized[:MAX_FILENAME_PART_LENGTH] or UNNAMED_PLACEHOLDER


def document_basename(name: Optional[str], kind: Optional[str], document_id: Optional[str]) -> str:
    """Build '{name}_{kind}_{id}' for a document's archive entries."""
    safe_name = sanitize_filename_part(name)
    safe_kind = sanitize_filename_part(kind or UNKNOWN_KIND)
    return f"{safe_name}_{safe_kind}_{document_id or UNKNOWN_ID}"


def entry_name(basename: str, extension: str) -> str:
    return f"{basename}.{extension}"


def batch_archive_name(collection_key: str, batch_number: int) -> str:
    """Build '{collection}_batch_{n}.zip' for a finalized batch."""
    return f"{sanitize_filename_part(collection_key)}_batch_{batch_number}.zip"


__all__ = [
    'sanitize_filename_part',
    'document_basename',
    'entry_name',
    'batch_archive_name',
    'UNNAMED_PLACEHOLDER'
]
