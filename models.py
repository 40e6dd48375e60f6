"""Data models for the compendium export pipeline."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger('compendium_exporter')


class ValueKind(Enum):
    """Kinds of values that can appear inside a document record."""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def value_kind(value: Any) -> ValueKind:
    """
    Classify a plain-data value.

    Args:
        value: Value taken from a document record

    Returns:
        The ValueKind of the value

    Raises:
        TypeError: If the value is not plain data
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise TypeError(f"Unsupported value type in record: {type(value).__name__}")


@dataclass
class Document:
    """A single exportable record with identity, display name and field data."""

    id: str
    data: Dict[str, Any]
    name: Optional[str] = None
    kind: Optional[str] = None
    collection_key: Optional[str] = None

    def to_plain_data(self) -> Dict[str, Any]:
        """Return the plain-data form used by the structured dumps."""
        return self.data

    def __eq__(self, other: Any) -> bool:
        """Compare documents by collection and ID."""
        if not isinstance(other, Document):
            return False
        return self.id == other.id and self.collection_key == other.collection_key

    def __hash__(self) -> int:
        """Hash document by collection and ID."""
        return hash((self.collection_key, self.id))


@dataclass(frozen=True)
class CollectionInfo:
    """A collection as presented for selection."""

    key: str
    label: str


@dataclass(frozen=True)
class ResolvedCollection:
    """A collection whose document index has been read."""

    key: str
    label: str
    document_ids: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.document_ids)


@dataclass(frozen=True)
class ExportFormats:
    """Independently toggled output formats."""

    yaml: bool = True
    json: bool = False
    txt: bool = False

    def any_enabled(self) -> bool:
        return self.yaml or self.json or self.txt

    def enabled(self) -> List[str]:
        """Return the enabled format extensions in output order."""
        return [name for name in ('yaml', 'json', 'txt') if getattr(self, name)]


@dataclass(frozen=True)
class ExclusionConfig:
    """Keys and substrings filtered out of the human-readable export."""

    excluded_keys: Tuple[str, ...] = ()
    excluded_substrings: Tuple[str, ...] = ()

    def is_excluded_key(self, key: str) -> bool:
        return key in self.excluded_keys


@dataclass(frozen=True)
class ExportConfig:
    """Settings for one export run, frozen at run start."""

    formats: ExportFormats = field(default_factory=ExportFormats)
    exclusions: ExclusionConfig = field(default_factory=ExclusionConfig)
    batch_size: int = 100
    min_wait_ms: float = 0
    show_progress: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise ValueError("Batch size must be a positive integer.")
        if not self.formats.any_enabled():
            raise ValueError("At least one export format (YAML, JSON or TXT) must be enabled.")
        if not isinstance(self.min_wait_ms, (int, float)) or self.min_wait_ms < 0 or not math.isfinite(self.min_wait_ms):
            raise ValueError("Minimum wait must be a non-negative number of milliseconds.")


@dataclass
class BatchResult:
    """Outcome of finalizing one batch archive."""

    collection_key: str
    batch_number: int
    filename: str
    document_count: int
    entry_count: int
    size_bytes: int = 0
    delivered: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize batch result to dictionary."""
        return {
            'collection_key': self.collection_key,
            'batch_number': self.batch_number,
            'filename': self.filename,
            'document_count': self.document_count,
            'entry_count': self.entry_count,
            'size_bytes': self.size_bytes,
            'delivered': self.delivered,
            'error': self.error
        }


@dataclass
class ExportRun:
    """Transient state of a single export invocation."""

    collection_keys: List[str]
    formats: ExportFormats
    cancellation: Any = None
    completed_collections: int = 0
    skipped_collections: List[str] = field(default_factory=list)
    failed_collections: List[str] = field(default_factory=list)
    batches: List[BatchResult] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    documents_processed: int = 0
    halted: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def record_warning(self, collection_key: str, message: str, **context: Any) -> None:
        self.warnings.append({'collection_key': collection_key, 'message': message, **context})

    def record_error(self, collection_key: str, message: str, **context: Any) -> None:
        self.errors.append({'collection_key': collection_key, 'message': message, **context})

    @property
    def delivered_batches(self) -> List[BatchResult]:
        return [batch for batch in self.batches if batch.delivered]

    @property
    def duration_seconds(self) -> float:
        end = self.finished_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def batches_for(self, collection_key: str) -> List[BatchResult]:
        """Get the batches produced for one collection, in order."""
        return [batch for batch in self.batches if batch.collection_key == collection_key]
