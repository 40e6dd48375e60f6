"""Directory fetcher reading collections of JSON/YAML documents from disk."""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from models import CollectionInfo, Document, ResolvedCollection
from .base_fetcher import BaseFetcher, CollectionNotFoundError, DocumentFetchError

logger = logging.getLogger('compendium_exporter.fetcher.directory')

METADATA_FILENAME = 'collection.yaml'
DOCUMENT_SUFFIXES = ('.json', '.yaml', '.yml')


class DirectoryFetcher(BaseFetcher):
    """
    Reads collections from a directory tree.

    Layout::

        <source.directory>/
            spells/                  # collection key "spells"
                collection.yaml      # optional: label, document_kind, documents
                fireball.json        # document id "fireball"
                magic-missile.yaml

    Document IDs in a collection index are file stems. Without an explicit
    'documents' list in collection.yaml, documents are ordered by filename.
    """

    def __init__(self, config: Dict[str, Any], logger=None):
        """
        Initialize directory fetcher with configuration.

        Args:
            config: Configuration dictionary with source.directory
            logger: Logger instance (optional)
        """
        super().__init__(config, logger)

        source_directory = config.get('source', {}).get('directory')
        if not source_directory:
            raise ValueError("source.directory is required for the directory fetcher")

        self.root = Path(source_directory).resolve()
        if not self.root.is_dir():
            raise FileNotFoundError(f"Source directory not found: {self.root}")

        self._metadata_cache: Dict[str, Dict[str, Any]] = {}
        self.logger.info(f"Initialized DirectoryFetcher for path: {self.root}")

    def list_collections(self) -> List[CollectionInfo]:
        collections = []
        for path in sorted(self.root.iterdir()):
            if not path.is_dir() or path.name.startswith('.'):
                continue
            try:
                metadata = self._load_metadata(path.name, path)
            except CollectionNotFoundError as e:
                self.logger.warning(str(e))
                metadata = {}
            collections.append(CollectionInfo(key=path.name, label=str(metadata.get('label') or path.name)))
        return collections

    def resolve_collection(self, collection_key: str) -> ResolvedCollection:
        collection_dir = self._collection_dir(collection_key)
        metadata = self._load_metadata(collection_key, collection_dir)

        explicit_ids = metadata.get('documents')
        if explicit_ids is not None:
            if not isinstance(explicit_ids, list):
                raise CollectionNotFoundError(
                    f"'documents' in {collection_dir / METADATA_FILENAME} must be a list"
                )
            document_ids = tuple(str(document_id) for document_id in explicit_ids)
        else:
            document_ids = tuple(
                path.stem for path in sorted(collection_dir.iterdir())
                if path.is_file() and path.suffix in DOCUMENT_SUFFIXES and path.name != METADATA_FILENAME
            )

        self.logger.debug(f"Resolved collection '{collection_key}' with {len(document_ids)} documents")
        return ResolvedCollection(
            key=collection_key,
            label=str(metadata.get('label') or collection_key),
            document_ids=document_ids
        )

    def fetch_document(self, collection_key: str, document_id: str) -> Document:
        try:
            collection_dir = self._collection_dir(collection_key)
        except CollectionNotFoundError as e:
            raise DocumentFetchError(str(e)) from e

        path = self._document_path(collection_dir, document_id)
        if path is None:
            raise DocumentFetchError(f"Document '{document_id}' not found in collection '{collection_key}'")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise DocumentFetchError(f"Failed to read document {path}: {e}") from e

        if not isinstance(data, dict):
            raise DocumentFetchError(f"Document {path} must contain a mapping, got {type(data).__name__}")

        data = _to_plain_value(data)
        metadata = self._load_metadata(collection_key, collection_dir)

        record_id = str(data.get('_id') or data.get('id') or document_id)
        if '/' in record_id or '\\' in record_id:
            raise DocumentFetchError(f"Document {path} has an unsafe id: {record_id!r}")

        return Document(
            id=record_id,
            data=data,
            name=data.get('name') if isinstance(data.get('name'), str) else None,
            kind=metadata.get('document_kind') or _string_or_none(data.get('type')),
            collection_key=collection_key
        )

    def _collection_dir(self, collection_key: str) -> Path:
        if not collection_key or '/' in collection_key or '\\' in collection_key or collection_key in ('.', '..'):
            raise CollectionNotFoundError(f"Invalid collection key: {collection_key!r}")

        collection_dir = self.root / collection_key
        if not collection_dir.is_dir():
            raise CollectionNotFoundError(f"Collection not found: {collection_key}")
        return collection_dir

    @staticmethod
    def _document_path(collection_dir: Path, document_id: str) -> Optional[Path]:
        if not document_id or '/' in document_id or '\\' in document_id or document_id in ('.', '..'):
            return None
        for suffix in DOCUMENT_SUFFIXES:
            candidate = collection_dir / f"{document_id}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def _load_metadata(self, collection_key: str, collection_dir: Path) -> Dict[str, Any]:
        """Load collection.yaml once per collection."""
        if collection_key in self._metadata_cache:
            return self._metadata_cache[collection_key]

        metadata_path = collection_dir / METADATA_FILENAME
        metadata: Dict[str, Any] = {}
        if metadata_path.is_file():
            try:
                with open(metadata_path, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                raise CollectionNotFoundError(f"Unreadable collection metadata {metadata_path}: {e}") from e
            if isinstance(loaded, dict):
                metadata = loaded
            elif loaded is not None:
                self.logger.warning(f"Ignoring {metadata_path}: expected a mapping")

        self._metadata_cache[collection_key] = metadata
        return metadata


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _to_plain_value(value: Any) -> Any:
    """Normalize YAML-specific scalars (dates, timestamps) into plain data."""
    if isinstance(value, dict):
        return {str(key): _to_plain_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain_value(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
