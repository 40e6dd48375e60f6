"""Abstract document source interface and its errors."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from models import CollectionInfo, Document, ResolvedCollection


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


class CollectionNotFoundError(FetcherError):
    """Exception for collection keys that do not resolve to a collection."""
    pass


class DocumentFetchError(FetcherError):
    """Exception for documents that cannot be loaded."""
    pass


class BaseFetcher(ABC):
    """Abstract base class for document sources."""

    def __init__(self, config: Dict[str, Any], logger=None):
        """
        Initialize base fetcher with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger

        if not self.logger:
            import logging
            self.logger = logging.getLogger('compendium_exporter.fetcher')

    @abstractmethod
    def list_collections(self) -> List[CollectionInfo]:
        """
        List the collections available for export.

        Returns:
            CollectionInfo objects in presentation order
        """
        pass

    @abstractmethod
    def resolve_collection(self, collection_key: str) -> ResolvedCollection:
        """
        Read a collection's document index.

        Args:
            collection_key: Collection key

        Returns:
            ResolvedCollection with ordered document IDs

        Raises:
            CollectionNotFoundError: If the key does not name a collection
        """
        pass

    @abstractmethod
    def fetch_document(self, collection_key: str, document_id: str) -> Document:
        """
        Load one document in full.

        Args:
            collection_key: Collection key
            document_id: Document ID from the collection index

        Returns:
            Document

        Raises:
            DocumentFetchError: If the document cannot be loaded
        """
        pass


__all__ = ['BaseFetcher', 'FetcherError', 'CollectionNotFoundError', 'DocumentFetchError']
