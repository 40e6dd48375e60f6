"""Fetchers package for reading collections and documents from a document store."""

from .base_fetcher import BaseFetcher, CollectionNotFoundError, DocumentFetchError, FetcherError
from .directory_fetcher import DirectoryFetcher


class FetcherFactory:
    """Factory for creating fetcher instances based on configuration."""

    @staticmethod
    def create_fetcher(config: dict, logger=None):
        """Create appropriate fetcher based on config source type.

        Args:
            config: Configuration dictionary
            logger: Logger instance

        Returns:
            BaseFetcher instance

        Raises:
            ValueError: If source type is invalid
        """
        source_type = config.get('source', {}).get('type', 'directory')

        if source_type == 'directory':
            return DirectoryFetcher(config, logger)
        else:
            raise ValueError(f"Invalid source type: {source_type}. Must be 'directory'.")


__all__ = [
    'BaseFetcher',
    'FetcherError',
    'CollectionNotFoundError',
    'DocumentFetchError',
    'DirectoryFetcher',
    'FetcherFactory'
]
