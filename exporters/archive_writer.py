"""In-memory ZIP writer holding one batch of exported entries."""

import io
import logging
import zipfile
from typing import List, Optional, Tuple, Union

logger = logging.getLogger('compendium_exporter.exporters.archive_writer')


class ArchiveError(Exception):
    """Raised when a batch archive cannot be assembled."""
    pass


class ArchiveBatchWriter:
    """
    Accumulates named entries and finalizes them into a ZIP archive.

    Entries may only be appended before finalize(), and finalize() may only be
    called once per writer. A new writer is used for every batch.
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED, logger: Optional[logging.Logger] = None):
        self.compression = compression
        self.logger = logger or logging.getLogger('compendium_exporter.exporters.archive_writer')
        self._entries: List[Tuple[str, bytes]] = []
        self._finalized = False

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def entry_names(self) -> List[str]:
        return [name for name, _ in self._entries]

    @property
    def finalized(self) -> bool:
        return self._finalized

    def append(self, name: str, content: Union[bytes, str]) -> None:
        """
        Add a named entry to the batch.

        Args:
            name: Entry name inside the archive
            content: Entry content; text is encoded as UTF-8

        Raises:
            ArchiveError: If the writer was already finalized or content cannot be encoded
        """
        if self._finalized:
            raise ArchiveError(f"Cannot append '{name}': archive already finalized")

        if isinstance(content, str):
            try:
                content = content.encode('utf-8')
            except UnicodeEncodeError as e:
                raise ArchiveError(f"Cannot encode entry '{name}': {e}") from e

        self._entries.append((name, bytes(content)))

    def finalize(self) -> bytes:
        """
        Build the archive from all appended entries.

        Returns:
            ZIP archive bytes

        Raises:
            ArchiveError: If called twice or the archive cannot be written
        """
        if self._finalized:
            raise ArchiveError("Archive already finalized")
        self._finalized = True

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, 'w', compression=self.compression) as archive:
                for name, content in self._entries:
                    archive.writestr(name, content)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise ArchiveError(f"Failed to build archive: {e}") from e

        data = buffer.getvalue()
        self.logger.debug(f"Finalized archive with {len(self._entries)} entries ({len(data)} bytes)")
        # Entries are no longer needed once the archive exists
        self._entries.clear()
        return data


__all__ = ['ArchiveBatchWriter', 'ArchiveError']
