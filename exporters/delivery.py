"""Delivery of finalized batch archives to the user."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union


class BatchDelivery(ABC):
    """Offers a finalized archive to the user."""

    @abstractmethod
    def deliver(self, filename: str, content: bytes) -> Optional[Path]:
        """
        Deliver one archive.

        Args:
            filename: Archive file name
            content: Archive bytes

        Returns:
            Location of the delivered file, if it has one
        """
        pass


class DirectoryDelivery(BatchDelivery):
    """Writes each archive into an output directory."""

    def __init__(self, output_directory: Union[str, Path], logger: Optional[logging.Logger] = None):
        self.output_directory = Path(output_directory)
        self.logger = logger or logging.getLogger('compendium_exporter.exporters.delivery')
        self.delivered_files = []

    def deliver(self, filename: str, content: bytes) -> Path:
        self.output_directory.mkdir(parents=True, exist_ok=True)
        target = self.output_directory / filename
        target.write_bytes(content)
        self.delivered_files.append(target)
        self.logger.info(f"Wrote {target} ({len(content)} bytes)")
        return target


__all__ = ['BatchDelivery', 'DirectoryDelivery']
