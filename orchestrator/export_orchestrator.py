"""
Batch export orchestrator for turning collections into ZIP archives.

This module provides the central coordinator of an export run: it walks the
selected collections in order, fetches each document, renders the requested
formats, groups the output into batches of bounded size and hands every
finalized batch to the delivery target.
"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional

from tqdm import tqdm

from converters import ContentScrubber
from exporters import (
    ArchiveBatchWriter,
    ArchiveError,
    BatchDelivery,
    batch_archive_name,
    document_basename,
    entry_name,
    render_document
)
from fetchers import BaseFetcher, CollectionNotFoundError
from logger import ProgressTracker, log_section
from models import BatchResult, Document, ExportConfig, ExportRun, ResolvedCollection
from orchestrator.cancellation import CancellationToken, ExportHalted

logger = logging.getLogger(__name__)


class CollectionState(Enum):
    """Per-collection processing states."""
    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    ACCUMULATING = "accumulating"
    FINALIZING = "finalizing"
    HALTED = "halted"


class BatchExportOrchestrator:
    """Central coordinator sequencing Fetch → Render → Batch → Finalize → Deliver."""

    def __init__(
        self,
        config: ExportConfig,
        fetcher: BaseFetcher,
        delivery: BatchDelivery,
        logger: Optional[logging.Logger] = None,
        scrubber: Optional[ContentScrubber] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Frozen settings for the run
            fetcher: Source of collections and documents
            delivery: Target receiving finalized archives
            logger: Optional logger instance
            scrubber: Optional scrubber for TXT output (built from config if not provided)
            sleep: Function used for the inter-document delay
        """
        self.config = config
        self.fetcher = fetcher
        self.delivery = delivery
        self.logger = logger or logging.getLogger('compendium_exporter.orchestrator')
        self.scrubber = scrubber or ContentScrubber(config.exclusions, logger=self.logger)
        self._sleep = sleep
        self.state = CollectionState.IDLE

        self.logger.info(
            f"BatchExportOrchestrator initialized: formats={config.formats.enabled()}, "
            f"batch_size={config.batch_size}, min_wait_ms={config.min_wait_ms}"
        )

    def run(self, collection_keys: Iterable[str], cancellation: Optional[CancellationToken] = None) -> ExportRun:
        """
        Export every selected collection as one or more batch archives.

        Collections are processed in the given order. Cancellation is checked
        before each collection and before each document; once observed, the
        run stops and any batch that was not yet finalized is discarded.

        Args:
            collection_keys: Keys of the collections to export
            cancellation: Optional cancellation token

        Returns:
            ExportRun describing batches, warnings and errors
        """
        token = cancellation or CancellationToken()
        run = ExportRun(
            collection_keys=list(collection_keys),
            formats=self.config.formats,
            cancellation=token
        )

        log_section("Export")
        self.logger.info(
            f"Starting export of {len(run.collection_keys)} collections. "
            f"YAML: {run.formats.yaml}, JSON: {run.formats.json}, TXT: {run.formats.txt}"
        )
        self.logger.info(f"Using excluded keys for TXT: {', '.join(self.config.exclusions.excluded_keys)}")

        with ProgressTracker(total_items=len(run.collection_keys), item_type='collections') as tracker:
            for collection_key in run.collection_keys:
                if token.is_cancelled():
                    self._halt(run)
                    break

                try:
                    exported = self._export_collection(collection_key, run, token)
                except ExportHalted:
                    self._halt(run)
                    break
                except Exception as e:
                    self.state = CollectionState.IDLE
                    self.logger.error(f"Failed to export {collection_key}: {str(e)}", exc_info=True)
                    run.failed_collections.append(collection_key)
                    run.record_error(collection_key, f"Failed to export {collection_key}: {e}", phase='collection')
                    tracker.increment(success=False)
                    continue

                if exported:
                    run.completed_collections += 1
                tracker.increment(success=exported)

        run.finished_at = datetime.now()
        if not run.halted:
            self.logger.info(
                f"Export complete: {run.completed_collections}/{len(run.collection_keys)} collections, "
                f"{len(run.delivered_batches)} archives"
            )
        return run

    def _export_collection(self, collection_key: str, run: ExportRun, token: CancellationToken) -> bool:
        """
        Export one collection.

        Returns:
            True if the collection was exported, False if it was skipped

        Raises:
            ExportHalted: If cancellation was observed
        """
        self.logger.info(f"Processing collection: {collection_key}")

        try:
            collection = self.fetcher.resolve_collection(collection_key)
        except CollectionNotFoundError as e:
            self.logger.warning(f"Skipped invalid collection: {collection_key} ({e})")
            run.skipped_collections.append(collection_key)
            run.record_warning(collection_key, f"Skipped invalid collection: {e}")
            return False

        if not collection.document_ids:
            self.logger.warning(f"Skipped empty collection: {collection_key}")
            run.skipped_collections.append(collection_key)
            run.record_warning(collection_key, "Skipped empty collection")
            return False

        self._export_documents(collection, run, token)
        self.state = CollectionState.IDLE
        return True

    def _export_documents(self, collection: ResolvedCollection, run: ExportRun, token: CancellationToken) -> None:
        batch_size = self.config.batch_size
        batch_number = 1
        writer = ArchiveBatchWriter(logger=self.logger)
        docs_in_current_batch = 0

        with tqdm(
            total=len(collection.document_ids),
            desc=collection.label[:32],
            unit='doc',
            disable=not self.config.show_progress
        ) as pbar:
            for index, document_id in enumerate(collection.document_ids):
                if token.is_cancelled():
                    if docs_in_current_batch:
                        self.logger.warning(
                            f"Discarding unfinished batch {batch_number} of {collection.key} "
                            f"({docs_in_current_batch} documents)"
                        )
                    self.state = CollectionState.HALTED
                    raise ExportHalted()

                if index and self.config.min_wait_ms > 0:
                    self._sleep(self.config.min_wait_ms / 1000)

                self.state = CollectionState.FETCHING
                document = self.fetcher.fetch_document(collection.key, document_id)

                self.state = CollectionState.PROCESSING
                self._append_document(writer, document)

                self.state = CollectionState.ACCUMULATING
                docs_in_current_batch += 1
                run.documents_processed += 1
                pbar.update(1)

                if docs_in_current_batch >= batch_size:
                    self._finalize_batch(writer, collection.key, batch_number, docs_in_current_batch, run)
                    batch_number += 1
                    writer = ArchiveBatchWriter(logger=self.logger)
                    docs_in_current_batch = 0

        if docs_in_current_batch > 0:
            self._finalize_batch(writer, collection.key, batch_number, docs_in_current_batch, run)

    def _append_document(self, writer: ArchiveBatchWriter, document: Document) -> None:
        """Render a document in each enabled format and add the entries to the batch."""
        basename = document_basename(document.name, document.kind, document.id)
        for extension, content in render_document(document, self.config.formats, self.scrubber):
            writer.append(entry_name(basename, extension), content)

    def _finalize_batch(
        self,
        writer: ArchiveBatchWriter,
        collection_key: str,
        batch_number: int,
        document_count: int,
        run: ExportRun
    ) -> BatchResult:
        """Finalize a batch and deliver it; failures are recorded, not raised."""
        self.state = CollectionState.FINALIZING
        filename = batch_archive_name(collection_key, batch_number)
        result = BatchResult(
            collection_key=collection_key,
            batch_number=batch_number,
            filename=filename,
            document_count=document_count,
            entry_count=writer.entry_count
        )
        self.logger.info(f"Generating ZIP for batch {batch_number} of collection {collection_key}")

        try:
            content = writer.finalize()
            result.size_bytes = len(content)
            self.delivery.deliver(filename, content)
            result.delivered = True
            self.logger.info(f"Batch {batch_number} finalized and delivered as {filename}")
        except Exception as e:
            result.error = str(e)
            self.logger.error(
                f"Failed to finalize batch {batch_number} of {collection_key}: {str(e)}",
                exc_info=not isinstance(e, (ArchiveError, OSError))
            )
            run.record_error(
                collection_key,
                f"Failed to finalize batch {batch_number}: {e}",
                phase='finalize',
                batch_number=batch_number
            )

        run.batches.append(result)
        self.state = CollectionState.ACCUMULATING
        return result

    def _halt(self, run: ExportRun) -> None:
        self.state = CollectionState.HALTED
        run.halted = True
        self.logger.warning("Export halted by user.")


__all__ = ['BatchExportOrchestrator', 'CollectionState']
