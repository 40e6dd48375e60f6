"""Export package producing batch archives from exported documents.

Package Structure:
- serializers: YAML/JSON dumps of raw documents and the TXT rendering of scrubbed ones
- archive_writer: In-memory ZIP writer holding one batch of entries
- file_naming: Sanitized entry and archive file names
- delivery: Hands finalized archives to the user (written to an output directory)

Configuration Referenced:
- export.output_directory: Where finalized archives are written
- export.formats: Which of YAML, JSON and TXT are produced
"""

from .archive_writer import ArchiveBatchWriter, ArchiveError
from .delivery import BatchDelivery, DirectoryDelivery
from .file_naming import batch_archive_name, document_basename, entry_name, sanitize_filename_part
from .serializers import dump_json, dump_yaml, render_document, serialize_txt

__all__ = [
    'ArchiveBatchWriter',
    'ArchiveError',
    'BatchDelivery',
    'DirectoryDelivery',
    'batch_archive_name',
    'document_basename',
    'entry_name',
    'sanitize_filename_part',
    'dump_json',
    'dump_yaml',
    'render_document',
    'serialize_txt'
]
