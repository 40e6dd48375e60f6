"""Orchestrator package coordinating export runs and reporting their outcome."""

from .cancellation import CancellationToken, ExportHalted
from .export_orchestrator import BatchExportOrchestrator, CollectionState
from .export_report import ExportReport

__all__ = [
    'BatchExportOrchestrator',
    'CollectionState',
    'CancellationToken',
    'ExportHalted',
    'ExportReport'
]
