"""
Export report generator summarizing a finished export run.

This module turns an ExportRun into a report dictionary and formats it for
console display and JSON export.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from logger import format_elapsed
from models import ExportRun

logger = logging.getLogger(__name__)


class ExportReport:
    """Generates export reports from the state of a finished run."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize export report generator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger('compendium_exporter.report')

    def generate_report(self, run: ExportRun) -> Dict[str, Any]:
        """
        Generate export report.

        Args:
            run: ExportRun returned by the orchestrator

        Returns:
            Export report dictionary
        """
        self.logger.info("Generating export report")

        report = {
            'summary': self._build_summary(run),
            'collections': self._build_collection_breakdown(run),
            'batches': [batch.to_dict() for batch in run.batches],
            'warnings': [dict(warning) for warning in run.warnings],
            'errors': [dict(error) for error in run.errors],
            'timestamp': datetime.now().isoformat()
        }

        self.logger.info(
            f"Report generated: {report['summary']['archives_delivered']} archives, "
            f"{report['summary']['total_errors']} errors"
        )

        return report

    def _build_summary(self, run: ExportRun) -> Dict[str, Any]:
        """Build high-level summary section."""
        duration = run.duration_seconds
        return {
            'collections_requested': len(run.collection_keys),
            'collections_completed': run.completed_collections,
            'collections_skipped': len(run.skipped_collections),
            'collections_failed': len(run.failed_collections),
            'documents_processed': run.documents_processed,
            'archives_delivered': len(run.delivered_batches),
            'archives_failed': len(run.batches) - len(run.delivered_batches),
            'formats': run.formats.enabled(),
            'halted': run.halted,
            'total_warnings': len(run.warnings),
            'total_errors': len(run.errors),
            'duration_seconds': duration,
            'duration_formatted': format_elapsed(duration)
        }

    def _build_collection_breakdown(self, run: ExportRun) -> List[Dict[str, Any]]:
        """Build per-collection statistics in run order."""
        breakdown = []

        for collection_key in run.collection_keys:
            batches = run.batches_for(collection_key)
            if collection_key in run.failed_collections:
                status = 'failed'
            elif collection_key in run.skipped_collections:
                status = 'skipped'
            elif batches:
                status = 'exported'
            else:
                status = 'not_started'

            breakdown.append({
                'key': collection_key,
                'status': status,
                'batches': len(batches),
                'documents_delivered': sum(b.document_count for b in batches if b.delivered),
                'failed_batches': sum(1 for b in batches if not b.delivered)
            })

        return breakdown

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Export report dictionary

        Returns:
            Formatted console string
        """
        sections = []

        # Header
        sections.append("=" * 60)
        sections.append("EXPORT REPORT")
        sections.append("=" * 60)
        sections.append("")

        # Summary section
        summary = report.get('summary', {})
        sections.append("Summary:")
        sections.append(
            f"  Collections: {summary.get('collections_completed', 0)}/"
            f"{summary.get('collections_requested', 0)} exported"
        )
        if summary.get('collections_skipped', 0) > 0:
            sections.append(f"  Skipped:     {summary['collections_skipped']}")
        if summary.get('collections_failed', 0) > 0:
            sections.append(f"  Failed:      {summary['collections_failed']}")
        sections.append(f"  Documents:   {summary.get('documents_processed', 0)}")
        sections.append(f"  Archives:    {summary.get('archives_delivered', 0)}")
        sections.append(f"  Formats:     {', '.join(f.upper() for f in summary.get('formats', []))}")
        sections.append(f"  Duration:    {summary.get('duration_formatted', '0s')}")

        if summary.get('total_warnings', 0) > 0:
            sections.append(f"  Warnings:    {summary['total_warnings']}")

        if summary.get('halted'):
            sections.append("  Status:      HALTED BY USER")

        sections.append("")

        # Collection breakdown
        collections = report.get('collections', [])
        if collections:
            sections.append("Collection Breakdown:")
            sections.append("-" * 60)
            for collection in collections:
                sections.append(f"  {collection['key']}: {collection['status']}")
                if collection['batches'] > 0:
                    sections.append(
                        f"    Batches: {collection['batches']}, "
                        f"Documents: {collection['documents_delivered']}"
                    )
                if collection['failed_batches'] > 0:
                    sections.append(f"    Failed batches: {collection['failed_batches']}")
            sections.append("")

        # Error summary
        errors = report.get('errors', [])
        if errors:
            sections.append("Error Summary:")
            sections.append(f"  Total errors: {len(errors)}")

            errors_by_phase = {}
            for error in errors:
                phase = error.get('phase', 'unknown')
                errors_by_phase[phase] = errors_by_phase.get(phase, 0) + 1

            for phase, count in sorted(errors_by_phase.items()):
                sections.append(f"  {phase}: {count} errors")

            sections.append("")

        # Footer
        sections.append("=" * 60)

        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: str) -> bool:
        """
        Export report to JSON file.

        Args:
            report: Export report dictionary
            filepath: Output file path

        Returns:
            True if the report was written
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)

            self.logger.info(f"JSON report exported to {filepath}")
            return True

        except OSError as e:
            self.logger.error(f"Failed to export JSON report: {str(e)}")
            return False


__all__ = ['ExportReport']
