#!/usr/bin/env python3
"""
Compendium Exporter - Main CLI Entry Point

This script provides the command-line interface for exporting document
collections into batches of ZIP archives, with each document rendered as raw
YAML and JSON dumps and as a scrubbed, human-readable text file.
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

import yaml

from config_loader import ConfigLoader, build_export_config, get_nested, parse_list_setting
from exporters import DirectoryDelivery
from fetchers import BaseFetcher, FetcherFactory
from logger import log_config, log_section, setup_logging
from models import ExportConfig
from orchestrator import BatchExportOrchestrator, CancellationToken, ExportReport

# Version
__version__ = "1.0.0"

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_CONFIG_ERROR = 2
EXIT_HALTED = 130


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='compendium-export',
        description="Export document collections as batched ZIP archives of YAML, JSON and TXT files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the collections found in a source directory
  compendium-export --source-dir ./collections --list

  # Export two collections as YAML (the default format)
  compendium-export --source-dir ./collections --collections spells,items

  # Export everything as JSON and scrubbed text, 50 documents per archive
  compendium-export --config config.yaml --no-yaml --json --txt --batch-size 50

  # Verbose logging
  compendium-export --config config.yaml -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (optional)'
    )

    parser.add_argument(
        '--source-dir',
        type=str,
        help='Directory holding one sub-directory per collection'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory receiving the batch archives (default: ./export)'
    )

    parser.add_argument(
        '--collections',
        type=str,
        help='Comma-separated collection keys to export (default: all)'
    )

    parser.add_argument(
        '--list',
        action='store_true',
        help='List available collections and exit'
    )

    parser.add_argument(
        '--yaml',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Include raw YAML dumps (default: on)'
    )

    parser.add_argument(
        '--json',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Include raw JSON dumps (default: off)'
    )

    parser.add_argument(
        '--txt',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Include scrubbed human-readable text (default: off)'
    )

    parser.add_argument(
        '--batch-size',
        type=int,
        default=None,
        help='Documents per archive (default: 100)'
    )

    parser.add_argument(
        '--min-wait-ms',
        type=float,
        default=None,
        help='Minimum delay between documents in milliseconds (default: 0)'
    )

    parser.add_argument(
        '--exclude-keys',
        type=str,
        default=None,
        help='Comma-separated keys dropped from the text export (replaces the defaults)'
    )

    parser.add_argument(
        '--exclude-substrings',
        type=str,
        default=None,
        help='Comma-separated substrings that reject a text value (replaces the defaults)'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write a JSON run report to this path'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def list_collections(fetcher: BaseFetcher) -> int:
    """Print the available collections."""
    collections = fetcher.list_collections()

    print("\n" + "=" * 60)
    print("AVAILABLE COLLECTIONS")
    print("=" * 60)
    if not collections:
        print("\nNo collections found.")
    for collection in collections:
        print(f"  {collection.key}: {collection.label}")
    print("=" * 60)

    return EXIT_OK


def select_collections(config: dict, fetcher: BaseFetcher, logger: logging.Logger) -> List[str]:
    """Return the configured collection keys, or every available collection."""
    selected = parse_list_setting(get_nested(config, 'export.collections'))
    if selected:
        return selected

    logger.info("No collections selected, exporting all available collections")
    return [collection.key for collection in fetcher.list_collections()]


def run_export(
    config: dict,
    export_config: ExportConfig,
    fetcher: BaseFetcher,
    logger: logging.Logger,
    cancellation: Optional[CancellationToken] = None
) -> int:
    """Execute the export run and report on it."""
    collection_keys = select_collections(config, fetcher, logger)
    if not collection_keys:
        logger.error("No collections to export")
        return EXIT_ERRORS

    output_directory = get_nested(config, 'export.output_directory', './export')
    delivery = DirectoryDelivery(output_directory, logger=logger)
    orchestrator = BatchExportOrchestrator(export_config, fetcher, delivery, logger=logger)

    token = cancellation or CancellationToken()
    previous_handler = signal.getsignal(signal.SIGINT)

    def handle_interrupt(signum, frame):
        # First Ctrl-C halts cooperatively, a second one aborts
        if token.is_cancelled():
            raise KeyboardInterrupt
        logger.warning("Interrupt received, halting after the current document")
        token.cancel()

    signal.signal(signal.SIGINT, handle_interrupt)
    try:
        run = orchestrator.run(collection_keys, token)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    report_generator = ExportReport(logger)
    report = report_generator.generate_report(run)
    print("\n" + report_generator.format_console_report(report))

    report_path = get_nested(config, 'export.report_path')
    if report_path:
        report_generator.export_json_report(report, report_path)

    if run.halted:
        logger.warning("Export halted by user")
        return EXIT_HALTED

    errors = report['summary']['total_errors']
    if errors > 0:
        logger.warning(f"Export completed with {errors} errors")
        return EXIT_ERRORS

    logger.info("Export completed successfully")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        # Minimal logging until the configuration is loaded
        logger = setup_logging(verbosity=args.verbose)

        config = ConfigLoader.load(args.config) if args.config else {}

        # Merge with CLI arguments (CLI takes precedence)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)
        export_config = build_export_config(config)

        # Reconfigure logging with config file settings
        logger = setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level')
        )

        log_section("Compendium Exporter")
        logger.info(f"Version: {__version__}")
        log_config(config)

        fetcher = FetcherFactory.create_fetcher(config, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        if args.list:
            return list_collections(fetcher)
        return run_export(config, export_config, fetcher, logger)

    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return EXIT_HALTED
    except Exception as e:
        logger.error(f"Export failed: {str(e)}", exc_info=True)
        return EXIT_ERRORS


if __name__ == "__main__":
    sys.exit(main())
