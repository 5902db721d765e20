#!/usr/bin/env python3
"""
dupscan CLI: command line interface for duplicate file audits.
Scans one or more directory trees and writes a JSON report of duplicate sets,
potential savings and every path that had to be skipped. Nothing is ever deleted.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from dupscan.core.models import ScanParams, ScanReport, NoScanRootsError
from dupscan.commands import ScanCommand
from dupscan.utils.convert_utils import ConvertUtils
from dupscan.services.report_service import ReportService
from dupscan.services.legacy_importer import LegacyReportImporter, LegacyImportError
from dupscan.aliases import (
    WORKERS_HELP_TEXT, TIMEOUT_HELP_TEXT, VERIFY_HELP_TEXT, EPILOG_TEXT, IMPORT_EPILOG_TEXT
)


def _split_list(values: List[str]) -> List[str]:
    """Accept both space separated and comma separated list arguments."""
    items = []
    for value in values:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupscan",
            description="dupscan: find byte-identical files and report reclaimable space",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            help="Directories to scan (space or comma separated)"
        )

        # Filtering options
        parser.add_argument(
            "--extensions", "-x",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="File extensions to include (e.g., .jpg .png or jpg,png). Default: all files"
        )

        # Engine options
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar='N',
            help=WORKERS_HELP_TEXT
        )
        parser.add_argument(
            "--timeout",
            default=None,
            type=float,
            metavar='SECONDS',
            help=TIMEOUT_HELP_TEXT
        )
        parser.add_argument(
            "--verify",
            action="store_true",
            help=VERIFY_HELP_TEXT
        )

        # Output options
        parser.add_argument(
            "--output", "-o",
            default=None,
            type=str,
            metavar='FILE',
            help="Report file path. Default: duplicate_report_<host>_<timestamp>.json"
        )
        parser.add_argument(
            "--stdout",
            action="store_true",
            help="Print the JSON report to stdout instead of writing a file"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and detailed statistics"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.stdout and args.output:
            self.error_exit("--stdout and --output cannot be used together")
        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")
        if args.timeout is not None and args.workers == 1:
            self.warning("--timeout only applies with --workers > 1; ignoring it")
            args.timeout = None

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams(
                roots=_split_list(args.input),
                extensions=_split_list(args.extensions),
                workers=args.workers,
                hash_timeout=args.timeout,
                verify=args.verify,
            )
        except NoScanRootsError as e:
            self.error_exit(str(e))
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(
            self,
            stage: str,
            current: int,
            total: Optional[int],
            eta: Optional[float]
    ) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            eta_str = f", ~{ConvertUtils.seconds_to_human(eta)} left" if eta else ""
            sys.stderr.write(
                f"\r  [{stage}] {current}/{total} ({percent:.1f}%{eta_str})   "
            )
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files found...   ")
        sys.stderr.flush()

    def run_scan(self, params: ScanParams) -> ScanReport:
        """Execute the scan workflow."""
        command = ScanCommand()
        try:
            report = command.execute(
                params,
                progress_observer=self.progress_callback if self.verbose else None,
            )
        except NoScanRootsError as e:
            self.error_exit(str(e))

        if self.verbose:
            sys.stderr.write("\n")
            print(command.get_stats().print_summary(), file=sys.stderr)
        return report

    def write_report(self, report: ScanReport, args: argparse.Namespace) -> Optional[Path]:
        """Write or print the report. Returns the written path, if any."""
        if args.stdout:
            print(ReportService.to_json(report))
            return None

        output = args.output or ReportService.default_report_name(report.metadata.hostname)
        try:
            return ReportService.write_json(report, output)
        except OSError as e:
            self.error_exit(f"Cannot write report to {output}: {e}")

    def output_summary(self, report: ScanReport, report_path: Optional[Path]) -> None:
        """Human-readable summary on stderr (stdout may carry the JSON report)."""
        if self.quiet:
            return

        summary = report.summary
        out = sys.stderr
        print(f"Scanned {summary.total_files_scanned} files in "
              f"{ConvertUtils.seconds_to_human(report.metadata.duration_seconds or 0)}", file=out)
        if summary.duplicate_set_count == 0:
            print("No duplicate files found.", file=out)
        else:
            print(f"Found {summary.duplicate_set_count} duplicate sets "
                  f"({summary.total_duplicate_files} files)", file=out)
            print(f"Potential savings: {ConvertUtils.bytes_to_human(summary.potential_savings_bytes)}", file=out)
        if report.errors:
            print(f"Skipped {len(report.errors)} paths (see 'errors' in the report)", file=out)
        if report_path is not None:
            print(f"Report written to: {report_path}", file=out)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"Warning: {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)

    @staticmethod
    def configure_logging(verbose: bool, debug: bool) -> None:
        level = logging.DEBUG if debug else logging.INFO if verbose else logging.ERROR
        logging.getLogger().setLevel(level)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging(args.verbose, args.debug)

        self.validate_args(args)
        params = self.create_params(args)

        if self.verbose:
            print(f"Scanning: {', '.join(params.roots)}", file=sys.stderr)

        report = self.run_scan(params)
        report_path = self.write_report(report, args)
        self.output_summary(report, report_path)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"Completed in {elapsed:.2f} seconds", file=sys.stderr)


class ImportCLIApplication:
    """Converts a legacy CSV report into the JSON report format."""

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        parser = argparse.ArgumentParser(
            prog="dupscan-import",
            description="Convert a legacy size-grouped CSV duplicate report to JSON",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=IMPORT_EPILOG_TEXT
        )
        parser.add_argument("csv_file", type=str, help="Legacy CSV report")
        parser.add_argument(
            "--output", "-o",
            default=None,
            type=str,
            metavar='FILE',
            help="Output path. Default: <csv name>_migrated.json next to the input"
        )
        return parser.parse_args(args)

    def run(self, argv: Optional[List[str]] = None) -> None:
        args = self.parse_args(argv)
        importer = LegacyReportImporter()
        try:
            report = importer.import_csv(args.csv_file)
        except LegacyImportError as e:
            CLIApplication.error_exit(f"Migration failed: {e}")

        output = args.output or importer.default_output_path(args.csv_file)
        try:
            ReportService.write_json(report, output)
        except OSError as e:
            CLIApplication.error_exit(f"Cannot write report to {output}: {e}")

        savings_gb = report.summary.potential_savings_bytes / (1024 ** 3)
        print(f"Migrated {report.summary.duplicate_set_count} sets to: {output}")
        print(f"Legacy savings recovered: {savings_gb:.2f} GB")


def _guard(app_run, argv: Optional[List[str]]) -> None:
    try:
        app_run(argv)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    _guard(CLIApplication().run, argv)


def import_main(argv: Optional[List[str]] = None) -> None:
    """Legacy report importer entry point."""
    _guard(ImportCLIApplication().run, argv)


if __name__ == "__main__":
    main()
