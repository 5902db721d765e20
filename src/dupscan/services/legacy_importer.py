"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/legacy_importer.py
Converts the older CSV duplicate report into a ScanReport.

The CSV has a header row and five columns: name, created, size, folder, path.
It was grouped by size only, so no content hash is known: every imported set
carries the LEGACY_HASH sentinel instead.
"""
import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Union

from dupscan.core.models import DuplicateSet, FileRecord, ScanMetadata, ScanReport
from dupscan.core.report import ReportBuilder
from dupscan.services.report_service import parse_created

logger = logging.getLogger(__name__)


class LegacyImportError(ValueError):
    """The legacy CSV report could not be read."""


class LegacyReportImporter:
    LEGACY_HASH = "migrated-legacy"
    LEGACY_HOSTNAME = "Migrated-Legacy"
    LEGACY_ROOTS = ("Imported from CSV",)
    MIN_COLUMNS = 5

    def import_csv(self, csv_path: Union[str, Path]) -> ScanReport:
        """
        Read a legacy CSV report.

        Raises:
            LegacyImportError: If the file cannot be read or decoded
        """
        try:
            with open(csv_path, "r", encoding="utf-8", newline="") as f:
                rows = list(csv.reader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise LegacyImportError(f"Cannot read legacy report {csv_path}: {e}") from e
        return self.import_rows(rows[1:])

    def import_rows(self, rows: List[List[str]]) -> ScanReport:
        """Build a report from data rows (header already removed)."""
        by_size: Dict[int, List[FileRecord]] = {}
        for line_no, row in enumerate(rows, start=2):
            if not any(cell.strip() for cell in row):
                continue
            if len(row) < self.MIN_COLUMNS:
                logger.warning(f"Line {line_no}: expected {self.MIN_COLUMNS} columns, got {len(row)}; skipped")
                continue
            name, created, size_str, _folder, full_path = (cell.strip() for cell in row[:5])
            try:
                size = int(size_str)
            except ValueError:
                logger.warning(f"Line {line_no}: invalid size {size_str!r}; skipped")
                continue

            created_at = parse_created(created)
            if created and created_at is None:
                logger.warning(f"Line {line_no}: unreadable creation date {created!r}; left empty")

            by_size.setdefault(size, []).append(FileRecord(
                path=full_path,
                size=size,
                created_at=created_at,
                name=name,
            ))

        sets = [
            DuplicateSet(content_hash=self.LEGACY_HASH, size=size, files=files)
            for size, files in by_size.items()
            if len(files) > 1
        ]
        # The legacy report only listed duplicates, so they are all we know was scanned
        total_dupes = sum(s.file_count for s in sets)
        summary = ReportBuilder.summarize(sets, total_files_scanned=total_dupes)
        logger.info(f"Imported {len(sets)} legacy sets")
        return ScanReport(
            metadata=ScanMetadata(
                hostname=self.LEGACY_HOSTNAME,
                scan_roots=self.LEGACY_ROOTS,
                scan_timestamp=datetime.now(timezone.utc).isoformat(),
                duration_seconds=None,
            ),
            summary=summary,
            sets=tuple(sets),
            errors=(),
        )

    @staticmethod
    def default_output_path(csv_path: Union[str, Path]) -> Path:
        """report.csv -> report_migrated.json, next to the input."""
        csv_path = Path(csv_path)
        stem = csv_path.stem if csv_path.suffix.lower() == ".csv" else csv_path.name
        return csv_path.with_name(f"{stem}_migrated.json")
