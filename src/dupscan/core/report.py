"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/report.py
Assembles the final ScanReport from duplicate sets, the skip log and run metadata.
Pure in-memory work: persistence lives in services/report_service.py.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from dupscan.core.models import (
    DuplicateSet, SkipRecord, ScanMetadata, ScanSummary, ScanReport)


class ReportBuilder:
    """
    Builds one immutable ScanReport.

    Sets are ordered by descending size, then by content hash, so two scans of
    an unchanged tree produce the same report body.
    """

    @staticmethod
    def summarize(sets: Sequence[DuplicateSet], total_files_scanned: int) -> ScanSummary:
        return ScanSummary(
            total_files_scanned=total_files_scanned,
            duplicate_set_count=len(sets),
            total_duplicate_files=sum(s.file_count for s in sets),
            potential_savings_bytes=sum(s.potential_savings for s in sets),
        )

    def build(
        self,
        sets: Sequence[DuplicateSet],
        errors: Sequence[SkipRecord],
        hostname: str,
        scan_roots: List[str],
        started_at: datetime,
        total_files_scanned: int,
        duration_seconds: Optional[float] = None,
    ) -> ScanReport:
        """
        Args:
            sets: Confirmed duplicate sets
            errors: Accumulated skip log, in the order it was produced
            hostname: Machine the scan ran on
            scan_roots: Roots as requested by the caller
            started_at: Scan start time (naive values are taken as UTC)
            total_files_scanned: Number of FileRecords produced by the walker
            duration_seconds: Run time; computed from `started_at` when omitted
        """
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)
        if duration_seconds is None:
            duration_seconds = (datetime.now(timezone.utc) - started_at).total_seconds()

        ordered = sorted(sets, key=lambda s: (-s.size, s.content_hash, s.sorted_paths()))

        metadata = ScanMetadata(
            hostname=hostname,
            scan_roots=tuple(scan_roots),
            scan_timestamp=started_at.isoformat(),
            duration_seconds=round(duration_seconds, 3),
        )
        return ScanReport(
            metadata=metadata,
            summary=self.summarize(ordered, total_files_scanned),
            sets=tuple(ordered),
            errors=tuple(errors),
        )
