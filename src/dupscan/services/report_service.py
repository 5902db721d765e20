"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
Serializes ScanReports to the JSON report format and back, and picks default
output file names.
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dupscan.core.models import (
    DuplicateSet, FileRecord, ScanMetadata, ScanReport, ScanSummary, SkipReason, SkipRecord)
from dupscan.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def parse_created(value: Any) -> Optional[float]:
    """
    Turn an ISO-8601 string (with or without a trailing 'Z') or a number into
    a unix timestamp. Missing or unparseable values become None.
    """
    if isinstance(value, (int, float)):
        return float(value)
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable creation time: {value!r}")
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


class ReportService:
    """
    JSON persistence for ScanReport. Keys use the camelCase report schema.
    """

    @staticmethod
    def to_dict(report: ScanReport) -> Dict[str, Any]:
        meta = report.metadata
        summary = report.summary
        return {
            "metadata": {
                "hostname": meta.hostname,
                "scanRoots": list(meta.scan_roots),
                "scanTimestamp": meta.scan_timestamp,
                "durationSeconds": meta.duration_seconds,
            },
            "summary": {
                "totalFilesScanned": summary.total_files_scanned,
                "duplicateSetCount": summary.duplicate_set_count,
                "totalDuplicateFiles": summary.total_duplicate_files,
                "potentialSavingsBytes": summary.potential_savings_bytes,
            },
            "sets": [
                {
                    "contentHash": dup_set.content_hash,
                    "sizeBytes": dup_set.size,
                    "fileCount": dup_set.file_count,
                    "files": [
                        {
                            "name": f.name,
                            "path": f.path,
                            "sizeBytes": f.size,
                            "createdAt": f.created_at_iso,
                        }
                        for f in dup_set.files
                    ],
                }
                for dup_set in report.sets
            ],
            "errors": [
                {"path": e.path, "reasonKind": e.reason.value, "detail": e.detail}
                for e in report.errors
            ],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ScanReport:
        """Reconstruct a ScanReport from its dict form (after loading from JSON)."""
        meta = data.get("metadata", {})
        summary = data.get("summary", {})
        sets = []
        for set_data in data.get("sets", []):
            files = [
                FileRecord(
                    path=f["path"],
                    size=int(f["sizeBytes"]),
                    created_at=parse_created(f.get("createdAt")),
                    name=f.get("name"),
                )
                for f in set_data.get("files", [])
            ]
            sets.append(DuplicateSet(
                content_hash=set_data["contentHash"],
                size=int(set_data["sizeBytes"]),
                files=files,
            ))
        errors = [
            SkipRecord(e["path"], SkipReason(e["reasonKind"]), e.get("detail", ""))
            for e in data.get("errors", [])
        ]
        return ScanReport(
            metadata=ScanMetadata(
                hostname=meta.get("hostname", ""),
                scan_roots=tuple(meta.get("scanRoots", [])),
                scan_timestamp=meta.get("scanTimestamp", ""),
                duration_seconds=meta.get("durationSeconds"),
            ),
            summary=ScanSummary(
                total_files_scanned=int(summary.get("totalFilesScanned", 0)),
                duplicate_set_count=int(summary.get("duplicateSetCount", len(sets))),
                total_duplicate_files=int(summary.get("totalDuplicateFiles", 0)),
                potential_savings_bytes=int(summary.get("potentialSavingsBytes", 0)),
            ),
            sets=tuple(sets),
            errors=tuple(errors),
        )

    @staticmethod
    def to_json(report: ScanReport) -> str:
        return json.dumps(ReportService.to_dict(report), indent=2, ensure_ascii=False)

    @staticmethod
    def write_json(report: ScanReport, path: Union[str, Path]) -> Path:
        """Write the report as indented UTF-8 JSON. Returns the written path."""
        path = Path(path)
        path.write_text(ReportService.to_json(report) + "\n", encoding="utf-8")
        logger.info(f"Report written to {path}")
        return path

    @staticmethod
    def read_json(path: Union[str, Path]) -> ScanReport:
        with open(path, "r", encoding="utf-8") as f:
            return ReportService.from_dict(json.load(f))

    @staticmethod
    def default_report_name(hostname: str, moment: Optional[datetime] = None) -> str:
        """
        duplicate_report_<hostname>_<YYYYmmdd_HHMMSS>.json, with characters
        that are unsafe in file names replaced by '_'.
        """
        moment = moment or datetime.now()
        safe_host = _UNSAFE_NAME_CHARS.sub("_", hostname).strip("_") or "unknown-host"
        return f"duplicate_report_{safe_host}_{ConvertUtils.datetime_to_compact(moment)}.json"
