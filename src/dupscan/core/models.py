"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for scanning directory trees and reporting duplicate files.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, Union
from datetime import datetime, timezone
import os
from enum import Enum


# =============================
# Enums
# =============================

class SkipReason(str, Enum):
    """Why a path was excluded from processing."""
    ACCESS_DENIED = "AccessDenied"
    SYMLINK_SKIPPED = "SymbolicLinkSkipped"
    HASH_FAILURE = "HashFailure"

    def __repr__(self) -> str:
        return self.value


class PipelineState(str, Enum):
    IDLE = "Idle"
    WALKING = "Walking"
    GROUPING = "Grouping"
    PARTIAL_HASHING = "PartialHashing"
    FULL_HASHING = "FullHashing"
    VERIFYING = "Verifying"
    REPORT_READY = "ReportReady"


class Stage(str, Enum):
    """Stage names reported to progress observers."""
    WALK = "Walking"
    SIZE = "Size grouping"
    PARTIAL = "Partial Hash"
    FULL = "Full Hash"
    VERIFY = "Byte Verify"


# ======================
#  Core Data Models
# ======================

@dataclass
class FileHashes:
    partial: Optional[bytes] = None
    full: Optional[bytes] = None

    def __post_init__(self):
        fields = getattr(self, '__dataclass_fields__', {})
        for key in fields:
            value = getattr(self, key)
            if value is not None and not isinstance(value, bytes):
                raise ValueError(f"Field '{key}' must be bytes or None")


@dataclass
class FileRecord:
    """
    One regular file found during a scan.
    Path, size and creation time are fixed by the walker; hashing stages
    only fill in `hashes`.
    """
    path: str
    size: int  # in bytes
    created_at: Optional[float] = None  # unix timestamp, None when unknown
    name: Optional[str] = None
    hashes: FileHashes = field(default_factory=FileHashes)

    def __post_init__(self):
        """Automatically extract basename from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

    @property
    def full_hash(self) -> Optional[bytes]:
        return self.hashes.full

    @property
    def created_at_iso(self) -> Optional[str]:
        """Creation time as an ISO-8601 UTC string, None when unknown."""
        if self.created_at is None:
            return None
        return datetime.fromtimestamp(self.created_at, tz=timezone.utc).isoformat()

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass(frozen=True)
class SkipRecord:
    """A path that could not be (or was not) processed, and why."""
    path: str
    reason: SkipReason
    detail: str = ""


@dataclass
class CandidateGroup:
    """
    Files that are still potential duplicates between two stages.
    All files share the same size; later stages also share hash prefixes.
    """
    size: int
    files: List[FileRecord]

    def __repr__(self):
        return f"<CandidateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class DuplicateSet:
    """
    Two or more files with identical size and identical full-content hash.
    """
    content_hash: str
    size: int
    files: List[FileRecord]

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError("A duplicate set needs at least two files")
        if any(f.size != self.size for f in self.files):
            raise ValueError("Cannot put files of different size in one duplicate set")

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def potential_savings(self) -> int:
        """Bytes freed by keeping one copy and removing the rest."""
        return self.size * (self.file_count - 1)

    def sorted_paths(self) -> List[str]:
        return sorted(f.path for f in self.files)

    def __repr__(self):
        return f"<DuplicateSet hash={self.content_hash}, size={self.size}, count={self.file_count}>"


@dataclass(frozen=True)
class ScanMetadata:
    hostname: str
    scan_roots: Tuple[str, ...]
    scan_timestamp: str
    duration_seconds: Optional[float]


@dataclass(frozen=True)
class ScanSummary:
    total_files_scanned: int
    duplicate_set_count: int
    total_duplicate_files: int
    potential_savings_bytes: int


@dataclass(frozen=True)
class ScanReport:
    """
    Final artifact of one scan. Built once by ReportBuilder and never changed.
    """
    metadata: ScanMetadata
    summary: ScanSummary
    sets: Tuple[DuplicateSet, ...]
    errors: Tuple[SkipRecord, ...]

    def __repr__(self):
        return (f"<ScanReport sets={self.summary.duplicate_set_count}, "
                f"errors={len(self.errors)}>")


class ScanStats:
    """
    Per-stage statistics collected while the pipeline runs.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

    def print_summary(self) -> str:
        lines = [
            "Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            lines.append(f"{stage}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


"""
DTO for scan parameters with built-in validation.
Interface-agnostic: used by both the CLI and library callers.
"""

class NoScanRootsError(ValueError):
    """Raised when a scan is requested without a single usable root directory."""


class ScanConfig:
    PARTIAL_HASH_SIZE = 16384           # Prefix fingerprinted by the partial stage
    READ_CHUNK_SIZE = 1024 * 1024       # Streaming block size for full hashing
    PROGRESS_INTERVAL = 100             # Notify observers every N items
    MAX_WORKERS = 64


@dataclass
class ScanParams:
    """Parameters for a scan with validation."""
    roots: List[str]
    extensions: List[str] = field(default_factory=list)
    workers: int = 1
    hash_timeout: Optional[float] = None
    verify: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        self.roots = [r for r in (root.strip() for root in self.roots) if r]
        if not self.roots:
            raise NoScanRootsError("At least one scan root is required")

        if self.workers < 1:
            raise ValueError("Worker count must be at least 1")
        if self.workers > ScanConfig.MAX_WORKERS:
            raise ValueError(f"Worker count cannot exceed {ScanConfig.MAX_WORKERS}")

        if self.hash_timeout is not None and self.hash_timeout <= 0:
            raise ValueError("Hash timeout must be positive")

        # Normalize extensions: ensure they start with dot and are lowercase
        normalized = []
        for ext in self.extensions:
            ext = ext.strip().lower()
            if ext and not ext.startswith('.'):
                ext = f".{ext}"
            if ext and ext not in normalized:
                normalized.append(ext)
        self.extensions = normalized

    @staticmethod
    def from_human_readable(
            roots_str: str,
            extensions_str: str = "",
            workers: int = 1,
            hash_timeout: Optional[float] = None,
            verify: bool = False,
    ) -> 'ScanParams':
        """
        Factory method to create params from comma-separated inputs,
        e.g. "/srv/a,/srv/b" and "jpg,png".
        """
        roots = [r.strip() for r in roots_str.split(",") if r.strip()] if roots_str else []
        ext_list = [
            ext.strip() for ext in extensions_str.split(",") if ext.strip()
        ] if extensions_str else []

        return ScanParams(
            roots=roots,
            extensions=ext_list,
            workers=workers,
            hash_timeout=hash_timeout,
            verify=verify,
        )
