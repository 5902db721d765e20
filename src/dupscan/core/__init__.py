"""
Core scanning engine: walker, hasher, grouper, stages and pipeline orchestrator.

This package contains the whole duplicate-detection pipeline:
- FileWalkerImpl: iterative directory traversal with extension filter and link skipping
- HasherImpl + XXHashAlgorithmImpl / XXH128AlgorithmImpl: xxHash prefix and full-content hashing
- FileGrouperImpl: size and hash-based grouping on an optional bounded thread pool
- ScanPipeline: staged run (walk → size → partial hash → full hash → report)
- ProgressTracker: throughput and ETA estimates for observers
- Models: FileRecord, SkipRecord, DuplicateSet, ScanReport and scan parameters

No I/O beyond reading the scanned files; report persistence lives in services.
"""

from .walker import FileWalkerImpl
from .grouper import FileGrouperImpl
from .hasher import HasherImpl, XXHashAlgorithmImpl, XXH128AlgorithmImpl, HashComputationError
from .pipeline import ScanPipeline
from .progress import ProgressTracker, ProgressSnapshot, LoggingProgressObserver
from .report import ReportBuilder
from .models import (
    FileRecord, FileHashes, SkipRecord, SkipReason, CandidateGroup, DuplicateSet,
    ScanMetadata, ScanSummary, ScanReport, ScanStats, ScanParams, ScanConfig,
    PipelineState, Stage, NoScanRootsError)

__all__ = [
    "FileWalkerImpl",
    "FileGrouperImpl",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "XXH128AlgorithmImpl",
    "HashComputationError",
    "ScanPipeline",
    "ProgressTracker",
    "ProgressSnapshot",
    "LoggingProgressObserver",
    "ReportBuilder",
    "FileRecord",
    "FileHashes",
    "SkipRecord",
    "SkipReason",
    "CandidateGroup",
    "DuplicateSet",
    "ScanMetadata",
    "ScanSummary",
    "ScanReport",
    "ScanStats",
    "ScanParams",
    "ScanConfig",
    "PipelineState",
    "Stage",
    "NoScanRootsError",
]
