"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Defines core interfaces (Protocols) used throughout the scanning pipeline.
Structural typing keeps the pipeline pieces swappable in tests.

Key Components:
---------------
- HashAlgorithm: Standardized interface for incremental hash functions.
- Hasher: Computes partial (prefix) and full content fingerprints of a file.
- FileWalker: Enumerates files under scan roots, returning records and skips.
- ProgressObserver: Receives stage progress notifications.
- HashStage: A pipeline stage that refines candidate groups.
"""

from typing import Protocol, List, Optional, Tuple, Any
from dupscan.core.models import FileRecord, CandidateGroup, SkipRecord


class HashState(Protocol):
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for hash algorithms.

    Allows plugging in xxHash, SHA-256 or anything else exposing the
    hashlib-style `update()`/`digest()` pair.
    """

    def new(self) -> HashState:
        """Returns a fresh incremental hash state."""
        ...


class Hasher(Protocol):
    """Interface for fingerprinting a file."""
    def compute_partial_hash(self, file: FileRecord) -> bytes: ...
    def compute_full_hash(self, file: FileRecord) -> bytes: ...


class ProgressObserver(Protocol):
    """
    Receives (stage_name, items_completed, items_total, estimated_seconds_remaining).
    `items_total` and the estimate are None when unknown (e.g. while walking).
    """
    def __call__(
        self,
        stage_name: str,
        items_completed: int,
        items_total: Optional[int],
        estimated_seconds_remaining: Optional[float]
    ) -> Any: ...


class FileWalker(Protocol):
    """
    Interface for walking file systems and collecting file metadata.
    """
    def walk(self, roots: List[str]) -> Tuple[List[FileRecord], List[SkipRecord]]:
        """
        Enumerate regular files under every root.

        Returns:
            (file records, skip records) concatenated across roots in input order.
        """
        ...


class HashStage(Protocol):
    """
    Interface for a pipeline stage that refines candidate groups.
    """
    def get_stage_name(self) -> str:
        """Return the name of this stage (used in logging and progress)."""
        ...

    def process(
        self,
        groups: List[CandidateGroup]
    ) -> Tuple[List[CandidateGroup], List[SkipRecord]]:
        """
        Process groups through this stage.

        Returns:
            Refined groups (2+ files each) and the skip records produced.
        """
        ...
