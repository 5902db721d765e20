"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Pipeline stages for dupscan's staged duplicate detection.

CLASS HIERARCHY
---------------
StageBase          : Shared progress plumbing
SizeStageImpl      : Groups walked files by exact size (no I/O)
PartialHashStage   : Regroups size candidates by a 16 KiB prefix fingerprint
FullHashStage      : Regroups survivors by full-content hash into DuplicateSets
VerifyStage        : Optional byte-by-byte confirmation of each DuplicateSet

STAGE CONTRACTS
---------------
Each stage:
  • Consumes the complete output of the previous stage
  • Returns its refined groups together with the skip records it produced
  • Never mutates the skip log of another stage
  • Reports progress via observers (stage name, done, total, ETA)

A stage given an empty input returns an empty output; it is never skipped.
"""

import filecmp
import logging
from typing import List, Optional, Tuple

from dupscan.core.models import (
    FileRecord, CandidateGroup, DuplicateSet, SkipRecord, SkipReason, Stage, ScanConfig)
from dupscan.core.grouper import FileGrouperImpl
from dupscan.core.interfaces import HashStage, ProgressObserver
from dupscan.core.progress import ProgressTracker

logger = logging.getLogger(__name__)


#=============================
# Base Class
#=============================
class StageBase:
    """Holds the grouper and the observers shared by all stages."""

    def __init__(
        self,
        grouper: FileGrouperImpl,
        observers: Optional[List[ProgressObserver]] = None,
        progress_interval: int = ScanConfig.PROGRESS_INTERVAL,
    ):
        self.grouper = grouper
        self.observers = list(observers or [])
        self.progress_interval = progress_interval

    def get_stage_name(self) -> str:
        raise NotImplementedError

    def _tracker(self, total: int) -> ProgressTracker:
        return ProgressTracker(
            self.get_stage_name(),
            items_total=total,
            observers=self.observers,
            interval=self.progress_interval,
        )


# =============================
# Individual Stages
# =============================
class SizeStageImpl(StageBase):
    def get_stage_name(self) -> str:
        return Stage.SIZE.value

    def process(self, files: List[FileRecord]) -> List[CandidateGroup]:
        """
        Group by file size.
        Returns list of CandidateGroups with 2+ files of same size.
        """
        size_groups = self.grouper.group_by_size(files)
        groups = [
            CandidateGroup(size=size, files=files_list)
            for size, files_list in size_groups.items()
        ]

        tracker = self._tracker(len(files))
        tracker.advance(len(files))
        tracker.finish()

        logger.info(f"{self.get_stage_name()}: {len(groups)} candidate groups "
                    f"({sum(len(g.files) for g in groups)} of {len(files)} files)")
        return groups


class PartialHashStage(StageBase, HashStage):
    def get_stage_name(self) -> str:
        return Stage.PARTIAL.value

    def process(
        self,
        groups: List[CandidateGroup]
    ) -> Tuple[List[CandidateGroup], List[SkipRecord]]:
        """
        Fingerprint the prefix of every candidate and regroup by (size, fingerprint).
        """
        files = [f for group in groups for f in group.files]
        tracker = self._tracker(len(files))

        hash_groups, skips = self.grouper.group_by_partial_hash(files, progress=tracker)
        tracker.finish()

        new_groups = [
            CandidateGroup(size=size, files=files_in_group)
            for (size, _), files_in_group in hash_groups.items()
        ]
        logger.info(f"{self.get_stage_name()}: {len(new_groups)} candidate groups remain")
        return new_groups, skips


class FullHashStage(StageBase, HashStage):
    def get_stage_name(self) -> str:
        return Stage.FULL.value

    def process(
        self,
        groups: List[CandidateGroup]
    ) -> Tuple[List[DuplicateSet], List[SkipRecord]]:
        """
        Hash every survivor in full. Each resulting group of two or more files
        is a confirmed DuplicateSet.
        """
        files = [f for group in groups for f in group.files]
        tracker = self._tracker(len(files))

        hash_groups, skips = self.grouper.group_by_full_hash(files, progress=tracker)
        tracker.finish()

        duplicate_sets = [
            DuplicateSet(content_hash=digest.hex(), size=size, files=files_in_group)
            for (size, digest), files_in_group in hash_groups.items()
        ]
        logger.info(f"{self.get_stage_name()}: {len(duplicate_sets)} duplicate sets confirmed")
        return duplicate_sets, skips


class VerifyStage(StageBase):
    """
    Compares the members of each DuplicateSet byte-by-byte.
    Members that differ from every other member are dropped; a set whose
    members fall into several identical sub-groups is split.
    """

    def get_stage_name(self) -> str:
        return Stage.VERIFY.value

    def process(
        self,
        sets: List[DuplicateSet]
    ) -> Tuple[List[DuplicateSet], List[SkipRecord]]:
        filecmp.clear_cache()
        tracker = self._tracker(sum(s.file_count for s in sets))
        verified: List[DuplicateSet] = []
        skips: List[SkipRecord] = []

        for dup_set in sets:
            buckets: List[List[FileRecord]] = []
            for file in dup_set.files:
                try:
                    bucket = self._find_bucket(buckets, file, skips)
                except OSError as e:
                    logger.warning(f"Error comparing {file.path}: {e}")
                    skips.append(SkipRecord(file.path, SkipReason.HASH_FAILURE, f"byte comparison failed: {e}"))
                else:
                    if bucket is None:
                        buckets.append([file])
                    else:
                        bucket.append(file)
                tracker.advance()

            confirmed = [b for b in buckets if len(b) >= 2]
            if len(confirmed) != 1 or len(confirmed[0]) != dup_set.file_count:
                logger.warning(f"Byte comparison disagrees with hash {dup_set.content_hash} "
                               f"({dup_set.file_count} files)")
            for bucket in confirmed:
                verified.append(DuplicateSet(content_hash=dup_set.content_hash, size=dup_set.size, files=bucket))

        tracker.finish()
        return verified, skips

    def _find_bucket(
        self,
        buckets: List[List[FileRecord]],
        file: FileRecord,
        skips: List[SkipRecord]
    ) -> Optional[List[FileRecord]]:
        # Open first so an unreadable file is blamed on itself, not on a bucket head
        with open(file.path, 'rb'):
            pass
        for bucket in list(buckets):
            while bucket:
                head = bucket[0]
                try:
                    if filecmp.cmp(head.path, file.path, shallow=False):
                        return bucket
                    break
                except OSError as e:
                    if e.filename != head.path:
                        raise
                    # Head became unreadable: drop it and compare against the next member
                    logger.warning(f"Error comparing {head.path}: {e}")
                    skips.append(SkipRecord(head.path, SkipReason.HASH_FAILURE, f"byte comparison failed: {e}"))
                    bucket.pop(0)
            if not bucket:
                buckets.remove(bucket)
        return None
