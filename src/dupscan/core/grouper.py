"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Groups FileRecords by size or by hash, keeping only groups of two or more.

Hash keys are computed either inline or on a bounded thread pool. Either way,
grouping itself happens on the calling thread and every group is sorted by
path, so the outcome does not depend on the order in which hashes finish.
"""

import logging
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_COMPLETED
from typing import List, Dict, Tuple, Any, Callable, Optional

from dupscan.core.interfaces import Hasher
from dupscan.core.models import FileRecord, SkipRecord, SkipReason
from dupscan.core.hasher import HasherImpl, HashComputationError
from dupscan.core.progress import ProgressTracker

logger = logging.getLogger(__name__)

KeyResult = Tuple[List[Tuple[FileRecord, Any]], List[SkipRecord]]


class FileGrouperImpl:
    """
    Groups files using an injected Hasher.

    Attributes:
        hasher: Computes partial/full fingerprints
        workers: Number of files hashed concurrently (1 = inline, no threads)
        timeout: Seconds a pooled hash job may run before it is abandoned
    """

    def __init__(self, hasher: Hasher = None, workers: int = 1, timeout: Optional[float] = None):
        self.hasher = hasher or HasherImpl()
        self.workers = max(1, workers)
        self.timeout = timeout

    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[FileRecord]]:
        """Groups files by their size."""
        keyed = [(f, f.size) for f in files]
        return self._group(keyed)

    def group_by_partial_hash(
        self,
        files: List[FileRecord],
        progress: Optional[ProgressTracker] = None
    ) -> Tuple[Dict[Tuple[int, bytes], List[FileRecord]], List[SkipRecord]]:
        """Groups files by (size, prefix fingerprint)."""
        keyed, skips = self._compute_keys(files, self.hasher.compute_partial_hash, progress)
        return self._group([(f, (f.size, key)) for f, key in keyed]), skips

    def group_by_full_hash(
        self,
        files: List[FileRecord],
        progress: Optional[ProgressTracker] = None
    ) -> Tuple[Dict[Tuple[int, bytes], List[FileRecord]], List[SkipRecord]]:
        """Groups files by (size, full content hash)."""
        keyed, skips = self._compute_keys(files, self.hasher.compute_full_hash, progress)
        return self._group([(f, (f.size, key)) for f, key in keyed]), skips

    @staticmethod
    def _group(keyed: List[Tuple[FileRecord, Any]]) -> Dict[Any, List[FileRecord]]:
        """
        Build {key: files} from (file, key) pairs, dropping groups with fewer
        than two files. Keys are returned in sorted order, files sorted by path.
        """
        groups = defaultdict(list)
        for file, key in keyed:
            groups[key].append(file)

        result = {}
        for key in sorted(groups):
            group = groups[key]
            if len(group) >= 2:  # Avoid groups with less than 2 files
                result[key] = sorted(group, key=lambda f: f.path)
        return result

    def _compute_keys(
        self,
        files: List[FileRecord],
        key_func: Callable[[FileRecord], bytes],
        progress: Optional[ProgressTracker] = None
    ) -> KeyResult:
        if self.workers == 1 or len(files) < 2:
            keyed, skips = self._compute_keys_inline(files, key_func, progress)
        else:
            keyed, skips = self._compute_keys_pooled(files, key_func, progress)

        skips.sort(key=lambda s: s.path)
        if skips:
            logger.warning(f"Skipped {len(skips)} files due to hash computation errors")
        return keyed, skips

    @staticmethod
    def _compute_keys_inline(files, key_func, progress) -> KeyResult:
        keyed = []
        skips = []
        for file in files:
            try:
                keyed.append((file, key_func(file)))
            except HashComputationError as e:
                logger.warning(f"Error processing {file.path}: {e.message}")
                skips.append(SkipRecord(file.path, SkipReason.HASH_FAILURE, e.message))
            if progress:
                progress.advance()
        return keyed, skips

    def _compute_keys_pooled(self, files, key_func, progress) -> KeyResult:
        """
        Hash on a bounded pool. Files queued behind workers that are held by
        abandoned jobs are handed to a fresh pool, so only the stalled files
        themselves end up as HashFailures.
        """
        keyed = []
        skips = []
        queue = list(files)
        while queue:
            queue = self._run_pool(queue, key_func, keyed, skips, progress)
        return keyed, skips

    def _run_pool(self, files, key_func, keyed, skips, progress) -> List[FileRecord]:
        """
        Run one pool over `files`. A job still running `timeout` seconds after
        it started is abandoned. Returns the files that never started because
        every worker was left holding an abandoned job.
        """
        started: Dict[str, float] = {}

        def timed(file: FileRecord):
            started[file.path] = time.monotonic()
            return key_func(file)

        leftover: List[FileRecord] = []
        stuck = 0
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dupscan-hash")
        try:
            futures = {executor.submit(timed, f): f for f in files}
            pending = set(futures)
            while pending:
                done, pending = wait(
                    pending,
                    timeout=self._next_wait(pending, futures, started),
                    return_when=FIRST_COMPLETED,
                )

                for fut in done:
                    file = futures[fut]
                    try:
                        keyed.append((file, fut.result()))
                    except HashComputationError as e:
                        logger.warning(f"Error processing {file.path}: {e.message}")
                        skips.append(SkipRecord(file.path, SkipReason.HASH_FAILURE, e.message))
                    if progress:
                        progress.advance()

                if self.timeout is None:
                    continue

                now = time.monotonic()
                for fut in [f for f in pending if f.running()]:
                    path = futures[fut].path
                    if path in started and now - started[path] >= self.timeout:
                        detail = f"timed out after {self.timeout}s"
                        logger.warning(f"Abandoning {path}: {detail}")
                        skips.append(SkipRecord(path, SkipReason.HASH_FAILURE, detail))
                        pending.discard(fut)
                        stuck += 1
                        if progress:
                            progress.advance()

                if stuck >= self.workers:
                    for fut in list(pending):
                        if fut.cancel():
                            pending.discard(fut)
                            leftover.append(futures[fut])
        finally:
            executor.shutdown(wait=stuck == 0, cancel_futures=True)

        if leftover:
            logger.info(f"All hash workers stalled; moving {len(leftover)} queued files to a new pool")
        return leftover

    def _next_wait(self, pending, futures, started) -> Optional[float]:
        """Seconds until the earliest running job reaches its timeout."""
        if self.timeout is None:
            return None
        deadlines = [
            started[futures[fut].path] + self.timeout
            for fut in pending
            if futures[fut].path in started
        ]
        if not deadlines:
            return self.timeout
        return max(0.0, min(deadlines) - time.monotonic())
