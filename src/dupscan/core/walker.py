"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Enumerates regular files under one or more scan roots.
Features:
- Iterative traversal with an explicit stack (no recursion depth limit)
- Symbolic links are detected with lstat semantics and never followed
- Optional extension allow-list
- Unreadable directories and entries become skip records instead of errors
"""

import os
from typing import List, Optional, Tuple
import time
import logging

logger = logging.getLogger(__name__)

# Local imports
from dupscan.core.models import FileRecord, SkipRecord, SkipReason, Stage
from dupscan.core.interfaces import FileWalker, ProgressObserver
from dupscan.core.progress import ProgressTracker


class FileWalkerImpl(FileWalker):
    """
    Walks directory trees and collects FileRecords for regular files.

    Attributes:
        extensions: Allowed file extensions (e.g., [".txt", ".jpg"]); empty means all
        observers: Progress observers notified with the running file count
    """

    def __init__(
        self,
        extensions: Optional[List[str]] = None,
        observers: Optional[List[ProgressObserver]] = None,
        progress_interval: int = 5000,
    ):
        self.extensions = [ext.lower() for ext in extensions] if extensions else []
        self.observers = list(observers or [])
        self.progress_interval = progress_interval

    def walk(self, roots: List[str]) -> Tuple[List[FileRecord], List[SkipRecord]]:
        """
        Walk every root in order. Results of all roots are concatenated.
        """
        logger.debug(f"Filters: extensions={self.extensions}")
        files: List[FileRecord] = []
        skips: List[SkipRecord] = []
        tracker = ProgressTracker(
            Stage.WALK.value,
            observers=self.observers,
            interval=self.progress_interval,
        )

        start_time = time.time()
        for root in roots:
            logger.info(f"Scanning directory: {root}")
            self._walk_root(root, files, skips, tracker)
        tracker.finish()

        elapsed_time = time.time() - start_time
        logger.debug(f"Total walk time: {elapsed_time:.2f} seconds")
        logger.info(f"Walk completed. Found {len(files)} matching files, {len(skips)} skipped paths.")
        return files, skips

    def _walk_root(
        self,
        root: str,
        files: List[FileRecord],
        skips: List[SkipRecord],
        tracker: ProgressTracker,
    ) -> None:
        stack = [os.path.abspath(root)]
        while stack:
            directory = stack.pop()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.warning(f"Cannot list directory {directory}: {e}")
                skips.append(SkipRecord(directory, SkipReason.ACCESS_DENIED, str(e)))
                continue

            subdirs = []
            for entry in entries:
                path = entry.path
                try:
                    if entry.is_symlink():
                        logger.debug(f"Skipping symbolic link: {path}")
                        skips.append(SkipRecord(path, SkipReason.SYMLINK_SKIPPED, "symbolic link not followed"))
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(path)
                        continue
                    if not entry.is_file(follow_symlinks=False):
                        continue  # sockets, fifos, devices
                    if not self._extension_passes(entry.name):
                        continue
                    stat_result = entry.stat(follow_symlinks=False)
                except OSError as e:
                    logger.warning(f"Cannot stat {path}: {e}")
                    skips.append(SkipRecord(path, SkipReason.ACCESS_DENIED, str(e)))
                    continue

                created_at = getattr(stat_result, 'st_birthtime', stat_result.st_ctime)
                files.append(FileRecord(
                    path=path,
                    size=stat_result.st_size,
                    created_at=created_at,
                    name=entry.name,
                ))
                tracker.advance()

            # Reversed so that sibling directories are popped in name order
            stack.extend(reversed(subdirs))

    def _extension_passes(self, name: str) -> bool:
        """
        Check if file matches any of the allowed extensions.
        """
        if not self.extensions:
            return True
        ext = os.path.splitext(name)[1].lower()
        return ext in self.extensions
