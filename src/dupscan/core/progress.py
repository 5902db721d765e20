"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Stage progress tracking with throughput and time-to-completion estimates.

The tracker only observes: it counts completions, measures elapsed time and
forwards snapshots to observers at a bounded cadence. Nothing it does can
change which files are processed or how they are grouped.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from dupscan.core.interfaces import ProgressObserver
from dupscan.core.models import ScanConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    stage_name: str
    items_completed: int
    items_total: Optional[int]
    elapsed_seconds: float

    @property
    def throughput(self) -> float:
        """Items per second since the stage started (0.0 before any time elapsed)."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.items_completed / self.elapsed_seconds

    @property
    def estimated_seconds_remaining(self) -> Optional[float]:
        """Projected seconds until the stage finishes, None when it cannot be estimated."""
        if self.items_total is None:
            return None
        remaining = max(0, self.items_total - self.items_completed)
        if remaining == 0:
            return 0.0
        rate = self.throughput
        if rate <= 0:
            return None
        return remaining / rate


class ProgressTracker:
    """
    Tracks completions for one stage and notifies observers every
    `interval` items plus once when the stage reaches its total.
    """

    def __init__(
        self,
        stage_name: str,
        items_total: Optional[int] = None,
        observers: Optional[List[ProgressObserver]] = None,
        interval: int = ScanConfig.PROGRESS_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval < 1:
            raise ValueError("Progress interval must be at least 1")
        self.stage_name = stage_name
        self.items_total = items_total
        self.observers = list(observers or [])
        self.interval = interval
        self._clock = clock
        self._started_at = clock()
        self._completed = 0
        self._since_notify = 0
        self._notified = False

    @property
    def items_completed(self) -> int:
        return self._completed

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            stage_name=self.stage_name,
            items_completed=self._completed,
            items_total=self.items_total,
            elapsed_seconds=self._clock() - self._started_at,
        )

    def advance(self, count: int = 1) -> None:
        """Record `count` completed items; notify only when the cadence is reached."""
        self._completed += count
        self._since_notify += count
        reached_total = self.items_total is not None and self._completed >= self.items_total
        if self._since_notify >= self.interval or reached_total:
            self._notify()

    def finish(self) -> ProgressSnapshot:
        """Flush a final notification unless observers already saw the final count."""
        if self._since_notify > 0 or not self._notified:
            self._notify()
        return self.snapshot()

    def _notify(self) -> None:
        self._since_notify = 0
        self._notified = True
        if not self.observers:
            return
        snap = self.snapshot()
        for observer in self.observers:
            try:
                observer(
                    snap.stage_name,
                    snap.items_completed,
                    snap.items_total,
                    snap.estimated_seconds_remaining,
                )
            except Exception as e:
                logger.warning(f"Error in progress observer: {e}")


class LoggingProgressObserver:
    """Progress sink that writes each notification to the module logger."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, stage_name, items_completed, items_total, estimated_seconds_remaining):
        if items_total:
            eta = "unknown" if estimated_seconds_remaining is None else f"{estimated_seconds_remaining:.1f}s"
            logger.log(self.level, f"[{stage_name}] {items_completed}/{items_total} (ETA {eta})")
        else:
            logger.log(self.level, f"[{stage_name}] {items_completed} items")
