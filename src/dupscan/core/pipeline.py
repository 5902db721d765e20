"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pipeline.py
Runs one scan through the staged pipeline:
    walk → size → partial hash → full hash [→ byte verify] → report

States advance strictly in that order. A stage with nothing to do still
runs on its empty input, and a finished pipeline cannot be run again.
"""
import socket
import time
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from dupscan.core.models import (
    PipelineState, ScanReport, ScanStats, NoScanRootsError, SkipRecord, ScanConfig)
from dupscan.core.interfaces import FileWalker, Hasher, ProgressObserver
from dupscan.core.walker import FileWalkerImpl
from dupscan.core.hasher import HasherImpl
from dupscan.core.grouper import FileGrouperImpl
from dupscan.core.stages import SizeStageImpl, PartialHashStage, FullHashStage, VerifyStage
from dupscan.core.report import ReportBuilder

logger = logging.getLogger(__name__)


# =============================
# Main Pipeline Class
# =============================
class ScanPipeline:
    """
    Single-use orchestrator for one scan invocation.
    Collects per-stage statistics in `stats` and exposes the current `state`.
    """

    def __init__(
        self,
        extensions: Optional[List[str]] = None,
        workers: int = 1,
        hash_timeout: Optional[float] = None,
        verify: bool = False,
        observers: Optional[List[ProgressObserver]] = None,
        walker: Optional[FileWalker] = None,
        hasher: Optional[Hasher] = None,
        hostname: Optional[str] = None,
        progress_interval: int = ScanConfig.PROGRESS_INTERVAL,
        on_state_change: Optional[Callable[[PipelineState], None]] = None,
    ):
        self.observers = list(observers or [])
        self.walker = walker or FileWalkerImpl(extensions=extensions, observers=self.observers)
        self.grouper = FileGrouperImpl(hasher or HasherImpl(), workers=workers, timeout=hash_timeout)
        self.verify = verify
        self.hostname = hostname or socket.gethostname()
        self.progress_interval = progress_interval
        self.on_state_change = on_state_change
        self.state = PipelineState.IDLE
        self.stats = ScanStats()

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)

    def run(self, roots: List[str], scan_roots: Optional[List[str]] = None) -> ScanReport:
        """
        Scan `roots` (already validated to exist) and build the report.

        `scan_roots` is what the caller asked for, recorded in the report
        metadata; it defaults to `roots`.

        Raises:
            NoScanRootsError: If `roots` is empty
            RuntimeError: If this pipeline has already run
        """
        if self.state != PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already used (state: {self.state.value})")
        if not roots:
            raise NoScanRootsError("No usable scan roots supplied")

        started_at = datetime.now(timezone.utc)
        total_start_time = time.time()
        errors: List[SkipRecord] = []
        stage_args = dict(observers=self.observers, progress_interval=self.progress_interval)

        self._transition(PipelineState.WALKING)
        start_time = time.time()
        files, walk_skips = self.walker.walk(roots)
        errors.extend(walk_skips)
        self.stats.update_stage("walk", 0, len(files), time.time() - start_time)

        self._transition(PipelineState.GROUPING)
        start_time = time.time()
        groups = SizeStageImpl(self.grouper, **stage_args).process(files)
        self._record("size", groups, start_time)

        self._transition(PipelineState.PARTIAL_HASHING)
        start_time = time.time()
        groups, skips = PartialHashStage(self.grouper, **stage_args).process(groups)
        errors.extend(skips)
        self._record("partial", groups, start_time)

        self._transition(PipelineState.FULL_HASHING)
        start_time = time.time()
        sets, skips = FullHashStage(self.grouper, **stage_args).process(groups)
        errors.extend(skips)
        self._record("full", sets, start_time)

        if self.verify:
            self._transition(PipelineState.VERIFYING)
            start_time = time.time()
            sets, skips = VerifyStage(self.grouper, **stage_args).process(sets)
            errors.extend(skips)
            self._record("verify", sets, start_time)

        report = ReportBuilder().build(
            sets=sets,
            errors=errors,
            hostname=self.hostname,
            scan_roots=list(scan_roots if scan_roots is not None else roots),
            started_at=started_at,
            total_files_scanned=len(files),
            duration_seconds=time.time() - total_start_time,
        )
        self.stats.total_time = time.time() - total_start_time
        self._transition(PipelineState.REPORT_READY)
        return report

    def _record(self, stage: str, groups, start_time: float) -> None:
        """Helper to update ScanStats from a stage's output groups."""
        self.stats.update_stage(
            stage_name=stage,
            groups_found=len(groups),
            files_processed=sum(len(g.files) for g in groups),
            duration=time.time() - start_time,
        )
