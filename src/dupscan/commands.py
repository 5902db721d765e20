"""
Unified command orchestrator for scans.
This is the SINGLE entry point for business logic, used by the CLI and library callers.
"""
import logging
from pathlib import Path
from typing import List, Optional

from dupscan.core.models import ScanParams, ScanReport, ScanStats, NoScanRootsError
from dupscan.core.interfaces import ProgressObserver
from dupscan.core.pipeline import ScanPipeline
from dupscan.core.progress import LoggingProgressObserver

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates one scan:
    1. Validate the requested roots (missing, non-directory, repeated or nested roots are dropped)
    2. Fail fast if none remain
    3. Run the pipeline and return its report

    Usage:
        params = ScanParams(roots=["/srv/media", "/srv/backup"], extensions=[".jpg"])
        report = ScanCommand().execute(params, progress_observer=cli_progress_printer)
    """

    def __init__(self):
        self._stats: Optional[ScanStats] = None

    @staticmethod
    def resolve_roots(roots: List[str]) -> List[str]:
        """
        Keep caller order; drop roots that do not exist, are not directories,
        or are already covered by an earlier root.
        """
        usable: List[Path] = []
        for root in roots:
            path = Path(root).expanduser()
            if not path.exists():
                logger.warning(f"Scan root does not exist: {root}")
                continue
            if not path.is_dir():
                logger.warning(f"Scan root is not a directory: {root}")
                continue
            path = path.resolve()
            covered = next((u for u in usable if path == u or u in path.parents), None)
            if covered is not None:
                logger.warning(f"Scan root {root} is already covered by {covered}")
                continue
            nested = [u for u in usable if path in u.parents]
            for inner in nested:
                logger.warning(f"Scan root {inner} is covered by {path}")
                usable.remove(inner)
            usable.append(path)
        return [str(p) for p in usable]

    def execute(
            self,
            params: ScanParams,
            progress_observer: Optional[ProgressObserver] = None,
    ) -> ScanReport:
        """
        Execute a scan with given parameters.

        Args:
            params: Validated scan parameters
            progress_observer: (stage, completed, total, eta_seconds) -> None.
                Without one, progress is written to the debug log.

        Returns:
            The finished ScanReport

        Raises:
            NoScanRootsError: If none of the requested roots is a usable directory
        """
        roots = self.resolve_roots(params.roots)
        if not roots:
            raise NoScanRootsError(
                f"None of the scan roots is an existing directory: {', '.join(params.roots)}")

        pipeline = ScanPipeline(
            extensions=params.extensions,
            workers=params.workers,
            hash_timeout=params.hash_timeout,
            verify=params.verify,
            observers=[progress_observer or LoggingProgressObserver(logging.DEBUG)],
        )
        logger.debug(f"Usable scan roots: {roots}")
        report = pipeline.run(roots, scan_roots=params.roots)
        self._stats = pipeline.stats
        return report

    def get_stats(self) -> Optional[ScanStats]:
        """Per-stage statistics of the last execution."""
        return self._stats
