"""
dupscan: audit directory trees for byte-identical files.

Core features:
- Staged detection: size → 16 KiB prefix hash → full xxHash3-128 hash
- Optional byte-by-byte verification of every duplicate set
- Symbolic links are never followed; unreadable paths are logged, not fatal
- JSON report with duplicate sets, potential savings and the skip log
- Importer for legacy size-grouped CSV reports
"""
from pathlib import Path

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("dupscan")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from dupscan.commands import ScanCommand
from dupscan.core import (
    ScanParams, ScanReport, DuplicateSet, FileRecord, SkipRecord, SkipReason, NoScanRootsError)
from dupscan.utils.convert_utils import ConvertUtils
from dupscan.services import ReportService, LegacyReportImporter

__all__ = [
    "ScanCommand",
    "ScanParams",
    "ScanReport",
    "DuplicateSet",
    "FileRecord",
    "SkipRecord",
    "SkipReason",
    "NoScanRootsError",
    "ConvertUtils",
    "ReportService",
    "LegacyReportImporter",
    "__version__",
]
