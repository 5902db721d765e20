"""Report persistence and legacy report import services."""

from .report_service import ReportService
from .legacy_importer import LegacyReportImporter, LegacyImportError

__all__ = ["ReportService", "LegacyReportImporter", "LegacyImportError"]
