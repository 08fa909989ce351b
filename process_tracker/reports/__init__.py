"""Process reports and CSV export."""

from .builder import ProcessReport, build_reports, duration_days, involved_assignees
from .export import EXPORT_FILENAME, HEADERS, export_csv, write_export
from .formatters import format_date, format_duration

__all__ = [
    "ProcessReport",
    "build_reports",
    "duration_days",
    "involved_assignees",
    "EXPORT_FILENAME",
    "HEADERS",
    "export_csv",
    "write_export",
    "format_date",
    "format_duration",
]
