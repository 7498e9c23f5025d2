"""Host-facing services"""
from .export_tool import ExportTool, create_export_tool
from .report_service import (
    LogEntry,
    Photo,
    ReportSection,
    SummaryReport,
    SummaryReportComposer,
    export_photo_batches,
    normalize_learner_name,
    report_filename,
)

__all__ = [
    "ExportTool",
    "create_export_tool",
    "LogEntry",
    "Photo",
    "ReportSection",
    "SummaryReport",
    "SummaryReportComposer",
    "export_photo_batches",
    "normalize_learner_name",
    "report_filename",
]
