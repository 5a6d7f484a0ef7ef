"""
app/services package marker.
"""

from app.services.report_service import ReportService, SheetPreview, get_report_service
from app.services.sheet_ingestion_service import (
    SheetIngestionService,
    SheetParseError,
    get_sheet_ingestion_service,
    parse_sheet_rows,
)

__all__ = [
    "ReportService",
    "SheetPreview",
    "get_report_service",
    "SheetIngestionService",
    "SheetParseError",
    "get_sheet_ingestion_service",
    "parse_sheet_rows",
]
