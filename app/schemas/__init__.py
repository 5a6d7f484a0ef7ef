"""
app/schemas package marker.
"""

from app.schemas.reports import (
    ReportErrorResponse,
    ReportRowsResponse,
    SheetPreviewResponse,
    TodaySanctionResponse,
)

__all__ = [
    "ReportErrorResponse",
    "ReportRowsResponse",
    "SheetPreviewResponse",
    "TodaySanctionResponse",
]
