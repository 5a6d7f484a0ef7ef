"""
app/schemas/reports.py

Response schemas for report endpoints.

Report rows themselves are passed through as plain dicts: their field
names ("Loan Amount", "_isGrandTotal", ...) are the dashboard contract and
must reach the browser byte-for-byte.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ReportRowsResponse = list[dict[str, Any]]


class TodaySanctionResponse(BaseModel):
    """
    Same-day sanction split: one executive leaderboard per case type.
    """

    new: list[dict[str, Any]] = Field(default_factory=list)
    repeat: list[dict[str, Any]] = Field(default_factory=list)


class SheetPreviewResponse(BaseModel):
    """
    Raw published-sheet contents, for diagnosing header drift.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str
    csv_length: int = Field(..., ge=0, alias="csvLength")
    first_500_chars: str = Field(..., alias="first500Chars")
    raw_csv: str = Field(..., alias="rawCsv")


class ReportErrorResponse(BaseModel):
    """
    Error body for upstream sheet failures.
    """

    error: str
    message: str
    url: str | None = None
