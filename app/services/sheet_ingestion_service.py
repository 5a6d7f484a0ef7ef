"""
app/services/sheet_ingestion_service.py

Service layer turning a published sheet export into raw rows.

Parsing is deliberately tolerant at the row level and strict at the
document level:

* the first line supplies the field names, kept exactly as written;
* every cell is trimmed;
* ragged rows are kept: missing trailing cells are simply absent, surplus
  cells beyond the header are dropped;
* rows with no non-blank cell are discarded;
* anything that is not CSV at all (empty body, HTML page, malformed quoting,
  non UTF-8 bytes) fails the whole cycle with :class:`SheetParseError`.

Field-level validity (dates, amounts, names) is left to the report layer.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from functools import lru_cache

from app.config import get_sheet_http_settings
from app.connectors.published_sheet import PublishedSheetConnector
from app.logging_utils import log_event
from reporting.fields import is_blank
from reporting.models import RawRow, freeze_row

logger = logging.getLogger(__name__)

_HTML_MARKERS: tuple[str, ...] = ("<!doctype html", "<html")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SheetParseError(ValueError):
    """
    Raised when fetched text cannot be read as delimited tabular data.
    """

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedSheet:
    """
    Parsed rows plus the counts needed for ingestion logging.
    """

    headers: tuple[str, ...]
    rows: list[RawRow]
    lines_read: int
    blank_rows: int


def decode_sheet(raw: bytes) -> str:
    """
    Decode a sheet export as UTF-8, dropping a leading byte-order mark.
    """

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SheetParseError("Sheet export must be UTF-8 encoded.") from exc


def parse_sheet(text: str) -> ParsedSheet:
    """
    Parse CSV text into header-keyed rows.
    """

    if not text.strip():
        raise SheetParseError("Sheet export is empty.")
    if text.lstrip()[:16].lower().startswith(_HTML_MARKERS):
        raise SheetParseError(
            "Sheet export returned an HTML page instead of CSV; is the sheet still published?"
        )

    rows: list[RawRow] = []
    lines_read = 0
    blank_rows = 0
    try:
        reader = csv.reader(io.StringIO(text, newline=""), strict=True)
        headers = next(reader, None)
        if headers is None or all(is_blank(header) for header in headers):
            raise SheetParseError("Sheet header row is missing.")

        for cells in reader:
            lines_read += 1
            row: dict[str, str] = {}
            for header, cell in zip(headers, cells):
                value = cell.strip()
                # Duplicate headers: the first non-blank cell wins.
                if header not in row or (not row[header] and value):
                    row[header] = value
            if all(is_blank(value) for value in row.values()):
                blank_rows += 1
                continue
            rows.append(freeze_row(row))
    except csv.Error as exc:
        raise SheetParseError(f"Invalid CSV format: {exc}") from exc

    return ParsedSheet(
        headers=tuple(headers),
        rows=rows,
        lines_read=lines_read,
        blank_rows=blank_rows,
    )


def parse_sheet_rows(text: str) -> list[RawRow]:
    return parse_sheet(text).rows


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SheetIngestionService:
    """
    Fetches a published sheet and parses it into raw rows.
    """

    def __init__(self, *, connector: PublishedSheetConnector) -> None:
        self._connector = connector

    def fetch_text(self, url: str) -> str:
        """
        Fetch and decode the export without parsing it.
        """

        try:
            return decode_sheet(self._connector.fetch_csv(url))
        except SheetParseError as exc:
            exc.url = url
            raise

    def ingest(self, url: str) -> list[RawRow]:
        """
        Fetch *url* and return its non-blank rows.

        Raises
        ------
        SheetFetchError
            When the sheet cannot be fetched.
        SheetParseError
            When the body is not parseable CSV.
        """

        text = self.fetch_text(url)
        try:
            parsed = parse_sheet(text)
        except SheetParseError as exc:
            exc.url = url
            logger.error("Sheet parse failed url=%s error=%s", url, exc)
            raise

        log_event(
            logger,
            logging.INFO,
            "sheet_ingested",
            url=url,
            characters=len(text),
            lines_read=parsed.lines_read,
            rows_kept=len(parsed.rows),
            blank_rows=parsed.blank_rows,
        )
        log_event(logger, logging.DEBUG, "sheet_headers", url=url, headers=list(parsed.headers))
        return parsed.rows


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_sheet_ingestion_service() -> SheetIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    return SheetIngestionService(
        connector=PublishedSheetConnector(http_settings=get_sheet_http_settings()),
    )
