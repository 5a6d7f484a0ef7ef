"""
reporting/dates.py

Calendar-date parsing for sheet cells and query parameters.

The sheet is maintained with day-first dates (``09/01/2026`` is 9 January),
so the day-first pattern is always tried before any generic parsing. A
generic month-first parse of the same text would silently misplace every
day <= 12.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_TRAILING_TIME = re.compile(
    r"[\sT]+\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?\s*(?:[AaPp][Mm])?$"
)

FALLBACK_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%d %b %Y",
    "%d-%b-%Y",
    "%d %B %Y",
    "%d-%B-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%m/%d/%Y",
    "%m-%d-%Y",
)

DISPLAY_FORMAT = "%d-%m-%Y"


def _parse_day_first(text: str) -> date | None:
    match = _DAY_FIRST.match(text)
    if match is None:
        return None

    day, month, year = (int(part) for part in match.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    try:
        parsed = date(year, month, day)
    except ValueError:
        # Day out of range for the month (30/02, 31/04, ...).
        return None
    if (parsed.year, parsed.month, parsed.day) != (year, month, day):
        return None
    return parsed


def _parse_generic(text: str) -> date | None:
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_date(raw: object) -> date | None:
    """
    Parse one sheet cell into a calendar date.

    1. ``D/M/YYYY`` or ``D-M-YYYY`` (day first), rejecting impossible dates.
    2. ISO-8601, then a fixed list of common spellings.
    3. The day-first pattern again with a trailing time of day removed.

    Returns ``None`` when the text is blank or is not a valid date.
    """

    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = str(raw).strip()
    if not text:
        return None

    parsed = _parse_day_first(text)
    if parsed is not None:
        return parsed

    parsed = _parse_generic(text)
    if parsed is not None:
        return parsed

    without_time = _TRAILING_TIME.sub("", text)
    if without_time != text:
        return _parse_day_first(without_time)
    return None


def parse_query_date(raw: str | None) -> date | None:
    """
    Parse a ``YYYY-MM-DD`` bound; anything else is treated as absent.
    """

    if raw is None or not raw.strip():
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def format_display_date(value: date) -> str:
    """
    Render a day as ``DD-MM-YYYY``, the sheet's own convention.
    """

    return value.strftime(DISPLAY_FORMAT)
