"""
reporting/fields.py

Field resolution over loosely-structured sheet rows.

Sheet headers drift: the same column shows up as ``Loan Amount``,
``LOAN AMOUNT`` or ``Loan Amount `` depending on who last edited the sheet.
Every lookup goes through :func:`resolve`, which walks an ordered alias list
and tolerates case, whitespace and punctuation differences, so call sites
never special-case header spelling.

Policies
--------
* Text fields: :func:`text_value` returns ``None`` when nothing resolves;
  callers that require the field skip the row.
* Numeric fields: :func:`numeric_value` returns ``Decimal(0)`` when nothing
  resolves or the cell does not parse. Blank amount cells are routine in the
  sheet (amounts filled in later) and must not drop the row.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, TypeVar

from reporting.models import RawRow

T = TypeVar("T")

ZERO = Decimal(0)

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.

    ``%`` is kept so ``Processing Fee %`` never matches ``Processing Fee``.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum() or ch == "%")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return str(value).strip() == ""


def _normalized_lookup(row: RawRow) -> dict[str, list[str]]:
    lookup: dict[str, list[str]] = {}
    for header in row:
        if header is None:
            continue
        normalized = normalize_header(header)
        if normalized:
            lookup.setdefault(normalized, []).append(header)
    return lookup


def resolve(row: RawRow, aliases: Iterable[str]) -> str | None:
    """
    Return the first non-blank value found under any alias, trimmed.

    Aliases are tried in priority order. For each alias an exact header match
    wins; otherwise any header equal to it after :func:`normalize_header` is
    used. Returns ``None`` when no alias yields a value.
    """

    lookup: dict[str, list[str]] | None = None
    for alias in aliases:
        value = row.get(alias)
        if not is_blank(value):
            return str(value).strip()

        if lookup is None:
            lookup = _normalized_lookup(row)
        for header in lookup.get(normalize_header(alias), ()):
            value = row.get(header)
            if not is_blank(value):
                return str(value).strip()
    return None


def text_value(row: RawRow, aliases: Iterable[str]) -> str | None:
    """
    Resolve a required text field; ``None`` signals the row should be skipped.
    """

    return resolve(row, aliases)


def parse_number(raw: str | None) -> Decimal | None:
    """
    Parse spreadsheet number text such as ``"50,000"`` or ``"1200.50 Rs"``.

    Thousands separators are stripped and the leading decimal number is read.
    Returns ``None`` when no number can be read.
    """

    if is_blank(raw):
        return None
    cleaned = str(raw).strip().replace(",", "")
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def numeric_value(row: RawRow, aliases: Iterable[str]) -> Decimal:
    """
    Resolve a numeric measure with the zero-fallback policy.
    """

    parsed = parse_number(resolve(row, aliases))
    return parsed if parsed is not None else ZERO


def scan_headers(
    row: RawRow,
    substrings: Iterable[str],
    parse: Callable[[str], T | None],
) -> T | None:
    """
    Secondary lookup: try every header containing one of *substrings*.

    Headers are visited in sheet order; the first cell for which *parse*
    returns a value wins. Only used after the alias list has failed.
    """

    needles = tuple(needle.lower() for needle in substrings)
    for header, value in row.items():
        if not header or is_blank(value):
            continue
        lowered = header.lower()
        if not any(needle in lowered for needle in needles):
            continue
        parsed = parse(str(value).strip())
        if parsed is not None:
            return parsed
    return None
