"""
tests/test_dates.py

Pytest unit tests for sheet date parsing.

Day-first parsing is the important property: ``09/01/2026`` must be
9 January, never 1 September.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from reporting.dates import format_display_date, parse_date, parse_query_date


class TestDayFirst:
    def test_ambiguous_date_is_read_day_first(self) -> None:
        assert parse_date("09/01/2026") == date(2026, 1, 9)

    def test_unambiguous_day_first_date(self) -> None:
        assert parse_date("13/01/2026") == date(2026, 1, 13)

    @pytest.mark.parametrize("raw", ["05-01-2026", "05/01/2026", "5/1/2026", " 05/01/2026 "])
    def test_separator_and_padding_variants(self, raw: str) -> None:
        assert parse_date(raw) == date(2026, 1, 5)

    @pytest.mark.parametrize("raw", ["30/02/2026", "31/04/2026", "29/02/2025", "00/01/2026"])
    def test_impossible_calendar_dates_are_rejected(self, raw: str) -> None:
        assert parse_date(raw) is None

    def test_leap_day_is_accepted(self) -> None:
        assert parse_date("29/02/2028") == date(2028, 2, 29)


class TestFallbackFormats:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2026-01-09", date(2026, 1, 9)),
            ("2026-01-09T10:30:00", date(2026, 1, 9)),
            ("2026-01-09T10:30:00Z", date(2026, 1, 9)),
            ("2026/01/09", date(2026, 1, 9)),
            ("09 Jan 2026", date(2026, 1, 9)),
            ("9-Jan-2026", date(2026, 1, 9)),
            ("January 9, 2026", date(2026, 1, 9)),
        ],
    )
    def test_common_spellings(self, raw: str, expected: date) -> None:
        assert parse_date(raw) == expected

    def test_month_first_only_when_day_first_is_impossible(self) -> None:
        assert parse_date("01/13/2026") == date(2026, 1, 13)

    def test_trailing_time_is_ignored(self) -> None:
        assert parse_date("09/01/2026 14:30") == date(2026, 1, 9)
        assert parse_date("09/01/2026 2:30:15 PM") == date(2026, 1, 9)


class TestParseDateInputs:
    @pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "TBD"])
    def test_blank_or_garbage_is_none(self, raw: object) -> None:
        assert parse_date(raw) is None

    def test_date_and_datetime_pass_through(self) -> None:
        assert parse_date(date(2026, 1, 9)) == date(2026, 1, 9)
        assert parse_date(datetime(2026, 1, 9, 23, 59)) == date(2026, 1, 9)


class TestQueryAndDisplay:
    def test_query_date_is_iso(self) -> None:
        assert parse_query_date("2026-01-09") == date(2026, 1, 9)

    @pytest.mark.parametrize("raw", [None, "", "09/01/2026", "2026-13-01", "NaN-NaN-NaN"])
    def test_invalid_query_date_is_absent(self, raw: str | None) -> None:
        assert parse_query_date(raw) is None

    def test_display_format_is_day_month_year(self) -> None:
        assert format_display_date(date(2026, 1, 9)) == "09-01-2026"
