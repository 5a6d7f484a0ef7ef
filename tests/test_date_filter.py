from __future__ import annotations

import unittest
from datetime import date, datetime
from unittest import mock

from reporting.date_filter import DateWindow, default_window, in_range, is_today


class TestInRange(unittest.TestCase):
    def test_no_bounds_matches_everything(self) -> None:
        self.assertTrue(in_range(date(1999, 1, 1), None, None))

    def test_to_date_is_inclusive(self) -> None:
        self.assertTrue(in_range(date(2026, 1, 31), date(2026, 1, 1), date(2026, 1, 31)))

    def test_day_after_to_date_is_excluded(self) -> None:
        self.assertFalse(in_range(date(2026, 2, 1), date(2026, 1, 1), date(2026, 1, 31)))

    def test_from_date_is_inclusive(self) -> None:
        self.assertTrue(in_range(date(2026, 1, 1), date(2026, 1, 1), None))
        self.assertFalse(in_range(date(2025, 12, 31), date(2026, 1, 1), None))

    def test_time_of_day_is_ignored(self) -> None:
        self.assertTrue(
            in_range(datetime(2026, 1, 31, 23, 59, 59), date(2026, 1, 1), date(2026, 1, 31))
        )
        self.assertTrue(
            in_range(date(2026, 1, 31), date(2026, 1, 1), datetime(2026, 1, 31, 0, 0))
        )


class TestPolicies(unittest.TestCase):
    def test_default_window_runs_through_today(self) -> None:
        today = date(2026, 3, 10)
        self.assertTrue(default_window(date(2026, 3, 10), date(2026, 1, 1), today))
        self.assertFalse(default_window(date(2026, 3, 11), date(2026, 1, 1), today))
        self.assertFalse(default_window(date(2025, 12, 31), date(2026, 1, 1), today))

    def test_is_today(self) -> None:
        self.assertTrue(is_today(datetime(2026, 3, 10, 8, 0), date(2026, 3, 10)))
        self.assertFalse(is_today(date(2026, 3, 9), date(2026, 3, 10)))


class TestDateWindow(unittest.TestCase):
    def test_request_without_bounds_uses_default_window(self) -> None:
        window = DateWindow.for_request(
            from_date=None,
            to_date=None,
            default_start=date(2026, 1, 1),
            clock=lambda: date(2026, 3, 10),
        )
        self.assertEqual(window, DateWindow(date(2026, 1, 1), date(2026, 3, 10), "default"))

    def test_single_bound_is_an_explicit_open_range(self) -> None:
        window = DateWindow.for_request(
            from_date=date(2026, 2, 1),
            to_date=None,
            default_start=date(2026, 1, 1),
            clock=lambda: date(2026, 3, 10),
        )
        self.assertEqual(window.label, "explicit")
        self.assertIsNone(window.end)
        self.assertTrue(window.contains(date(2030, 1, 1)))
        self.assertFalse(window.contains(date(2026, 1, 31)))

    def test_today_only(self) -> None:
        window = DateWindow.today_only(clock=lambda: date(2026, 3, 10))
        self.assertTrue(window.contains(date(2026, 3, 10)))
        self.assertFalse(window.contains(date(2026, 3, 11)))
        self.assertFalse(window.contains(date(2026, 3, 9)))

    def test_since_window_bounds_and_datetimes(self) -> None:
        window = DateWindow.since(date(2026, 1, 1), clock=lambda: date(2026, 3, 10))
        self.assertTrue(window.contains(datetime(2026, 3, 10, 23, 0)))
        self.assertTrue(window.contains(date(2026, 1, 1)))
        self.assertFalse(window.contains(date(2026, 3, 11)))

    def test_windows_apply_their_named_policy(self) -> None:
        since = DateWindow.since(date(2026, 1, 1), clock=lambda: date(2026, 3, 10))
        today = DateWindow.today_only(clock=lambda: date(2026, 3, 10))

        with mock.patch("reporting.date_filter.default_window", wraps=default_window) as spy:
            since.contains(date(2026, 2, 1))
        spy.assert_called_once_with(date(2026, 2, 1), date(2026, 1, 1), date(2026, 3, 10))

        with mock.patch("reporting.date_filter.is_today", wraps=is_today) as spy:
            today.contains(date(2026, 3, 10))
        spy.assert_called_once_with(date(2026, 3, 10), date(2026, 3, 10))
