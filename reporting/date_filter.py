"""
reporting/date_filter.py

Day-granularity date windows used to select rows for a report.

Three policies exist:

* explicit range: caller-supplied ``from``/``to`` bounds, both inclusive;
* default window: a configured start date up to and including today;
* today only: the current calendar day in server local time.

``today`` is always injectable so callers (and tests) can pin the clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable

Clock = Callable[[], date]


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def local_today() -> date:
    return date.today()


def in_range(
    value: date | datetime,
    from_date: date | datetime | None,
    to_date: date | datetime | None,
) -> bool:
    """
    Return True when *value* falls inside the inclusive ``[from_date, to_date]`` days.

    With both bounds absent every date matches. Bounds are compared at day
    granularity, so any time component on either side is ignored.
    """

    if from_date is None and to_date is None:
        return True

    day = _as_day(value)
    if from_date is not None and day < _as_day(from_date):
        return False
    if to_date is not None and day > _as_day(to_date):
        return False
    return True


def default_window(
    value: date | datetime,
    start: date,
    today: date | None = None,
) -> bool:
    """
    Return True when *value* is between *start* and today, inclusive.
    """

    return in_range(value, start, today if today is not None else local_today())


def is_today(value: date | datetime, today: date | None = None) -> bool:
    return _as_day(value) == (today if today is not None else local_today())


@dataclass(frozen=True)
class DateWindow:
    """
    Resolved inclusive day window; ``None`` bounds are open.
    """

    start: date | None
    end: date | None
    label: str

    @classmethod
    def explicit(cls, from_date: date | None, to_date: date | None) -> "DateWindow":
        return cls(start=from_date, end=to_date, label="explicit")

    @classmethod
    def since(cls, start: date, *, clock: Clock = local_today) -> "DateWindow":
        return cls(start=start, end=clock(), label="default")

    @classmethod
    def today_only(cls, *, clock: Clock = local_today) -> "DateWindow":
        today = clock()
        return cls(start=today, end=today, label="today")

    @classmethod
    def for_request(
        cls,
        *,
        from_date: date | None,
        to_date: date | None,
        default_start: date,
        clock: Clock = local_today,
    ) -> "DateWindow":
        """
        Explicit range when either bound is supplied, else the default window.
        """

        if from_date is not None or to_date is not None:
            return cls.explicit(from_date, to_date)
        return cls.since(default_start, clock=clock)

    def contains(self, value: date | datetime) -> bool:
        """
        Apply the policy this window was built with.
        """

        if self.label == "today" and self.end is not None:
            return is_today(value, self.end)
        if self.label == "default" and self.start is not None and self.end is not None:
            return default_window(value, self.start, self.end)
        return in_range(value, self.start, self.end)
