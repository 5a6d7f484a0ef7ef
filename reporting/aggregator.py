"""
reporting/aggregator.py

Group-and-sum engine behind every report.

Given parsed sheet rows, an :class:`AggregationPlan` and a
:class:`~reporting.date_filter.DateWindow`, :func:`aggregate` produces the
ordered group summaries plus one grand total. The engine is pure: no I/O,
no clock reads (the window already carries its resolved bounds), and fresh
accumulators on every call, so repeated calls over the same rows are
identical.

Per-row pipeline
----------------
1. Resolve the disbursal date: alias list first, then any header whose name
   contains a date hint. Rows without a valid date are skipped.
2. Drop rows outside the window.
3. Compute the group key (day, executive name, fee percentage). Rows without
   a key are skipped.
4. Classify the case type and apply the plan's :class:`UnclassifiedPolicy`.
5. Add the configured measures (zero-fallback for blank/unparsable cells).

Ordering
--------
``DAY`` ascending by date, ``EXECUTIVE`` descending by the ranking measure
(ties keep first-seen order), ``FEE_BUCKET`` ascending by percentage.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from reporting.aliases import DATE_HEADER_HINTS
from reporting.date_filter import DateWindow
from reporting.dates import parse_date
from reporting.fields import ZERO, numeric_value, resolve, scan_headers, text_value
from reporting.models import (
    AggregationResult,
    AliasSet,
    CaseType,
    GroupBy,
    GroupKey,
    GroupSummary,
    RawRow,
    UnclassifiedPolicy,
)
from reporting.profiles import CaseTypeRule

logger = logging.getLogger(__name__)

_PERCENT_NUMBER = re.compile(r"(\d+(?:\.\d+)?)\s*%?")

# Executive cells that merely repeat the column title (header rows pasted
# mid-sheet) are not executives.
_HEADER_ECHO = "sanctioned"


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregationPlan:
    """
    Declarative description of one report's grouping.

    Parameters
    ----------
    group_by:
        Grouping dimension.
    date_aliases:
        Alias set for the disbursal date column.
    measures:
        Numeric columns summed per group; each alias set's ``field`` names
        the measure.
    key_aliases:
        Alias set for the grouping column (executive or fee percentage).
        Unused for ``GroupBy.DAY``.
    key_hints:
        Header substrings scanned when ``key_aliases`` does not resolve.
    case_type:
        Optional New/Repeat classification rule.
    case_filter:
        When set, only rows classified as this case type are aggregated.
    unclassified:
        Handling of rows whose case type matches neither literal.
    rank_measure:
        Measure used to order executive groups.
    """

    group_by: GroupBy
    date_aliases: AliasSet
    measures: tuple[AliasSet, ...] = ()
    key_aliases: AliasSet | None = None
    key_hints: tuple[str, ...] = ()
    date_hints: tuple[str, ...] = DATE_HEADER_HINTS
    case_type: CaseTypeRule | None = None
    case_filter: CaseType | None = None
    unclassified: UnclassifiedPolicy = UnclassifiedPolicy.COUNT_AND_SUM
    rank_measure: str | None = None

    @property
    def measure_names(self) -> tuple[str, ...]:
        return tuple(alias_set.field for alias_set in self.measures)


# ---------------------------------------------------------------------------
# Row-level resolution
# ---------------------------------------------------------------------------


def resolve_row_date(
    row: RawRow,
    aliases: AliasSet,
    hints: Iterable[str] = DATE_HEADER_HINTS,
) -> date | None:
    """
    Find the row's date: alias list first, then the header heuristic.
    """

    for alias in aliases:
        parsed = parse_date(resolve(row, (alias,)))
        if parsed is not None:
            return parsed
    return scan_headers(row, hints, parse_date)


def fee_bucket_of(raw: str | None) -> str | None:
    """
    Extract the percentage number from a fee cell (``"2.5 %"`` → ``"2.5"``).
    """

    if raw is None:
        return None
    match = _PERCENT_NUMBER.search(raw)
    return match.group(1) if match else None


def executive_of(raw: str | None) -> str | None:
    if raw is None:
        return None
    name = raw.strip()
    if not name or _HEADER_ECHO in name.lower():
        return None
    return name


def _text_with_hints(row: RawRow, aliases: AliasSet | None, hints: tuple[str, ...]) -> str | None:
    if aliases is not None:
        value = text_value(row, aliases)
        if value is not None:
            return value
    if not hints:
        return None
    return scan_headers(row, hints, lambda value: value or None)


def group_key_of(row: RawRow, day: date, plan: AggregationPlan) -> GroupKey | None:
    """
    Compute the grouping key for a row already known to fall on *day*.

    An executive cell that echoes the header title skips the row; the
    header heuristic is only consulted when the executive column is absent
    or blank.
    """

    if plan.group_by is GroupBy.DAY:
        return day
    if plan.group_by is GroupBy.EXECUTIVE:
        raw = text_value(row, plan.key_aliases) if plan.key_aliases is not None else None
        if raw is not None:
            return executive_of(raw)
        if not plan.key_hints:
            return None
        return scan_headers(row, plan.key_hints, executive_of)
    if plan.group_by is GroupBy.FEE_BUCKET:
        return fee_bucket_of(_text_with_hints(row, plan.key_aliases, plan.key_hints))
    raise ValueError(f"Unsupported group_by: {plan.group_by!r}")


def classify_row(row: RawRow, rule: CaseTypeRule | None) -> CaseType | None:
    if rule is None:
        return None
    return rule.classify(resolve(row, rule.column))


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


@dataclass
class _Accumulator:
    key: GroupKey
    measure_names: tuple[str, ...]
    new_cases: int = 0
    repeat_cases: int = 0
    cases: int = 0
    measures: dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in self.measure_names:
            self.measures.setdefault(name, ZERO)

    def add(self, case: CaseType | None, counted: bool, amounts: dict[str, Decimal]) -> None:
        if case is CaseType.NEW:
            self.new_cases += 1
        elif case is CaseType.REPEAT:
            self.repeat_cases += 1
        if counted:
            self.cases += 1
        for name, amount in amounts.items():
            self.measures[name] += amount

    def freeze(self) -> GroupSummary:
        return GroupSummary(
            key=self.key,
            new_cases=self.new_cases,
            repeat_cases=self.repeat_cases,
            cases=self.cases,
            measures=dict(self.measures),
        )


def _order(groups: list[GroupSummary], plan: AggregationPlan) -> list[GroupSummary]:
    if plan.group_by is GroupBy.DAY:
        return sorted(groups, key=lambda group: group.key)
    if plan.group_by is GroupBy.EXECUTIVE:
        rank = plan.rank_measure or (plan.measure_names[0] if plan.measures else None)
        if rank is None:
            return sorted(groups, key=lambda group: group.cases, reverse=True)
        return sorted(groups, key=lambda group: group.measure(rank), reverse=True)
    if plan.group_by is GroupBy.FEE_BUCKET:
        return sorted(groups, key=lambda group: Decimal(str(group.key)))
    raise ValueError(f"Unsupported group_by: {plan.group_by!r}")


def grand_total_of(groups: Iterable[GroupSummary], measure_names: Iterable[str]) -> GroupSummary:
    """
    Sum every group's counters and measures into one flagged summary.
    """

    totals: dict[str, Decimal] = {name: ZERO for name in measure_names}
    new_cases = repeat_cases = cases = 0
    for group in groups:
        new_cases += group.new_cases
        repeat_cases += group.repeat_cases
        cases += group.cases
        for name, amount in group.measures.items():
            totals[name] = totals.get(name, ZERO) + amount
    return GroupSummary(
        key=None,
        new_cases=new_cases,
        repeat_cases=repeat_cases,
        cases=cases,
        measures=totals,
        is_grand_total=True,
    )


def aggregate(
    rows: Iterable[RawRow],
    plan: AggregationPlan,
    window: DateWindow,
) -> AggregationResult:
    """
    Group, classify and sum *rows* according to *plan* within *window*.
    """

    accumulators: dict[GroupKey, _Accumulator] = {}
    skipped: Counter[str] = Counter()
    rows_in = 0

    for row in rows:
        rows_in += 1
        day = resolve_row_date(row, plan.date_aliases, plan.date_hints)
        if day is None:
            skipped["without_date"] += 1
            continue
        if not window.contains(day):
            skipped["outside_window"] += 1
            continue

        key = group_key_of(row, day, plan)
        if key is None:
            skipped["without_key"] += 1
            continue

        case = classify_row(row, plan.case_type)
        if plan.case_filter is not None and case is not plan.case_filter:
            skipped["other_case_type"] += 1
            continue
        if case is None and plan.case_type is not None:
            skipped["unclassified"] += 1
            if plan.unclassified is UnclassifiedPolicy.SKIP:
                continue
        counted = case is not None or plan.unclassified is UnclassifiedPolicy.COUNT_AND_SUM

        amounts = {alias_set.field: numeric_value(row, alias_set) for alias_set in plan.measures}

        accumulator = accumulators.get(key)
        if accumulator is None:
            accumulator = _Accumulator(key=key, measure_names=plan.measure_names)
            accumulators[key] = accumulator
        accumulator.add(case, counted, amounts)

    groups = _order([accumulator.freeze() for accumulator in accumulators.values()], plan)
    grand_total = grand_total_of(groups, plan.measure_names)

    logger.debug(
        "aggregate group_by=%s window=%s[%s..%s] rows_in=%d groups=%d skipped=%s",
        plan.group_by.value,
        window.label,
        window.start,
        window.end,
        rows_in,
        len(groups),
        dict(skipped),
    )
    return AggregationResult(groups=tuple(groups), grand_total=grand_total)
