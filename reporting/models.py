"""
reporting/models.py

Domain types shared by the report pipeline.

A ``RawRow`` is one parsed spreadsheet line keyed by the header text exactly
as it appeared in the sheet. Everything downstream of ingestion works on
these read-only mappings and produces ``GroupSummary`` records, which the
report assemblers relabel into presentation dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Union

RawRow = Mapping[str, str]
"""Header text → trimmed cell text for one sheet line."""

GroupKey = Union[date, str]
"""Calendar day, executive name, or fee-percentage text."""

ReportRow = dict[str, Any]
ReportResult = list[ReportRow]

GRAND_TOTAL_FLAG = "_isGrandTotal"
"""Key carried by every report row; True only on the trailing total."""


class CaseType(str, Enum):
    """
    Borrower classification read from the case-type column.
    """

    NEW = "new"
    REPEAT = "repeat"


class GroupBy(str, Enum):
    """
    Dimension used to bucket rows.
    """

    DAY = "day"
    EXECUTIVE = "executive"
    FEE_BUCKET = "fee_bucket"


class UnclassifiedPolicy(str, Enum):
    """
    What happens to a row whose case type matches neither configured literal.

    ``COUNT_AND_SUM``: counted as a case and summed (reports with no type split).
    ``SUM_ONLY``: measures summed, excluded from every case counter.
    ``SKIP``: row dropped from the report.
    """

    COUNT_AND_SUM = "count_and_sum"
    SUM_ONLY = "sum_only"
    SKIP = "skip"


@dataclass(frozen=True)
class AliasSet:
    """
    Ordered header spellings accepted for one logical field.
    """

    field: str
    aliases: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.aliases)


def freeze_row(row: Mapping[str, str]) -> RawRow:
    """
    Return a read-only view over a copy of *row*.
    """

    return MappingProxyType(dict(row))


@dataclass(frozen=True)
class GroupSummary:
    """
    Accumulated counters and measure totals for one group.

    The grand total uses the same shape with ``is_grand_total=True`` and no key.
    """

    key: GroupKey | None
    new_cases: int = 0
    repeat_cases: int = 0
    cases: int = 0
    measures: Mapping[str, Decimal] = field(default_factory=dict)
    is_grand_total: bool = False

    def measure(self, name: str) -> Decimal:
        return self.measures.get(name, Decimal(0))


@dataclass(frozen=True)
class AggregationResult:
    """
    Ordered group summaries plus exactly one grand total.
    """

    groups: tuple[GroupSummary, ...]
    grand_total: GroupSummary

    @property
    def is_empty(self) -> bool:
        return not self.groups
