"""
reporting/assemblers.py

The four dashboard reports, each a configuration of the aggregator plus
presentation labels.

All functions are pure over already-ingested rows. Output rows are plain
dicts whose field names are consumed verbatim by the dashboard tables, so
the label strings below are part of the public contract.

Reports
-------
daily_performance_report: one row per disbursal day
executive_leaderboard_report: one row per sanctioning executive
same_day_sanction_report: today's executives, split New vs Repeat
fee_bucket_report: today's loans grouped by PF %
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from reporting import aliases
from reporting.aggregator import AggregationPlan, aggregate
from reporting.date_filter import Clock, DateWindow, local_today
from reporting.dates import format_display_date
from reporting.models import (
    GRAND_TOTAL_FLAG,
    AggregationResult,
    CaseType,
    GroupBy,
    GroupSummary,
    RawRow,
    ReportResult,
    ReportRow,
    UnclassifiedPolicy,
)
from reporting.profiles import SheetProfile

DAILY_GRAND_TOTAL_LABEL = "GRAND TOTAL"
GRAND_TOTAL_LABEL = "Grand Total"


def to_json_number(value: Decimal | int) -> int | float:
    """
    Render an exact amount as a JSON-friendly number (int when integral).
    """

    if isinstance(value, int):
        return value
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _clock_for(today: date | None) -> Clock:
    if today is None:
        return local_today
    return lambda: today


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def daily_plan(profile: SheetProfile) -> AggregationPlan:
    return AggregationPlan(
        group_by=GroupBy.DAY,
        date_aliases=profile.disburse_date,
        measures=(
            profile.loan_amount,
            profile.processing_fee,
            profile.net_disbursal,
            profile.loan_repay,
        ),
        case_type=profile.case_type,
        unclassified=UnclassifiedPolicy.SUM_ONLY,
    )


def executive_plan(profile: SheetProfile, case_filter: CaseType | None = None) -> AggregationPlan:
    return AggregationPlan(
        group_by=GroupBy.EXECUTIVE,
        date_aliases=profile.disburse_date,
        measures=(profile.loan_amount,),
        key_aliases=profile.executive,
        key_hints=aliases.EXECUTIVE_HEADER_HINTS if case_filter is None else (),
        case_type=profile.case_type if case_filter is not None else None,
        case_filter=case_filter,
        unclassified=(
            UnclassifiedPolicy.SKIP if case_filter is not None else UnclassifiedPolicy.COUNT_AND_SUM
        ),
        rank_measure=profile.loan_amount.field,
    )


def fee_bucket_plan(profile: SheetProfile) -> AggregationPlan:
    return AggregationPlan(
        group_by=GroupBy.FEE_BUCKET,
        date_aliases=profile.disburse_date,
        measures=(profile.loan_amount, profile.net_disbursal, profile.loan_repay),
        key_aliases=profile.pf_percent,
    )


# ---------------------------------------------------------------------------
# Labelling
# ---------------------------------------------------------------------------


def _label_daily(result: AggregationResult, profile: SheetProfile) -> ReportResult:
    def row_for(group: GroupSummary, label: str) -> ReportRow:
        return {
            "Date": label,
            "New": group.new_cases,
            "Repeat": group.repeat_cases,
            "Total Cases": group.cases,
            "Loan Amount": to_json_number(group.measure(profile.loan_amount.field)),
            "PF Amount": to_json_number(group.measure(profile.processing_fee.field)),
            "Disbursal Amount": to_json_number(group.measure(profile.net_disbursal.field)),
            "Repay Amount": to_json_number(group.measure(profile.loan_repay.field)),
            GRAND_TOTAL_FLAG: group.is_grand_total,
        }

    rows = [row_for(group, format_display_date(group.key)) for group in result.groups]
    rows.append(row_for(result.grand_total, DAILY_GRAND_TOTAL_LABEL))
    return rows


def _label_executives(result: AggregationResult, profile: SheetProfile) -> ReportResult:
    loan_field = profile.loan_amount.field
    rows: ReportResult = [
        {
            "Sr": rank,
            "Executive Name": group.key,
            "Number of Cases": group.cases,
            "Loan Amount": to_json_number(group.measure(loan_field)),
            GRAND_TOTAL_FLAG: False,
        }
        for rank, group in enumerate(result.groups, start=1)
    ]
    rows.append(
        {
            "Sr": "",
            "Executive Name": GRAND_TOTAL_LABEL,
            "Number of Cases": result.grand_total.cases,
            "Loan Amount": to_json_number(result.grand_total.measure(loan_field)),
            GRAND_TOTAL_FLAG: True,
        }
    )
    return rows


def _label_fee_buckets(
    result: AggregationResult,
    profile: SheetProfile,
    report_day: date,
) -> ReportResult:
    display_day = format_display_date(report_day)

    def row_for(group: GroupSummary, day_label: str, pf_label: str) -> ReportRow:
        return {
            "DATE": day_label,
            "PF %": pf_label,
            "Total cases": group.cases,
            "Loan Amount": to_json_number(group.measure(profile.loan_amount.field)),
            "DISBURSE Amount": to_json_number(group.measure(profile.net_disbursal.field)),
            "Repay Amount": to_json_number(group.measure(profile.loan_repay.field)),
            GRAND_TOTAL_FLAG: group.is_grand_total,
        }

    rows = [row_for(group, display_day, f"{group.key}%") for group in result.groups]
    rows.append(row_for(result.grand_total, "", GRAND_TOTAL_LABEL))
    return rows


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def daily_performance_report(
    rows: Iterable[RawRow],
    profile: SheetProfile,
    *,
    default_start: date,
    from_date: date | None = None,
    to_date: date | None = None,
    today: date | None = None,
) -> ReportResult:
    """
    Day-by-day New/Repeat counts and amount totals, oldest day first.

    Rows whose case type is neither literal still add to the amounts but
    are not counted as New, Repeat or in ``Total Cases``.
    """

    window = DateWindow.for_request(
        from_date=from_date,
        to_date=to_date,
        default_start=default_start,
        clock=_clock_for(today),
    )
    return _label_daily(aggregate(rows, daily_plan(profile), window), profile)


def executive_leaderboard_report(
    rows: Iterable[RawRow],
    profile: SheetProfile,
    *,
    default_start: date,
    from_date: date | None = None,
    to_date: date | None = None,
    today: date | None = None,
) -> ReportResult:
    """
    Cases and loan amount per executive, highest loan amount first.
    """

    window = DateWindow.for_request(
        from_date=from_date,
        to_date=to_date,
        default_start=default_start,
        clock=_clock_for(today),
    )
    return _label_executives(aggregate(rows, executive_plan(profile), window), profile)


def same_day_sanction_report(
    rows: Sequence[RawRow],
    profile: SheetProfile,
    *,
    today: date | None = None,
) -> dict[str, ReportResult]:
    """
    Today's sanctions per executive, as two leaderboards: New and Repeat.

    Rows with an unrecognised case type appear in neither table.
    """

    window = DateWindow.today_only(clock=_clock_for(today))
    return {
        "new": _label_executives(
            aggregate(rows, executive_plan(profile, CaseType.NEW), window),
            profile,
        ),
        "repeat": _label_executives(
            aggregate(rows, executive_plan(profile, CaseType.REPEAT), window),
            profile,
        ),
    }


def fee_bucket_report(
    rows: Iterable[RawRow],
    profile: SheetProfile,
    *,
    today: date | None = None,
) -> ReportResult:
    """
    Today's loans grouped by processing-fee percentage, lowest first.
    """

    window = DateWindow.today_only(clock=_clock_for(today))
    report_day = window.end
    return _label_fee_buckets(aggregate(rows, fee_bucket_plan(profile), window), profile, report_day)
