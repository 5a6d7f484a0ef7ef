"""
reporting/profiles.py

Per-sheet configuration: which alias sets and case-type literals apply.

Two ledgers are published. They share the date, executive and fee columns
but disagree on how the borrower type is recorded and on the names of the
disbursal/repayment columns.
"""

from __future__ import annotations

from dataclasses import dataclass

from reporting import aliases
from reporting.models import AliasSet, CaseType


@dataclass(frozen=True)
class CaseTypeRule:
    """
    Maps the case-type column onto :class:`CaseType`.

    Literals are compared case-insensitively after trimming.
    """

    column: AliasSet
    new_literal: str
    repeat_literal: str

    def classify(self, raw: str | None) -> CaseType | None:
        if raw is None:
            return None
        folded = raw.strip().casefold()
        if folded == self.new_literal.casefold():
            return CaseType.NEW
        if folded == self.repeat_literal.casefold():
            return CaseType.REPEAT
        return None


@dataclass(frozen=True)
class SheetProfile:
    """
    Everything that differs between published ledgers.
    """

    name: str
    title: str
    case_type: CaseTypeRule
    disburse_date: AliasSet = aliases.DISBURSE_DATE
    executive: AliasSet = aliases.SANCTIONED_BY
    loan_amount: AliasSet = aliases.LOAN_AMOUNT
    processing_fee: AliasSet = aliases.PROCESSING_FEE
    pf_percent: AliasSet = aliases.PF_PERCENT
    net_disbursal: AliasSet = aliases.NET_DISBURSAL
    loan_repay: AliasSet = aliases.LOAN_REPAY


DISBURSAL = SheetProfile(
    name="disbursal",
    title="Daily Disbursal Ledger",
    case_type=CaseTypeRule(column=aliases.REPEAT_NEW, new_literal="new", repeat_literal="repeat"),
)

SALARY4SURE = SheetProfile(
    name="salary4sure",
    title="Salary4Sure Ledger",
    case_type=CaseTypeRule(column=aliases.CASE_TYPE, new_literal="FRESH", repeat_literal="REPEAT"),
    net_disbursal=aliases.NET_DISBURSE_AMT,
    loan_repay=aliases.REPAYMENT_AMT,
)

PROFILES: dict[str, SheetProfile] = {
    DISBURSAL.name: DISBURSAL,
    SALARY4SURE.name: SALARY4SURE,
}


def get_profile(name: str) -> SheetProfile:
    try:
        return PROFILES[name]
    except KeyError as exc:
        raise KeyError(f"Unknown sheet profile: {name!r}") from exc
