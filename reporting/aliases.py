"""
reporting/aliases.py

Header alias tables for the loan ledger sheets.

Each logical field lists the spellings seen in the published sheets, most
common first. Case and spacing variants are still listed explicitly even
though :func:`reporting.fields.resolve` also matches them after
normalization: the explicit entries keep the primary lookup exact and make
the sheets' history visible here.
"""

from __future__ import annotations

from reporting.models import AliasSet

DISBURSE_DATE = AliasSet(
    "disburse_date",
    (
        "Disburse Date",
        "Disburse date",
        "disburse date",
        "DISBURSE DATE",
        "Disburse Date ",
        "DisburseDate",
        "Disburse_Date",
    ),
)

# Header substrings scanned when no DISBURSE_DATE alias yields a date.
DATE_HEADER_HINTS: tuple[str, ...] = ("date", "disburse")

REPEAT_NEW = AliasSet(
    "repeat_new",
    (
        "Repeat/New",
        "Repeat/New ",
        "repeat/new",
        "REPEAT/NEW",
        "Repeat New",
        "repeat new",
    ),
)

CASE_TYPE = AliasSet(
    "case_type",
    (
        "Case Type",
        "Case type",
        "case type",
        "CASE TYPE",
        "Case Type ",
        "CaseType",
        "Case_Type",
    ),
)

SANCTIONED_BY = AliasSet(
    "sanctioned_by",
    (
        "Sanctioned By",
        "Sanctioned by",
        "sanctioned by",
        "SANCTIONED BY",
        "Sanctioned By ",
        "SanctionedBy",
        "Sanctioned_By",
    ),
)

# Header substrings scanned when no SANCTIONED_BY alias yields a name.
EXECUTIVE_HEADER_HINTS: tuple[str, ...] = ("sanctioned", "executive", "by")

LOAN_AMOUNT = AliasSet(
    "loan_amount",
    (
        "Loan Amount",
        "Loan amount",
        "loan amount",
        "LOAN AMOUNT",
        "Loan Amount ",
        "LoanAmount",
    ),
)

PROCESSING_FEE = AliasSet(
    "processing_fee",
    (
        "Processing Fee",
        "Processing fee",
        "processing fee",
        "PROCESSING FEE",
        "Processing Fee ",
        "ProcessingFee",
    ),
)

PF_PERCENT = AliasSet(
    "pf_percent",
    (
        "PF %",
        "PF%",
        "pf %",
        "PF % ",
        "PF_Percent",
        "PF Percent",
        "Processing Fee %",
        "Processing Fee%",
    ),
)

_NET_DISBURSAL = (
    "Net Disbursal Amount",
    "Net Disbursal amount",
    "net disbursal amount",
    "NET DISBURSAL AMOUNT",
    "Net Disbursal Amount ",
    "Net DisbursalAmount",
    "NetDisbursalAmount",
    # Misspelling carried by older copies of the ledger.
    "Net Disbused Amount",
    "Net Disbused amount",
    "net disbused amount",
    "NET DISBUSED AMOUNT",
    "Net Disbused Amount ",
    "Net DisbusedAmount",
)

_NET_DISBURSE_AMT = (
    "Net disburse Amt",
    "Net disburse amt",
    "net disburse amt",
    "NET DISBURSE AMT",
    "Net disburse Amt ",
    "Net Disburse Amt",
    "NetDisburseAmt",
)

_LOAN_REPAY = (
    "Loan Repay Amount",
    "Loan Repay amount",
    "loan repay amount",
    "LOAN REPAY AMOUNT",
    "Loan Repay Amount ",
    "Loan RepayAmount",
    "LoanRepayAmount",
)

_REPAYMENT_AMT = (
    "Repayment Amt",
    "Repayment amt",
    "repayment amt",
    "REPAYMENT AMT",
    "Repayment Amt ",
    "RepaymentAmt",
)

NET_DISBURSAL = AliasSet("net_disbursal", _NET_DISBURSAL)
LOAN_REPAY = AliasSet("loan_repay", _LOAN_REPAY)

# Salary4Sure's ledger uses its own short headers first.
NET_DISBURSE_AMT = AliasSet("net_disbursal", _NET_DISBURSE_AMT + _NET_DISBURSAL)
REPAYMENT_AMT = AliasSet("loan_repay", _REPAYMENT_AMT + _LOAN_REPAY)
