from __future__ import annotations

import unittest
from datetime import date

from app.config import ReportSettings, SheetSourceSettings
from app.services.report_service import ReportService
from reporting.models import freeze_row

DISBURSAL_URL = "https://sheets.example.test/disbursal.csv"
SALARY4SURE_URL = "https://sheets.example.test/salary4sure.csv"
CSV_TEXT = "Disburse Date,Repeat/New,Sanctioned By,Loan Amount\n" + "x" * 600


class _StubIngestion:
    def __init__(self) -> None:
        self.urls: list[str] = []

    def ingest(self, url: str) -> list:
        self.urls.append(url)
        return [
            freeze_row(
                {
                    "Disburse Date": "10/01/2026",
                    "Repeat/New": "New",
                    "Sanctioned By": "Asha",
                    "Loan Amount": "50,000",
                    "Case Type": "FRESH",
                    "PF %": "2%",
                }
            ),
            freeze_row({"Disburse Date": "31/12/2025", "Repeat/New": "New", "Loan Amount": "1"}),
        ]

    def fetch_text(self, url: str) -> str:
        self.urls.append(url)
        return CSV_TEXT


class TestReportService(unittest.TestCase):
    def setUp(self) -> None:
        self.ingestion = _StubIngestion()
        self.service = ReportService(
            ingestion=self.ingestion,  # type: ignore[arg-type]
            sources=SheetSourceSettings(disbursal_url=DISBURSAL_URL, salary4sure_url=SALARY4SURE_URL),
            report_settings=ReportSettings(default_window_start=date(2026, 1, 1)),
            clock=lambda: date(2026, 1, 10),
        )

    def test_each_profile_reads_its_own_sheet(self) -> None:
        self.service.daily_performance("disbursal")
        self.service.daily_performance("salary4sure")

        self.assertEqual(self.ingestion.urls, [DISBURSAL_URL, SALARY4SURE_URL])

    def test_default_window_uses_configured_start(self) -> None:
        report = self.service.daily_performance("disbursal")

        self.assertEqual([row["Date"] for row in report], ["10-01-2026", "GRAND TOTAL"])
        self.assertEqual(report[-1]["Loan Amount"], 50000)

    def test_explicit_range_overrides_default(self) -> None:
        report = self.service.daily_performance(
            "disbursal", from_date=date(2025, 12, 1), to_date=date(2025, 12, 31)
        )

        self.assertEqual([row["Date"] for row in report], ["31-12-2025", "GRAND TOTAL"])

    def test_today_reports_use_service_clock(self) -> None:
        sanction = self.service.same_day_sanction("salary4sure")
        buckets = self.service.fee_buckets("disbursal")

        self.assertEqual(sanction["new"][0]["Executive Name"], "Asha")
        self.assertEqual(buckets[0]["DATE"], "10-01-2026")
        self.assertEqual(buckets[0]["PF %"], "2%")

    def test_sheet_preview(self) -> None:
        preview = self.service.sheet_preview("salary4sure")

        self.assertEqual(preview.url, SALARY4SURE_URL)
        self.assertEqual(preview.csv_length, len(CSV_TEXT))
        self.assertEqual(preview.first_500_chars, CSV_TEXT[:500])
        self.assertEqual(preview.raw_csv, CSV_TEXT)

    def test_unknown_profile(self) -> None:
        with self.assertRaises(KeyError):
            self.service.executive_leaderboard("payroll")
