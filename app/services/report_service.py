"""
app/services/report_service.py

Runs one full report cycle: fetch sheet → parse rows → assemble report.

Every call performs its own fetch. Concurrent callers therefore each hit
the upstream sheet; there is no in-flight de-duplication or result caching
at this layer. The refresh job keeps its own last-good snapshot for
WebSocket viewers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from app.config import (
    ReportSettings,
    SheetSourceSettings,
    get_report_settings,
    get_sheet_source_settings,
)
from app.services.sheet_ingestion_service import SheetIngestionService, get_sheet_ingestion_service
from reporting import assemblers
from reporting.date_filter import Clock, local_today
from reporting.models import RawRow, ReportResult
from reporting.profiles import SheetProfile, get_profile

logger = logging.getLogger(__name__)

PREVIEW_CHARACTERS = 500


@dataclass(frozen=True)
class SheetPreview:
    """
    Raw view of a published sheet, for diagnosing header drift.
    """

    url: str
    csv_length: int
    first_500_chars: str
    raw_csv: str


class ReportService:
    """
    Coordinates ingestion and report assembly for each sheet profile.
    """

    def __init__(
        self,
        *,
        ingestion: SheetIngestionService,
        sources: SheetSourceSettings,
        report_settings: ReportSettings,
        clock: Clock = local_today,
    ) -> None:
        self._ingestion = ingestion
        self._sources = sources
        self._report_settings = report_settings
        self._clock = clock

    def source_url(self, profile_name: str) -> str:
        return self._sources.url_for(profile_name)

    def _load(self, profile_name: str) -> tuple[SheetProfile, list[RawRow], date]:
        profile = get_profile(profile_name)
        started = time.monotonic()
        rows = self._ingestion.ingest(self.source_url(profile_name))
        logger.debug(
            "Loaded profile=%s rows=%d elapsed_ms=%.0f",
            profile_name,
            len(rows),
            (time.monotonic() - started) * 1000,
        )
        return profile, rows, self._clock()

    def daily_performance(
        self,
        profile_name: str,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> ReportResult:
        profile, rows, today = self._load(profile_name)
        report = assemblers.daily_performance_report(
            rows,
            profile,
            default_start=self._report_settings.default_window_start,
            from_date=from_date,
            to_date=to_date,
            today=today,
        )
        logger.info(
            "Daily performance report profile=%s from=%s to=%s days=%d",
            profile_name,
            from_date,
            to_date,
            len(report) - 1,
        )
        return report

    def executive_leaderboard(
        self,
        profile_name: str,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> ReportResult:
        profile, rows, today = self._load(profile_name)
        report = assemblers.executive_leaderboard_report(
            rows,
            profile,
            default_start=self._report_settings.default_window_start,
            from_date=from_date,
            to_date=to_date,
            today=today,
        )
        logger.info(
            "Executive report profile=%s from=%s to=%s executives=%d",
            profile_name,
            from_date,
            to_date,
            len(report) - 1,
        )
        return report

    def same_day_sanction(self, profile_name: str) -> dict[str, ReportResult]:
        profile, rows, today = self._load(profile_name)
        report = assemblers.same_day_sanction_report(rows, profile, today=today)
        logger.info(
            "Today sanction report profile=%s new_executives=%d repeat_executives=%d",
            profile_name,
            len(report["new"]) - 1,
            len(report["repeat"]) - 1,
        )
        return report

    def fee_buckets(self, profile_name: str) -> ReportResult:
        profile, rows, today = self._load(profile_name)
        report = assemblers.fee_bucket_report(rows, profile, today=today)
        logger.info("PF wise report profile=%s buckets=%d", profile_name, len(report) - 1)
        return report

    def sheet_preview(self, profile_name: str) -> SheetPreview:
        get_profile(profile_name)
        url = self.source_url(profile_name)
        text = self._ingestion.fetch_text(url)
        return SheetPreview(
            url=url,
            csv_length=len(text),
            first_500_chars=text[:PREVIEW_CHARACTERS],
            raw_csv=text,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    """
    Build and cache the report service with env-driven settings.
    """

    return ReportService(
        ingestion=get_sheet_ingestion_service(),
        sources=get_sheet_source_settings(),
        report_settings=get_report_settings(),
    )
