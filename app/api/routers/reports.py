"""
app/api/routers/reports.py

Dashboard report endpoints.

The same five routes are mounted once per sheet profile:

    /api/...              -> disbursal ledger
    /api/salary4sure/...  -> Salary4Sure ledger

Upstream sheet failures surface as 502 with a JSON body naming the cause.
``fromDate``/``toDate`` are read as ``YYYY-MM-DD``; a blank or unreadable
bound (the dashboard sends ``NaN-NaN-NaN`` for a cleared input) is treated
as absent rather than rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import provide_report_service
from app.connectors.published_sheet import SheetFetchError
from app.schemas.reports import (
    ReportErrorResponse,
    ReportRowsResponse,
    SheetPreviewResponse,
    TodaySanctionResponse,
)
from app.services.report_service import ReportService
from app.services.sheet_ingestion_service import SheetParseError
from reporting.dates import parse_query_date
from reporting.profiles import DISBURSAL, SALARY4SURE

logger = logging.getLogger(__name__)

_UPSTREAM_ERROR_RESPONSES = {
    status.HTTP_502_BAD_GATEWAY: {
        "model": ReportErrorResponse,
        "description": "The published sheet could not be fetched or parsed.",
    },
}


@contextmanager
def _upstream_errors(profile_name: str) -> Iterator[None]:
    """
    Translate sheet fetch/parse failures into 502 responses.
    """

    try:
        yield
    except SheetFetchError as exc:
        logger.warning("Sheet fetch failed profile=%s url=%s: %s", profile_name, exc.url, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ReportErrorResponse(
                error="upstream_fetch_failed",
                message=str(exc),
                url=exc.url,
            ).model_dump(),
        ) from exc
    except SheetParseError as exc:
        logger.warning("Sheet parse failed profile=%s url=%s: %s", profile_name, exc.url, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ReportErrorResponse(
                error="upstream_unparseable",
                message=str(exc),
                url=exc.url,
            ).model_dump(),
        ) from exc


def build_report_router(profile_name: str, *, prefix: str) -> APIRouter:
    """
    Build the report routes for one sheet profile.
    """

    router = APIRouter(prefix=prefix, tags=[f"reports:{profile_name}"])

    @router.get(
        "/leaderboard",
        response_model=ReportRowsResponse,
        responses=_UPSTREAM_ERROR_RESPONSES,
        summary="Daily performance report",
    )
    def leaderboard(
        from_date: str | None = Query(
            default=None,
            alias="fromDate",
            description="Inclusive start date (YYYY-MM-DD); blank or invalid means unbounded.",
        ),
        to_date: str | None = Query(
            default=None,
            alias="toDate",
            description="Inclusive end date (YYYY-MM-DD); blank or invalid means unbounded.",
        ),
        service: ReportService = Depends(provide_report_service),
    ) -> ReportRowsResponse:
        """
        One row per disbursal day plus a trailing grand total.

        Without a range the window runs from the configured default start
        through today.
        """

        with _upstream_errors(profile_name):
            return service.daily_performance(
                profile_name,
                from_date=parse_query_date(from_date),
                to_date=parse_query_date(to_date),
            )

    @router.get(
        "/executive-report",
        response_model=ReportRowsResponse,
        responses=_UPSTREAM_ERROR_RESPONSES,
        summary="Executive leaderboard",
    )
    def executive_report(
        from_date: str | None = Query(
            default=None,
            alias="fromDate",
            description="Inclusive start date (YYYY-MM-DD); blank or invalid means unbounded.",
        ),
        to_date: str | None = Query(
            default=None,
            alias="toDate",
            description="Inclusive end date (YYYY-MM-DD); blank or invalid means unbounded.",
        ),
        service: ReportService = Depends(provide_report_service),
    ) -> ReportRowsResponse:
        with _upstream_errors(profile_name):
            return service.executive_leaderboard(
                profile_name,
                from_date=parse_query_date(from_date),
                to_date=parse_query_date(to_date),
            )

    @router.get(
        "/today-sanction-report",
        response_model=TodaySanctionResponse,
        responses=_UPSTREAM_ERROR_RESPONSES,
        summary="Same-day sanctions split by case type",
    )
    def today_sanction_report(
        service: ReportService = Depends(provide_report_service),
    ) -> TodaySanctionResponse:
        with _upstream_errors(profile_name):
            report = service.same_day_sanction(profile_name)
        return TodaySanctionResponse(new=report["new"], repeat=report["repeat"])

    @router.get(
        "/pf-wise-report",
        response_model=ReportRowsResponse,
        responses=_UPSTREAM_ERROR_RESPONSES,
        summary="Today's disbursals grouped by processing-fee percentage",
    )
    def pf_wise_report(
        service: ReportService = Depends(provide_report_service),
    ) -> ReportRowsResponse:
        with _upstream_errors(profile_name):
            return service.fee_buckets(profile_name)

    @router.get(
        "/debug",
        response_model=SheetPreviewResponse,
        response_model_by_alias=True,
        responses=_UPSTREAM_ERROR_RESPONSES,
        summary="Raw sheet preview",
    )
    def debug_sheet(
        service: ReportService = Depends(provide_report_service),
    ) -> SheetPreviewResponse:
        """
        Return the raw CSV text for diagnosing header drift.
        """

        with _upstream_errors(profile_name):
            preview = service.sheet_preview(profile_name)
        return SheetPreviewResponse(
            url=preview.url,
            csv_length=preview.csv_length,
            first_500_chars=preview.first_500_chars,
            raw_csv=preview.raw_csv,
        )

    return router


disbursal_router = build_report_router(DISBURSAL.name, prefix="/api")
salary4sure_router = build_report_router(SALARY4SURE.name, prefix="/api/salary4sure")
