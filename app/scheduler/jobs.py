"""
app/scheduler/jobs.py

APScheduler-based periodic refresh of the live leaderboard.

Schedule
--------
  leaderboard_refresh: every ``REFRESH_INTERVAL_SECONDS`` (default 600 s)

Each run recomputes the daily performance report for the configured
profile and hands it to the :class:`~app.realtime.hub.LeaderboardHub`,
which stores it as the latest snapshot and pushes it to connected viewers.
A failed run is logged and broadcast as an ``error`` event; the previous
snapshot stays in place until a later run succeeds.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import RefreshSettings, get_refresh_settings
from app.connectors.published_sheet import SheetFetchError
from app.realtime.hub import ERROR_EVENT, UPDATE_EVENT, LeaderboardHub, get_leaderboard_hub
from app.services.report_service import ReportService, get_report_service
from app.services.sheet_ingestion_service import SheetParseError

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "leaderboard_refresh"


# ---------------------------------------------------------------------------
# Job: leaderboard refresh
# ---------------------------------------------------------------------------


def run_leaderboard_refresh(
    *,
    service: ReportService | None = None,
    hub: LeaderboardHub | None = None,
    profile: str | None = None,
) -> bool:
    """
    Recompute the daily leaderboard and publish it.

    Returns True when a fresh snapshot was published. Never raises.
    """

    service = service or get_report_service()
    hub = hub or get_leaderboard_hub()
    profile = profile or get_refresh_settings().profile

    logger.info("Scheduler: leaderboard_refresh starting profile=%s", profile)
    try:
        data = service.daily_performance(profile)
    except (SheetFetchError, SheetParseError) as exc:
        logger.warning("Scheduler: leaderboard_refresh failed profile=%s: %s", profile, exc)
        hub.publish(ERROR_EVENT, {"message": "Failed to update leaderboard"})
        return False
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Scheduler: leaderboard_refresh crashed profile=%s: %s",
            profile,
            exc,
            exc_info=True,
        )
        hub.publish(ERROR_EVENT, {"message": "Failed to update leaderboard"})
        return False

    hub.publish(UPDATE_EVENT, data)
    logger.info(
        "Scheduler: leaderboard_refresh complete profile=%s days=%d viewers=%d",
        profile,
        len(data) - 1,
        hub.connection_count,
    )
    return True


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(settings: RefreshSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the refresh job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """

    settings = settings or get_refresh_settings()
    scheduler = BackgroundScheduler()

    scheduler.add_job(
        run_leaderboard_refresh,
        trigger="interval",
        seconds=settings.interval_seconds,
        kwargs={"profile": settings.profile},
        id=REFRESH_JOB_ID,
        name="Leaderboard refresh",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.interval_seconds,
    )

    return scheduler
