"""
app/api/dependencies.py

Shared FastAPI dependencies for the report and live routers.

Routers depend on these providers rather than on the cached factories
directly, so tests can swap in fakes through ``app.dependency_overrides``.
"""

from __future__ import annotations

from app.config import RefreshSettings, get_refresh_settings
from app.realtime.hub import LeaderboardHub, get_leaderboard_hub
from app.services.report_service import ReportService, get_report_service


def provide_report_service() -> ReportService:
    return get_report_service()


def provide_leaderboard_hub() -> LeaderboardHub:
    return get_leaderboard_hub()


def provide_refresh_settings() -> RefreshSettings:
    return get_refresh_settings()
