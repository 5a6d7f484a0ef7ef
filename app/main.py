from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from urllib.parse import urlparse

from fastapi import FastAPI

from reporting.profiles import PROFILES

_SHEET_URL_VARIABLES = (
    "DISBURSAL_SHEET_URL",
    "PUBLISHED_SHEET_URL",
    "SALARY4SURE_SHEET_URL",
)


def _validate_env() -> None:
    """
    Validate optional environment overrides at startup.

    Every variable has a working default; only values that are set but
    unusable are rejected. Raises RuntimeError listing every problem so the
    operator can fix them in one restart cycle.

    Rules:
    - Sheet URLs must be absolute http(s) URLs.
    - REPORT_DEFAULT_WINDOW_START must be an ISO date (YYYY-MM-DD).
    - REFRESH_PROFILE must name a known sheet profile.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Sheet URLs -----------------------------------------------------
    for name in _SHEET_URL_VARIABLES:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            continue
        parsed = urlparse(raw.strip())
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            errors.append(f"{name}='{raw.strip()}' is not an absolute http(s) URL.")

    # --- Report window --------------------------------------------------
    window_start = os.getenv("REPORT_DEFAULT_WINDOW_START", "").strip()
    if window_start:
        try:
            date.fromisoformat(window_start)
        except ValueError:
            errors.append(
                f"REPORT_DEFAULT_WINDOW_START='{window_start}' is not a valid ISO date (YYYY-MM-DD)."
            )

    # --- Refresh profile ------------------------------------------------
    refresh_profile = os.getenv("REFRESH_PROFILE", "").strip().lower()
    if refresh_profile and refresh_profile not in PROFILES:
        errors.append(
            f"REFRESH_PROFILE='{refresh_profile}' is not valid. "
            f"Allowed values: {sorted(PROFILES)}."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed. Invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _build_lifespan(enable_refresh: bool):
    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        """Bind the live hub to the running loop and run the refresh scheduler."""
        from app.realtime.hub import get_leaderboard_hub

        log = logging.getLogger(__name__)
        hub = get_leaderboard_hub()
        hub.bind_loop(asyncio.get_running_loop())

        scheduler = None
        if enable_refresh:
            from app.scheduler.jobs import build_scheduler

            scheduler = build_scheduler()
            scheduler.start()
            log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
        else:
            log.info("Leaderboard refresh disabled")

        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=True)
                log.info("Scheduler shut down")
            hub.bind_loop(None)

    return _lifespan


def create_app(*, enable_refresh: bool | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``enable_refresh`` overrides ``REFRESH_ENABLED``; tests pass False to
    keep the background scheduler off.
    """

    _validate_env()
    _configure_logging()

    from app.config import get_refresh_settings

    refresh_settings = get_refresh_settings()
    if enable_refresh is None:
        enable_refresh = refresh_settings.enabled

    application = FastAPI(
        title="Disbursal Dashboard API",
        version="1.0.0",
        lifespan=_build_lifespan(enable_refresh),
    )

    from app.api.routers import disbursal_router, live_router, salary4sure_router

    application.include_router(disbursal_router)
    application.include_router(salary4sure_router)
    application.include_router(live_router)

    @application.get("/health")
    def healthcheck() -> dict[str, object]:
        from app.realtime.hub import get_leaderboard_hub

        hub = get_leaderboard_hub()
        return {
            "status": "ok",
            "refresh_enabled": enable_refresh,
            "refresh_profile": refresh_settings.profile,
            "viewers": hub.connection_count,
            "snapshot_ready": hub.latest is not None,
        }

    return application


app = create_app()
