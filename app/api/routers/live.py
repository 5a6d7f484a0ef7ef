"""
app/api/routers/live.py

WebSocket feed for the live leaderboard.

On connect a viewer receives the latest snapshot published by the refresh
job, or a freshly computed one when no refresh has completed yet. After
that the connection only receives pushes from the hub; incoming messages
are read and ignored so disconnects are noticed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from app.api.dependencies import (
    provide_leaderboard_hub,
    provide_refresh_settings,
    provide_report_service,
)
from app.config import RefreshSettings
from app.connectors.published_sheet import SheetFetchError
from app.realtime.hub import ERROR_EVENT, UPDATE_EVENT, LeaderboardHub, event_message
from app.services.report_service import ReportService
from app.services.sheet_ingestion_service import SheetParseError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws")
async def leaderboard_feed(
    websocket: WebSocket,
    hub: LeaderboardHub = Depends(provide_leaderboard_hub),
    service: ReportService = Depends(provide_report_service),
    settings: RefreshSettings = Depends(provide_refresh_settings),
) -> None:
    await hub.connect(websocket)
    try:
        snapshot = hub.latest
        if snapshot is None:
            try:
                snapshot = await run_in_threadpool(service.daily_performance, settings.profile)
            except (SheetFetchError, SheetParseError) as exc:
                logger.warning("Initial leaderboard snapshot failed: %s", exc)
                await websocket.send_json(
                    event_message(ERROR_EVENT, {"message": "Failed to fetch data"})
                )

        if snapshot is not None:
            await websocket.send_json(event_message(UPDATE_EVENT, snapshot))

        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
