"""
app/realtime/hub.py

WebSocket fan-out for the live leaderboard.

The refresh job runs on an APScheduler worker thread while WebSocket
connections live on the server's event loop. :meth:`LeaderboardHub.publish`
is the thread-side entry point: it records the snapshot and schedules the
broadcast onto the bound loop with ``asyncio.run_coroutine_threadsafe``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)

UPDATE_EVENT = "leaderboard-update"
ERROR_EVENT = "error"


def event_message(event: str, data: Any) -> dict[str, Any]:
    return {"event": event, "data": data}


class LeaderboardHub:
    """
    Tracks connected viewers and the last successfully computed snapshot.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._latest: list[dict[str, Any]] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        with self._lock:
            self._loop = loop

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        with self._lock:
            self._connections.add(websocket)
            count = len(self._connections)
        logger.info("Viewer connected viewers=%d", count)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            self._connections.discard(websocket)
            count = len(self._connections)
        logger.info("Viewer disconnected viewers=%d", count)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    @property
    def latest(self) -> list[dict[str, Any]] | None:
        with self._lock:
            return self._latest

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    async def broadcast(self, message: dict[str, Any]) -> int:
        """
        Send *message* to every viewer; viewers that fail are dropped.

        Returns the number of viewers that received the message.
        """

        with self._lock:
            targets = list(self._connections)

        delivered = 0
        for websocket in targets:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.warning("Dropping viewer after failed send: %s", exc)
                self.disconnect(websocket)
        return delivered

    def publish(self, event: str, data: Any) -> Future[int] | None:
        """
        Thread-safe publish from outside the event loop.

        Update events also replace the stored snapshot. Returns the scheduled
        future, or ``None`` when no loop is bound (no server running).
        """

        with self._lock:
            if event == UPDATE_EVENT:
                self._latest = data
            loop = self._loop

        if loop is None or loop.is_closed():
            logger.debug("No event loop bound; %s not broadcast", event)
            return None
        return asyncio.run_coroutine_threadsafe(self.broadcast(event_message(event, data)), loop)


_hub = LeaderboardHub()


def get_leaderboard_hub() -> LeaderboardHub:
    return _hub
