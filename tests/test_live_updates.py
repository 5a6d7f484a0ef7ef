"""
tests/test_live_updates.py

Pytest unit tests for the leaderboard hub and the scheduled refresh job.

No network and no running server: the report service is faked and the
hub's event loop is a private loop driven by the test.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from app.config import RefreshSettings
from app.connectors.published_sheet import SheetFetchError
from app.realtime.hub import ERROR_EVENT, UPDATE_EVENT, LeaderboardHub, event_message
from app.scheduler.jobs import REFRESH_JOB_ID, build_scheduler, run_leaderboard_refresh
from app.services.sheet_ingestion_service import SheetParseError

SNAPSHOT = [{"Date": "GRAND TOTAL", "New": 0, "_isGrandTotal": True}]


class _FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.accepted = False
        self.sent: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class _FakeReportService:
    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else SNAPSHOT
        self.error = error
        self.profiles: list[str] = []

    def daily_performance(self, profile_name: str, **_: Any) -> Any:
        self.profiles.append(profile_name)
        if self.error is not None:
            raise self.error
        return self.result


class _RecordingHub:
    def __init__(self) -> None:
        self.published: list[tuple[str, Any]] = []
        self.connection_count = 0

    def publish(self, event: str, data: Any) -> None:
        self.published.append((event, data))


# ---------------------------------------------------------------------------
# Hub
# ---------------------------------------------------------------------------


class TestLeaderboardHub:
    def test_broadcast_drops_failed_viewers(self) -> None:
        hub = LeaderboardHub()
        healthy, broken = _FakeSocket(), _FakeSocket(fail=True)

        async def scenario() -> int:
            await hub.connect(healthy)  # type: ignore[arg-type]
            await hub.connect(broken)  # type: ignore[arg-type]
            return await hub.broadcast(event_message(UPDATE_EVENT, SNAPSHOT))

        delivered = asyncio.run(scenario())

        assert delivered == 1
        assert healthy.accepted
        assert healthy.sent == [{"event": UPDATE_EVENT, "data": SNAPSHOT}]
        assert hub.connection_count == 1

    def test_publish_without_loop_keeps_snapshot(self) -> None:
        hub = LeaderboardHub()

        assert hub.publish(UPDATE_EVENT, SNAPSHOT) is None
        assert hub.latest == SNAPSHOT

    def test_error_event_does_not_replace_snapshot(self) -> None:
        hub = LeaderboardHub()
        hub.publish(UPDATE_EVENT, SNAPSHOT)
        hub.publish(ERROR_EVENT, {"message": "Failed to update leaderboard"})

        assert hub.latest == SNAPSHOT

    def test_publish_from_another_thread_reaches_viewers(self) -> None:
        hub = LeaderboardHub()
        socket = _FakeSocket()

        async def scenario() -> int:
            hub.bind_loop(asyncio.get_running_loop())
            await hub.connect(socket)  # type: ignore[arg-type]
            future = await asyncio.to_thread(hub.publish, UPDATE_EVENT, SNAPSHOT)
            return await asyncio.wrap_future(future)

        assert asyncio.run(scenario()) == 1
        assert socket.sent == [{"event": UPDATE_EVENT, "data": SNAPSHOT}]


# ---------------------------------------------------------------------------
# Refresh job
# ---------------------------------------------------------------------------


class TestLeaderboardRefresh:
    def test_success_publishes_update(self) -> None:
        service, hub = _FakeReportService(), _RecordingHub()

        ok = run_leaderboard_refresh(service=service, hub=hub, profile="salary4sure")  # type: ignore[arg-type]

        assert ok is True
        assert service.profiles == ["salary4sure"]
        assert hub.published == [(UPDATE_EVENT, SNAPSHOT)]

    @pytest.mark.parametrize(
        "error",
        [
            SheetFetchError("down", url="https://sheets.example.test"),
            SheetParseError("not csv"),
            KeyError("disbursal"),
        ],
    )
    def test_failure_publishes_error_and_never_raises(self, error: Exception) -> None:
        service, hub = _FakeReportService(error=error), _RecordingHub()

        ok = run_leaderboard_refresh(service=service, hub=hub, profile="disbursal")  # type: ignore[arg-type]

        assert ok is False
        assert hub.published == [(ERROR_EVENT, {"message": "Failed to update leaderboard"})]


class TestBuildScheduler:
    def test_registers_single_interval_job(self) -> None:
        scheduler = build_scheduler(RefreshSettings(enabled=True, interval_seconds=120))

        jobs = scheduler.get_jobs()
        assert [job.id for job in jobs] == [REFRESH_JOB_ID]
        assert jobs[0].max_instances == 1
        assert jobs[0].coalesce is True
        assert jobs[0].kwargs == {"profile": "disbursal"}
