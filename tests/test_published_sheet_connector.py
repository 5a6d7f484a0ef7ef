from __future__ import annotations

from collections.abc import Iterator

import pytest
import requests

from app.config import SheetHTTPSettings
from app.connectors.published_sheet import PublishedSheetConnector, SheetFetchError

SHEET_URL = "https://sheets.example.test/pub?output=csv"


class _FakeResponse:
    def __init__(self, status_code: int = 200, chunks: tuple[bytes, ...] = ()) -> None:
        self.status_code = status_code
        self.chunks = chunks
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        yield from self.chunks

    def close(self) -> None:
        self.closed = True


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, object]] = []

    def request(self, **kwargs: object) -> _FakeResponse:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


class _SteppingClock:
    """Monotonic clock that advances by *step* seconds on every read."""

    def __init__(self, step: float) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


def _connector(
    session: _FakeSession,
    timeout: float = 10.0,
    clock: _SteppingClock | None = None,
) -> PublishedSheetConnector:
    return PublishedSheetConnector(
        http_settings=SheetHTTPSettings(timeout_seconds=timeout),
        session=session,  # type: ignore[arg-type]
        clock=clock or _SteppingClock(0.0),
    )


def test_returns_body_and_applies_timeout() -> None:
    response = _FakeResponse(chunks=(b"A,B\n", b"1,2\n"))
    session = _FakeSession(response=response)

    body = _connector(session, timeout=7.5).fetch_csv(SHEET_URL)

    assert body == b"A,B\n1,2\n"
    assert session.calls == [{"method": "GET", "url": SHEET_URL, "timeout": 7.5, "stream": True}]
    assert response.closed


def test_timeout_raises_fetch_error() -> None:
    session = _FakeSession(error=requests.Timeout("slow"))

    with pytest.raises(SheetFetchError) as exc_info:
        _connector(session).fetch_csv(SHEET_URL)

    assert exc_info.value.url == SHEET_URL
    assert exc_info.value.status_code is None
    assert "Timed out" in str(exc_info.value)


def test_slow_download_is_held_to_total_deadline() -> None:
    response = _FakeResponse(chunks=(b"A,B\n", b"1,2\n", b"3,4\n"))
    session = _FakeSession(response=response)

    with pytest.raises(SheetFetchError) as exc_info:
        _connector(session, timeout=10.0, clock=_SteppingClock(6.0)).fetch_csv(SHEET_URL)

    assert "Timed out after 10s" in str(exc_info.value)
    assert response.closed


def test_http_error_status_is_recorded() -> None:
    response = _FakeResponse(status_code=404)
    session = _FakeSession(response=response)

    with pytest.raises(SheetFetchError) as exc_info:
        _connector(session).fetch_csv(SHEET_URL)

    assert exc_info.value.status_code == 404
    assert response.closed


def test_connection_error_raises_fetch_error() -> None:
    session = _FakeSession(error=requests.ConnectionError("dns"))

    with pytest.raises(SheetFetchError) as exc_info:
        _connector(session).fetch_csv(SHEET_URL)

    assert exc_info.value.url == SHEET_URL


def test_broken_stream_raises_fetch_error() -> None:
    class _BrokenResponse(_FakeResponse):
        def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
            yield b"A,B\n"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

    session = _FakeSession(response=_BrokenResponse())

    with pytest.raises(SheetFetchError):
        _connector(session).fetch_csv(SHEET_URL)


def test_single_attempt_per_call() -> None:
    session = _FakeSession(error=requests.ConnectionError("reset"))

    with pytest.raises(SheetFetchError):
        _connector(session).fetch_csv(SHEET_URL)

    assert len(session.calls) == 1
