"""
app/connectors/published_sheet.py

HTTP fetch of a published spreadsheet's CSV export.

One GET per call. ``requests`` applies its timeout to the connect and to
each socket read, so the body is streamed and the whole download is also
held to the same budget: a stalled or trickling upstream fails once the
deadline passes (at most one extra read timeout later). Failures are not
retried here: the next scheduled refresh (or the next request) is the retry.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import requests

from app.config import SheetHTTPSettings

logger = logging.getLogger(__name__)

CHUNK_BYTES = 64 * 1024


class SheetFetchError(RuntimeError):
    """
    Raised when the published sheet cannot be reached or answers with an error.
    """

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class PublishedSheetConnector:
    """
    Fetches raw CSV bytes from a world-readable sheet export URL.
    """

    source = "published_sheet"

    def __init__(
        self,
        *,
        http_settings: SheetHTTPSettings,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._clock = clock

    def _timed_out(self, url: str) -> SheetFetchError:
        return SheetFetchError(
            f"Timed out after {self._timeout_seconds:.0f}s fetching published sheet.",
            url=url,
        )

    def _read_body(self, response: requests.Response, url: str, deadline: float) -> bytes:
        chunks: list[bytes] = []
        for chunk in response.iter_content(chunk_size=CHUNK_BYTES):
            if self._clock() > deadline:
                logger.error("Published sheet download exceeded deadline url=%s", url)
                raise self._timed_out(url)
            chunks.append(chunk)
        return b"".join(chunks)

    def fetch_csv(self, url: str) -> bytes:
        """
        GET *url* and return the response body.

        Raises
        ------
        SheetFetchError
            On connection errors, timeouts (including a download that
            outlasts the configured budget), or non-2xx responses.
        """

        logger.info("Fetching published sheet url=%s timeout=%.1fs", url, self._timeout_seconds)
        deadline = self._clock() + self._timeout_seconds
        try:
            response = self._session.request(
                method="GET",
                url=url,
                timeout=self._timeout_seconds,
                stream=True,
            )
            try:
                response.raise_for_status()
                body = self._read_body(response, url, deadline)
            finally:
                response.close()
        except requests.Timeout as exc:
            logger.error("Published sheet request timed out url=%s", url)
            raise self._timed_out(url) from exc
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error(
                "Published sheet request failed status=%s url=%s error=%s",
                status_code,
                url,
                exc,
            )
            raise SheetFetchError(
                f"Published sheet answered with HTTP {status_code}.",
                url=url,
                status_code=status_code,
            ) from exc
        except requests.RequestException as exc:
            logger.error("Published sheet request failed url=%s error=%s", url, exc)
            raise SheetFetchError(f"Could not reach published sheet: {exc}", url=url) from exc

        logger.info("Published sheet received url=%s bytes=%d", url, len(body))
        return body
