"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path

DEFAULT_DISBURSAL_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vTzniutQXMP9vyaICei8iW8NJxQLYDvM-tqyx_Wzp7T4ZqstkD9Ac7q3kpUCYV2eTSfAsgc0fXQQ6Eb"
    "/pub?output=csv&gid=0"
)
DEFAULT_SALARY4SURE_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vRNPt_FYJXzimdb9d1w5v7Dyoq-cB26orQKBwOlOCUxwBmDtMgxMoMgpK_XDymo_5dfDh79pHPaHtyR"
    "/pub?output=csv&gid=1101474402"
)
DEFAULT_WINDOW_START = date(2026, 1, 1)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_date_env(name: str, default: date) -> date:
    """
    Read an ISO ``YYYY-MM-DD`` date from environment variables with fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return date.fromisoformat(raw_value.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class SheetSourceSettings:
    """
    Published-sheet CSV export URLs, one per ledger profile.
    """

    disbursal_url: str = DEFAULT_DISBURSAL_SHEET_URL
    salary4sure_url: str = DEFAULT_SALARY4SURE_SHEET_URL

    def url_for(self, profile_name: str) -> str:
        urls = {
            "disbursal": self.disbursal_url,
            "salary4sure": self.salary4sure_url,
        }
        try:
            return urls[profile_name]
        except KeyError as exc:
            raise KeyError(f"No sheet URL configured for profile {profile_name!r}") from exc


@dataclass(frozen=True)
class SheetHTTPSettings:
    """
    HTTP behavior for fetching the published sheets.
    """

    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class ReportSettings:
    """
    Report defaults.

    ``default_window_start`` is the first day included when a report is
    requested without an explicit date range.
    """

    default_window_start: date = DEFAULT_WINDOW_START


@dataclass(frozen=True)
class RefreshSettings:
    """
    Periodic leaderboard refresh and push settings.
    """

    enabled: bool = True
    interval_seconds: int = 600
    profile: str = "disbursal"


@lru_cache(maxsize=1)
def get_sheet_source_settings() -> SheetSourceSettings:
    """
    Return cached sheet URLs from environment variables.
    """

    return SheetSourceSettings(
        disbursal_url=_get_str_env(
            "DISBURSAL_SHEET_URL",
            _get_str_env("PUBLISHED_SHEET_URL", DEFAULT_DISBURSAL_SHEET_URL),
        ),
        salary4sure_url=_get_str_env("SALARY4SURE_SHEET_URL", DEFAULT_SALARY4SURE_SHEET_URL),
    )


@lru_cache(maxsize=1)
def get_sheet_http_settings() -> SheetHTTPSettings:
    """
    Return cached sheet HTTP settings from environment variables.
    """

    return SheetHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("SHEET_HTTP_TIMEOUT_SECONDS", 10.0)),
    )


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report defaults from environment variables.
    """

    return ReportSettings(
        default_window_start=_get_date_env("REPORT_DEFAULT_WINDOW_START", DEFAULT_WINDOW_START),
    )


@lru_cache(maxsize=1)
def get_refresh_settings() -> RefreshSettings:
    """
    Return cached refresh settings from environment variables.
    """

    return RefreshSettings(
        enabled=_get_bool_env("REFRESH_ENABLED", True),
        interval_seconds=max(10, _get_int_env("REFRESH_INTERVAL_SECONDS", 600)),
        profile=_get_str_env("REFRESH_PROFILE", "disbursal").lower(),
    )
