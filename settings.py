from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DATA_SOURCE_ENV = "BHMS_DATA_SOURCE"
_FETCH_TIMEOUT_ENV = "BHMS_FETCH_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_DATA_SOURCE = "./data/batterydata_converted.csv"


@dataclass(frozen=True)
class Settings:
    data_source: str
    fetch_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_timeout(default: float) -> float:
    value = os.getenv(_FETCH_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        data_source=_read_str_env(_DATA_SOURCE_ENV, DEFAULT_DATA_SOURCE),
        fetch_timeout=_read_timeout(10.0),
        log_level=_read_log_level("INFO"),
    )
