from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_MERAKI_BASE_URL_ENV = "MERAKI_BASE_URL"
_MERAKI_TIMEOUT_ENV = "MERAKI_TIMEOUT"
_PRTG_TIMEOUT_ENV = "PRTG_TIMEOUT"
_RETRY_ATTEMPTS_ENV = "RETRY_MAX_ATTEMPTS"
_RETRY_DELAY_ENV = "RETRY_INITIAL_DELAY"
_MT10_SCRIPT_ENV = "PRTG_MT10_SCRIPT"
_MT11_SCRIPT_ENV = "PRTG_MT11_SCRIPT"
_SENSOR_PRIORITY_ENV = "PRTG_SENSOR_PRIORITY"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_MERAKI_BASE_URL = "https://api.meraki.com/api/v1"


@dataclass(frozen=True)
class Settings:
    meraki_base_url: str
    meraki_timeout: float
    prtg_timeout: float
    retry_max_attempts: int
    retry_initial_delay: float
    mt10_script: str
    mt11_script: str
    sensor_priority: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
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


def _read_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_priority(default: int) -> int:
    # PRTG priorities run from 1 to 5 stars.
    parsed = _read_int_env(_SENSOR_PRIORITY_ENV, default)
    return parsed if 1 <= parsed <= 5 else default


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
        meraki_base_url=_read_str_env(_MERAKI_BASE_URL_ENV, DEFAULT_MERAKI_BASE_URL).rstrip("/"),
        meraki_timeout=_read_float_env(_MERAKI_TIMEOUT_ENV, 30.0),
        prtg_timeout=_read_float_env(_PRTG_TIMEOUT_ENV, 30.0),
        retry_max_attempts=_read_int_env(_RETRY_ATTEMPTS_ENV, 3),
        retry_initial_delay=_read_float_env(_RETRY_DELAY_ENV, 2.0),
        mt10_script=_read_str_env(_MT10_SCRIPT_ENV, "MerakiMT10.cmd"),
        mt11_script=_read_str_env(_MT11_SCRIPT_ENV, "MerakiMT11.cmd"),
        sensor_priority=_read_priority(3),
        log_level=_read_log_level("INFO"),
    )
