from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache


_MS_PRICE_ENV = "FUEL_PRICE_MS"
_HSD_PRICE_ENV = "FUEL_PRICE_HSD"
_STRICT_MODE_ENV = "PASTE_STRICT_MODE"
_DISPENSER_COUNT_ENV = "DISPENSER_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    ms_price: float
    hsd_price: float
    strict_paste: bool
    dispenser_count: int
    log_level: str


def _read_price(name: str, default: float) -> float:
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
    return parsed if math.isfinite(parsed) and parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_dispenser_count(default: int) -> int:
    value = os.getenv(_DISPENSER_COUNT_ENV)
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
        ms_price=_read_price(_MS_PRICE_ENV, 101.66),
        hsd_price=_read_price(_HSD_PRICE_ENV, 93.26),
        strict_paste=_read_bool(_STRICT_MODE_ENV, False),
        dispenser_count=_read_dispenser_count(4),
        log_level=_read_log_level("INFO"),
    )
