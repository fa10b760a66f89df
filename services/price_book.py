from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import lru_cache
from itertools import count
from threading import Lock
from typing import Dict, List, Optional, Union

from models.records import FuelPrices, FuelType
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FuelPriceEntry:
    id: str
    fuel_type: FuelType
    price: float
    effective_date: date
    created_at: datetime


class FuelPriceBook:
    """Thread-safe record of posted fuel prices; the latest effective entry wins."""

    def __init__(self, ms_price: float, hsd_price: float) -> None:
        self._entries: List[FuelPriceEntry] = []
        self._ids = count(1)
        self._lock = Lock()
        today = datetime.now(timezone.utc).date()
        self.set_price(FuelType.MS, ms_price, today)
        self.set_price(FuelType.HSD, hsd_price, today)

    def set_price(
        self,
        fuel_type: Union[FuelType, str],
        price: float,
        effective_date: Optional[date] = None,
    ) -> FuelPriceEntry:
        try:
            resolved = FuelType(fuel_type)
        except ValueError as exc:
            raise ValueError("Invalid fuel_type. Must be MS or HSD") from exc
        if price is None or not math.isfinite(price) or price <= 0:
            raise ValueError("Fuel price must be a positive number.")

        now = datetime.now(timezone.utc)
        with self._lock:
            entry = FuelPriceEntry(
                id=str(next(self._ids)),
                fuel_type=resolved,
                price=float(price),
                effective_date=effective_date or now.date(),
                created_at=now,
            )
            self._entries.append(entry)

        logger.info(
            "Recorded fuel price %.2f", entry.price, extra={"fuel_type": resolved.value}
        )
        return entry

    def current(self, as_of: Optional[date] = None) -> FuelPrices:
        cutoff = as_of or datetime.now(timezone.utc).date()
        latest: Dict[FuelType, FuelPriceEntry] = {}
        with self._lock:
            entries = list(self._entries)
        for entry in entries:
            if entry.effective_date > cutoff:
                continue
            known = latest.get(entry.fuel_type)
            if known is None or entry.effective_date >= known.effective_date:
                latest[entry.fuel_type] = entry
        missing = [fuel.value for fuel in FuelType if fuel not in latest]
        if missing:
            raise KeyError(f"No effective price for {', '.join(missing)} as of {cutoff}.")
        return FuelPrices(ms=latest[FuelType.MS].price, hsd=latest[FuelType.HSD].price)

    def history(self) -> List[FuelPriceEntry]:
        with self._lock:
            return sorted(
                self._entries,
                key=lambda entry: (entry.effective_date, int(entry.id)),
                reverse=True,
            )


@lru_cache
def build_default_price_book() -> FuelPriceBook:
    settings = get_settings()
    return FuelPriceBook(ms_price=settings.ms_price, hsd_price=settings.hsd_price)
