"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class FuelProduct(str, Enum):
    """Product labels as they appear on the pump meter printout."""

    diesel = "Diesel"
    petrol = "PETROL"


class FuelType(str, Enum):
    """Billing fuel types: Motor Spirit and High Speed Diesel."""

    MS = "MS"
    HSD = "HSD"


PRODUCT_FUEL_TYPES: Dict[FuelProduct, FuelType] = {
    FuelProduct.diesel: FuelType.HSD,
    FuelProduct.petrol: FuelType.MS,
}

PUMP_TYPES = ("ms_pump", "hsd_pump")


@dataclass(frozen=True, slots=True)
class PumpRow:
    """A single nozzle reading parsed from pasted text."""

    product: FuelProduct
    pump: int
    nozzle: int
    opening: float
    closing: float
    total: float


@dataclass(slots=True)
class PumpReading:
    """One fuel side of a dispenser, with its derived sale figures."""

    pump_name: str
    fuel_type: FuelType
    opening_reading: float = 0.0
    closing_reading: float = 0.0
    dispensed_qty: float = 0.0
    pump_test_qty: float = 0.0
    own_use_qty: float = 0.0
    net_dispensed_qty: float = 0.0
    rate_per_litre: float = 0.0
    amount: float = 0.0


@dataclass(slots=True)
class DispenserReading:
    dispenser_name: str
    ms_pump: PumpReading
    hsd_pump: PumpReading

    def side(self, pump_type: str) -> PumpReading:
        if pump_type == "ms_pump":
            return self.ms_pump
        if pump_type == "hsd_pump":
            return self.hsd_pump
        raise ValueError(f"Unknown pump type {pump_type!r}; expected one of {PUMP_TYPES}.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DispenserReading":
        return cls(
            dispenser_name=str(payload["dispenser_name"]),
            ms_pump=_pump_from_dict(payload["ms_pump"], FuelType.MS),
            hsd_pump=_pump_from_dict(payload["hsd_pump"], FuelType.HSD),
        )


def _pump_from_dict(payload: Mapping[str, Any], fuel_type: FuelType) -> PumpReading:
    # the side a reading sits on decides its fuel type
    values = dict(payload)
    values["fuel_type"] = fuel_type
    return PumpReading(**values)


@dataclass
class ReadingTotals:
    """Sums across every pump side of a shift sheet."""

    total_dispensed: float = 0.0
    total_pump_test: float = 0.0
    total_own_use: float = 0.0
    total_net_dispensed: float = 0.0
    total_amount: float = 0.0


@dataclass(frozen=True)
class FuelPrices:
    ms: float
    hsd: float

    @classmethod
    def from_mapping(cls, payload: Mapping[str, float]) -> "FuelPrices":
        return cls(ms=float(payload["MS"]), hsd=float(payload["HSD"]))

    def as_mapping(self) -> Dict[str, float]:
        return {FuelType.MS.value: self.ms, FuelType.HSD.value: self.hsd}


@dataclass(frozen=True)
class ShiftTiming:
    start: str
    end: str
    label: str


MAX_SHIFTS_PER_DAY = 3

SHIFT_TIMINGS: Dict[int, ShiftTiming] = {
    1: ShiftTiming(start="06:00", end="14:00", label="Shift I (6AM - 2PM)"),
    2: ShiftTiming(start="14:00", end="22:00", label="Shift II (2PM - 10PM)"),
    3: ShiftTiming(start="22:00", end="06:00", label="Shift III (10PM - 6AM)"),
}


def shift_timing(shift_number: Optional[int]) -> ShiftTiming:
    timing = SHIFT_TIMINGS.get(shift_number) if shift_number is not None else None
    if timing is not None:
        return timing
    return ShiftTiming(start="00:00", end="00:00", label=f"Shift {shift_number}")


@dataclass
class SkippedLine:
    """A pasted data line that was rejected, with the reason."""

    line_number: int
    reason: str


@dataclass
class ParseResult:
    rows: list[PumpRow] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)
