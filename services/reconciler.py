"""Reconciliation of pump rows into per-dispenser sale figures."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from models.records import (
    DispenserReading,
    FuelPrices,
    FuelProduct,
    FuelType,
    ParseResult,
    PumpReading,
    PumpRow,
    ReadingTotals,
)
from services.paste_parser import PasteParser

logger = logging.getLogger(__name__)

PUMP_TEST_QTY_BY_SHIFT: Dict[int, float] = {1: 5.0}

EDITABLE_FIELDS = frozenset(
    {
        "opening_reading",
        "closing_reading",
        "dispensed_qty",
        "pump_test_qty",
        "own_use_qty",
        "net_dispensed_qty",
        "rate_per_litre",
        "amount",
    }
)

PricesLike = Union[FuelPrices, Mapping[str, float]]


def pump_test_for(shift_number: Optional[int]) -> float:
    """Litres drawn for calibration in the given shift; only the first shift tests."""
    if shift_number is None:
        return 0.0
    return PUMP_TEST_QTY_BY_SHIFT.get(shift_number, 0.0)


def _as_prices(prices: PricesLike) -> FuelPrices:
    if isinstance(prices, FuelPrices):
        return prices
    return FuelPrices.from_mapping(prices)


def _batch_side(
    row: Optional[PumpRow],
    pump_number: int,
    fuel_type: FuelType,
    pump_test_qty: float,
    rate: float,
) -> PumpReading:
    dispensed = row.total if row is not None else 0.0
    # own use is not part of pasted data, so only the pump test is deducted here
    net = max(0.0, dispensed - pump_test_qty)
    return PumpReading(
        pump_name=f"{fuel_type.value}-{pump_number}",
        fuel_type=fuel_type,
        opening_reading=row.opening if row is not None else 0.0,
        closing_reading=row.closing if row is not None else 0.0,
        dispensed_qty=dispensed,
        pump_test_qty=pump_test_qty,
        own_use_qty=0.0,
        net_dispensed_qty=net,
        rate_per_litre=rate,
        amount=net * rate,
    )


def convert_to_dispenser_readings(
    rows: Iterable[PumpRow],
    prices: PricesLike,
    shift_number: Optional[int] = None,
) -> List[DispenserReading]:
    """Group rows by pump and compute clamped net quantities and amounts.

    Dispensed quantity comes from each row's printed ``total``. The last row
    seen for a product on a pump wins; nozzles are not summed.
    """
    fuel_prices = _as_prices(prices)
    grouped: Dict[int, Dict[FuelProduct, PumpRow]] = {}
    for row in rows:
        grouped.setdefault(row.pump, {})[row.product] = row

    pump_test_qty = pump_test_for(shift_number)
    dispensers: List[DispenserReading] = []
    for pump_number, sides in grouped.items():
        dispensers.append(
            DispenserReading(
                dispenser_name=f"Pump-{pump_number}",
                ms_pump=_batch_side(
                    sides.get(FuelProduct.petrol),
                    pump_number,
                    FuelType.MS,
                    pump_test_qty,
                    fuel_prices.ms,
                ),
                hsd_pump=_batch_side(
                    sides.get(FuelProduct.diesel),
                    pump_number,
                    FuelType.HSD,
                    pump_test_qty,
                    fuel_prices.hsd,
                ),
            )
        )
    return dispensers


def compute_totals(dispensers: Iterable[DispenserReading]) -> ReadingTotals:
    totals = ReadingTotals()
    for dispenser in dispensers:
        for pump in (dispenser.ms_pump, dispenser.hsd_pump):
            totals.total_dispensed += pump.dispensed_qty
            totals.total_pump_test += pump.pump_test_qty
            totals.total_own_use += pump.own_use_qty
            totals.total_net_dispensed += pump.net_dispensed_qty
            totals.total_amount += pump.amount
    return totals


def recompute_pump_reading(pump: PumpReading, field_name: str, value: float) -> None:
    """Apply a single edit and refresh the fields that depend on it.

    Meter edits refresh only ``dispensed_qty``; the net quantity follows on the
    next edit of a deduction. Net quantity is not clamped here.
    """
    if field_name not in EDITABLE_FIELDS:
        raise ValueError(f"Field {field_name!r} cannot be edited.")

    setattr(pump, field_name, float(value))

    if field_name in ("opening_reading", "closing_reading"):
        pump.dispensed_qty = max(0.0, pump.closing_reading - pump.opening_reading)

    if field_name in ("dispensed_qty", "pump_test_qty", "own_use_qty"):
        pump.net_dispensed_qty = (
            pump.dispensed_qty - pump.pump_test_qty - pump.own_use_qty
        )
        pump.amount = pump.net_dispensed_qty * pump.rate_per_litre

    if field_name in ("net_dispensed_qty", "rate_per_litre"):
        pump.amount = pump.net_dispensed_qty * pump.rate_per_litre


def _empty_side(name: str, fuel_type: FuelType, rate: float, pump_test_qty: float) -> PumpReading:
    return PumpReading(
        pump_name=name,
        fuel_type=fuel_type,
        pump_test_qty=pump_test_qty,
        rate_per_litre=rate,
    )


@dataclass
class ShiftReadingSheet:
    """Live, editable grid of dispenser readings for one shift."""

    shift_number: Optional[int]
    prices: FuelPrices
    dispensers: List[DispenserReading] = field(default_factory=list)

    @classmethod
    def blank(
        cls,
        shift_number: Optional[int],
        prices: PricesLike,
        dispenser_count: int = 4,
    ) -> "ShiftReadingSheet":
        fuel_prices = _as_prices(prices)
        pump_test_qty = pump_test_for(shift_number)
        dispensers = [
            DispenserReading(
                dispenser_name=f"DS-{index}",
                ms_pump=_empty_side(f"MS-{index}", FuelType.MS, fuel_prices.ms, pump_test_qty),
                hsd_pump=_empty_side(
                    f"HSD-{index}", FuelType.HSD, fuel_prices.hsd, pump_test_qty
                ),
            )
            for index in range(1, dispenser_count + 1)
        ]
        return cls(shift_number=shift_number, prices=fuel_prices, dispensers=dispensers)

    def update_pump_reading(
        self, dispenser_index: int, pump_type: str, field_name: str, value: float
    ) -> PumpReading:
        if not 0 <= dispenser_index < len(self.dispensers):
            raise IndexError(f"Dispenser index {dispenser_index} is out of range.")
        pump = self.dispensers[dispenser_index].side(pump_type)
        recompute_pump_reading(pump, field_name, value)
        return pump

    def apply_prices(self, prices: PricesLike) -> None:
        """Propagate refreshed prices; only rates and amounts change."""
        self.prices = _as_prices(prices)
        for dispenser in self.dispensers:
            sides = ((dispenser.ms_pump, self.prices.ms), (dispenser.hsd_pump, self.prices.hsd))
            for pump, rate in sides:
                pump.rate_per_litre = rate
                pump.amount = pump.net_dispensed_qty * pump.rate_per_litre

    def load_paste(self, text: str, parser: Optional[PasteParser] = None) -> ParseResult:
        """Replace the grid with pasted readings when any pump was recognised."""
        result = (parser or PasteParser()).parse(text)
        dispensers = convert_to_dispenser_readings(result.rows, self.prices, self.shift_number)
        if dispensers:
            self.dispensers = dispensers
        else:
            logger.info(
                "Pasted data produced no dispensers; keeping current sheet",
                extra={"shift_number": self.shift_number, "skipped_count": len(result.skipped)},
            )
        return result

    def totals(self) -> ReadingTotals:
        return compute_totals(self.dispensers)

    def to_payload(self, shift_id: str, operator_name: str) -> Dict[str, Any]:
        return {
            "shift_id": shift_id,
            "shift_number": self.shift_number,
            "operator_name": operator_name,
            "dispensers": [dispenser.to_dict() for dispenser in self.dispensers],
            "totals": asdict(self.totals()),
        }
