"""Unit tests for batch reconciliation of parsed pump rows."""

from __future__ import annotations

import pytest

from models.records import FuelPrices, FuelProduct, FuelType, PumpRow
from services.paste_parser import parse_pasted_data
from services.reconciler import (
    compute_totals,
    convert_to_dispenser_readings,
    pump_test_for,
)

PRICES = {"MS": 93.26, "HSD": 93.26}


def _row(product: FuelProduct, pump: int, total: float, nozzle: int = 1) -> PumpRow:
    return PumpRow(
        product=product,
        pump=pump,
        nozzle=nozzle,
        opening=100.0,
        closing=100.0 + total,
        total=total,
    )


def test_pump_test_table() -> None:
    assert pump_test_for(1) == 5.0
    assert pump_test_for(2) == 0.0
    assert pump_test_for(3) == 0.0
    assert pump_test_for(None) == 0.0


def test_first_shift_scenario() -> None:
    text = (
        "PRODUCT\tPUMP\tNOZZLE\tOPENING\tCLOSING\tTOTAL\n"
        "Diesel\t1\t1\t226928.6\t227183.59\t254.99\n"
        "PETROL\t\t2\t96221.4\t96526.27\t304.87\n"
    )

    dispensers = convert_to_dispenser_readings(parse_pasted_data(text), PRICES, shift_number=1)

    assert len(dispensers) == 1
    dispenser = dispensers[0]
    assert dispenser.dispenser_name == "Pump-1"

    hsd = dispenser.hsd_pump
    assert hsd.pump_name == "HSD-1"
    assert hsd.fuel_type is FuelType.HSD
    assert hsd.opening_reading == 226928.6
    assert hsd.closing_reading == 227183.59
    assert hsd.dispensed_qty == 254.99
    assert hsd.pump_test_qty == 5.0
    assert hsd.own_use_qty == 0.0
    assert hsd.net_dispensed_qty == pytest.approx(249.99)
    assert hsd.amount == pytest.approx(249.99 * 93.26)

    ms = dispenser.ms_pump
    assert ms.pump_name == "MS-1"
    assert ms.net_dispensed_qty == pytest.approx(299.87)
    assert ms.amount == pytest.approx(299.87 * 93.26)


def test_other_shifts_do_not_deduct_pump_test() -> None:
    rows = [_row(FuelProduct.diesel, 2, 40.0), _row(FuelProduct.petrol, 2, 60.0)]

    dispensers = convert_to_dispenser_readings(rows, {"MS": 100.0, "HSD": 90.0}, shift_number=2)

    assert dispensers[0].hsd_pump.pump_test_qty == 0.0
    assert dispensers[0].hsd_pump.net_dispensed_qty == 40.0
    assert dispensers[0].hsd_pump.amount == 3600.0
    assert dispensers[0].ms_pump.amount == 6000.0


def test_net_is_clamped_to_zero() -> None:
    rows = [_row(FuelProduct.diesel, 1, 3.0)]

    dispensers = convert_to_dispenser_readings(rows, PRICES, shift_number=1)

    hsd = dispensers[0].hsd_pump
    assert hsd.dispensed_qty == 3.0
    assert hsd.net_dispensed_qty == 0.0
    assert hsd.amount == 0.0


def test_missing_side_is_zero_filled_with_rate() -> None:
    rows = [_row(FuelProduct.diesel, 3, 12.0)]

    dispensers = convert_to_dispenser_readings(rows, FuelPrices(ms=101.66, hsd=93.26))

    ms = dispensers[0].ms_pump
    assert ms.pump_name == "MS-3"
    assert ms.opening_reading == 0.0
    assert ms.closing_reading == 0.0
    assert ms.dispensed_qty == 0.0
    assert ms.net_dispensed_qty == 0.0
    assert ms.amount == 0.0
    assert ms.rate_per_litre == 101.66


def test_groups_in_first_seen_order_and_last_row_wins() -> None:
    rows = [
        _row(FuelProduct.diesel, 2, 10.0),
        _row(FuelProduct.diesel, 1, 20.0),
        _row(FuelProduct.diesel, 2, 30.0, nozzle=3),
        _row(FuelProduct.petrol, 1, 40.0),
    ]

    dispensers = convert_to_dispenser_readings(rows, PRICES)

    assert [d.dispenser_name for d in dispensers] == ["Pump-2", "Pump-1"]
    assert dispensers[0].hsd_pump.dispensed_qty == 30.0
    assert dispensers[1].ms_pump.dispensed_qty == 40.0


def test_dispensed_uses_printed_total_not_meter_difference() -> None:
    row = PumpRow(
        product=FuelProduct.petrol, pump=1, nozzle=1, opening=10.0, closing=50.0, total=12.0
    )

    dispensers = convert_to_dispenser_readings([row], PRICES)

    assert dispensers[0].ms_pump.dispensed_qty == 12.0


def test_empty_rows_give_no_dispensers() -> None:
    assert convert_to_dispenser_readings([], PRICES, shift_number=1) == []


def test_conversion_is_idempotent() -> None:
    text = (
        "Diesel\t1\t1\t10\t20\t10\n"
        "PETROL\t\t2\t30\t40\t10\n"
        "Diesel\t2\t3\t10\t12\t2\n"
    )

    first = convert_to_dispenser_readings(parse_pasted_data(text), PRICES, shift_number=1)
    second = convert_to_dispenser_readings(parse_pasted_data(text), PRICES, shift_number=1)

    assert first == second


def test_amount_consistency_and_non_negativity() -> None:
    rows = [
        _row(FuelProduct.diesel, pump, total)
        for pump, total in enumerate([0.0, 1.5, 4.99, 5.0, 7.25, 1234.5], start=1)
    ]

    for shift_number in (1, 2, None):
        for dispenser in convert_to_dispenser_readings(rows, PRICES, shift_number):
            for pump in (dispenser.ms_pump, dispenser.hsd_pump):
                assert pump.net_dispensed_qty >= 0
                assert abs(pump.amount - pump.net_dispensed_qty * pump.rate_per_litre) < 1e-9


def test_compute_totals_sums_every_side() -> None:
    rows = [_row(FuelProduct.diesel, 1, 10.0), _row(FuelProduct.petrol, 1, 20.0)]
    dispensers = convert_to_dispenser_readings(rows, {"MS": 2.0, "HSD": 1.0}, shift_number=1)

    totals = compute_totals(dispensers)

    assert totals.total_dispensed == 30.0
    assert totals.total_pump_test == 10.0
    assert totals.total_own_use == 0.0
    assert totals.total_net_dispensed == 20.0
    assert totals.total_amount == 5.0 * 1.0 + 15.0 * 2.0
