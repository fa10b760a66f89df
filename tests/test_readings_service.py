from __future__ import annotations

import logging

import pytest

from models.records import FuelPrices
from services.price_book import FuelPriceBook
from services.readings import PumpEdit, ReadingService

PASTE = (
    "PRODUCT\tPUMP\tNOZZLE\tOPENING\tCLOSING\tTOTAL\n"
    "Diesel\t1\t1\t226928.6\t227183.59\t254.99\n"
    "PETROL\t\t2\t96221.4\t96526.27\t304.87\n"
    "Kerosene\t2\t1\t1\t2\t1\n"
)


@pytest.fixture()
def service() -> ReadingService:
    return ReadingService(price_book=FuelPriceBook(ms_price=101.66, hsd_price=93.26))


def test_convert_uses_price_book_when_prices_omitted(service: ReadingService) -> None:
    outcome = service.convert(PASTE, shift_number=1)

    dispenser = outcome.sheet.dispensers[0]
    assert outcome.sheet.prices == FuelPrices(ms=101.66, hsd=93.26)
    assert dispenser.ms_pump.rate_per_litre == 101.66
    assert dispenser.hsd_pump.amount == pytest.approx(249.99 * 93.26)
    assert outcome.skipped == []


def test_convert_with_explicit_prices_and_strict(service: ReadingService) -> None:
    outcome = service.convert(PASTE, prices={"MS": 93.26, "HSD": 93.26}, strict=True)

    assert outcome.sheet.dispensers[0].ms_pump.amount == pytest.approx(304.87 * 93.26)
    assert [(line.line_number, line.reason) for line in outcome.skipped] == [
        (4, "unrecognized product")
    ]


def test_convert_logs_summary(service: ReadingService, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="services.readings"):
        service.convert(PASTE, shift_number=2)

    records = [record for record in caplog.records if record.name == "services.readings"]
    assert records
    assert getattr(records[0], "row_count", None) == 2
    assert getattr(records[0], "dispenser_count", None) == 1
    assert getattr(records[0], "shift_number", None) == 2


def test_edit_applies_to_caller_sheet(service: ReadingService) -> None:
    sheet = service.blank_sheet(shift_number=1, dispenser_count=2)

    edited = service.edit(
        sheet.dispensers,
        PumpEdit(dispenser_index=1, pump_type="hsd_pump", field_name="dispensed_qty", value=30.0),
        shift_number=1,
    )

    pump = edited.dispensers[1].hsd_pump
    assert pump.net_dispensed_qty == 25.0
    assert pump.amount == pytest.approx(25.0 * 93.26)
    assert edited.totals().total_dispensed == 30.0


def test_reprice_follows_price_book(service: ReadingService) -> None:
    outcome = service.convert(PASTE, shift_number=1)
    service.price_book.set_price("MS", 110.0)

    repriced = service.reprice(outcome.sheet.dispensers, shift_number=1)

    ms = repriced.dispensers[0].ms_pump
    assert ms.rate_per_litre == 110.0
    assert ms.amount == pytest.approx(ms.net_dispensed_qty * 110.0)
    assert repriced.dispensers[0].hsd_pump.rate_per_litre == 93.26
