"""Orchestration of paste parsing, reconciliation and pricing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Mapping, Optional, Union

from models.records import DispenserReading, FuelPrices, ParseResult, SkippedLine
from services.paste_parser import PasteParser
from services.price_book import FuelPriceBook, build_default_price_book
from services.reconciler import ShiftReadingSheet, convert_to_dispenser_readings
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class ConversionOutcome:
    """A reconciled sheet together with the parse diagnostics that produced it."""

    sheet: ShiftReadingSheet
    skipped: List[SkippedLine] = field(default_factory=list)
    processing_ms: int = 0


@dataclass(frozen=True)
class PumpEdit:
    dispenser_index: int
    pump_type: str
    field_name: str
    value: float


class ReadingService:
    """Coordinates the parser, reconciler and price book for callers."""

    def __init__(
        self,
        price_book: FuelPriceBook,
        strict: bool = False,
        dispenser_count: int = 4,
    ) -> None:
        self.price_book = price_book
        self.strict = strict
        self.dispenser_count = dispenser_count

    def parse(self, text: str, strict: Optional[bool] = None) -> ParseResult:
        strict_mode = self.strict if strict is None else strict
        result = PasteParser(strict=strict_mode).parse(text)
        if not strict_mode:
            result.skipped = []
        return result

    def convert(
        self,
        text: str,
        prices: Union[FuelPrices, Mapping[str, float], None] = None,
        shift_number: Optional[int] = None,
        strict: Optional[bool] = None,
    ) -> ConversionOutcome:
        """Parse pasted text and reconcile it into a shift sheet."""
        start_time = time.perf_counter()
        result = self.parse(text, strict=strict)
        fuel_prices = self.resolve_prices(prices)
        sheet = ShiftReadingSheet(
            shift_number=shift_number,
            prices=fuel_prices,
            dispensers=convert_to_dispenser_readings(result.rows, fuel_prices, shift_number),
        )
        processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Converted pasted readings",
            extra={
                "shift_number": shift_number,
                "row_count": len(result.rows),
                "skipped_count": len(result.skipped),
                "dispenser_count": len(sheet.dispensers),
                "processing_ms": processing_ms,
            },
        )
        return ConversionOutcome(
            sheet=sheet, skipped=result.skipped, processing_ms=processing_ms
        )

    def blank_sheet(
        self, shift_number: Optional[int], dispenser_count: Optional[int] = None
    ) -> ShiftReadingSheet:
        return ShiftReadingSheet.blank(
            shift_number,
            self.price_book.current(),
            dispenser_count=dispenser_count or self.dispenser_count,
        )

    def edit(
        self,
        dispensers: Iterable[DispenserReading],
        edit: PumpEdit,
        shift_number: Optional[int] = None,
        prices: Union[FuelPrices, Mapping[str, float], None] = None,
    ) -> ShiftReadingSheet:
        """Apply one grid edit to a caller-held sheet and return the recomputed sheet."""
        sheet = ShiftReadingSheet(
            shift_number=shift_number,
            prices=self.resolve_prices(prices),
            dispensers=list(dispensers),
        )
        sheet.update_pump_reading(
            edit.dispenser_index, edit.pump_type, edit.field_name, edit.value
        )
        return sheet

    def reprice(
        self,
        dispensers: Iterable[DispenserReading],
        shift_number: Optional[int] = None,
        prices: Union[FuelPrices, Mapping[str, float], None] = None,
    ) -> ShiftReadingSheet:
        fuel_prices = self.resolve_prices(prices)
        sheet = ShiftReadingSheet(
            shift_number=shift_number, prices=fuel_prices, dispensers=list(dispensers)
        )
        sheet.apply_prices(fuel_prices)
        return sheet

    def resolve_prices(
        self, prices: Union[FuelPrices, Mapping[str, float], None]
    ) -> FuelPrices:
        if prices is None:
            return self.price_book.current()
        if isinstance(prices, FuelPrices):
            return prices
        return FuelPrices.from_mapping(prices)


@lru_cache
def build_default_service() -> ReadingService:
    """Factory that wires the reading service from settings."""
    settings = get_settings()
    return ReadingService(
        price_book=build_default_price_book(),
        strict=settings.strict_paste,
        dispenser_count=settings.dispenser_count,
    )
