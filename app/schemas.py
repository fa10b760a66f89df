"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from models.records import FuelProduct, FuelType


class FuelPricesModel(BaseModel):
    """Per-litre prices for both fuel types."""

    MS: float = Field(..., gt=0)
    HSD: float = Field(..., gt=0)


class PumpRowModel(BaseModel):
    product: FuelProduct
    pump: int = Field(..., gt=0)
    nozzle: int
    opening: float = Field(..., ge=0)
    closing: float = Field(..., ge=0)
    total: float


class SkippedLineModel(BaseModel):
    """A pasted data line that was dropped during parsing."""

    line_number: int = Field(..., ge=1)
    reason: str


class PumpReadingModel(BaseModel):
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


class DispenserReadingModel(BaseModel):
    dispenser_name: str
    ms_pump: PumpReadingModel
    hsd_pump: PumpReadingModel


class ReadingTotalsModel(BaseModel):
    total_dispensed: float
    total_pump_test: float
    total_own_use: float
    total_net_dispensed: float
    total_amount: float


class ParseRequest(BaseModel):
    text: str = Field(..., description="Tab or space separated meter readings.")
    strict: Optional[bool] = Field(
        default=None, description="Return skipped lines; defaults to the server setting."
    )


class ParseResponse(BaseModel):
    rows: List[PumpRowModel] = Field(default_factory=list)
    skipped: List[SkippedLineModel] = Field(default_factory=list)


class ConvertRequest(ParseRequest):
    prices: Optional[FuelPricesModel] = Field(
        default=None, description="Overrides the current price book when supplied."
    )
    shift_number: Optional[int] = Field(default=None, ge=1)


class SheetResponse(BaseModel):
    """Dispenser readings for a shift with their aggregate totals."""

    shift_number: Optional[int] = None
    prices: FuelPricesModel
    dispensers: List[DispenserReadingModel] = Field(default_factory=list)
    totals: ReadingTotalsModel
    skipped: List[SkippedLineModel] = Field(default_factory=list)
    processing_ms: Optional[int] = None


class EditRequest(BaseModel):
    shift_number: Optional[int] = Field(default=None, ge=1)
    prices: Optional[FuelPricesModel] = None
    dispensers: List[DispenserReadingModel]
    dispenser_index: int = Field(..., ge=0)
    pump_type: Literal["ms_pump", "hsd_pump"]
    field: str
    value: float


class RepriceRequest(BaseModel):
    shift_number: Optional[int] = Field(default=None, ge=1)
    prices: Optional[FuelPricesModel] = None
    dispensers: List[DispenserReadingModel]


class ShiftTimingModel(BaseModel):
    shift_number: int
    start: str
    end: str
    label: str


class FuelPriceCreate(BaseModel):
    fuel_type: str
    price: float
    effective_date: Optional[date] = None


class FuelPriceRecord(BaseModel):
    id: str
    fuel_type: FuelType
    price: float
    effective_date: date
    created_at: datetime


class FuelPriceListing(BaseModel):
    current: FuelPricesModel
    history: List[FuelPriceRecord] = Field(default_factory=list)
