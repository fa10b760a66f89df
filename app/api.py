"""HTTP route definitions for the service."""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    ConvertRequest,
    DispenserReadingModel,
    EditRequest,
    FuelPriceCreate,
    FuelPriceListing,
    FuelPriceRecord,
    FuelPricesModel,
    ParseRequest,
    ParseResponse,
    PumpRowModel,
    ReadingTotalsModel,
    RepriceRequest,
    SheetResponse,
    ShiftTimingModel,
    SkippedLineModel,
)
from models.records import DispenserReading, SkippedLine, shift_timing
from services.price_book import FuelPriceEntry
from services.readings import PumpEdit, ReadingService, build_default_service
from services.reconciler import ShiftReadingSheet

router = APIRouter()


def get_service() -> ReadingService:
    return build_default_service()


def _skipped(lines: Iterable[SkippedLine]) -> List[SkippedLineModel]:
    return [SkippedLineModel(line_number=line.line_number, reason=line.reason) for line in lines]


def _sheet_response(
    sheet: ShiftReadingSheet,
    skipped: Iterable[SkippedLine] = (),
    processing_ms: Optional[int] = None,
) -> SheetResponse:
    return SheetResponse(
        shift_number=sheet.shift_number,
        prices=FuelPricesModel(**sheet.prices.as_mapping()),
        dispensers=[
            DispenserReadingModel.model_validate(dispenser.to_dict())
            for dispenser in sheet.dispensers
        ],
        totals=ReadingTotalsModel(**asdict(sheet.totals())),
        skipped=_skipped(skipped),
        processing_ms=processing_ms,
    )


def _to_domain(dispensers: Iterable[DispenserReadingModel]) -> List[DispenserReading]:
    return [DispenserReading.from_dict(model.model_dump()) for model in dispensers]


def _price_record(entry: FuelPriceEntry) -> FuelPriceRecord:
    return FuelPriceRecord(**asdict(entry))


def _current_prices(service: ReadingService) -> FuelPricesModel:
    try:
        prices = service.price_book.current()
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return FuelPricesModel(**prices.as_mapping())


@router.post(
    "/readings/parse",
    response_model=ParseResponse,
    summary="Parse pasted pump meter readings into rows.",
)
async def parse_readings(
    request: ParseRequest,
    service: ReadingService = Depends(get_service),
) -> ParseResponse:
    result = service.parse(request.text, strict=request.strict)
    return ParseResponse(
        rows=[PumpRowModel(**asdict(row)) for row in result.rows],
        skipped=_skipped(result.skipped),
    )


@router.post(
    "/readings/convert",
    response_model=SheetResponse,
    summary="Parse pasted readings and reconcile them into dispenser figures.",
)
async def convert_readings(
    request: ConvertRequest,
    service: ReadingService = Depends(get_service),
) -> SheetResponse:
    prices = request.prices.model_dump() if request.prices is not None else None
    try:
        outcome = service.convert(
            request.text,
            prices=prices,
            shift_number=request.shift_number,
            strict=request.strict,
        )
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return _sheet_response(outcome.sheet, outcome.skipped, outcome.processing_ms)


@router.post(
    "/readings/edit",
    response_model=SheetResponse,
    summary="Apply a single grid edit and recompute derived fields.",
)
async def edit_reading(
    request: EditRequest,
    service: ReadingService = Depends(get_service),
) -> SheetResponse:
    prices = request.prices.model_dump() if request.prices is not None else None
    edit = PumpEdit(
        dispenser_index=request.dispenser_index,
        pump_type=request.pump_type,
        field_name=request.field,
        value=request.value,
    )
    try:
        sheet = service.edit(
            _to_domain(request.dispensers),
            edit,
            shift_number=request.shift_number,
            prices=prices,
        )
    except (ValueError, IndexError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _sheet_response(sheet)


@router.post(
    "/readings/reprice",
    response_model=SheetResponse,
    summary="Apply current or supplied fuel prices to a sheet.",
)
async def reprice_readings(
    request: RepriceRequest,
    service: ReadingService = Depends(get_service),
) -> SheetResponse:
    prices = request.prices.model_dump() if request.prices is not None else None
    sheet = service.reprice(
        _to_domain(request.dispensers), shift_number=request.shift_number, prices=prices
    )
    return _sheet_response(sheet)


@router.get(
    "/readings/blank",
    response_model=SheetResponse,
    summary="Empty dispenser grid for a shift.",
)
async def blank_readings(
    shift_number: Optional[int] = Query(default=None, ge=1),
    dispenser_count: Optional[int] = Query(default=None, ge=1, le=64),
    service: ReadingService = Depends(get_service),
) -> SheetResponse:
    return _sheet_response(service.blank_sheet(shift_number, dispenser_count))


@router.get(
    "/shifts/{shift_number}/timing",
    response_model=ShiftTimingModel,
    summary="Start, end and label for a shift number.",
)
async def get_shift_timing(shift_number: int) -> ShiftTimingModel:
    timing = shift_timing(shift_number)
    return ShiftTimingModel(
        shift_number=shift_number, start=timing.start, end=timing.end, label=timing.label
    )


@router.get(
    "/fuel-prices",
    response_model=FuelPriceListing,
    summary="Current fuel prices and posting history.",
)
async def list_fuel_prices(
    service: ReadingService = Depends(get_service),
) -> FuelPriceListing:
    return FuelPriceListing(
        current=_current_prices(service),
        history=[_price_record(entry) for entry in service.price_book.history()],
    )


@router.post(
    "/fuel-prices",
    response_model=FuelPriceRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Post a new fuel price.",
)
async def create_fuel_price(
    request: FuelPriceCreate,
    service: ReadingService = Depends(get_service),
) -> FuelPriceRecord:
    try:
        entry = service.price_book.set_price(
            request.fuel_type, request.price, request.effective_date
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _price_record(entry)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
