"""Parsing of pump meter readings pasted from a spreadsheet."""

from __future__ import annotations

import logging
import re
from typing import Optional

from models.records import FuelProduct, ParseResult, PumpRow, SkippedLine

logger = logging.getLogger(__name__)

_HEADER_MARKERS = ("PRODUCT", "PUMP")
_COLUMN_COUNT = 6
_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

REASON_UNRECOGNIZED_PRODUCT = "unrecognized product"
REASON_INCOMPLETE_PETROL_ROW = "incomplete petrol row"
REASON_MISSING_PUMP = "missing pump number"
REASON_NEGATIVE_READING = "negative meter reading"


def _parse_int(value: str) -> int:
    match = _INT_PREFIX.match(value)
    return int(match.group()) if match else 0


def _parse_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return 0.0
    parsed = float(match.group())
    # -0.0 and 0.0 both coerce to a plain zero
    return parsed or 0.0


def _split_columns(line: str) -> Optional[list[str]]:
    """Split a data line into raw columns, or ``None`` when it cannot be aligned."""
    if "\t" in line:
        return line.split("\t")

    stripped = line.strip()
    parts = stripped.split()
    if stripped.startswith(FuelProduct.petrol.value):
        if len(parts) == _COLUMN_COUNT - 1:
            # petrol rows share the preceding diesel row's pump column
            return [parts[0], "", *parts[1:]]
        if len(parts) < _COLUMN_COUNT:
            return None
    return parts


def _leading_line_breaks(text: str) -> int:
    """Number of line breaks removed from the front when the document is stripped."""
    leading = text[: len(text) - len(text.lstrip())]
    return len((leading + "x").splitlines()) - 1


def _resolve_product(label: str) -> Optional[FuelProduct]:
    try:
        return FuelProduct(label)
    except ValueError:
        return None


class PasteParser:
    """Turns ragged tab or whitespace delimited text into pump rows.

    Malformed lines are dropped rather than raised. With ``strict`` enabled the
    skipped lines are logged at WARNING so they can be surfaced to the operator;
    the retained rows are the same either way.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def parse(self, text: str) -> ParseResult:
        if not isinstance(text, str):
            raise TypeError(f"Pasted data must be a string, got {type(text).__name__}.")

        result = ParseResult()
        current_pump = 0
        stripped = text.strip()
        first_line = _leading_line_breaks(text) + 1

        for line_number, line in enumerate(stripped.splitlines(), start=first_line):
            if any(marker in line for marker in _HEADER_MARKERS) or not line.strip():
                continue

            columns = _split_columns(line)
            if columns is None:
                self._skip(result, line_number, REASON_INCOMPLETE_PETROL_ROW)
                continue

            columns = [column.strip() for column in columns]
            columns.extend([""] * (_COLUMN_COUNT - len(columns)))

            label = columns[0]
            pump = _parse_int(columns[1])
            nozzle = _parse_int(columns[2])
            opening = _parse_float(columns[3])
            closing = _parse_float(columns[4])
            total = _parse_float(columns[5])

            product = _resolve_product(label)
            if product is FuelProduct.diesel and pump > 0:
                current_pump = pump
            elif product is FuelProduct.petrol and (pump == 0 or columns[1] == ""):
                pump = current_pump

            if product is None:
                self._skip(result, line_number, REASON_UNRECOGNIZED_PRODUCT, product=label)
                continue
            if pump <= 0:
                self._skip(result, line_number, REASON_MISSING_PUMP, product=label)
                continue
            if opening < 0 or closing < 0:
                self._skip(
                    result, line_number, REASON_NEGATIVE_READING, product=label, pump=pump
                )
                continue

            result.rows.append(
                PumpRow(
                    product=product,
                    pump=pump,
                    nozzle=nozzle,
                    opening=opening,
                    closing=closing,
                    total=total,
                )
            )

        logger.debug(
            "Parsed pasted pump readings",
            extra={"row_count": len(result.rows), "skipped_count": len(result.skipped)},
        )
        return result

    def _skip(
        self,
        result: ParseResult,
        line_number: int,
        reason: str,
        product: Optional[str] = None,
        pump: Optional[int] = None,
    ) -> None:
        result.skipped.append(SkippedLine(line_number=line_number, reason=reason))
        logger.log(
            logging.WARNING if self.strict else logging.DEBUG,
            "Skipping line %s: %s",
            line_number,
            reason,
            extra={
                "line_number": line_number,
                "reason": reason,
                "product": product,
                "pump": pump,
            },
        )


def parse_pasted_data(text: str) -> list[PumpRow]:
    """Lenient entry point returning only the retained rows."""
    return PasteParser().parse(text).rows
