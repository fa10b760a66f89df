from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _litres(value: Any) -> str:
    return f"{float(value or 0):.2f}L"


def _money(value: Any) -> str:
    return f"{float(value or 0):,.2f}"


def render_skipped(payload: Dict[str, Any]) -> None:
    skipped = payload.get("skipped") or []
    if not skipped:
        return
    typer.echo()
    echo_heading("Skipped Lines")
    for line in skipped:
        typer.echo(f"  - line {line.get('line_number')}: {line.get('reason')}")


def render_rows(payload: Dict[str, Any]) -> None:
    echo_heading("Parsed Rows")
    rows = payload.get("rows") or []
    if not rows:
        typer.echo("No pump readings recognised.")
    for row in rows:
        typer.echo(
            f"  - {row.get('product')} pump {row.get('pump')} nozzle {row.get('nozzle')}: "
            f"{row.get('opening')} -> {row.get('closing')} ({_litres(row.get('total'))})"
        )
    render_skipped(payload)


def render_sheet(payload: Dict[str, Any]) -> None:
    echo_heading("Dispenser Readings")
    echo_key_values(
        [
            ("shift_number", payload.get("shift_number")),
            ("prices", payload.get("prices")),
        ]
    )
    dispensers = payload.get("dispensers") or []
    if not dispensers:
        typer.echo("No dispensers available.")
    for dispenser in dispensers:
        typer.echo(f"{dispenser.get('dispenser_name')}:")
        for key in ("hsd_pump", "ms_pump"):
            pump = dispenser.get(key) or {}
            typer.echo(
                f"  - {pump.get('pump_name')}: dispensed {_litres(pump.get('dispensed_qty'))}"
                f", test {_litres(pump.get('pump_test_qty'))}"
                f", own use {_litres(pump.get('own_use_qty'))}"
                f", net {_litres(pump.get('net_dispensed_qty'))}"
                f" @ {_money(pump.get('rate_per_litre'))} = {_money(pump.get('amount'))}"
            )

    totals = payload.get("totals") or {}
    typer.echo()
    echo_heading("Totals")
    echo_key_values(
        [
            ("total_dispensed", _litres(totals.get("total_dispensed"))),
            ("total_pump_test", _litres(totals.get("total_pump_test"))),
            ("total_own_use", _litres(totals.get("total_own_use"))),
            ("total_net_dispensed", _litres(totals.get("total_net_dispensed"))),
            ("total_amount", _money(totals.get("total_amount"))),
        ]
    )
    render_skipped(payload)


def render_prices(payload: Dict[str, Any]) -> None:
    echo_heading("Current Fuel Prices")
    current = payload.get("current") or {}
    echo_key_values([(fuel, _money(price)) for fuel, price in current.items()])

    history = payload.get("history") or []
    if history:
        typer.echo()
        echo_heading("History")
        for entry in history:
            typer.echo(
                f"  - {entry.get('effective_date')} {entry.get('fuel_type')}: "
                f"{_money(entry.get('price'))}"
            )
