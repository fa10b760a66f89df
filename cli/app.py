from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_prices, render_rows, render_sheet


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for parsing pump readings and reconciling shift sales.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("parse")
def parse_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Text file with pasted readings."
    ),
    strict: bool = typer.Option(False, "--strict", help="Report skipped lines."),
) -> None:
    """Parse pasted pump readings and list the recognised rows."""
    state = _get_state(ctx)
    render_rows(state.client.parse_file(file, strict=strict))


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Text file with pasted readings."
    ),
    shift: Optional[int] = typer.Option(None, "--shift", "-s", min=1, help="Shift number."),
    ms_price: Optional[float] = typer.Option(None, "--ms", help="MS price per litre."),
    hsd_price: Optional[float] = typer.Option(None, "--hsd", help="HSD price per litre."),
    strict: bool = typer.Option(False, "--strict", help="Report skipped lines."),
) -> None:
    """Reconcile pasted readings into dispenser sale figures."""
    state = _get_state(ctx)
    if (ms_price is None) != (hsd_price is None):
        raise typer.BadParameter("Provide both --ms and --hsd, or neither.")
    prices = None
    if ms_price is not None and hsd_price is not None:
        prices = {"MS": ms_price, "HSD": hsd_price}
    payload = state.client.convert_file(file, shift_number=shift, prices=prices, strict=strict)
    render_sheet(payload)


@app.command("prices")
def prices_command(ctx: typer.Context) -> None:
    """Show current fuel prices and their history."""
    state = _get_state(ctx)
    render_prices(state.client.get_prices())


@app.command("set-price")
def set_price_command(
    ctx: typer.Context,
    fuel_type: str = typer.Argument(..., help="MS or HSD."),
    price: float = typer.Argument(..., help="Price per litre."),
    effective_date: Optional[datetime] = typer.Option(
        None, "--effective-date", formats=["%Y-%m-%d"], help="Date the price applies from."
    ),
) -> None:
    """Post a new fuel price."""
    state = _get_state(ctx)
    entry = state.client.set_price(
        fuel_type.upper(),
        price,
        effective_date.date() if effective_date is not None else None,
    )
    typer.secho(
        f"Recorded {entry.get('fuel_type')} at {entry.get('price')} "
        f"effective {entry.get('effective_date')}",
        fg=typer.colors.GREEN,
    )
