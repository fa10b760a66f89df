from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the shift readings service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def parse_file(self, path: Path, strict: bool = False) -> Dict[str, Any]:
        return self._post("/readings/parse", {"text": _read_text(path), "strict": strict})

    def convert_file(
        self,
        path: Path,
        shift_number: Optional[int] = None,
        prices: Optional[Dict[str, float]] = None,
        strict: bool = False,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"text": _read_text(path), "strict": strict}
        if shift_number is not None:
            body["shift_number"] = shift_number
        if prices is not None:
            body["prices"] = prices
        return self._post("/readings/convert", body)

    def get_prices(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/fuel-prices")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def set_price(
        self, fuel_type: str, price: float, effective_date: Optional[date] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"fuel_type": fuel_type, "price": price}
        if effective_date is not None:
            body["effective_date"] = effective_date.isoformat()
        return self._post("/fuel-prices", body)

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post(path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _read_text(path: Path) -> str:
    if not path.exists():
        raise typer.BadParameter(f"File {path} does not exist.")
    if not path.is_file():
        raise typer.BadParameter(f"Path {path} is not a file.")
    return path.read_text(encoding="utf-8")
