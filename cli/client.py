from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer


def load_payload(path: Path) -> Dict[str, Any]:
    """Read a reading from a JSON file holding a single object."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise typer.BadParameter(f"File {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter(f"File {path} must contain a JSON object.")
    return payload


class ApiClient:
    """Minimal HTTP client for the telemetry service."""

    def __init__(self, base_url: str, timeout: float) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def send_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post("/api/readings", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        data = response.json().get("data")
        if not isinstance(data, dict):
            raise typer.BadParameter("Unexpected response payload when sending reading.")
        return data

    def get_latest(self) -> Optional[Dict[str, Any]]:
        try:
            response = self._client.get("/api/latest")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json().get("data")

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            detail = exc.response.json().get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        typer.secho(
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
