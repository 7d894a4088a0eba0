from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

_UNIT_SUFFIX = {"speed": "m/s", "acceleration": "m/s^2"}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {'n/a' if value is None else value}")


def _axis(value: Optional[Dict[str, Any]]) -> Optional[str]:
    if not value:
        return None
    return f"x={value.get('x')} y={value.get('y')} z={value.get('z')}"


def _intensity(payload: Dict[str, Any]) -> Optional[str]:
    intensity = payload.get("intensity")
    if intensity is None:
        return None
    suffix = _UNIT_SUFFIX.get(payload.get("intensity_unit") or "", "")
    return f"{intensity:.2f} {suffix}".strip()


def render_reading(payload: Optional[Dict[str, Any]]) -> None:
    if payload is None:
        typer.echo("No readings yet.")
        return

    echo_heading("Reading")
    echo_key_values(
        [
            ("timestamp_ms", payload.get("timestamp_ms")),
            ("temperature", payload.get("temperature")),
            ("humidity", payload.get("humidity")),
            ("lat", payload.get("lat")),
            ("lon", payload.get("lon")),
            ("accel", _axis(payload.get("accel"))),
            ("gyro", _axis(payload.get("gyro"))),
        ]
    )

    typer.echo()
    echo_heading("Motion")
    echo_key_values(
        [
            ("intensity", _intensity(payload)),
            ("pitch_deg", payload.get("pitch_deg")),
            ("roll_deg", payload.get("roll_deg")),
        ]
    )

    alerts = payload.get("alerts") or []
    typer.echo()
    echo_heading("Alerts")
    if alerts:
        for alert in alerts:
            typer.secho(f"  - {alert}", fg=typer.colors.RED)
    else:
        typer.echo("No alerts.")
