from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import typer

from cli.client import ApiClient, load_payload
from cli.render import render_reading
from settings import get_settings


@dataclass
class CLIState:
    base_url: str
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor telemetry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _axes(values: Optional[Tuple[float, float, float]]) -> Optional[Dict[str, float]]:
    if not values:
        return None
    x, y, z = values
    return {"x": x, "y": y, "z": z}


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str = typer.Option(
        "http://localhost:3000",
        "--base-url",
        "-b",
        envvar="API_BASE_URL",
        help="Service base URL.",
    ),
    timeout: float = typer.Option(
        10.0,
        "--timeout",
        envvar="CLI_REQUEST_TIMEOUT",
        min=0.1,
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    base_url = base_url.rstrip("/")
    client = ApiClient(base_url, timeout)
    ctx.obj = CLIState(base_url=base_url, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON file holding the reading; explicit options override its fields.",
    ),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Degrees Celsius."),
    humidity: Optional[float] = typer.Option(None, "--humidity", help="Relative humidity in percent."),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude in degrees."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude in degrees."),
    accel: Optional[Tuple[float, float, float]] = typer.Option(
        None, "--accel", help="Raw accelerometer counts X Y Z."
    ),
    gyro: Optional[Tuple[float, float, float]] = typer.Option(
        None, "--gyro", help="Raw gyroscope counts X Y Z."
    ),
) -> None:
    """Send one reading to the service and show the enriched result."""
    state = _get_state(ctx)
    payload: Dict[str, Any] = load_payload(file) if file is not None else {}
    overrides = {
        "temperature": temperature,
        "humidity": humidity,
        "lat": lat,
        "lon": lon,
        "accel": _axes(accel),
        "gyro": _axes(gyro),
    }
    payload.update({key: value for key, value in overrides.items() if value is not None})
    if not payload:
        raise typer.BadParameter("Provide --file or at least one sensor option.")

    typer.echo(f"Sending reading to {state.base_url} ...")
    reading = state.client.send_reading(payload)
    typer.secho("Reading accepted.", fg=typer.colors.GREEN)
    typer.echo()
    render_reading(reading)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Fetch the most recent enriched reading."""
    state = _get_state(ctx)
    render_reading(state.client.get_latest())


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: float = typer.Option(
        2.0,
        "--interval",
        envvar="CLI_WATCH_INTERVAL",
        min=0.0,
        help="Seconds between polls.",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many polls; runs until interrupted when omitted.",
    ),
) -> None:
    """Poll the latest reading repeatedly."""
    state = _get_state(ctx)
    polls = 0
    while True:
        render_reading(state.client.get_latest())
        polls += 1
        if count is not None and polls >= count:
            return
        typer.echo()
        time.sleep(interval)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to SERVER_HOST)."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (defaults to SERVER_PORT)."),
) -> None:
    """Run the HTTP service with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=host or settings.server_host,
        port=port or settings.server_port,
        log_config=None,
    )
