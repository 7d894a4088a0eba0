from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app


_ENRICHED: Dict[str, Any] = {
    "temperature": 45.0,
    "humidity": None,
    "accel": {"x": 20000.0, "y": 0.0, "z": 0.0},
    "gyro": None,
    "lat": None,
    "lon": None,
    "timestamp_ms": 1_700_000_000_000,
    "intensity": 2.1641,
    "intensity_unit": "acceleration",
    "pitch_deg": 90.0,
    "roll_deg": 0.0,
    "alerts": [
        "high temperature",
        "device might be tilted or falling",
        "sudden impact/shock detected",
    ],
}


class StubClient:
    def __init__(self, latest: Optional[Dict[str, Any]] = None) -> None:
        self.base_url: Optional[str] = None
        self.timeout: Optional[float] = None
        self.latest = latest
        self.sent: List[Dict[str, Any]] = []
        self.latest_calls = 0
        self.closed = False

    def send_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.sent.append(payload)
        return dict(_ENRICHED)

    def get_latest(self) -> Optional[Dict[str, Any]]:
        self.latest_calls += 1
        return self.latest

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(base_url: str, timeout: float) -> StubClient:
        stub.base_url = base_url
        stub.timeout = timeout
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_send_from_options(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(
        app,
        ["send", "--temperature", "45", "--accel", "20000", "0", "0"],
    )

    assert result.exit_code == 0, result.output
    assert stub.sent == [{"temperature": 45.0, "accel": {"x": 20000.0, "y": 0.0, "z": 0.0}}]
    assert "Reading accepted" in result.stdout
    assert "sudden impact/shock detected" in result.stdout
    assert "2.16 m/s^2" in result.stdout
    assert stub.closed is True


def test_send_from_file_with_override(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)
    payload_path = tmp_path / "reading.json"
    payload_path.write_text(json.dumps({"lat": 1.5, "lon": 2.5, "humidity": 30}))

    result = runner.invoke(app, ["send", "--file", str(payload_path), "--humidity", "95"])

    assert result.exit_code == 0, result.output
    assert stub.sent == [{"lat": 1.5, "lon": 2.5, "humidity": 95.0}]


def test_send_without_fields_fails(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["send"])

    assert result.exit_code != 0
    assert stub.sent == []


def test_latest_without_readings(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["latest"])

    assert result.exit_code == 0
    assert "No readings yet." in result.stdout


def test_latest_renders_reading(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(latest=dict(_ENRICHED))
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--base-url", "http://sensor.local:3000/", "latest"])

    assert result.exit_code == 0
    assert stub.base_url == "http://sensor.local:3000"
    assert "temperature: 45.0" in result.stdout
    assert "accel: x=20000.0 y=0.0 z=0.0" in result.stdout
    assert "high temperature" in result.stdout


def test_watch_polls_requested_number_of_times(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(latest=dict(_ENRICHED))
    _install_stub(monkeypatch, stub)
    sleeps: List[float] = []
    monkeypatch.setattr("cli.app.time.sleep", sleeps.append)

    result = runner.invoke(app, ["watch", "--count", "3", "--interval", "0.25"])

    assert result.exit_code == 0, result.output
    assert stub.latest_calls == 3
    assert sleeps == [0.25, 0.25]


def test_serve_runs_uvicorn_with_settings(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)
    calls: List[Dict[str, Any]] = []

    def fake_run(target: str, **kwargs: Any) -> None:
        calls.append({"target": target, **kwargs})

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = runner.invoke(app, ["serve", "--port", "8123"])

    assert result.exit_code == 0, result.output
    assert calls and calls[0]["target"] == "app.main:app"
    assert calls[0]["port"] == 8123


def test_environment_supplies_connection_and_watch_defaults(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(latest=None)
    _install_stub(monkeypatch, stub)
    sleeps: List[float] = []
    monkeypatch.setattr("cli.app.time.sleep", sleeps.append)

    result = runner.invoke(
        app,
        ["watch", "--count", "2"],
        env={
            "API_BASE_URL": "http://example.test/",
            "CLI_REQUEST_TIMEOUT": "3.5",
            "CLI_WATCH_INTERVAL": "5",
        },
    )

    assert result.exit_code == 0, result.output
    assert stub.base_url == "http://example.test"
    assert stub.timeout == 3.5
    assert sleeps == [5.0]


def test_invalid_timeout_from_environment_is_rejected(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["latest"], env={"CLI_REQUEST_TIMEOUT": "not-a-number"})

    assert result.exit_code == 2
    assert stub.latest_calls == 0


def test_send_rejects_file_without_json_object(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient()
    _install_stub(monkeypatch, stub)
    payload_path = tmp_path / "reading.json"
    payload_path.write_text("[1, 2, 3]")

    result = runner.invoke(app, ["send", "--file", str(payload_path)])

    assert result.exit_code != 0
    assert stub.sent == []
