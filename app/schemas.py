"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class IntensityUnit(str, Enum):
    """Which quantity ``intensity`` measures."""

    speed = "speed"  # m/s from consecutive GPS fixes
    acceleration = "acceleration"  # m/s^2 net of gravity


class AxisReading(BaseModel):
    """Three-axis sensor value as reported by the device."""

    x: float
    y: float
    z: float


class EnrichedReading(BaseModel):
    """A raw sample plus derived movement, orientation and alerts."""

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    accel: Optional[AxisReading] = None
    gyro: Optional[AxisReading] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    timestamp_ms: int = Field(..., ge=0, description="Server receive time in epoch milliseconds.")
    intensity: Optional[float] = Field(
        default=None, description="Ground speed or net linear acceleration."
    )
    intensity_unit: Optional[IntensityUnit] = None
    pitch_deg: Optional[float] = None
    roll_deg: Optional[float] = None
    alerts: List[str] = Field(default_factory=list)


class IngestResponse(BaseModel):
    """Acknowledgement returned after a reading is accepted."""

    ok: bool = True
    data: EnrichedReading


class LatestReadingResponse(BaseModel):
    """Most recent enriched reading, or ``null`` before the first ingest."""

    ok: bool = True
    data: Optional[EnrichedReading] = None
