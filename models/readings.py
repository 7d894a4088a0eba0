"""Domain models for raw device telemetry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Vector3:
    """A three-axis sensor value in raw device counts."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class RawSample:
    """One telemetry payload after coercion, before derived fields are attached."""

    timestamp_ms: int
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    accel: Optional[Vector3] = None
    gyro: Optional[Vector3] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_gps_fix(self) -> bool:
        return self.lat is not None and self.lon is not None
