"""Stateless motion math: geodesic distance and accelerometer orientation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_M = 6_371_000.0
STANDARD_GRAVITY_MS2 = 9.80665
# LSB per g for a +/-2g accelerometer range.
ACCEL_COUNTS_PER_G = 16384.0
_ZERO_FLOOR = 1e-9


@dataclass(frozen=True, slots=True)
class Orientation:
    """Gravity-relative attitude derived from one accelerometer sample."""

    pitch_deg: Optional[float]
    roll_deg: Optional[float]
    g_x: float
    g_y: float
    g_z: float


def great_circle_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def _finite_degrees(radians: float) -> Optional[float]:
    degrees = math.degrees(radians)
    return degrees if math.isfinite(degrees) else None


def accel_to_orientation(
    ax: float,
    ay: float,
    az: float,
    scale: float = ACCEL_COUNTS_PER_G,
) -> Orientation:
    """Convert raw accelerometer counts into pitch/roll and g-unit components.

    A zero pitch denominator or zero ``g_z`` is replaced by ``1e-9`` so the
    angle stays defined; an angle that still comes out non-finite is ``None``.
    """
    g_x = ax / scale
    g_y = ay / scale
    g_z = az / scale

    pitch_denominator = math.hypot(g_y, g_z) or _ZERO_FLOOR
    pitch = math.atan2(g_x, pitch_denominator)
    roll = math.atan2(-g_y, g_z or _ZERO_FLOOR)

    return Orientation(
        pitch_deg=_finite_degrees(pitch),
        roll_deg=_finite_degrees(roll),
        g_x=g_x,
        g_y=g_y,
        g_z=g_z,
    )


def linear_accel_magnitude(g_x: float, g_y: float, g_z: float) -> float:
    """Acceleration net of gravity in m/s^2, never negative."""
    magnitude_g = math.hypot(g_x, g_y, g_z)
    return max(0.0, magnitude_g - 1.0) * STANDARD_GRAVITY_MS2
