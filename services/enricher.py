"""Stateful enrichment of raw device samples into published readings."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Any, Callable, List, Optional, Sequence

from app.schemas import AxisReading, EnrichedReading, IntensityUnit
from models.readings import RawSample, Vector3
from services.kinematics import (
    Orientation,
    accel_to_orientation,
    great_circle_distance,
    linear_accel_magnitude,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

_SCALAR_FIELDS = ("temperature", "humidity", "lat", "lon")
_VECTOR_FIELDS = ("accel", "gyro")

MIN_ELAPSED_MS = 1
HIGH_SPEED_MS = 20.0
TILT_MAX_ABS_Z_COUNTS = 12000
SHOCK_MIN_TOTAL_COUNTS = 15000


class InvalidPayload(ValueError):
    """Raised when an ingest body is absent or is not a JSON object."""


def wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _as_vector(value: Any) -> Optional[Vector3]:
    if not isinstance(value, Mapping):
        return None
    axes = [_as_number(value.get(axis)) for axis in ("x", "y", "z")]
    if any(axis is None for axis in axes):
        return None
    return Vector3(*axes)


def coerce_sample(payload: Any, timestamp_ms: int) -> RawSample:
    """Build a ``RawSample``, storing any malformed optional field as absent."""
    if not isinstance(payload, Mapping):
        raise InvalidPayload("Invalid payload")

    values: dict[str, Any] = {}
    for name in _SCALAR_FIELDS:
        values[name] = _as_number(payload.get(name))
    for name in _VECTOR_FIELDS:
        values[name] = _as_vector(payload.get(name))

    for name, value in values.items():
        if value is None and payload.get(name) is not None:
            logger.debug("Ignoring malformed field", extra={"field": name})

    return RawSample(timestamp_ms=timestamp_ms, **values)


@dataclass(frozen=True)
class Intensity:
    value: Optional[float] = None
    unit: Optional[IntensityUnit] = None


def gps_arm_applies(current: RawSample, previous: Optional[RawSample]) -> bool:
    return previous is not None and previous.has_gps_fix and current.has_gps_fix


def accel_arm_applies(current: RawSample) -> bool:
    return current.accel is not None


def ground_speed(current: RawSample, previous: RawSample) -> float:
    """Meters per second between two GPS fixes, with elapsed time floored at 1 ms."""
    elapsed_ms = max(MIN_ELAPSED_MS, current.timestamp_ms - previous.timestamp_ms)
    distance = great_circle_distance(previous.lat, previous.lon, current.lat, current.lon)
    return distance / (elapsed_ms / 1000)


def orient(accel: Vector3) -> Orientation:
    return accel_to_orientation(accel.x, accel.y, accel.z)


def derive_intensity(
    current: RawSample,
    previous: Optional[RawSample],
    orientation: Optional[Orientation] = None,
) -> Intensity:
    """Pick GPS ground speed when two fixes exist, else net linear acceleration.

    ``orientation`` is the already-derived attitude of ``current.accel``.
    """
    if gps_arm_applies(current, previous):
        return Intensity(ground_speed(current, previous), IntensityUnit.speed)
    if accel_arm_applies(current):
        if orientation is None:
            orientation = orient(current.accel)
        magnitude = linear_accel_magnitude(orientation.g_x, orientation.g_y, orientation.g_z)
        return Intensity(magnitude, IntensityUnit.acceleration)
    return Intensity()


@dataclass(frozen=True)
class AlertContext:
    sample: RawSample
    intensity: Intensity


Predicate = Callable[[AlertContext], bool]


@dataclass(frozen=True)
class AlertRule:
    message: str
    predicate: Predicate


@dataclass(frozen=True)
class AlertCategory:
    """Rules evaluated in order; ``exclusive`` stops at the first match."""

    name: str
    rules: Sequence[AlertRule]
    exclusive: bool = True


def _field_above(name: str, threshold: float) -> Predicate:
    def predicate(context: AlertContext) -> bool:
        value = getattr(context.sample, name)
        return value is not None and value > threshold

    return predicate


def _field_below(name: str, threshold: float) -> Predicate:
    def predicate(context: AlertContext) -> bool:
        value = getattr(context.sample, name)
        return value is not None and value < threshold

    return predicate


def _high_speed(context: AlertContext) -> bool:
    intensity = context.intensity
    return (
        intensity.unit is IntensityUnit.speed
        and intensity.value is not None
        and intensity.value > HIGH_SPEED_MS
    )


def _tilted(context: AlertContext) -> bool:
    accel = context.sample.accel
    return accel is not None and abs(accel.z) < TILT_MAX_ABS_Z_COUNTS


def _shock(context: AlertContext) -> bool:
    accel = context.sample.accel
    if accel is None:
        return False
    total = math.hypot(abs(accel.x), abs(accel.y), abs(accel.z))
    return total > SHOCK_MIN_TOTAL_COUNTS


ALERT_CATEGORIES: tuple[AlertCategory, ...] = (
    AlertCategory(
        "temperature",
        (
            AlertRule("extremely high temperature", _field_above("temperature", 50)),
            AlertRule("high temperature", _field_above("temperature", 40)),
            AlertRule("below freezing", _field_below("temperature", 0)),
        ),
    ),
    AlertCategory(
        "humidity",
        (
            AlertRule("critically high humidity", _field_above("humidity", 90)),
            AlertRule("very low humidity", _field_below("humidity", 20)),
        ),
    ),
    AlertCategory(
        "movement",
        (AlertRule("sudden high movement speed", _high_speed),),
    ),
    AlertCategory(
        "impact",
        (
            AlertRule("device might be tilted or falling", _tilted),
            AlertRule("sudden impact/shock detected", _shock),
        ),
        exclusive=False,
    ),
)


def derive_alerts(
    context: AlertContext,
    categories: Sequence[AlertCategory] = ALERT_CATEGORIES,
) -> List[str]:
    alerts: List[str] = []
    for category in categories:
        for rule in category.rules:
            if not rule.predicate(context):
                continue
            alerts.append(rule.message)
            if category.exclusive:
                break
    return alerts


def _axis(vector: Optional[Vector3]) -> Optional[AxisReading]:
    if vector is None:
        return None
    return AxisReading(x=vector.x, y=vector.y, z=vector.z)


def enrich_sample(
    sample: RawSample,
    previous: Optional[RawSample],
    categories: Sequence[AlertCategory] = ALERT_CATEGORIES,
) -> EnrichedReading:
    """Derive intensity, orientation and alerts for ``sample``. Pure."""
    orientation = orient(sample.accel) if sample.accel is not None else None
    intensity = derive_intensity(sample, previous, orientation)

    pitch_deg = orientation.pitch_deg if orientation is not None else None
    roll_deg = orientation.roll_deg if orientation is not None else None

    alerts = derive_alerts(AlertContext(sample=sample, intensity=intensity), categories)

    return EnrichedReading(
        temperature=sample.temperature,
        humidity=sample.humidity,
        accel=_axis(sample.accel),
        gyro=_axis(sample.gyro),
        lat=sample.lat,
        lon=sample.lon,
        timestamp_ms=sample.timestamp_ms,
        intensity=intensity.value,
        intensity_unit=intensity.unit,
        pitch_deg=pitch_deg,
        roll_deg=roll_deg,
        alerts=alerts,
    )


class ReadingEnricher:
    """Owns the previous raw sample and the latest published reading."""

    def __init__(
        self,
        clock: Clock = wall_clock_ms,
        categories: Sequence[AlertCategory] = ALERT_CATEGORIES,
    ) -> None:
        self._clock = clock
        self._categories = tuple(categories)
        self._previous: Optional[RawSample] = None
        self._latest: Optional[EnrichedReading] = None
        self._lock = Lock()

    def ingest(self, payload: Any) -> EnrichedReading:
        """Enrich one payload and publish it; raises ``InvalidPayload`` for non-objects."""
        if not isinstance(payload, Mapping):
            logger.warning(
                "Rejecting ingest payload",
                extra={"reason": f"expected object, got {type(payload).__name__}"},
            )
            raise InvalidPayload("Invalid payload")

        with self._lock:
            sample = coerce_sample(payload, self._clock())
            reading = enrich_sample(sample, self._previous, self._categories)
            self._latest = reading
            self._previous = sample
            snapshot = reading.model_copy(deep=True)

        logger.debug(
            "Reading enriched",
            extra={
                "timestamp_ms": reading.timestamp_ms,
                "intensity": reading.intensity,
                "intensity_unit": reading.intensity_unit.value if reading.intensity_unit else None,
                "alert_count": len(reading.alerts),
            },
        )
        if reading.alerts:
            logger.info(
                "Reading raised alerts: %s",
                ", ".join(reading.alerts),
                extra={"timestamp_ms": reading.timestamp_ms, "alert_count": len(reading.alerts)},
            )
        return snapshot

    def get_latest(self) -> Optional[EnrichedReading]:
        with self._lock:
            if self._latest is None:
                return None
            return self._latest.model_copy(deep=True)

    def get_previous(self) -> Optional[RawSample]:
        with self._lock:
            return self._previous

    def reset(self) -> None:
        """Drop both retained samples, e.g. during application shutdown."""
        with self._lock:
            self._previous = None
            self._latest = None


@lru_cache
def build_default_enricher() -> ReadingEnricher:
    """Factory for the process-wide enricher owned by the application lifespan."""
    return ReadingEnricher(clock=wall_clock_ms)
