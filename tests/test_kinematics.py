"""Unit tests for the stateless kinematics helpers."""

from __future__ import annotations

import math

import pytest

from services.kinematics import (
    STANDARD_GRAVITY_MS2,
    accel_to_orientation,
    great_circle_distance,
    linear_accel_magnitude,
)


@pytest.mark.parametrize(
    ("lat", "lon"),
    [(0.0, 0.0), (51.5007, -0.1246), (-33.8568, 151.2153), (90.0, 0.0), (-90.0, 180.0)],
)
def test_distance_between_identical_points_is_zero(lat: float, lon: float) -> None:
    assert great_circle_distance(lat, lon, lat, lon) == 0.0


def test_distance_of_one_degree_longitude_at_equator() -> None:
    distance = great_circle_distance(0, 0, 0, 1)

    assert distance == pytest.approx(111_195, abs=50)


def test_distance_between_antipodes_is_half_circumference() -> None:
    distance = great_circle_distance(0, 0, 0, 180)

    assert math.isfinite(distance)
    assert distance == pytest.approx(math.pi * 6_371_000, rel=1e-9)


def test_distance_is_symmetric() -> None:
    forward = great_circle_distance(48.8566, 2.3522, 40.7128, -74.0060)
    backward = great_circle_distance(40.7128, -74.0060, 48.8566, 2.3522)

    assert forward == pytest.approx(backward)


def test_orientation_of_flat_device() -> None:
    orientation = accel_to_orientation(0, 0, 16384)

    assert orientation.g_z == pytest.approx(1.0)
    assert orientation.pitch_deg == pytest.approx(0.0)
    assert orientation.roll_deg == pytest.approx(0.0)


def test_orientation_of_device_standing_on_edge() -> None:
    orientation = accel_to_orientation(16384, 0, 0)

    assert orientation.pitch_deg == pytest.approx(90.0)
    assert orientation.roll_deg == pytest.approx(0.0)


def test_roll_sign_follows_negated_y_axis() -> None:
    orientation = accel_to_orientation(0, 16384, 16384)

    assert orientation.roll_deg == pytest.approx(-45.0)


def test_orientation_of_zero_vector_uses_floor() -> None:
    orientation = accel_to_orientation(0, 0, 0)

    assert orientation.pitch_deg is not None and math.isfinite(orientation.pitch_deg)
    assert orientation.roll_deg is not None and math.isfinite(orientation.roll_deg)
    assert orientation.pitch_deg == 0.0
    assert orientation.roll_deg == 0.0


def test_orientation_honours_custom_scale() -> None:
    orientation = accel_to_orientation(0, 0, 8192, scale=8192)

    assert orientation.g_z == pytest.approx(1.0)


def test_linear_accel_at_rest_is_zero() -> None:
    assert linear_accel_magnitude(0.0, 0.0, 1.0) == 0.0


def test_linear_accel_is_clamped_below_one_g() -> None:
    assert linear_accel_magnitude(0.0, 0.0, 0.2) == 0.0


def test_linear_accel_scales_excess_g_to_ms2() -> None:
    assert linear_accel_magnitude(0.0, 0.0, 2.0) == pytest.approx(STANDARD_GRAVITY_MS2)
