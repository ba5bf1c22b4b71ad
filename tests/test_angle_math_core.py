from __future__ import annotations

import math

import pytest

from angle_match.angle_math import (
    Category,
    angle_category,
    angular_distance,
    clamp_to_category,
    direction_vector,
    normalize_angle,
    orientation,
)


def test_normalize_wraps_into_range() -> None:
    assert normalize_angle(370.0) == pytest.approx(10.0)
    assert normalize_angle(-10.0) == pytest.approx(350.0)
    assert normalize_angle(190.0, 180.0) == pytest.approx(10.0)
    assert normalize_angle(-1e-17, 180.0) < 180.0


def test_category_uses_line_orientation() -> None:
    assert angle_category(30.0) is Category.ACUTE
    assert angle_category(90.0) is Category.RIGHT
    assert angle_category(270.0) is Category.RIGHT
    assert angle_category(120.0) is Category.OBTUSE
    # 200 deg is the same line as 20 deg.
    assert angle_category(200.0) is Category.ACUTE
    assert angle_category(0.0) is Category.ACUTE
    assert orientation(180.0) == pytest.approx(0.0)


def test_clamp_to_category_keeps_half_turn_offset() -> None:
    assert clamp_to_category(95.0, Category.ACUTE) == pytest.approx(80.0)
    assert clamp_to_category(95.0, Category.OBTUSE) == pytest.approx(100.0)
    assert clamp_to_category(275.0, Category.ACUTE) == pytest.approx(260.0)
    assert clamp_to_category(40.0, Category.ACUTE) == pytest.approx(40.0)


def test_angular_distance_is_shortest_way_round() -> None:
    assert angular_distance(10.0, 350.0) == pytest.approx(20.0)
    assert angular_distance(5.0, 175.0, 180.0) == pytest.approx(10.0)
    assert angular_distance(30.0, 30.0) == pytest.approx(0.0)


def test_direction_vector_points_up_for_ninety_degrees() -> None:
    dx, dy = direction_vector(90.0)
    assert dx == pytest.approx(0.0, abs=1e-12)
    assert dy == pytest.approx(-1.0)
    dx, dy = direction_vector(0.0)
    assert (dx, dy) == pytest.approx((1.0, 0.0))
    assert math.hypot(*direction_vector(33.0)) == pytest.approx(1.0)
