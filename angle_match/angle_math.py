from __future__ import annotations

import math
from enum import StrEnum

HALF_TURN_DEG = 180.0
FULL_TURN_DEG = 360.0
ANGLE_EPSILON = 1e-9


class Category(StrEnum):
    ACUTE = "acute"
    RIGHT = "right"
    OBTUSE = "obtuse"


# Closed orientation bands (degrees, mod 180) that decoys are clamped into.
# Obtuse stops at 179: 180 folds back onto 0, which is acute.
CATEGORY_BANDS: dict[Category, tuple[float, float]] = {
    Category.ACUTE: (0.0, 80.0),
    Category.RIGHT: (80.0, 100.0),
    Category.OBTUSE: (100.0, 179.0),
}


def normalize_angle(angle: float, range_deg: float = FULL_TURN_DEG) -> float:
    """Wrap ``angle`` into ``[0, range_deg)``."""

    value = float(angle) % float(range_deg)
    # -1e-17 % 180 == 180.0 in floating point.
    if value >= range_deg:
        value -= range_deg
    return value


def orientation(angle: float) -> float:
    """Line orientation: a line at ``a`` and ``a + 180`` looks identical."""

    return normalize_angle(angle, HALF_TURN_DEG)


def angle_category(angle: float) -> Category:
    o = orientation(angle)
    if abs(o - 90.0) <= ANGLE_EPSILON:
        return Category.RIGHT
    if o < 90.0:
        return Category.ACUTE
    return Category.OBTUSE


def category_band(category: Category) -> tuple[float, float]:
    return CATEGORY_BANDS[category]


def clamp_to_category(angle: float, category: Category) -> float:
    """Clamp the orientation of ``angle`` into the band for ``category``.

    The half-turn offset is preserved, so on a 360 degree range an angle in
    the lower half plane stays there.
    """

    lo, hi = CATEGORY_BANDS[category]
    o = orientation(angle)
    offset = float(angle) - o
    return offset + max(lo, min(hi, o))


def same_angle(a: float, b: float) -> bool:
    return abs(float(a) - float(b)) <= ANGLE_EPSILON


def angular_distance(a: float, b: float, range_deg: float = FULL_TURN_DEG) -> float:
    """Shortest distance between two angles on a circle of ``range_deg``."""

    diff = abs(normalize_angle(a, range_deg) - normalize_angle(b, range_deg))
    return min(diff, range_deg - diff)


def deg_to_rad(deg: float) -> float:
    return math.radians(float(deg))


def rad_to_deg(rad: float) -> float:
    return math.degrees(float(rad))


def direction_vector(angle_deg: float) -> tuple[float, float]:
    """Unit vector for ``angle_deg`` in screen space (y axis points down)."""

    rad = deg_to_rad(angle_deg)
    return math.cos(rad), -math.sin(rad)
