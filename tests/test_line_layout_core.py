from __future__ import annotations

import itertools

import pytest

from angle_match.line_layout import (
    PADDING_RATIO,
    angles_per_quadrant_for,
    layout_lines,
)

CANVAS = 400.0


def _ids():
    counter = itertools.count()
    return lambda: f"t{next(counter)}"


@pytest.mark.parametrize("apq", [1, 2, 3, 4])
def test_each_density_places_anchors_inside_quadrant_inset(apq: int) -> None:
    options = [float(10 + i) for i in range(apq * 4)]
    lines = layout_lines(options, CANVAS, id_factory=_ids())

    assert len(lines) == len(options)
    half = CANVAS / 2.0
    pad = CANVAS * PADDING_RATIO
    for k, line in enumerate(lines):
        assert line.quadrant == k // apq
        assert line.angle == options[k]
        qx = half if line.quadrant % 2 else 0.0
        qy = half if line.quadrant >= 2 else 0.0
        x, y = line.position
        assert qx + pad - 1e-9 <= x <= qx + half - pad + 1e-9
        assert qy + pad - 1e-9 <= y <= qy + half - pad + 1e-9

    # Anchors within a quadrant never coincide.
    for q in range(4):
        anchors = [line.position for line in lines if line.quadrant == q]
        assert len(set(anchors)) == len(anchors)


def test_single_density_uses_inset_corner_per_quadrant() -> None:
    lines = layout_lines([10.0, 20.0, 30.0, 40.0], CANVAS, id_factory=_ids())
    assert [line.position for line in lines] == [
        (60.0, 60.0),
        (260.0, 60.0),
        (60.0, 260.0),
        (260.0, 260.0),
    ]


def test_right_quadrants_mirror_column_order() -> None:
    lines = layout_lines([float(a) for a in range(8)], CANVAS, id_factory=_ids())
    left = [line.position[0] for line in lines if line.quadrant == 0]
    right = [line.position[0] for line in lines if line.quadrant == 1]
    assert left == [60.0, 140.0]
    assert right == [340.0, 260.0]


def test_ids_are_unique_and_empty_input_is_empty() -> None:
    lines = layout_lines([10.0, 20.0, 30.0, 40.0, 50.0], CANVAS)
    assert len({line.id for line in lines}) == 5
    assert layout_lines([], CANVAS) == []
    assert angles_per_quadrant_for(5) == 2


def test_more_than_four_per_quadrant_is_rejected() -> None:
    with pytest.raises(ValueError):
        layout_lines([float(a) for a in range(17)], CANVAS)
