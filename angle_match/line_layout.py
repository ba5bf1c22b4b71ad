"""Placement of option lines on the response canvas.

The square canvas is split into four quadrants (0 top-left, 1 top-right,
2 bottom-left, 3 bottom-right). Option ``k`` goes to quadrant
``k // angles_per_quadrant``. Within a quadrant the anchors sit on the
corners of an inset square (15% padding); right-hand quadrants mirror the
column order so lines read outward from the centre.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

QUADRANT_COUNT = 4
PADDING_RATIO = 0.15

_line_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class Line:
    angle: float
    id: str
    quadrant: int
    position: tuple[float, float]


@dataclass(frozen=True, slots=True)
class QuadrantFrame:
    """Geometry shared by every anchor in one quadrant."""

    quadrant: int
    quadrant_size: float
    padding: float
    available: float

    @property
    def is_left(self) -> bool:
        return self.quadrant % 2 == 0

    @property
    def is_top(self) -> bool:
        return self.quadrant < 2

    def column_x(self, column: int, columns: int) -> float:
        """X of ``column`` (0-based) out of ``columns`` slots, mirrored on the right."""

        if self.is_left:
            return self.padding + column * self.available
        return self.quadrant_size + self.padding + (columns - 1 - column) * self.available

    def row_y(self, row: int) -> float:
        base = self.padding if self.is_top else self.quadrant_size + self.padding
        return base + row * self.available


LayoutPattern = Callable[[QuadrantFrame, int], tuple[float, float]]


def _single(frame: QuadrantFrame, index: int) -> tuple[float, float]:
    _ = index
    return frame.column_x(0, 1), frame.row_y(0)


def _pair(frame: QuadrantFrame, index: int) -> tuple[float, float]:
    return frame.column_x(index, 2), frame.row_y(0)


def _triangle(frame: QuadrantFrame, index: int) -> tuple[float, float]:
    # One anchor on the inset corner, then two along the second row.
    if index == 0:
        return frame.column_x(0, 1), frame.row_y(0)
    return frame.column_x(index - 1, 2), frame.row_y(1)


def _grid(frame: QuadrantFrame, index: int) -> tuple[float, float]:
    return frame.column_x(index % 2, 2), frame.row_y(index // 2)


LAYOUT_PATTERNS: dict[int, LayoutPattern] = {
    1: _single,
    2: _pair,
    3: _triangle,
    4: _grid,
}


def angles_per_quadrant_for(option_count: int) -> int:
    return max(1, math.ceil(option_count / QUADRANT_COUNT))


def quadrant_frame(quadrant: int, canvas_size: float) -> QuadrantFrame:
    quadrant_size = float(canvas_size) / 2.0
    padding = float(canvas_size) * PADDING_RATIO
    return QuadrantFrame(
        quadrant=quadrant,
        quadrant_size=quadrant_size,
        padding=padding,
        available=quadrant_size - padding * 2.0,
    )


def next_line_id() -> str:
    return f"line-{next(_line_ids)}"


def layout_lines(
    options: Sequence[float],
    canvas_size: float,
    *,
    id_factory: Callable[[], str] = next_line_id,
) -> list[Line]:
    """Compute one anchored Line per option.

    Densities above 4 per quadrant have no pattern and raise ``ValueError``.
    """

    if not options:
        return []
    apq = angles_per_quadrant_for(len(options))
    pattern = LAYOUT_PATTERNS.get(apq)
    if pattern is None:
        raise ValueError(f"no layout pattern for {apq} angles per quadrant")

    lines: list[Line] = []
    for k, angle in enumerate(options):
        quadrant = k // apq
        frame = quadrant_frame(quadrant, canvas_size)
        lines.append(
            Line(
                angle=float(angle),
                id=id_factory(),
                quadrant=quadrant,
                position=pattern(frame, k % apq),
            )
        )
    return lines
