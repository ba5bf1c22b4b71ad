"""Drawing and pointer handling for angle lines on a pygame surface."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import pygame

from .angle_math import direction_vector, same_angle
from .hit_test import nearest_line
from .line_layout import Line, layout_lines

logger = logging.getLogger(__name__)

PAPER = (255, 255, 255)
INK = (0, 0, 0)
SELECTED_COLOR = (0, 0, 255)
HOVER_COLOR = (173, 216, 230)
BORDER_COLOR = (209, 213, 219)

REFERENCE_WIDTH = 3
DEFAULT_WIDTH = 6
EMPHASIS_WIDTH = 8


def drawn_length(canvas_size: float) -> float:
    return float(canvas_size) / 8.0


def line_end(start: tuple[float, float], angle: float, length: float) -> tuple[float, float]:
    dx, dy = direction_vector(angle)
    return start[0] + dx * length, start[1] + dy * length


def draw_angle_line(
    surface: pygame.Surface,
    start: tuple[float, float],
    angle: float,
    color: tuple[int, int, int],
    width: int,
    length: float,
) -> None:
    pygame.draw.line(surface, color, start, line_end(start, angle, length), width)


def line_style(
    line: Line,
    *,
    selected_angle: float | None,
    hovered_id: str | None,
    disabled: bool,
) -> tuple[tuple[int, int, int], int]:
    # Matched by angle, not id: every line at the chosen angle shows as selected.
    if selected_angle is not None and same_angle(line.angle, selected_angle):
        return SELECTED_COLOR, EMPHASIS_WIDTH
    if not disabled and hovered_id is not None and line.id == hovered_id:
        return HOVER_COLOR, EMPHASIS_WIDTH
    return INK, DEFAULT_WIDTH


def render_lines(
    surface: pygame.Surface,
    lines: Sequence[Line] = (),
    *,
    target_angle: float | None = None,
    selected_angle: float | None = None,
    hovered_id: str | None = None,
    disabled: bool = False,
) -> None:
    """Clear ``surface`` and paint either the reference line or the options.

    With ``target_angle`` a single centred reference line is drawn and
    ``lines`` is ignored.
    """

    w, h = surface.get_size()
    canvas_size = min(w, h)
    length = drawn_length(canvas_size)
    surface.fill(PAPER)

    if target_angle is not None:
        draw_angle_line(surface, (w / 2.0, h / 2.0), target_angle, INK, REFERENCE_WIDTH, length)
        return

    for line in lines:
        color, width = line_style(
            line,
            selected_angle=selected_angle,
            hovered_id=hovered_id,
            disabled=disabled,
        )
        draw_angle_line(surface, line.position, line.angle, color, width, length)


class LineCanvas:
    """Interactive response canvas for one displayed stimulus.

    Owns the derived Line set plus hover/selection state. The Line set is
    replaced whole whenever the options or the canvas size change. A click
    commits at most once; ``reset`` re-arms it for the next stimulus.
    """

    def __init__(
        self,
        *,
        rect: pygame.Rect,
        on_select: Callable[[float], None] | None = None,
    ) -> None:
        self._rect = pygame.Rect(rect)
        self._on_select = on_select
        self._options: tuple[float, ...] = ()
        self._lines: list[Line] = []
        self._hovered_id: str | None = None
        self._selected: float | None = None
        self._disabled = False
        self._paper = pygame.Surface(self._rect.size)

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(self._rect)

    @property
    def canvas_size(self) -> int:
        return min(self._rect.w, self._rect.h)

    @property
    def lines(self) -> tuple[Line, ...]:
        return tuple(self._lines)

    @property
    def hovered_id(self) -> str | None:
        return self._hovered_id

    @property
    def selected_angle(self) -> float | None:
        return self._selected

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._disabled = bool(value)

    def set_options(self, options: Sequence[float]) -> None:
        new = tuple(float(a) for a in options)
        if new == self._options and self._lines:
            return
        self._options = new
        self._relayout()

    def set_rect(self, rect: pygame.Rect) -> None:
        rect = pygame.Rect(rect)
        resized = rect.size != self._rect.size
        self._rect = rect
        if resized:
            self._paper = pygame.Surface(self._rect.size)
            self._relayout()

    def reset(self) -> None:
        self._selected = None
        self._hovered_id = None
        self._disabled = False

    def to_canvas(self, pos: tuple[int, int]) -> tuple[float, float]:
        return float(pos[0] - self._rect.x), float(pos[1] - self._rect.y)

    def handle_motion(self, point: tuple[float, float]) -> str | None:
        """Update hover from a canvas-space point. Ignored once disabled."""

        if self._disabled:
            return self._hovered_id
        line = nearest_line(point, self._lines, self.canvas_size)
        self._hovered_id = None if line is None else line.id
        return self._hovered_id

    def handle_click(self, point: tuple[float, float]) -> float | None:
        """Commit a selection from a canvas-space point. Returns the angle or None."""

        if self._disabled or self._selected is not None:
            return None
        line = nearest_line(point, self._lines, self.canvas_size)
        if line is None:
            return None
        self._selected = line.angle
        self._disabled = True
        logger.debug("Selected line %s at %.1f deg", line.id, line.angle)
        if self._on_select is not None:
            self._on_select(line.angle)
        return line.angle

    def handle_leave(self) -> None:
        self._hovered_id = None

    def handle_event(self, event: pygame.event.Event) -> float | None:
        """Route a pygame event; returns the committed angle on a new selection."""

        if event.type == pygame.MOUSEMOTION:
            pos = getattr(event, "pos", None)
            if pos is None:
                return None
            if self._rect.collidepoint(pos):
                self.handle_motion(self.to_canvas(pos))
            else:
                self.handle_leave()
            return None

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            if pos is None or not self._rect.collidepoint(pos):
                return None
            return self.handle_click(self.to_canvas(pos))

        if event.type == pygame.WINDOWLEAVE:
            self.handle_leave()
        return None

    def render(self, surface: pygame.Surface) -> None:
        render_lines(
            self._paper,
            self._lines,
            selected_angle=self._selected,
            hovered_id=self._hovered_id,
            disabled=self._disabled,
        )
        surface.blit(self._paper, self._rect.topleft)
        pygame.draw.rect(surface, BORDER_COLOR, self._rect, 1)

    def _relayout(self) -> None:
        self._lines = layout_lines(self._options, self.canvas_size)
        self._hovered_id = None
