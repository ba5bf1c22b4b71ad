from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from angle_match.line_canvas import (
    HOVER_COLOR,
    INK,
    PAPER,
    SELECTED_COLOR,
    LineCanvas,
    render_lines,
)
from angle_match.line_layout import Line

OPTIONS = (30.0, 60.0, 120.0, 150.0)


def _rgb(surface: pygame.Surface, pos: tuple[int, int]) -> tuple[int, int, int]:
    c = surface.get_at(pos)
    return (c.r, c.g, c.b)


def test_render_styles_selected_and_hovered_lines() -> None:
    surface = pygame.Surface((400, 400))
    line = Line(angle=0.0, id="x", quadrant=0, position=(200.0, 200.0))

    render_lines(surface, [line])
    assert _rgb(surface, (220, 200)) == INK
    assert _rgb(surface, (10, 10)) == PAPER

    render_lines(surface, [line], hovered_id="x")
    assert _rgb(surface, (220, 200)) == HOVER_COLOR

    render_lines(surface, [line], hovered_id="x", disabled=True)
    assert _rgb(surface, (220, 200)) == INK

    render_lines(surface, [line], selected_angle=0.0, hovered_id="x")
    assert _rgb(surface, (220, 200)) == SELECTED_COLOR


def test_reference_mode_draws_single_centred_line() -> None:
    surface = pygame.Surface((200, 200))
    render_lines(surface, target_angle=90.0)
    # Length is size/8 upward from the centre.
    assert _rgb(surface, (100, 90)) == INK
    assert _rgb(surface, (100, 110)) == PAPER


def test_canvas_commits_a_single_selection() -> None:
    picked: list[float] = []
    canvas = LineCanvas(rect=pygame.Rect(100, 50, 400, 400), on_select=picked.append)
    canvas.set_options(OPTIONS)
    assert len(canvas.lines) == 4

    # Anchor of option 0 is the top-left inset corner (60, 60).
    hover = pygame.event.Event(pygame.MOUSEMOTION, {"pos": (160, 110), "rel": (0, 0), "buttons": (0, 0, 0)})
    canvas.handle_event(hover)
    assert canvas.hovered_id == canvas.lines[0].id

    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (160, 110), "button": 1})
    assert canvas.handle_event(click) == 30.0
    assert canvas.selected_angle == 30.0
    assert canvas.disabled

    # Further clicks, including on another line, are ignored.
    assert canvas.handle_event(click) is None
    other = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (360, 110), "button": 1})
    assert canvas.handle_event(other) is None
    assert picked == [30.0]

    canvas.reset()
    assert canvas.selected_angle is None
    assert not canvas.disabled
    assert canvas.handle_click((260.0, 60.0)) == 60.0
    assert picked == [30.0, 60.0]


def test_canvas_ignores_clicks_off_lines_and_outside_rect() -> None:
    picked: list[float] = []
    canvas = LineCanvas(rect=pygame.Rect(0, 0, 400, 400), on_select=picked.append)
    canvas.set_options(OPTIONS)

    assert canvas.handle_click((200.0, 380.0)) is None
    outside = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (900, 900), "button": 1})
    assert canvas.handle_event(outside) is None
    assert picked == []
    assert not canvas.disabled


def test_resize_relayouts_and_clears_hover() -> None:
    canvas = LineCanvas(rect=pygame.Rect(0, 0, 400, 400))
    canvas.set_options(OPTIONS)
    canvas.handle_motion((60.0, 60.0))
    assert canvas.hovered_id is not None

    canvas.set_rect(pygame.Rect(0, 0, 200, 200))
    assert canvas.hovered_id is None
    assert canvas.lines[0].position == (30.0, 30.0)

    surface = pygame.Surface((300, 300))
    canvas.render(surface)
    assert _rgb(surface, (250, 250)) != SELECTED_COLOR


def test_every_line_at_the_selected_angle_is_highlighted() -> None:
    surface = pygame.Surface((400, 400))
    lines = [
        Line(angle=45.0, id="a", quadrant=0, position=(60.0, 200.0)),
        Line(angle=45.0, id="b", quadrant=1, position=(260.0, 200.0)),
        Line(angle=30.0, id="c", quadrant=2, position=(60.0, 340.0)),
    ]
    render_lines(surface, lines, selected_angle=45.0, disabled=True)

    # 10px along a 45 degree line from each anchor.
    assert _rgb(surface, (67, 193)) == SELECTED_COLOR
    assert _rgb(surface, (267, 193)) == SELECTED_COLOR
    assert _rgb(surface, (69, 335)) == INK
