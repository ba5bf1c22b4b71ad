"""Pygame UI shell for the Angle Matching trainer.

Screens:
- Main Menu (start test, settings, quit)
- Settings (stimulus count, target angles, density, quadrant rule, variance)
- Angle Matching test (reference line + clickable option lines, then results)

Deterministic generation/timing/scoring lives in angle_match/* (core modules).
"""

from __future__ import annotations

import logging
import random
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pygame

from .angle_matching import AngleMatchingTest, GeneratorProfile, build_angle_matching_test
from .clock import RealClock
from .cognitive_core import Phase, TestSnapshot
from .line_canvas import LineCanvas, render_lines
from .persistence import default_db_path, record_angle_matching_attempt
from .results import attempt_result_from_test, export_results_csv
from .settings import SettingsStore

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"
WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
MAX_CANVAS_SIZE = 800
MAX_STIMULI = 50

QUADRANT_NAMES = {1: "Top Left", 2: "Top Right", 3: "Bottom Left", 4: "Bottom Right"}

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
HEADER_BG = (18, 30, 118)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
ACTIVE_BG = (244, 248, 255)
ACTIVE_TEXT = (14, 26, 74)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def surface(self) -> pygame.Surface:
        return self._surface

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def toggle_fullscreen(self) -> None:
        try:
            pygame.display.toggle_fullscreen()
        except pygame.error as exc:
            logger.warning("Fullscreen request failed: %s. Continuing without fullscreen.", exc)
            return
        self._surface = pygame.display.get_surface() or self._surface

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.VIDEORESIZE:
            self._surface = pygame.display.get_surface() or self._surface
        if event.type == pygame.KEYDOWN and event.key == pygame.K_F11:
            self.toggle_fullscreen()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _draw_frame(
    surface: pygame.Surface,
    *,
    title: str,
    tag: str,
    title_font: pygame.font.Font,
    tag_font: pygame.font.Font,
) -> tuple[pygame.Rect, pygame.Rect]:
    """Paint the shared window chrome; returns (frame, header)."""

    w, h = surface.get_size()
    surface.fill(BG)

    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)

    header_h = max(34, min(52, h // 8))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.rect(surface, HEADER_BG, header)
    pygame.draw.line(surface, BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

    tag_surf = tag_font.render(tag, True, TEXT_MUTED)
    surface.blit(tag_surf, (header.x + 12, header.y + (header.h - tag_surf.get_height()) // 2))
    title_surf = title_font.render(title, True, TEXT_MAIN)
    surface.blit(title_surf, title_surf.get_rect(center=(frame.centerx, header.centery)))
    return frame, header


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _draw_rows(
    surface: pygame.Surface,
    list_rect: pygame.Rect,
    labels: list[str],
    selected: int,
    font: pygame.font.Font,
    *,
    max_row_h: int = 44,
) -> list[pygame.Rect]:
    pygame.draw.rect(surface, (6, 13, 92), list_rect)
    pygame.draw.rect(surface, (78, 102, 170), list_rect, 1)

    item_count = max(1, len(labels))
    gap = max(2, min(10, list_rect.h // max(10, item_count * 3)))
    row_h = max(18, min(max_row_h, (list_rect.h - gap * (item_count + 1)) // item_count))
    total_h = row_h * item_count + gap * (item_count - 1)
    y = list_rect.y + max(4, (list_rect.h - total_h) // 2)

    rects: list[pygame.Rect] = []
    for idx, label in enumerate(labels):
        row = pygame.Rect(list_rect.x + 12, y, list_rect.w - 24, row_h)
        is_selected = idx == selected
        if is_selected:
            pygame.draw.rect(surface, ACTIVE_BG, row)
            pygame.draw.rect(surface, (120, 142, 196), row, 2)
        else:
            pygame.draw.rect(surface, (9, 20, 106), row)
            pygame.draw.rect(surface, (62, 84, 152), row, 1)

        color = ACTIVE_TEXT if is_selected else TEXT_MAIN
        text = font.render(_fit_label(font, label, row.w - 20), True, color)
        surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
        rects.append(row)
        y += row_h + gap
    return rects


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._row_rects: list[pygame.Rect] = []
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.MOUSEMOTION:
            idx = self._row_at(getattr(event, "pos", None))
            if idx is not None:
                self._selected = idx
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            idx = self._row_at(getattr(event, "pos", None))
            if idx is not None:
                self._selected = idx
                self._activate()

    def _row_at(self, pos: tuple[int, int] | None) -> int | None:
        if pos is None:
            return None
        for idx, rect in enumerate(self._row_rects):
            if rect.collidepoint(pos):
                return idx
        return None

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        frame, header = _draw_frame(
            surface,
            title=self._title,
            tag="MENU",
            title_font=self._title_font,
            tag_font=self._hint_font,
        )

        content_top = header.bottom + max(16, h // 30)
        content_bottom = frame.bottom - max(44, h // 12)
        list_rect = pygame.Rect(
            frame.x + max(14, w // 44),
            content_top,
            frame.w - max(28, w // 22),
            max(120, content_bottom - content_top),
        )
        self._row_rects = _draw_rows(
            surface,
            list_rect,
            [item.label for item in self._items],
            self._selected,
            self._item_font,
        )

        footer = "Enter/Click: Select  |  Esc/Backspace: Back  |  F11: Fullscreen"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


@dataclass(frozen=True, slots=True)
class _SettingRow:
    label: str
    value: str
    adjust: Callable[[int], None] | None = None
    activate: Callable[[], None] | None = None


class SettingsScreen:
    """Keyboard/mouse editor over SettingsStore; every change is saved at once."""

    def __init__(self, app: App, *, store: SettingsStore) -> None:
        self._app = app
        self._store = store
        self._selected = 0
        self._row_rects: list[pygame.Rect] = []
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 26)
        self._hint_font = pygame.font.Font(None, 22)

    def _rows(self) -> list[_SettingRow]:
        cfg = self._store.config
        store = self._store
        rows = [
            _SettingRow(
                "Number of stimuli",
                str(cfg.stimuli_count),
                adjust=lambda d: store.update(stimuli_count=min(MAX_STIMULI, cfg.stimuli_count + d)),
            ),
            _SettingRow(
                "Angles per quadrant",
                str(cfg.angles_per_quadrant),
                adjust=lambda d: store.update(angles_per_quadrant=cfg.angles_per_quadrant + d),
            ),
            _SettingRow(
                "Use specific quadrant for correct angle",
                "On" if cfg.use_correct_quadrant else "Off",
                adjust=lambda d: store.update(use_correct_quadrant=not cfg.use_correct_quadrant),
                activate=lambda: store.update(use_correct_quadrant=not cfg.use_correct_quadrant),
            ),
        ]
        if cfg.use_correct_quadrant:
            rows.append(
                _SettingRow(
                    "Correct angle quadrant",
                    QUADRANT_NAMES.get(cfg.correct_quadrant, str(cfg.correct_quadrant)),
                    adjust=lambda d: store.update(correct_quadrant=(cfg.correct_quadrant - 1 + d) % 4 + 1),
                )
            )
        rows.append(
            _SettingRow(
                "Degree variance",
                f"{cfg.degree_variance:g}",
                adjust=lambda d: store.update(degree_variance=cfg.degree_variance + d * cfg.rules.variance_step),
            )
        )
        rows.append(
            _SettingRow(
                "Generator profile",
                cfg.profile.value,
                adjust=lambda d: store.update(profile=_other_profile(cfg.profile)),
                activate=lambda: store.update(profile=_other_profile(cfg.profile)),
            )
        )
        if cfg.rules.uses_supplied_targets:
            for i, angle in enumerate(cfg.target_angles):
                rows.append(
                    _SettingRow(
                        f"Stimulus {i + 1} target angle",
                        f"{angle} deg",
                        adjust=lambda d, i=i, angle=angle: store.set_target_angle(i, angle + d),
                    )
                )
        rows.append(_SettingRow("Reset to defaults", "", activate=store.reset))
        rows.append(_SettingRow("Back", "", activate=self._app.pop))
        return rows

    def handle_event(self, event: pygame.event.Event) -> None:
        rows = self._rows()
        self._selected = min(self._selected, len(rows) - 1)

        if event.type == pygame.KEYDOWN:
            step = 10 if getattr(event, "mod", 0) & pygame.KMOD_SHIFT else 1
            row = rows[self._selected]
            if event.key in (pygame.K_UP, pygame.K_w):
                self._selected = (self._selected - 1) % len(rows)
            elif event.key in (pygame.K_DOWN, pygame.K_s):
                self._selected = (self._selected + 1) % len(rows)
            elif event.key in (pygame.K_LEFT, pygame.K_a) and row.adjust is not None:
                row.adjust(-step)
            elif event.key in (pygame.K_RIGHT, pygame.K_d) and row.adjust is not None:
                row.adjust(step)
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE) and row.activate is not None:
                row.activate()
            elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._app.pop()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            for idx, rect in enumerate(self._row_rects):
                if pos is not None and rect.collidepoint(pos) and idx < len(rows):
                    self._selected = idx
                    if rows[idx].activate is not None:
                        rows[idx].activate()
                    break

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        frame, header = _draw_frame(
            surface,
            title="Settings",
            tag="SETTINGS",
            title_font=self._title_font,
            tag_font=self._hint_font,
        )
        rows = self._rows()
        self._selected = min(self._selected, len(rows) - 1)

        list_rect = pygame.Rect(
            frame.x + max(14, w // 44),
            header.bottom + 10,
            frame.w - max(28, w // 22),
            frame.bottom - header.bottom - max(44, h // 12),
        )
        labels = [row.label if row.value == "" else f"{row.label}:  {row.value}" for row in rows]
        self._row_rects = _draw_rows(surface, list_rect, labels, self._selected, self._item_font, max_row_h=34)

        footer = "Up/Down: Move  |  Left/Right: Adjust (Shift x10)  |  Enter: Toggle  |  Esc: Back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


def _other_profile(profile: GeneratorProfile) -> GeneratorProfile:
    if profile is GeneratorProfile.STANDARD:
        return GeneratorProfile.LEGACY
    return GeneratorProfile.STANDARD


class AngleMatchingScreen:
    def __init__(
        self,
        app: App,
        *,
        engine_factory: Callable[[], AngleMatchingTest],
        db_path: Path | None,
        export_dir: Path,
    ) -> None:
        self._app = app
        self._engine = engine_factory()
        self._db_path = db_path
        self._export_dir = export_dir
        self._canvas = LineCanvas(rect=pygame.Rect(0, 0, 400, 400), on_select=self._on_select)
        self._reference_rect = pygame.Rect(0, 0, 200, 200)
        self._reference = pygame.Surface(self._reference_rect.size)
        self._next_rect = pygame.Rect(0, 0, 0, 0)
        self._shown_index = -1
        self._recorded = False
        self._status: str | None = None

        self._title_font = pygame.font.Font(None, 36)
        self._small_font = pygame.font.Font(None, 28)
        self._tiny_font = pygame.font.Font(None, 22)

    @property
    def engine(self) -> AngleMatchingTest:
        return self._engine

    @property
    def canvas(self) -> LineCanvas:
        return self._canvas

    def _on_select(self, angle: float) -> None:
        event = self._engine.select(angle)
        if event is not None:
            logger.info("Selection %.1f deg after %d ms", event.angle, event.elapsed_time_ms)

    def _layout(self, size: tuple[int, int]) -> None:
        w, h = size
        landscape = w > h
        # Response canvas: as large as fits, up to MAX_CANVAS_SIZE.
        avail_h = h - 140
        if landscape:
            canvas = min(avail_h, int(w * 0.58), MAX_CANVAS_SIZE)
        else:
            canvas = min(w - 32, avail_h // 2, MAX_CANVAS_SIZE)
        canvas = max(120, canvas)
        ref = max(80, min(canvas // 2, 400))

        top = 80
        if landscape:
            gap = max(16, (w - canvas - ref) // 3)
            self._reference_rect = pygame.Rect(gap, top + (canvas - ref) // 2, ref, ref)
            self._canvas.set_rect(pygame.Rect(gap * 2 + ref, top, canvas, canvas))
            self._next_rect = pygame.Rect(
                self._reference_rect.x, self._reference_rect.bottom + 16, ref, 44
            )
        else:
            self._reference_rect = pygame.Rect((w - ref) // 2, top, ref, ref)
            self._canvas.set_rect(pygame.Rect((w - canvas) // 2, self._reference_rect.bottom + 16, canvas, canvas))
            self._next_rect = pygame.Rect(self._reference_rect.right + 12, self._reference_rect.centery - 22, 160, 44)
        if self._reference.get_size() != self._reference_rect.size:
            self._reference = pygame.Surface(self._reference_rect.size)

    def _sync_canvas(self, snap: TestSnapshot) -> None:
        if snap.trial is None or snap.index == self._shown_index:
            return
        self._canvas.set_options(snap.trial.options)
        self._canvas.reset()
        self._shown_index = snap.index

    def _advance(self) -> None:
        if self._engine.next_trial():
            snap = self._engine.snapshot()
            self._sync_canvas(snap)
            if snap.phase is Phase.RESULTS:
                self._record_attempt()

    def _record_attempt(self) -> None:
        if self._recorded or self._db_path is None:
            return
        self._recorded = True
        result = attempt_result_from_test(self._engine)
        try:
            record_angle_matching_attempt(db_path=self._db_path, result=result, app_version=APP_VERSION)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Could not record attempt in %s: %s", self._db_path, exc)
            self._status = f"Could not save results: {exc}"

    def _export_csv(self) -> None:
        stamp = time.strftime("%Y%m%d_%H%M%S")
        path = self._export_dir / f"test_results_{stamp}.csv"
        try:
            export_results_csv(self._engine.results(), path)
        except OSError as exc:
            logger.error("CSV export to %s failed: %s", path, exc)
            self._status = f"Export failed: {exc}"
            return
        self._status = f"Saved {path}"

    def handle_event(self, event: pygame.event.Event) -> None:
        self._layout(self._app.surface.get_size())
        snap = self._engine.snapshot()

        # Emergency exit from any state.
        if event.type == pygame.KEYDOWN:
            shift = bool(getattr(event, "mod", 0) & pygame.KMOD_SHIFT)
            if event.key == pygame.K_F12 or (event.key == pygame.K_ESCAPE and shift):
                self._app.pop()
                return

        if snap.phase is Phase.INSTRUCTIONS:
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                    self._engine.start()
                    snap = self._engine.snapshot()
                    self._sync_canvas(snap)
                    if snap.phase is Phase.RESULTS:
                        self._record_attempt()
                elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                    self._app.pop()
            return

        if snap.phase in (Phase.RESPONSE, Phase.SELECTED):
            self._sync_canvas(snap)
            self._canvas.handle_event(event)
            if snap.phase is Phase.SELECTED:
                if event.type == pygame.KEYDOWN and event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                    self._advance()
                elif (
                    event.type == pygame.MOUSEBUTTONDOWN
                    and getattr(event, "button", 0) == 1
                    and self._next_rect.collidepoint(getattr(event, "pos", (-1, -1)))
                ):
                    self._advance()
            return

        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._app.pop()
            elif event.key == pygame.K_e:
                self._export_csv()

    def render(self, surface: pygame.Surface) -> None:
        self._layout(surface.get_size())
        snap = self._engine.snapshot()
        self._sync_canvas(snap)

        phase_label = {
            Phase.INSTRUCTIONS: "Instructions",
            Phase.RESPONSE: "Choose",
            Phase.SELECTED: "Selected",
            Phase.RESULTS: "Results",
        }.get(snap.phase, "Task")
        frame, header = _draw_frame(
            surface,
            title=snap.title,
            tag=phase_label,
            title_font=self._title_font,
            tag_font=self._tiny_font,
        )

        if snap.phase in (Phase.RESPONSE, Phase.SELECTED) and snap.trial is not None:
            progress = self._tiny_font.render(f"Stimulus {snap.index + 1}/{snap.total}", True, TEXT_MUTED)
            surface.blit(progress, progress.get_rect(midright=(header.right - 12, header.centery)))

            render_lines(self._reference, target_angle=snap.trial.target_angle)
            surface.blit(self._reference, self._reference_rect.topleft)
            pygame.draw.rect(surface, BORDER, self._reference_rect, 1)
            self._canvas.render(surface)

            if snap.phase is Phase.SELECTED:
                label = "Finish Test" if snap.index + 1 >= snap.total else "Next Stimulus"
                pygame.draw.rect(surface, ACTIVE_BG, self._next_rect)
                pygame.draw.rect(surface, (120, 142, 196), self._next_rect, 2)
                text = self._small_font.render(label, True, ACTIVE_TEXT)
                surface.blit(text, text.get_rect(center=self._next_rect.center))
        elif snap.phase is Phase.INSTRUCTIONS:
            self._draw_lines(surface, self._engine.instructions(), frame, header)
        else:
            lines = snap.prompt.split("\n")
            lines.append("")
            for r in self._engine.results():
                verdict = "Correct" if r.correct else "Incorrect"
                lines.append(
                    f"Stimulus {r.index + 1}: {verdict}  |  {r.time_ms / 1000.0:.2f} s  |  "
                    f"target {r.target_angle:g} deg, selected {r.selected_angle:g} deg"
                )
            if self._status:
                lines.extend(["", self._status])
            self._draw_lines(surface, lines, frame, header)

        if snap.phase is Phase.RESPONSE:
            footer = "Click the matching line  |  F12: Exit"
        elif snap.phase is Phase.SELECTED:
            footer = "Enter / Next: Continue  |  F12: Exit"
        elif snap.phase is Phase.INSTRUCTIONS:
            footer = "Enter: Begin  |  Esc/Backspace: Back"
        else:
            footer = "E: Export CSV  |  Enter: Return to menu"
        foot = self._tiny_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))

    def _draw_lines(
        self,
        surface: pygame.Surface,
        lines: list[str],
        frame: pygame.Rect,
        header: pygame.Rect,
    ) -> None:
        x = frame.x + 24
        y = header.bottom + 16
        line_h = self._small_font.get_linesize()
        for line in lines:
            if y + line_h > frame.bottom - 36:
                break
            text = self._small_font.render(_fit_label(self._small_font, line, frame.w - 48), True, TEXT_MAIN)
            surface.blit(text, (x, y))
            y += line_h


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    settings_path: Path | None = None,
    db_path: Path | None = None,
    export_dir: Path | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Angle Matching Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    store = SettingsStore(settings_path or SettingsStore.default_path())
    results_db = db_path or default_db_path()
    exports = export_dir or (Path.home() / "angle_match_exports")
    real_clock = RealClock()

    def open_test() -> None:
        seed = _new_seed()
        config = store.config
        logger.info("Starting test with seed %d", seed)
        app.push(
            AngleMatchingScreen(
                app,
                engine_factory=lambda: build_angle_matching_test(clock=real_clock, seed=seed, config=config),
                db_path=results_db,
                export_dir=exports,
            )
        )

    main_items = [
        MenuItem("Start Test", open_test),
        MenuItem("Settings", lambda: app.push(SettingsScreen(app, store=store))),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Angle Matching", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
