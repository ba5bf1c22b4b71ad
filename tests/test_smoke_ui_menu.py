from __future__ import annotations

import json
import os
from pathlib import Path


def test_ui_smoke_open_test_then_adjust_settings(tmp_path: Path) -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from angle_match.app import run

    settings_path = tmp_path / "settings.json"

    def post_key(key: int) -> None:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": ""}))

    def inject(frame: int) -> None:
        # Main Menu -> Start Test -> begin -> exit; then Settings -> stimuli +1 -> back
        script = {
            1: pygame.K_RETURN,
            2: pygame.K_RETURN,
            3: pygame.K_F12,
            4: pygame.K_DOWN,
            5: pygame.K_RETURN,
            6: pygame.K_RIGHT,
            7: pygame.K_ESCAPE,
        }
        if frame in script:
            post_key(script[frame])

    assert run(max_frames=12, event_injector=inject, settings_path=settings_path, db_path=tmp_path / "r.sqlite3") == 0

    payload = json.loads(settings_path.read_text(encoding="utf-8"))
    assert payload["settings"]["stimuli_count"] == 4
    assert len(payload["settings"]["target_angles"]) == 4
