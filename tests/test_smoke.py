"""Smoke tests for the pygame UI.

These tests verify that the application's main loop can initialise and
execute a handful of frames without crashing when the SDL dummy video
driver is used.  They do not check rendering correctness.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless(tmp_path: Path) -> None:
    """Ensure the application can start and run a few frames headlessly."""
    # Import inside the test so that environment variables take effect
    from angle_match.app import run

    exit_code = run(
        max_frames=3,
        settings_path=tmp_path / "settings.json",
        db_path=tmp_path / "results.sqlite3",
    )
    assert exit_code == 0


def test_main_parses_logging_flags(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import angle_match.__main__ as entry

    calls: dict[str, object] = {}

    def fake_run(**kwargs: object) -> int:
        calls.update(kwargs)
        return 0

    monkeypatch.setattr(entry, "run", fake_run)
    log_file = tmp_path / "app.log"
    assert entry.main(["--debug", "--log-file", str(log_file), "--settings", str(tmp_path / "s.json")]) == 0
    assert calls["settings_path"] == tmp_path / "s.json"
    assert calls["db_path"] is None
    assert log_file.exists()

    logger = logging.getLogger("angle_match")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
