from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from angle_match.angle_matching import AngleMatchingConfig, GeneratorProfile
from angle_match.cognitive_core import SeededRng
from angle_match.settings import SETTINGS_STORE_ENV, SettingsStore


def _store(path: Path) -> SettingsStore:
    return SettingsStore(path, rng=SeededRng(7))


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    store = _store(tmp_path / "settings.json")
    assert store.config == AngleMatchingConfig()
    assert not store.path.exists()


def test_update_clamps_persists_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = _store(path)

    cfg = store.update(degree_variance=8.0, angles_per_quadrant=9, correct_quadrant=-2)
    assert cfg.degree_variance == pytest.approx(7.5)
    assert cfg.angles_per_quadrant == 4
    assert cfg.correct_quadrant == 1

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["settings"]["angles_per_quadrant"] == 4
    assert not path.with_suffix(".json.tmp").exists()

    assert _store(path).config == cfg


def test_stimuli_count_resizes_target_angles(tmp_path: Path) -> None:
    store = _store(tmp_path / "settings.json")

    grown = store.update(stimuli_count=5)
    assert grown.stimuli_count == 5
    assert len(grown.target_angles) == 5
    assert grown.target_angles[:3] == (30, 60, 120)

    shrunk = store.update(stimuli_count=2)
    assert shrunk.target_angles == (30, 60)


def test_target_angle_edits_are_clamped(tmp_path: Path) -> None:
    store = _store(tmp_path / "settings.json")
    assert store.set_target_angle(0, 200).target_angles[0] == 179
    assert store.set_target_angle(1, -5).target_angles[1] == 1
    before = store.config
    assert store.set_target_angle(10, 45) == before


def test_profile_switch_snaps_variance_to_profile_step(tmp_path: Path) -> None:
    store = _store(tmp_path / "settings.json")
    cfg = store.update(profile="legacy")
    assert cfg.profile is GeneratorProfile.LEGACY
    assert cfg.degree_variance == pytest.approx(10.0)

    assert store.reset() == AngleMatchingConfig()


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps([1, 2, 3]),
        json.dumps({"version": 1, "settings": {"degree_variance": 20}}),
    ],
)
def test_corrupt_or_incomplete_file_falls_back_to_defaults(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="angle_match"):
        store = _store(path)
    assert store.config == AngleMatchingConfig()
    assert "using defaults" in caplog.text


def test_default_path_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_STORE_ENV, str(target))
    assert SettingsStore.default_path() == target

    monkeypatch.delenv(SETTINGS_STORE_ENV)
    assert SettingsStore.default_path().name == ".angle_match_settings.json"
