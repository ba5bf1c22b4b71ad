from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

from .angle_matching import AngleMatchingConfig, GeneratorProfile
from .cognitive_core import RandomSource, SeededRng

logger = logging.getLogger(__name__)

SETTINGS_STORE_ENV = "ANGLE_MATCH_SETTINGS_PATH"


class SettingsStore:
    """JSON-backed home for the current AngleMatchingConfig.

    Every update is clamped through ``AngleMatchingConfig.validated`` and
    written straight back to disk. A missing or corrupt file yields defaults.
    """

    _version = 1

    def __init__(self, path: Path, *, rng: RandomSource | None = None) -> None:
        self._path = path
        self._rng: RandomSource = rng if rng is not None else SeededRng(int.from_bytes(os.urandom(4), "big"))
        self._config = AngleMatchingConfig()
        self._load()

    @classmethod
    def default_path(cls) -> Path:
        explicit = os.environ.get(SETTINGS_STORE_ENV)
        if explicit:
            return Path(explicit).expanduser()
        return Path.home() / ".angle_match_settings.json"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config(self) -> AngleMatchingConfig:
        return self._config

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read settings from %s (%s); using defaults.", self._path, exc)
            return
        if not isinstance(payload, dict):
            logger.warning("Settings file %s has no settings object; using defaults.", self._path)
            return

        raw = payload.get("settings")
        if not isinstance(raw, dict) or "stimuli_count" not in raw:
            logger.warning("Settings file %s is missing required fields; using defaults.", self._path)
            return
        self._config = AngleMatchingConfig.from_dict(raw)
        logger.info("Loaded settings from %s", self._path)

    def save(self) -> None:
        payload: dict[str, Any] = {
            "version": self._version,
            "settings": self._config.to_dict(),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            logger.error("Could not save settings to %s: %s", self._path, exc)

    def update(self, **changes: Any) -> AngleMatchingConfig:
        """Apply field changes, clamp, persist, and return the new config.

        Changing ``stimuli_count`` resizes ``target_angles`` to match.
        """

        cfg = self._config
        if "profile" in changes:
            cfg = replace(cfg, profile=GeneratorProfile(changes.pop("profile")))
        count = changes.pop("stimuli_count", None)
        if "target_angles" in changes:
            changes["target_angles"] = tuple(int(a) for a in changes["target_angles"])
        if changes:
            cfg = replace(cfg, **changes)
        if count is not None:
            cfg = cfg.with_stimuli_count(int(count), rng=self._rng)

        self._config = cfg.validated()
        self.save()
        return self._config

    def set_target_angle(self, index: int, angle: int) -> AngleMatchingConfig:
        targets = list(self._config.target_angles)
        if not 0 <= index < len(targets):
            return self._config
        targets[index] = int(angle)
        return self.update(target_angles=targets)

    def reset(self) -> AngleMatchingConfig:
        self._config = AngleMatchingConfig()
        self.save()
        return self._config
