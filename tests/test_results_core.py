from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

import pytest

from angle_match.angle_matching import AngleMatchingConfig, build_angle_matching_test
from angle_match.cognitive_core import TrialResult
from angle_match.persistence import SCHEMA_VERSION, record_angle_matching_attempt
from angle_match.results import attempt_result_from_test, export_results_csv, results_to_csv


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def _trial(index: int, target: float, selected: float, time_ms: int) -> TrialResult:
    return TrialResult(
        index=index,
        target_angle=target,
        selected_angle=selected,
        correct=target == selected,
        presented_at_s=0.0,
        answered_at_s=time_ms / 1000.0,
        time_ms=time_ms,
    )


def test_csv_has_header_and_formatted_rows() -> None:
    text = results_to_csv([_trial(0, 30.0, 30.0, 1234), _trial(1, 120.0, 112.5, 1500)])
    assert text.splitlines() == [
        "Stimulus,Correct,Time (seconds),Target Angle,Selected Angle",
        "1,Yes,1.23,30,30",
        "2,No,1.50,120,112.5",
    ]


def test_export_writes_file_and_creates_parent(tmp_path: Path) -> None:
    path = export_results_csv([_trial(0, 60.0, 60.0, 800)], tmp_path / "out" / "results.csv")
    assert path.read_text(encoding="utf-8").splitlines()[1] == "1,Yes,0.80,60,60"


def test_export_to_unwritable_location_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OSError):
        export_results_csv([], blocker / "results.csv")


def _finished_engine():
    clock = FakeClock()
    cfg = AngleMatchingConfig(stimuli_count=2, target_angles=(30, 150))
    engine = build_angle_matching_test(clock=clock, seed=21, config=cfg)
    engine.start()

    stim = engine.stimuli()
    clock.advance(1.0)
    engine.select(stim[0].target_angle)
    engine.next_trial()

    wrong = next(o for o in stim[1].options if o != stim[1].target_angle)
    clock.advance(2.0)
    engine.select(wrong)
    engine.next_trial()
    return engine


def test_attempt_is_recorded_in_sqlite(tmp_path: Path) -> None:
    engine = _finished_engine()
    result = attempt_result_from_test(engine)
    assert result.attempted == 2
    assert result.correct == 1
    assert result.median_rt_ms == pytest.approx(1500.0)

    db_path = tmp_path / "results.sqlite3"
    attempt_id = record_angle_matching_attempt(db_path=db_path, result=result, app_version="test")

    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == SCHEMA_VERSION
        row = conn.execute(
            "SELECT test_code, rng_seed, profile FROM attempt WHERE id=?", (attempt_id,)
        ).fetchone()
        assert row == ("angle_matching", 21, "standard")

        metrics = dict(conn.execute("SELECT key, value FROM metric WHERE attempt_id=?", (attempt_id,)))
        assert metrics["attempted"] == "2"
        assert metrics["correct"] == "1"
        assert metrics["mean_rt_ms"] == "1500.000"

        events = conn.execute(
            "SELECT seq, is_correct, rt_ms FROM trial_event WHERE attempt_id=? ORDER BY seq",
            (attempt_id,),
        ).fetchall()
        assert events == [(0, 1, 1000), (1, 0, 2000)]
    finally:
        conn.close()

    # Re-opening an existing database appends without re-migrating.
    second = record_angle_matching_attempt(db_path=db_path, result=result, app_version="test")
    assert second == attempt_id + 1
