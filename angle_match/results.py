from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path

from .angle_matching import AngleMatchingConfig, AngleMatchingTest
from .cognitive_core import TrialResult

logger = logging.getLogger(__name__)

CSV_HEADER = ("Stimulus", "Correct", "Time (seconds)", "Target Angle", "Selected Angle")


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Persistable summary + per-stimulus log for a completed run."""

    test_code: str
    test_version: int
    seed: int
    config: AngleMatchingConfig

    attempted: int
    correct: int
    accuracy: float
    mean_rt_ms: float | None
    median_rt_ms: float | None
    degraded_stimuli: tuple[int, ...]

    trials: list[TrialResult]


def attempt_result_from_test(
    test: AngleMatchingTest,
    *,
    test_code: str = "angle_matching",
    test_version: int = 1,
) -> AttemptResult:
    summary = test.summary()
    return AttemptResult(
        test_code=str(test_code),
        test_version=int(test_version),
        seed=int(test.seed),
        config=test.config,
        attempted=int(summary.attempted),
        correct=int(summary.correct),
        accuracy=float(summary.accuracy),
        mean_rt_ms=summary.mean_time_ms,
        median_rt_ms=summary.median_time_ms,
        degraded_stimuli=test.report.degraded_indices(),
        trials=test.results(),
    )


def _format_angle(angle: float) -> str:
    return f"{angle:g}"


def csv_rows(trials: list[TrialResult]) -> list[list[str]]:
    rows = [list(CSV_HEADER)]
    for n, trial in enumerate(trials, start=1):
        rows.append(
            [
                str(n),
                "Yes" if trial.correct else "No",
                f"{trial.time_ms / 1000.0:.2f}",
                _format_angle(trial.target_angle),
                _format_angle(trial.selected_angle),
            ]
        )
    return rows


def results_to_csv(trials: list[TrialResult]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(csv_rows(trials))
    return buf.getvalue()


def export_results_csv(trials: list[TrialResult], path: Path) -> Path:
    """Write the results table to ``path``. OSError propagates to the caller."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(results_to_csv(trials), encoding="utf-8", newline="")
    logger.info("Exported %d results to %s", len(trials), path)
    return path
