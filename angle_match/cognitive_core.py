from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, MutableSequence, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

from .angle_math import same_angle
from .clock import Clock, elapsed_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    """Randomness strategy threaded through generators.

    ``random.Random`` satisfies this protocol, as does ``SeededRng``.
    """

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...

    def shuffle(self, seq: MutableSequence[object]) -> None: ...


class Trial(Protocol):
    @property
    def target_angle(self) -> float: ...

    @property
    def options(self) -> tuple[float, ...]: ...


class SelectionScorer(Protocol):
    def is_correct(self, *, trial: Trial, selected: float) -> bool: ...


class Phase(str, Enum):
    INSTRUCTIONS = "instructions"
    RESPONSE = "response"
    SELECTED = "selected"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class RetryOutcome(Generic[T]):
    value: T
    attempts: int
    satisfied: bool


def bounded_retry(
    attempt: Callable[[], T],
    accept: Callable[[T], bool],
    *,
    max_attempts: int,
) -> RetryOutcome[T]:
    """Call ``attempt`` until ``accept`` passes or the budget runs out.

    On exhaustion the last candidate is returned with ``satisfied=False``.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    value = attempt()
    tries = 1
    while not accept(value):
        if tries >= max_attempts:
            return RetryOutcome(value=value, attempts=tries, satisfied=False)
        value = attempt()
        tries += 1
    return RetryOutcome(value=value, attempts=tries, satisfied=True)


@dataclass(frozen=True, slots=True)
class SelectionEvent:
    angle: float
    elapsed_time_ms: int


@dataclass(frozen=True, slots=True)
class TrialResult:
    index: int
    target_angle: float
    selected_angle: float
    correct: bool
    presented_at_s: float
    answered_at_s: float
    time_ms: int


@dataclass(frozen=True, slots=True)
class AttemptSummary:
    attempted: int
    correct: int
    accuracy: float
    mean_time_ms: float | None
    median_time_ms: float | None


@dataclass(frozen=True, slots=True)
class TestSnapshot:
    """View model for the UI (pure data)."""

    title: str
    phase: Phase
    prompt: str
    index: int
    total: int
    trial: Trial | None
    selected_angle: float | None
    correct_so_far: int


class ExactAngleScorer:
    def is_correct(self, *, trial: Trial, selected: float) -> bool:
        return same_angle(selected, trial.target_angle)


class SequencedSelectionTest:
    """Reusable harness: instructions -> (response -> selected)* -> results.

    - The trial sequence is fixed at construction and never mutated.
    - Time is entirely via injected Clock.
    - One selection is accepted per trial; later ones are ignored until
      ``next_trial`` advances.
    """

    def __init__(
        self,
        *,
        title: str,
        instructions: list[str],
        trials: Sequence[Trial],
        clock: Clock,
        seed: int,
        scorer: SelectionScorer | None = None,
    ) -> None:
        self._title = title
        self._instructions = instructions
        self._trials = tuple(trials)
        self._clock = clock
        self._seed = int(seed)
        self._scorer: SelectionScorer = scorer or ExactAngleScorer()

        self._phase: Phase = Phase.INSTRUCTIONS
        self._index = -1
        self._presented_at_s: float | None = None
        self._selected: float | None = None
        self._results: list[TrialResult] = []

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def title(self) -> str:
        return self._title

    def instructions(self) -> list[str]:
        return list(self._instructions)

    def trials(self) -> tuple[Trial, ...]:
        return self._trials

    def results(self) -> list[TrialResult]:
        return list(self._results)

    def current_trial(self) -> Trial | None:
        if self._phase not in (Phase.RESPONSE, Phase.SELECTED):
            return None
        return self._trials[self._index]

    def start(self) -> None:
        if self._phase is not Phase.INSTRUCTIONS:
            return
        if not self._trials:
            logger.info("No trials configured; going straight to results.")
            self._phase = Phase.RESULTS
            return
        self._present(0)

    def select(self, angle: float) -> SelectionEvent | None:
        """Commit a selection for the current trial. Returns None if ignored."""

        if self._phase is not Phase.RESPONSE:
            return None
        assert self._presented_at_s is not None

        trial = self._trials[self._index]
        answered_at_s = self._clock.now()
        time_ms = elapsed_ms(self._presented_at_s, answered_at_s)
        correct = bool(self._scorer.is_correct(trial=trial, selected=angle))

        self._results.append(
            TrialResult(
                index=self._index,
                target_angle=float(trial.target_angle),
                selected_angle=float(angle),
                correct=correct,
                presented_at_s=self._presented_at_s,
                answered_at_s=answered_at_s,
                time_ms=time_ms,
            )
        )
        self._selected = float(angle)
        self._phase = Phase.SELECTED
        logger.debug(
            "Trial %d: target=%s selected=%s correct=%s rt=%dms",
            self._index,
            trial.target_angle,
            angle,
            correct,
            time_ms,
        )
        return SelectionEvent(angle=float(angle), elapsed_time_ms=time_ms)

    def next_trial(self) -> bool:
        """Advance after a selection. Returns True if the state changed."""

        if self._phase is not Phase.SELECTED:
            return False
        if self._index + 1 >= len(self._trials):
            self._phase = Phase.RESULTS
            self._presented_at_s = None
            self._selected = None
            return True
        self._present(self._index + 1)
        return True

    def summary(self) -> AttemptSummary:
        attempted = len(self._results)
        correct = sum(1 for r in self._results if r.correct)
        accuracy = 0.0 if attempted == 0 else correct / attempted
        times = sorted(r.time_ms for r in self._results)

        mean_ms: float | None
        median_ms: float | None
        if not times:
            mean_ms = None
            median_ms = None
        else:
            mean_ms = float(sum(times)) / float(len(times))
            mid = len(times) // 2
            if len(times) % 2 == 1:
                median_ms = float(times[mid])
            else:
                median_ms = float(times[mid - 1] + times[mid]) / 2.0

        return AttemptSummary(
            attempted=attempted,
            correct=correct,
            accuracy=accuracy,
            mean_time_ms=mean_ms,
            median_time_ms=median_ms,
        )

    def current_prompt(self) -> str:
        if self._phase is Phase.INSTRUCTIONS:
            return "Press Enter to begin."
        if self._phase is Phase.RESPONSE:
            return "Click the line that matches the target angle."
        if self._phase is Phase.SELECTED:
            if self._index + 1 >= len(self._trials):
                return "Press Enter to finish the test."
            return "Press Enter for the next stimulus."
        s = self.summary()
        acc_pct = int(round(s.accuracy * 100))
        rt = "n/a" if s.mean_time_ms is None else f"{s.mean_time_ms / 1000.0:.2f}s"
        return f"Results\nAttempted: {s.attempted}\nCorrect: {s.correct}\nAccuracy: {acc_pct}%\nMean RT: {rt}"

    def snapshot(self) -> TestSnapshot:
        return TestSnapshot(
            title=self._title,
            phase=self._phase,
            prompt=self.current_prompt(),
            index=self._index,
            total=len(self._trials),
            trial=self.current_trial(),
            selected_angle=self._selected,
            correct_so_far=sum(1 for r in self._results if r.correct),
        )

    def _present(self, index: int) -> None:
        self._index = index
        self._selected = None
        self._presented_at_s = self._clock.now()
        self._phase = Phase.RESPONSE


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def shuffle(self, seq: MutableSequence[object]) -> None:
        self._rng.shuffle(seq)


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x <= lo else hi if x >= hi else float(x)


def round_to_step(x: float, step: float) -> float:
    # Half-up, matching how the settings form rounds.
    return math.floor(float(x) / step + 0.5) * step
