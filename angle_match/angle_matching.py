from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from .angle_math import (
    ANGLE_EPSILON,
    Category,
    angle_category,
    angular_distance,
    category_band,
    clamp_to_category,
    normalize_angle,
    orientation,
    same_angle,
)
from .clock import Clock
from .cognitive_core import (
    ExactAngleScorer,
    RandomSource,
    SeededRng,
    SequencedSelectionTest,
    bounded_retry,
    clamp,
    round_to_step,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS_PER_ANGLE = 100
MAX_REPAIR_ROUNDS = 100
QUADRANTS = 4


class GeneratorProfile(StrEnum):
    STANDARD = "standard"
    LEGACY = "legacy"


@dataclass(frozen=True, slots=True)
class ProfileRules:
    angle_range_deg: float
    variance_min: float
    variance_max: float
    variance_step: float
    target_min: int
    target_max: int
    # Random targets are ``randint(lo, hi) * 10``.
    random_target_steps: tuple[int, int]
    uses_supplied_targets: bool
    # None means half the degree variance.
    min_separation_deg: float | None

    def min_separation(self, degree_variance: float) -> float:
        if self.min_separation_deg is None:
            return max(0.0, float(degree_variance) / 2.0)
        return self.min_separation_deg


PROFILE_RULES: dict[GeneratorProfile, ProfileRules] = {
    GeneratorProfile.STANDARD: ProfileRules(
        angle_range_deg=180.0,
        variance_min=7.5,
        variance_max=50.0,
        variance_step=2.5,
        target_min=1,
        target_max=179,
        random_target_steps=(1, 17),
        uses_supplied_targets=True,
        min_separation_deg=None,
    ),
    GeneratorProfile.LEGACY: ProfileRules(
        angle_range_deg=360.0,
        variance_min=10.0,
        variance_max=50.0,
        variance_step=10.0,
        target_min=0,
        target_max=359,
        random_target_steps=(0, 35),
        uses_supplied_targets=False,
        min_separation_deg=20.0,
    ),
}


@dataclass(frozen=True, slots=True)
class AngleMatchingConfig:
    stimuli_count: int = 3
    angles_per_quadrant: int = 1
    correct_quadrant: int = 1
    use_correct_quadrant: bool = False
    degree_variance: float = 7.5
    target_angles: tuple[int, ...] = (30, 60, 120)
    profile: GeneratorProfile = GeneratorProfile.STANDARD

    @property
    def rules(self) -> ProfileRules:
        return PROFILE_RULES[self.profile]

    @property
    def option_count(self) -> int:
        return max(1, int(self.angles_per_quadrant)) * QUADRANTS

    def validated(self) -> "AngleMatchingConfig":
        """Return a copy with every field clamped into its legal range."""

        rules = self.rules
        variance = round_to_step(self.degree_variance, rules.variance_step)
        variance = clamp(variance, rules.variance_min, rules.variance_max)
        targets = tuple(
            int(clamp(int(a), rules.target_min, rules.target_max)) for a in self.target_angles
        )
        return replace(
            self,
            stimuli_count=max(1, int(self.stimuli_count)),
            angles_per_quadrant=int(clamp(int(self.angles_per_quadrant), 1, QUADRANTS)),
            correct_quadrant=int(clamp(int(self.correct_quadrant), 1, QUADRANTS)),
            use_correct_quadrant=bool(self.use_correct_quadrant),
            degree_variance=variance,
            target_angles=targets,
        )

    def with_stimuli_count(self, count: int, *, rng: RandomSource) -> "AngleMatchingConfig":
        """Change the stimulus count, keeping one target slot per stimulus.

        Existing slots are kept; new slots get a random multiple of 10.
        """

        count = max(1, int(count))
        if count == self.stimuli_count and len(self.target_angles) == count:
            return self
        lo_q, hi_q = self.rules.random_target_steps
        targets = list(self.target_angles[:count])
        while len(targets) < count:
            targets.append(rng.randint(lo_q, hi_q) * 10)
        return replace(self, stimuli_count=count, target_angles=tuple(targets))

    def to_dict(self) -> dict[str, Any]:
        return {
            "stimuli_count": int(self.stimuli_count),
            "angles_per_quadrant": int(self.angles_per_quadrant),
            "correct_quadrant": int(self.correct_quadrant),
            "use_correct_quadrant": bool(self.use_correct_quadrant),
            "degree_variance": float(self.degree_variance),
            "target_angles": [int(a) for a in self.target_angles],
            "profile": str(self.profile.value),
        }

    @classmethod
    def from_dict(cls, data: object) -> "AngleMatchingConfig":
        if not isinstance(data, dict):
            return cls()
        defaults = cls()
        try:
            profile = GeneratorProfile(str(data.get("profile", defaults.profile.value)))
        except ValueError:
            profile = defaults.profile

        raw_targets = data.get("target_angles")
        targets: list[int] = []
        if isinstance(raw_targets, list):
            for raw in raw_targets:
                try:
                    targets.append(int(raw))
                except (TypeError, ValueError):
                    continue
        else:
            targets = list(defaults.target_angles)

        loaded = cls(
            stimuli_count=_as_int(data.get("stimuli_count"), defaults.stimuli_count),
            angles_per_quadrant=_as_int(data.get("angles_per_quadrant"), defaults.angles_per_quadrant),
            correct_quadrant=_as_int(data.get("correct_quadrant"), defaults.correct_quadrant),
            use_correct_quadrant=bool(data.get("use_correct_quadrant", defaults.use_correct_quadrant)),
            degree_variance=_as_float(data.get("degree_variance"), defaults.degree_variance),
            target_angles=tuple(targets),
            profile=profile,
        )
        return loaded.validated()


def _as_int(value: object, fallback: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


def _as_float(value: object, fallback: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


@dataclass(frozen=True, slots=True)
class Stimulus:
    target_angle: float
    options: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class StimulusReport:
    index: int
    spacing_met: bool
    category_met: bool
    repaired_duplicates: int = 0

    @property
    def degraded(self) -> bool:
        return not (self.spacing_met and self.category_met)


@dataclass(frozen=True, slots=True)
class GenerationReport:
    stimuli: tuple[StimulusReport, ...] = field(default_factory=tuple)

    @property
    def all_constraints_met(self) -> bool:
        return not any(r.degraded for r in self.stimuli)

    def degraded_indices(self) -> tuple[int, ...]:
        return tuple(r.index for r in self.stimuli if r.degraded)


class StimulusGenerator:
    """Builds target/decoy angle sets from a configuration.

    Decoys grow as a chain: each one perturbs a random existing option by the
    degree variance, so decoys stay close to each other as well as to the
    target.
    """

    def __init__(self, *, seed: int | None = None, rng: RandomSource | None = None) -> None:
        self._rng: RandomSource = rng if rng is not None else SeededRng(0 if seed is None else seed)

    def generate(self, config: AngleMatchingConfig) -> list[Stimulus]:
        stimuli, _ = self.generate_with_report(config)
        return stimuli

    def generate_with_report(
        self, config: AngleMatchingConfig
    ) -> tuple[list[Stimulus], GenerationReport]:
        count = int(config.stimuli_count)
        if count <= 0:
            return [], GenerationReport()

        stimuli: list[Stimulus] = []
        reports: list[StimulusReport] = []
        for i in range(count):
            stimulus, report = self._make_stimulus(i, config)
            stimuli.append(stimulus)
            reports.append(report)
            if report.degraded:
                logger.warning(
                    "Stimulus %d (target %.1f) is best-effort: spacing_met=%s category_met=%s",
                    i,
                    stimulus.target_angle,
                    report.spacing_met,
                    report.category_met,
                )

        logger.info("Generated %d stimuli (%s profile).", len(stimuli), config.profile.value)
        return stimuli, GenerationReport(stimuli=tuple(reports))

    def _make_stimulus(self, index: int, config: AngleMatchingConfig) -> tuple[Stimulus, StimulusReport]:
        rules = config.rules
        option_count = config.option_count
        variance = float(config.degree_variance)
        min_sep = rules.min_separation(variance)

        target = self._resolve_target(index, config)
        category = angle_category(target)

        options: list[float] = [target]
        spacing_met = True
        while len(options) < option_count:
            spacing_met &= self._grow(options, category, variance, min_sep, rules.angle_range_deg)

        repaired, repair_spacing = self._repair_uniqueness(
            options,
            target=target,
            category=category,
            option_count=option_count,
            variance=variance,
            min_sep=min_sep,
            range_deg=rules.angle_range_deg,
        )
        spacing_met &= repair_spacing

        self._rng.shuffle(options)

        if config.use_correct_quadrant:
            self._place_in_quadrant(options, target, config)

        category_met = all(angle_category(o) is category for o in options)
        stimulus = Stimulus(target_angle=target, options=tuple(options))
        report = StimulusReport(
            index=index,
            spacing_met=spacing_met,
            category_met=category_met,
            repaired_duplicates=repaired,
        )
        return stimulus, report

    def _resolve_target(self, index: int, config: AngleMatchingConfig) -> float:
        rules = config.rules
        if rules.uses_supplied_targets and index < len(config.target_angles):
            raw = float(config.target_angles[index])
        else:
            lo_q, hi_q = rules.random_target_steps
            raw = float(self._rng.randint(lo_q, hi_q) * 10)
        return normalize_angle(raw, rules.angle_range_deg)

    def _chain_step(
        self,
        options: Sequence[float],
        category: Category,
        variance: float,
        range_deg: float,
    ) -> float:
        base = options[self._rng.randint(0, len(options) - 1)]
        direction = 1.0 if self._rng.random() < 0.5 else -1.0
        candidate = normalize_angle(base + direction * variance, range_deg)
        return clamp_to_category(candidate, category)

    def _grow(
        self,
        options: list[float],
        category: Category,
        variance: float,
        min_sep: float,
        range_deg: float,
    ) -> bool:
        outcome = bounded_retry(
            lambda: self._chain_step(options, category, variance, range_deg),
            lambda c: all(
                angular_distance(c, o, range_deg) >= min_sep - ANGLE_EPSILON for o in options
            ),
            max_attempts=MAX_ATTEMPTS_PER_ANGLE,
        )
        options.append(outcome.value)
        return outcome.satisfied

    def _repair_uniqueness(
        self,
        options: list[float],
        *,
        target: float,
        category: Category,
        option_count: int,
        variance: float,
        min_sep: float,
        range_deg: float,
    ) -> tuple[int, bool]:
        repaired = 0
        spacing_met = True
        rounds = 0
        while True:
            extra = [i for i, a in enumerate(options) if same_angle(a, target)][1:]
            if not extra:
                break
            rounds += 1
            if rounds > MAX_REPAIR_ROUNDS:
                for i in extra:
                    options[i] = _nudge_off_target(target, category)
                spacing_met = False
                break
            for i in reversed(extra):
                del options[i]
            repaired += len(extra)
            while len(options) < option_count:
                spacing_met &= self._grow(options, category, variance, min_sep, range_deg)
        return repaired, spacing_met

    def _place_in_quadrant(
        self,
        options: list[float],
        target: float,
        config: AngleMatchingConfig,
    ) -> None:
        apq = len(options) // QUADRANTS
        quadrant = int(clamp(int(config.correct_quadrant), 1, QUADRANTS))
        lo = (quadrant - 1) * apq
        hi = quadrant * apq
        idx = next(i for i, a in enumerate(options) if same_angle(a, target))
        if lo <= idx < hi:
            return
        swap = self._rng.randint(lo, hi - 1)
        options[idx], options[swap] = options[swap], options[idx]


def _nudge_off_target(target: float, category: Category) -> float:
    """Nearest in-band angle 1 degree away from ``target``."""

    lo, hi = category_band(category)
    o = orientation(target)
    offset = target - o
    for delta in (-1.0, 1.0):
        candidate = o + delta
        if lo <= candidate <= hi:
            return offset + candidate
    return offset + (hi if same_angle(o, lo) else lo)


class AngleMatchingTest(SequencedSelectionTest):
    """Session controller for one run of the angle-matching task."""

    def __init__(
        self,
        *,
        config: AngleMatchingConfig,
        stimuli: Sequence[Stimulus],
        report: GenerationReport,
        clock: Clock,
        seed: int,
        instructions: list[str],
    ) -> None:
        super().__init__(
            title="Angle Matching",
            instructions=instructions,
            trials=stimuli,
            clock=clock,
            seed=seed,
            scorer=ExactAngleScorer(),
        )
        self._config = config
        self._report = report

    @property
    def config(self) -> AngleMatchingConfig:
        return self._config

    @property
    def report(self) -> GenerationReport:
        return self._report

    def stimuli(self) -> tuple[Stimulus, ...]:
        return tuple(s for s in self.trials() if isinstance(s, Stimulus))


def build_angle_matching_test(
    *,
    clock: Clock,
    seed: int,
    config: AngleMatchingConfig | None = None,
    rng: RandomSource | None = None,
) -> AngleMatchingTest:
    cfg = config or AngleMatchingConfig()
    generator = StimulusGenerator(seed=seed, rng=rng)
    stimuli, report = generator.generate_with_report(cfg)

    instructions = [
        "Angle Matching",
        "",
        "A target line is shown at the top of the screen.",
        "Find the line below that has exactly the same angle.",
        "All candidate lines are in the same angle family as the target.",
        "",
        "Controls:",
        "- Move the mouse over a line to highlight it",
        "- Click once to choose; your choice cannot be changed",
        "- Press Enter (or click Next) to continue",
        "",
        f"This run has {len(stimuli)} stimuli.",
    ]

    return AngleMatchingTest(
        config=cfg,
        stimuli=stimuli,
        report=report,
        clock=clock,
        seed=seed,
        instructions=instructions,
    )
