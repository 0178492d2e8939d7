"""Tuning parameters of the annealer."""

from __future__ import annotations

from dataclasses import dataclass, replace

from entity_metro.ordering.constants import (
    COOLING_ADJUST_MAX,
    COOLING_ADJUST_MIN,
    COOLING_MAX,
    COOLING_MIN,
    DEFAULT_COOLING,
    DEFAULT_COOLING_ADJUST,
    DEFAULT_STEPS,
    DEFAULT_TARGET_ACCEPTANCE,
    MAX_BATCH_SIZE,
    MAX_STEPS,
    MAX_TEMPERATURE,
    MIN_BATCH_SIZE,
    MIN_STEPS,
    MIN_TEMPERATURE,
    RESEED_PLATEAU_STEPS,
    STOP_AFTER_PLATEAU_MS,
    TARGET_ACCEPTANCE_MAX,
    TARGET_ACCEPTANCE_MIN,
    TARGET_MS,
)


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class SolverConfig:
    """Annealer settings. ``None`` fields are derived from the problem.

    ``batch_size`` defaults to :func:`~entity_metro.ordering.tuning.batch_size_for`,
    ``initial_temperature`` to an estimate from sampled swaps,
    ``reheat_temperature`` to the initial temperature and ``seed`` to a
    hash of the graph's shape.
    """

    batch_size: int | None = None
    steps: int = DEFAULT_STEPS
    initial_temperature: float | None = None
    cooling: float = DEFAULT_COOLING
    reheat_enabled: bool = True
    reheat_threshold: int = RESEED_PLATEAU_STEPS
    reheat_temperature: float | None = None
    target_acceptance: float = DEFAULT_TARGET_ACCEPTANCE
    cooling_adjust: float = DEFAULT_COOLING_ADJUST
    seed: int | None = None
    target_ms: float = TARGET_MS
    stop_after_plateau_ms: float = STOP_AFTER_PLATEAU_MS

    def clamped(self) -> SolverConfig:
        """Return a copy with every numeric field inside its documented range."""
        return replace(
            self,
            batch_size=(
                None
                if self.batch_size is None
                else _clamp(int(self.batch_size), MIN_BATCH_SIZE, MAX_BATCH_SIZE)
            ),
            steps=_clamp(int(self.steps), MIN_STEPS, MAX_STEPS),
            initial_temperature=(
                None
                if self.initial_temperature is None
                else _clamp(float(self.initial_temperature), MIN_TEMPERATURE, MAX_TEMPERATURE)
            ),
            cooling=_clamp(float(self.cooling), COOLING_MIN, COOLING_MAX),
            reheat_threshold=max(1, int(self.reheat_threshold)),
            reheat_temperature=(
                None
                if self.reheat_temperature is None
                else _clamp(float(self.reheat_temperature), MIN_TEMPERATURE, MAX_TEMPERATURE)
            ),
            target_acceptance=_clamp(
                float(self.target_acceptance), TARGET_ACCEPTANCE_MIN, TARGET_ACCEPTANCE_MAX
            ),
            cooling_adjust=_clamp(
                float(self.cooling_adjust), COOLING_ADJUST_MIN, COOLING_ADJUST_MAX
            ),
            target_ms=max(1.0, float(self.target_ms)),
            stop_after_plateau_ms=max(0.0, float(self.stop_after_plateau_ms)),
        )
