"""Self-tuning helpers: initial temperature, batch sizing and stop policy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from entity_metro.ordering.constants import (
    CONTROLLER_DEAD_BAND,
    CONTROLLER_FACTOR_RANGE,
    DEFAULT_STEPS,
    DEFAULT_TARGET_ACCEPTANCE,
    MAX_BATCH_SIZE,
    MAX_STEPS,
    MAX_TEMPERATURE,
    MAX_TEMPERATURE_SAMPLES,
    MAX_TOTAL_NODES,
    MIN_BATCH_SIZE,
    MIN_ESTIMATED_TEMPERATURE,
    MIN_STEPS,
    MIN_TEMPERATURE_SAMPLES,
    SAMPLER_SEED_MIX,
    STOP_AFTER_PLATEAU_MS,
    TARGET_ACCEPTANCE_MAX,
    TARGET_ACCEPTANCE_MIN,
    TARGET_MS,
)
from entity_metro.ordering.problem import SolverProblem
from entity_metro.ordering.rng import LcgRng

logger = logging.getLogger(__name__)


def estimate_initial_temperature(
    problem: SolverProblem,
    seed: int,
    target_acceptance: float = DEFAULT_TARGET_ACCEPTANCE,
) -> float:
    """Pick a starting temperature from the spread of uphill swap costs.

    Samples single random swaps of the identity permutation and returns
    ``mean(positive deltas) / -ln(target_acceptance)``, so that an average
    uphill move is initially accepted with the target probability.
    """
    node_count = problem.node_count
    if node_count < 2 or problem.edge_count == 0:
        return 1.0

    order = list(range(node_count))
    base_cost = problem.cost(order)
    rng = LcgRng(seed ^ SAMPLER_SEED_MIX)
    sample_count = max(MIN_TEMPERATURE_SAMPLES, min(node_count, MAX_TEMPERATURE_SAMPLES))

    total_delta = 0
    uphill = 0
    for _ in range(sample_count):
        i, j = rng.distinct_pair(node_count)
        order[i], order[j] = order[j], order[i]
        candidate_cost = problem.cost(order)
        order[i], order[j] = order[j], order[i]
        if candidate_cost > base_cost:
            total_delta += candidate_cost - base_cost
            uphill += 1

    avg_delta = total_delta / uphill if uphill else 1.0
    target = min(max(target_acceptance, TARGET_ACCEPTANCE_MIN), TARGET_ACCEPTANCE_MAX)
    denom = -math.log(target)
    temperature = avg_delta / denom if denom > 0 else avg_delta
    temperature = min(max(temperature, MIN_ESTIMATED_TEMPERATURE), MAX_TEMPERATURE)
    logger.debug(
        "estimated initial temperature %.3f from %d/%d uphill samples",
        temperature,
        uphill,
        sample_count,
    )
    return temperature


def batch_size_for(node_count: int) -> int:
    """Number of chains that fits the lane memory budget for ``node_count`` nodes."""
    max_chains = MAX_TOTAL_NODES // max(node_count, 1)
    return min(max(max_chains, MIN_BATCH_SIZE), MAX_BATCH_SIZE)


def _controller_factor(elapsed_ms: float, target_ms: float) -> float | None:
    """Multiplicative correction for the next batch, None inside the dead band."""
    if elapsed_ms <= 0:
        return CONTROLLER_FACTOR_RANGE[1]
    ratio = max(target_ms, 1.0) / elapsed_ms
    if CONTROLLER_DEAD_BAND[0] <= ratio <= CONTROLLER_DEAD_BAND[1]:
        return None
    return min(max(ratio, CONTROLLER_FACTOR_RANGE[0]), CONTROLLER_FACTOR_RANGE[1])


def adjust_steps(
    current: int,
    elapsed_ms: float,
    target_ms: float = TARGET_MS,
    min_steps: int = MIN_STEPS,
    max_steps: int = MAX_STEPS,
) -> int:
    """Scale the step count so the next batch lands near ``target_ms``."""
    factor = _controller_factor(elapsed_ms, target_ms)
    if factor is None:
        return min(max(current, min_steps), max_steps)
    return min(max(round(current * factor), min_steps), max_steps)


@dataclass
class BatchController:
    """Proportional controller for the caller-visible steps and batch size.

    The step count absorbs the correction first; once it is pinned at a
    bound the batch size is scaled by the same factor.
    """

    steps: int = DEFAULT_STEPS
    batch_size: int = MIN_BATCH_SIZE
    target_ms: float = TARGET_MS
    max_batch_size: int = MAX_BATCH_SIZE

    def update(self, elapsed_ms: float) -> None:
        factor = _controller_factor(elapsed_ms, self.target_ms)
        if factor is None:
            return
        steps = adjust_steps(self.steps, elapsed_ms, self.target_ms)
        if steps != self.steps:
            self.steps = steps
            return
        batch = round(self.batch_size * factor)
        self.batch_size = min(max(batch, MIN_BATCH_SIZE), self.max_batch_size)


@dataclass
class PlateauTracker:
    """Accumulates batch time since the last improvement of the best cost."""

    stop_after_ms: float = STOP_AFTER_PLATEAU_MS
    best_cost: int | None = None
    plateau_ms: float = 0.0

    def observe(self, cost: int | None, elapsed_ms: float) -> bool:
        """Record one batch; return True when it improved the best cost."""
        if cost is not None and (self.best_cost is None or cost < self.best_cost):
            self.best_cost = cost
            self.plateau_ms = 0.0
            return True
        self.plateau_ms += max(elapsed_ms, 0.0)
        return False

    @property
    def exhausted(self) -> bool:
        return self.plateau_ms >= self.stop_after_ms
