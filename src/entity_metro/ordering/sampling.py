"""Random-permutation baseline: keep the cheapest of many shuffles."""

from __future__ import annotations

import logging

from entity_metro.errors import SolverError
from entity_metro.ordering.constants import DEFAULT_SAMPLE_BATCH
from entity_metro.ordering.problem import SolverProblem
from entity_metro.ordering.rng import chain_seed, seed_to_u32, shuffled_order

logger = logging.getLogger(__name__)


def best_random_order(
    problem: SolverProblem,
    seed: int,
    batch_size: int = DEFAULT_SAMPLE_BATCH,
) -> tuple[int, list[int]]:
    """Return ``(cost, order)`` of the best of ``batch_size`` random orders.

    Candidate ``k`` is the same shuffle chain ``k`` of the annealer starts
    from, so the baseline is what annealing would begin with.
    """
    if batch_size <= 0:
        raise SolverError("batch size must be > 0")

    seed32 = seed_to_u32(seed)
    best_cost: int | None = None
    best_order: list[int] = []
    for candidate in range(batch_size):
        order, _ = shuffled_order(problem.node_count, chain_seed(seed32, candidate))
        cost = problem.cost(order)
        if best_cost is None or cost < best_cost:
            best_cost = cost
            best_order = order
    logger.debug("best of %d random orders: cost %d", batch_size, best_cost)
    return best_cost, best_order
