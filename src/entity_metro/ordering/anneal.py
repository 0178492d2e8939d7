"""Parallel simulated annealing for Minimum Linear Arrangement.

Every chain is one lane of a structure-of-arrays batch: row ``k`` of
``orders``/``positions``/``best_orders`` and element ``k`` of the
per-chain vectors belong to chain ``k``. All lanes advance in lock-step
with numpy array operations and never read each other's state during a
batch. Between batches a min-reduction finds the globally best chain and
stagnant chains are reseeded from it.

Per iteration and lane:

1. draw two distinct positions from the lane's 32-bit LCG;
2. compute the cost delta of swapping their nodes from the edges incident
   to those two nodes only;
3. accept downhill moves, and uphill moves with probability
   ``exp(-delta / T)`` while ``T`` is above the minimum temperature;
4. cool ``T`` by the lane's cooling rate, never below its floor, and
   retune the cooling rate from the acceptance ratio every window.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from entity_metro.errors import SolverError
from entity_metro.ordering.config import SolverConfig
from entity_metro.ordering.constants import (
    ACCEPTANCE_BAND,
    ACCEPTANCE_WINDOW,
    COOLING_MAX,
    COOLING_MIN,
    FLOOR_FRACTION,
    INV_U32_MAX_PLUS1,
    MAX_BATCH_SIZE,
    MAX_STEPS,
    MIN_BATCH_SIZE,
    MIN_TEMPERATURE,
)
from entity_metro.ordering.problem import SolverProblem
from entity_metro.ordering.rng import (
    chain_seed,
    lcg_next_lanes,
    seed_to_u32,
    shuffled_order,
)
from entity_metro.ordering.tuning import estimate_initial_temperature

logger = logging.getLogger(__name__)

# Per-lane arrays, in the order they are stored on SolverState.
_LANE_FIELDS = (
    "orders",
    "positions",
    "best_orders",
    "costs",
    "best_costs",
    "temperatures",
    "floors",
    "cooling",
    "window_steps",
    "window_accepts",
    "stagnant",
    "rng_states",
    "seed_versions",
    "chain_ids",
)


@dataclass(frozen=True)
class Chain:
    """Snapshot of one chain's state."""

    index: int
    chain_id: int
    order: list[int]
    positions: list[int]
    cost: int
    best_cost: int
    best_order: list[int]
    temperature: float
    temperature_floor: float
    cooling: float
    stagnant: int
    rng_state: int
    seed_version: int


@dataclass(frozen=True)
class SwapRecord:
    """One iteration across all lanes: proposed positions, delta, decision."""

    i: np.ndarray
    j: np.ndarray
    delta: np.ndarray
    accepted: np.ndarray


@dataclass(frozen=True)
class BatchOutcome:
    """Result of :func:`run_batch`: the best arrangement known after it."""

    best_cost: int
    best_order: list[int]
    best_index: int
    steps: int
    accepted: int
    reseeded: int
    elapsed_ms: float


class SolverState:
    """All chains of one annealing run plus the cross-chain best."""

    def __init__(
        self,
        problem: SolverProblem,
        config: SolverConfig,
        seed: int,
        initial_temperature: float,
        reheat_temperature: float,
    ) -> None:
        self.problem = problem
        self.config = config
        self.seed = seed
        self.seed32 = seed_to_u32(seed)
        self.initial_temperature = initial_temperature
        self.reheat_temperature = reheat_temperature
        self.reheat_floor = max(reheat_temperature * FLOOR_FRACTION, MIN_TEMPERATURE)

        self.global_best_cost: int | None = None
        self.global_best_order: list[int] | None = None
        self.best_version = 0
        self.best_index = 0
        self.next_chain_id = 0
        self.total_steps = 0
        self.batches = 0

        n = problem.node_count
        self.orders = np.zeros((0, n), dtype=np.int64)
        self.positions = np.zeros((0, n), dtype=np.int64)
        self.best_orders = np.zeros((0, n), dtype=np.int64)
        self.costs = np.zeros(0, dtype=np.int64)
        self.best_costs = np.zeros(0, dtype=np.int64)
        self.temperatures = np.zeros(0, dtype=np.float64)
        self.floors = np.zeros(0, dtype=np.float64)
        self.cooling = np.zeros(0, dtype=np.float64)
        self.window_steps = np.zeros(0, dtype=np.int64)
        self.window_accepts = np.zeros(0, dtype=np.int64)
        self.stagnant = np.zeros(0, dtype=np.int64)
        self.rng_states = np.zeros(0, dtype=np.uint32)
        self.seed_versions = np.zeros(0, dtype=np.int64)
        self.chain_ids = np.zeros(0, dtype=np.int64)

    @property
    def batch_size(self) -> int:
        return int(self.costs.shape[0])

    def chain(self, index: int) -> Chain:
        return Chain(
            index=index,
            chain_id=int(self.chain_ids[index]),
            order=self.orders[index].tolist(),
            positions=self.positions[index].tolist(),
            cost=int(self.costs[index]),
            best_cost=int(self.best_costs[index]),
            best_order=self.best_orders[index].tolist(),
            temperature=float(self.temperatures[index]),
            temperature_floor=float(self.floors[index]),
            cooling=float(self.cooling[index]),
            stagnant=int(self.stagnant[index]),
            rng_state=int(self.rng_states[index]),
            seed_version=int(self.seed_versions[index]),
        )

    def chains(self) -> list[Chain]:
        return [self.chain(k) for k in range(self.batch_size)]

    def recomputed_costs(self) -> list[int]:
        """Full O(E) cost of every lane's current order."""
        return [self.problem.cost(row) for row in self.orders]

    def _append_lanes(self, count: int) -> None:
        """Add ``count`` freshly shuffled chains with the next chain ids."""
        n = self.problem.node_count
        new = {name: [] for name in _LANE_FIELDS}
        for _ in range(count):
            chain_id = self.next_chain_id
            self.next_chain_id += 1
            order, state = shuffled_order(n, chain_seed(self.seed32, chain_id))
            positions = [0] * n
            for pos, node in enumerate(order):
                positions[node] = pos
            cost = self.problem.cost(order)
            new["orders"].append(order)
            new["positions"].append(positions)
            new["best_orders"].append(order)
            new["costs"].append(cost)
            new["best_costs"].append(cost)
            new["temperatures"].append(self.initial_temperature)
            new["floors"].append(MIN_TEMPERATURE)
            new["cooling"].append(self.config.cooling)
            new["window_steps"].append(0)
            new["window_accepts"].append(0)
            new["stagnant"].append(0)
            new["rng_states"].append(state)
            new["seed_versions"].append(0)
            new["chain_ids"].append(chain_id)

        for name in _LANE_FIELDS:
            current = getattr(self, name)
            added = np.asarray(new[name], dtype=current.dtype).reshape(
                (count,) + current.shape[1:]
            )
            setattr(self, name, np.concatenate([current, added]))

    def _keep_lanes(self, lanes: np.ndarray) -> None:
        for name in _LANE_FIELDS:
            setattr(self, name, getattr(self, name)[lanes].copy())


def initialize(
    problem: SolverProblem,
    batch_size: int,
    seed: int,
    config: SolverConfig | None = None,
) -> SolverState:
    """Create ``batch_size`` independent chains over ``problem``.

    Chain ``k`` seeds its generator from ``seed`` and ``k`` and starts from
    its own Fisher-Yates shuffle of the identity permutation.
    """
    if batch_size <= 0:
        raise SolverError("batch size must be > 0")
    batch_size = min(batch_size, MAX_BATCH_SIZE)
    config = (config or SolverConfig()).clamped()

    initial_temperature = config.initial_temperature
    if initial_temperature is None:
        initial_temperature = estimate_initial_temperature(
            problem, seed, config.target_acceptance
        )
    initial_temperature = max(initial_temperature, MIN_TEMPERATURE)
    reheat_temperature = config.reheat_temperature or initial_temperature

    state = SolverState(problem, config, seed, initial_temperature, reheat_temperature)
    state._append_lanes(batch_size)
    logger.debug(
        "initialized %d chain(s) over %d nodes / %d edges (T0=%.3f, seed=%d)",
        batch_size,
        problem.node_count,
        problem.edge_count,
        initial_temperature,
        seed,
    )
    return state


def resize(state: SolverState, batch_size: int) -> None:
    """Grow or shrink the chain set in place.

    New lanes are freshly shuffled chains; shrinking keeps the lanes with
    the lowest best cost (in their original order).
    """
    batch_size = min(max(batch_size, MIN_BATCH_SIZE), MAX_BATCH_SIZE)
    current = state.batch_size
    if batch_size > current:
        state._append_lanes(batch_size - current)
    elif batch_size < current:
        ranked = np.argsort(state.best_costs, kind="stable")[:batch_size]
        state._keep_lanes(np.sort(ranked))
        state.best_index = int(np.argmin(state.best_costs))


def run_batch(
    state: SolverState,
    steps: int,
    trace: list[SwapRecord] | None = None,
) -> BatchOutcome:
    """Advance every chain ``steps`` iterations and reduce to the best order."""
    if steps < 0:
        raise SolverError("steps must be >= 0")
    steps = min(steps, MAX_STEPS)
    start = time.perf_counter()

    accepted = 0
    if state.problem.node_count > 1 and steps > 0:
        accepted = _anneal_lanes(state, steps, trace)
    reseeded = _reduce_and_reseed(state)

    state.total_steps += steps
    state.batches += 1
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.debug(
        "batch %d: %d steps x %d chains, accepted %d, reseeded %d, best %d (%.1f ms)",
        state.batches,
        steps,
        state.batch_size,
        accepted,
        reseeded,
        state.global_best_cost,
        elapsed_ms,
    )
    return BatchOutcome(
        best_cost=state.global_best_cost,
        best_order=list(state.global_best_order),
        best_index=state.best_index,
        steps=steps,
        accepted=accepted,
        reseeded=reseeded,
        elapsed_ms=elapsed_ms,
    )


def _gather_neighbours(
    problem: SolverProblem, nodes: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Concatenated CSR slices of ``nodes`` as ``(owner, neighbour)`` pairs.

    ``owner[k]`` is the index into ``nodes`` whose slice entry ``k`` came
    from, so the result holds exactly ``sum(degree(nodes))`` entries.
    """
    counts = problem.degrees[nodes]
    owner = np.repeat(np.arange(nodes.shape[0]), counts)
    total = owner.shape[0]
    if total == 0:
        return owner, np.zeros(0, dtype=np.int64)
    first = np.cumsum(counts) - counts
    within = np.arange(total) - np.repeat(first, counts)
    starts = np.repeat(problem.adj_offsets[nodes], counts)
    return owner, problem.adj_list[starts + within]


def _swap_delta(
    problem: SolverProblem,
    positions: np.ndarray,
    lanes: np.ndarray,
    node_i: np.ndarray,
    node_j: np.ndarray,
    pos_i: np.ndarray,
    pos_j: np.ndarray,
) -> np.ndarray:
    """Cost change of moving ``node_i`` to ``pos_j`` and ``node_j`` to ``pos_i``.

    Only edges incident to the two nodes change; an edge between them
    keeps its span and is skipped.
    """
    delta = np.zeros(lanes.shape[0], dtype=np.int64)
    for node, other, here, there in (
        (node_i, node_j, pos_i, pos_j),
        (node_j, node_i, pos_j, pos_i),
    ):
        owner, nbrs = _gather_neighbours(problem, node)
        if nbrs.size == 0:
            continue
        nbr_pos = positions[lanes[owner], nbrs]
        change = np.abs(there[owner] - nbr_pos) - np.abs(here[owner] - nbr_pos)
        change[nbrs == other[owner]] = 0
        np.add.at(delta, owner, change)
    return delta


def _anneal_lanes(
    state: SolverState,
    steps: int,
    trace: list[SwapRecord] | None,
) -> int:
    problem = state.problem
    config = state.config
    n = problem.node_count
    lanes = np.arange(state.batch_size)
    max_cost = problem.max_cost

    orders = state.orders
    positions = state.positions
    costs = state.costs
    best_costs = state.best_costs
    best_orders = state.best_orders
    temperatures = state.temperatures
    floors = state.floors
    cooling = state.cooling
    window_steps = state.window_steps
    window_accepts = state.window_accepts
    stagnant = state.stagnant
    rng = state.rng_states

    adjust = config.cooling_adjust
    reheat_gain = min(max(adjust * 4.0, 0.001), 0.05)
    floor_decay = min(max(1.0 - adjust * 2.0, COOLING_MIN), COOLING_MAX)
    reheat_threshold = float(config.reheat_threshold)
    floor_cap = state.reheat_floor
    too_hot = config.target_acceptance + ACCEPTANCE_BAND
    too_cold = config.target_acceptance - ACCEPTANCE_BAND
    n_u32 = np.uint32(n)
    n_minus_one_u32 = np.uint32(n - 1)
    accepted_total = 0

    for _ in range(steps):
        rng = lcg_next_lanes(rng)
        pos_i = (rng % n_u32).astype(np.int64)
        rng = lcg_next_lanes(rng)
        pos_j = (rng % n_minus_one_u32).astype(np.int64)
        pos_j += pos_j >= pos_i

        node_i = orders[lanes, pos_i]
        node_j = orders[lanes, pos_j]
        delta = _swap_delta(problem, positions, lanes, node_i, node_j, pos_i, pos_j)
        candidate = np.clip(costs + delta, 0, max_cost)

        accept = delta <= 0
        needs_draw = ~accept & (temperatures > MIN_TEMPERATURE)
        if needs_draw.any():
            rng = np.where(needs_draw, lcg_next_lanes(rng), rng)
            exponent = np.where(needs_draw, -delta / temperatures, -np.inf)
            probability = np.exp(exponent)
            draw = rng.astype(np.float64) * INV_U32_MAX_PLUS1
            accept |= needs_draw & (draw < probability)

        moved = np.nonzero(accept)[0]
        if moved.size:
            mi, mj = pos_i[moved], pos_j[moved]
            ni, nj = node_i[moved], node_j[moved]
            orders[moved, mi] = nj
            orders[moved, mj] = ni
            positions[moved, nj] = mi
            positions[moved, ni] = mj
            costs[moved] = candidate[moved]
            accepted_total += int(moved.size)

        improved = accept & (costs < best_costs)
        if improved.any():
            best_costs[improved] = costs[improved]
            best_orders[improved] = orders[improved]
            floors[improved] = np.maximum(floors[improved] * floor_decay, MIN_TEMPERATURE)
        stagnant[:] = np.where(improved, 0, stagnant + 1)

        # Gentle reheat of the floor while a chain is stuck.
        ratio = stagnant / reheat_threshold
        gain = reheat_gain * (ratio / (1.0 + ratio))
        floors[:] = np.where(stagnant > 0, np.minimum(floors * (1.0 + gain), floor_cap), floors)
        temperatures[:] = np.maximum(temperatures * cooling, floors)

        window_steps += 1
        window_accepts += accept
        full = window_steps >= ACCEPTANCE_WINDOW
        if full.any():
            acceptance = window_accepts / np.maximum(window_steps, 1)
            cooling[:] = np.where(
                full & (acceptance > too_hot),
                np.maximum(cooling - adjust, COOLING_MIN),
                cooling,
            )
            cooling[:] = np.where(
                full & (acceptance < too_cold),
                np.minimum(cooling + adjust, COOLING_MAX),
                cooling,
            )
            window_steps[full] = 0
            window_accepts[full] = 0

        if trace is not None:
            trace.append(
                SwapRecord(
                    i=pos_i.copy(),
                    j=pos_j.copy(),
                    delta=delta.copy(),
                    accepted=accept.copy(),
                )
            )

    state.rng_states = rng
    return accepted_total


def _reduce_and_reseed(state: SolverState) -> int:
    """Publish the best chain as global best and reseed stagnant chains.

    Returns the number of reseeded chains.
    """
    best_index = int(np.argmin(state.best_costs))
    best_cost = int(state.best_costs[best_index])
    if state.global_best_cost is None or best_cost < state.global_best_cost:
        state.global_best_cost = best_cost
        state.global_best_order = state.best_orders[best_index].tolist()
        state.best_version += 1
    state.best_index = best_index
    state.seed_versions[best_index] = state.best_version

    config = state.config
    if not config.reheat_enabled or state.batch_size < 2:
        return 0

    stale = (state.stagnant >= config.reheat_threshold) & (
        state.seed_versions < state.best_version
    )
    stale[best_index] = False
    lanes = np.nonzero(stale)[0]
    if lanes.size == 0:
        return 0

    n = state.problem.node_count
    best = np.asarray(state.global_best_order, dtype=np.int64)
    state.orders[lanes] = best
    state.best_orders[lanes] = best
    state.positions[lanes[:, None], best[None, :]] = np.arange(n, dtype=np.int64)
    state.costs[lanes] = state.global_best_cost
    state.best_costs[lanes] = state.global_best_cost
    state.temperatures[lanes] = np.maximum(state.temperatures[lanes], state.reheat_temperature)
    state.floors[lanes] = np.maximum(state.floors[lanes], state.reheat_floor)
    state.stagnant[lanes] = 0
    state.seed_versions[lanes] = state.best_version
    logger.debug(
        "reseeded %d stagnant chain(s) from best version %d (cost %d)",
        lanes.size,
        state.best_version,
        state.global_best_cost,
    )
    return int(lanes.size)
