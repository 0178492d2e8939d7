"""Per-graph ordering session: worker, batch control and best-order publication."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace

from entity_metro.errors import OrderError, WorkerError
from entity_metro.ordering.config import SolverConfig
from entity_metro.ordering.problem import SolverProblem, validate_order
from entity_metro.ordering.tuning import BatchController, PlateauTracker, batch_size_for
from entity_metro.ordering.worker import (
    AnnealRunner,
    BatchRequest,
    BatchResult,
    BatchWorker,
    RunnerFactory,
)
from entity_metro.parser.model import EntityGraph

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_FAILURES = 3


@dataclass(frozen=True)
class OrderResult:
    order: list[int]
    cost: int
    batches: int
    elapsed_ms: float
    reason: str


class OrderSession:
    """Keeps annealing state for one graph at a time.

    Attaching a graph with a different fingerprint discards the worker and
    every published result. The best order is replaced only by a complete,
    validated permutation with a strictly lower cost.
    """

    def __init__(
        self,
        config: SolverConfig | None = None,
        runner_factory: RunnerFactory = AnnealRunner,
    ) -> None:
        self.config = (config or SolverConfig()).clamped()
        self._runner_factory = runner_factory
        self.graph: EntityGraph | None = None
        self.problem: SolverProblem | None = None
        self.worker: BatchWorker | None = None
        self.controller = BatchController()
        self.plateau = PlateauTracker()
        self.batches = 0
        self.failures = 0
        self.last_error: str | None = None
        self._best: tuple[int, tuple[int, ...]] | None = None

    @property
    def fingerprint(self) -> str | None:
        return self.graph.fingerprint if self.graph is not None else None

    @property
    def best_cost(self) -> int | None:
        best = self._best
        return best[0] if best is not None else None

    @property
    def best_order(self) -> list[int] | None:
        best = self._best
        return list(best[1]) if best is not None else None

    @property
    def finished(self) -> bool:
        """True once no further batches are worth issuing."""
        if self.problem is None:
            return True
        best = self.best_cost
        if best is not None and best <= self.problem.edge_count:
            # Every edge spans at least one position.
            return True
        return self.plateau.exhausted

    def attach(self, graph: EntityGraph) -> bool:
        """Switch to ``graph``; returns True when the state was reset."""
        if self.graph is not None and graph.fingerprint == self.graph.fingerprint:
            return False
        self.reset(graph)
        return True

    def reset(self, graph: EntityGraph) -> None:
        self.close()
        self.graph = graph
        self.batches = 0
        self.failures = 0
        self.last_error = None
        self._best = None
        self.plateau = PlateauTracker(stop_after_ms=self.config.stop_after_plateau_ms)
        if graph.node_count == 0:
            self.problem = None
            self._best = (0, ())
            return

        self.problem = SolverProblem.from_graph(graph)
        batch_size = self.config.batch_size or batch_size_for(graph.node_count)
        self.controller = BatchController(
            steps=self.config.steps,
            batch_size=batch_size,
            target_ms=self.config.target_ms,
        )
        identity = list(range(graph.node_count))
        self._publish(self.problem.cost(identity), identity)
        self.worker = BatchWorker(
            self.problem,
            replace(self.config, batch_size=batch_size),
            seed=self.config.seed,
            runner_factory=self._runner_factory,
        )
        logger.debug(
            "ordering session for graph %s: %d nodes, %d edges, %d chains",
            graph.fingerprint[:12],
            graph.node_count,
            self.problem.edge_count,
            batch_size,
        )

    def close(self) -> None:
        if self.worker is not None:
            self.worker.close()
            self.worker = None

    def pump(self) -> BatchResult | None:
        """Collect a finished batch (if any) and keep one batch in flight."""
        if self.worker is None:
            return None
        result = self.worker.poll()
        if result is not None:
            self.record(result)
        self._request_next()
        return result

    def record(self, result: BatchResult) -> bool:
        """Fold one batch result in; returns True when the best order improved."""
        if not result.ok:
            self.failures += 1
            self.last_error = result.error
            return False
        self.failures = 0
        self.batches += 1
        self.controller.update(result.elapsed_ms)
        improved = self._publish(result.best_cost, result.best_order)
        self.plateau.observe(self.best_cost, result.elapsed_ms)
        return improved

    def run_until_plateau(
        self,
        graph: EntityGraph,
        max_ms: float | None = None,
        max_batches: int | None = None,
    ) -> OrderResult:
        """Anneal ``graph`` in the calling thread's time until a stop condition."""
        self.attach(graph)
        start = time.perf_counter()
        reason = "plateau"
        while not self.finished:
            if max_batches is not None and self.batches >= max_batches:
                reason = "max-batches"
                break
            if max_ms is not None and (time.perf_counter() - start) * 1000.0 >= max_ms:
                reason = "time-limit"
                break
            self._request_next()
            result = self.worker.wait(timeout=1.0)
            if result is None:
                continue
            self.record(result)
            if self.failures >= MAX_CONSECUTIVE_FAILURES:
                raise WorkerError(f"annealing failed {self.failures} times: {self.last_error}")
        else:
            if self.problem is None:
                reason = "empty"
            elif not self.plateau.exhausted:
                reason = "lower-bound"

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        cost, order = self.best_cost, self.best_order
        logger.info(
            "ordering stopped (%s) after %d batch(es), %.0f ms: cost %d",
            reason,
            self.batches,
            elapsed_ms,
            cost,
        )
        return OrderResult(
            order=order, cost=cost, batches=self.batches, elapsed_ms=elapsed_ms, reason=reason
        )

    def _request_next(self) -> None:
        if self.worker is None or self.worker.in_flight or self.finished:
            return
        self.worker.submit(
            BatchRequest(steps=self.controller.steps, batch_size=self.controller.batch_size)
        )

    def _publish(self, cost: int | None, order: list[int]) -> bool:
        if cost is None or self.problem is None:
            return False
        try:
            validate_order(order, self.problem.node_count)
        except OrderError as exc:
            logger.warning("ignoring invalid order from solver: %s", exc)
            return False
        current = self._best
        if current is not None and cost >= current[0]:
            return False
        self._best = (cost, tuple(int(node) for node in order))
        return True


def run_until_plateau(
    graph: EntityGraph,
    config: SolverConfig | None = None,
    max_ms: float | None = None,
    max_batches: int | None = None,
) -> OrderResult:
    """Blocking helper: anneal ``graph`` once and return the best order found."""
    session = OrderSession(config)
    try:
        return session.run_until_plateau(graph, max_ms=max_ms, max_batches=max_batches)
    finally:
        session.close()
