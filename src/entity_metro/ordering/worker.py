"""Background thread that runs annealing batches one request at a time."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from entity_metro.errors import WorkerError
from entity_metro.ordering.anneal import BatchOutcome, initialize, resize, run_batch
from entity_metro.ordering.config import SolverConfig
from entity_metro.ordering.problem import SolverProblem
from entity_metro.ordering.tuning import batch_size_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchRequest:
    steps: int
    batch_size: int | None = None


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one request; ``error`` is set when the batch failed."""

    best_cost: int | None = None
    best_order: list[int] = field(default_factory=list)
    batch_size: int = 0
    steps: int = 0
    accepted: int = 0
    reseeded: int = 0
    elapsed_ms: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_outcome(cls, outcome: BatchOutcome, batch_size: int) -> BatchResult:
        return cls(
            best_cost=outcome.best_cost,
            best_order=outcome.best_order,
            batch_size=batch_size,
            steps=outcome.steps,
            accepted=outcome.accepted,
            reseeded=outcome.reseeded,
            elapsed_ms=outcome.elapsed_ms,
        )

    @classmethod
    def failed(cls, message: str) -> BatchResult:
        return cls(error=message)


class AnnealRunner:
    """Owns the chains of one problem and runs batches on them."""

    def __init__(self, problem: SolverProblem, config: SolverConfig, seed: int) -> None:
        batch_size = config.batch_size or batch_size_for(problem.node_count)
        self.state = initialize(problem, batch_size, seed, config)

    @property
    def batch_size(self) -> int:
        return self.state.batch_size

    def run(self, request: BatchRequest) -> BatchOutcome:
        if request.batch_size and request.batch_size != self.state.batch_size:
            resize(self.state, request.batch_size)
        return run_batch(self.state, request.steps)


RunnerFactory = Callable[[SolverProblem, SolverConfig, int], AnnealRunner]


class BatchWorker:
    """Single-slot mailbox in front of a daemon annealing thread.

    At most one request is in flight: :meth:`submit` returns False and
    drops the request while a batch is running. Results are collected
    with :meth:`poll` (non-blocking) or :meth:`wait`. A failing batch is
    reported as a :class:`BatchResult` with ``error`` set; the runner is
    then discarded and rebuilt on the next request.
    """

    def __init__(
        self,
        problem: SolverProblem,
        config: SolverConfig | None = None,
        seed: int | None = None,
        runner_factory: RunnerFactory = AnnealRunner,
    ) -> None:
        self.problem = problem
        self.config = (config or SolverConfig()).clamped()
        self.seed = problem.seed() if seed is None else seed
        self._runner_factory = runner_factory
        self._runner: AnnealRunner | None = None
        self._requests: queue.Queue[BatchRequest | None] = queue.Queue(maxsize=1)
        self._results: queue.Queue[BatchResult] = queue.Queue()
        self._lock = threading.Lock()
        self._in_flight = False
        self._closed = False
        self._thread = threading.Thread(
            target=self._loop, name="entity-metro-anneal", daemon=True
        )
        self._thread.start()

    def __enter__(self) -> BatchWorker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    def submit(self, request: BatchRequest) -> bool:
        """Queue ``request`` unless a batch is already running."""
        with self._lock:
            if self._closed:
                raise WorkerError("worker is closed")
            if self._in_flight:
                return False
            self._in_flight = True
        self._requests.put_nowait(request)
        return True

    def poll(self) -> BatchResult | None:
        try:
            return self._results.get_nowait()
        except queue.Empty:
            return None

    def wait(self, timeout: float | None = None) -> BatchResult | None:
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self, timeout: float = 5.0) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._requests.put(None)
        self._thread.join(timeout)

    def _loop(self) -> None:
        while True:
            request = self._requests.get()
            if request is None:
                return
            result = self._process(request)
            # Idle is only observable once the result is queued.
            with self._lock:
                self._results.put(result)
                self._in_flight = False

    def _process(self, request: BatchRequest) -> BatchResult:
        try:
            if self._runner is None:
                self._runner = self._runner_factory(self.problem, self.config, self.seed)
            outcome = self._runner.run(request)
            return BatchResult.from_outcome(outcome, self._runner.batch_size)
        except Exception as exc:  # noqa: BLE001 - reported to the caller as a result
            logger.warning("annealing batch failed, discarding solver state: %s", exc)
            self._runner = None
            return BatchResult.failed(str(exc) or type(exc).__name__)
