"""Node ordering by approximate Minimum Linear Arrangement.

Public API:
- SolverProblem / initialize / run_batch / resize: the annealing kernel
- BatchWorker: background thread with a single-slot request mailbox
- OrderSession / run_until_plateau: per-graph driver used by the CLI
- best_random_order: random-permutation baseline
"""

from entity_metro.ordering.anneal import (
    BatchOutcome,
    Chain,
    SolverState,
    SwapRecord,
    initialize,
    resize,
    run_batch,
)
from entity_metro.ordering.config import SolverConfig
from entity_metro.ordering.problem import (
    SolverProblem,
    order_cost,
    order_cost_checked,
    validate_order,
)
from entity_metro.ordering.sampling import best_random_order
from entity_metro.ordering.session import OrderResult, OrderSession, run_until_plateau
from entity_metro.ordering.tuning import (
    BatchController,
    PlateauTracker,
    adjust_steps,
    batch_size_for,
    estimate_initial_temperature,
)
from entity_metro.ordering.worker import AnnealRunner, BatchRequest, BatchResult, BatchWorker

__all__ = [
    "AnnealRunner",
    "BatchController",
    "BatchOutcome",
    "BatchRequest",
    "BatchResult",
    "BatchWorker",
    "Chain",
    "OrderResult",
    "OrderSession",
    "PlateauTracker",
    "SolverConfig",
    "SolverProblem",
    "SolverState",
    "SwapRecord",
    "adjust_steps",
    "batch_size_for",
    "best_random_order",
    "estimate_initial_temperature",
    "initialize",
    "order_cost",
    "order_cost_checked",
    "resize",
    "run_batch",
    "run_until_plateau",
    "validate_order",
]
