"""Tests for per-graph ordering sessions."""

from __future__ import annotations

import time

import pytest

from entity_metro.errors import WorkerError
from entity_metro.ordering import (
    BatchResult,
    OrderSession,
    SolverConfig,
    order_cost,
    run_until_plateau,
)
from entity_metro.parser.model import Edge, EntityGraph, Node

FAST = SolverConfig(batch_size=8, steps=200, seed=1)


def _scrambled_path() -> EntityGraph:
    """A path whose identity order is far from optimal."""
    path = [0, 5, 2, 7, 4, 1, 6, 3]
    return EntityGraph.from_edges(8, list(zip(path, path[1:])))


def test_attach_resets_only_on_new_fingerprint():
    session = OrderSession(FAST)
    try:
        graph = _scrambled_path()
        assert session.attach(graph)
        assert session.fingerprint == graph.fingerprint
        assert not session.attach(_scrambled_path())
        other = EntityGraph.from_edges(3, [(0, 2)])
        assert session.attach(other)
        assert session.fingerprint == other.fingerprint
        assert session.best_order == [0, 1, 2]
    finally:
        session.close()


def test_attach_resets_for_constructor_built_graphs():
    def direct(n):
        nodes = tuple(Node(id=f"n{i}", title=f"n{i}") for i in range(n))
        edges = tuple(Edge(source=i, target=i + 1, attr="ref") for i in range(n - 1))
        return EntityGraph(nodes=nodes, edges=edges)

    session = OrderSession(FAST)
    try:
        assert session.attach(direct(4))
        assert session.best_order == [0, 1, 2, 3]
        assert session.attach(direct(7))
        assert session.best_order == list(range(7))
        assert session.problem.node_count == 7
    finally:
        session.close()


def test_identity_published_on_attach():
    graph = _scrambled_path()
    session = OrderSession(FAST)
    try:
        session.attach(graph)
        assert session.best_order == list(range(8))
        assert session.best_cost == order_cost(graph, list(range(8)))
        assert session.batches == 0
    finally:
        session.close()


def test_record_only_accepts_better_valid_orders():
    graph = _scrambled_path()
    session = OrderSession(FAST)
    try:
        session.attach(graph)
        identity_cost = session.best_cost

        assert not session.record(BatchResult(best_cost=0, best_order=[0, 0, 1, 2, 3, 4, 5, 6]))
        assert not session.record(BatchResult(best_cost=1, best_order=[0, 1, 2]))
        assert session.best_cost == identity_cost

        assert not session.record(
            BatchResult(best_cost=identity_cost, best_order=list(reversed(range(8))))
        )
        assert session.best_order == list(range(8))

        good = [0, 5, 2, 7, 4, 1, 6, 3]
        assert session.record(BatchResult(best_cost=7, best_order=good))
        assert session.best_order == good
        assert session.best_cost == 7
        assert session.batches == 4
    finally:
        session.close()


def test_failed_result_counts_failures():
    session = OrderSession(FAST)
    try:
        session.attach(_scrambled_path())
        assert not session.record(BatchResult.failed("boom"))
        assert session.failures == 1
        assert session.last_error == "boom"
        assert session.batches == 0
        session.record(BatchResult(best_cost=100, best_order=list(range(8))))
        assert session.failures == 0
    finally:
        session.close()


def test_lower_bound_stops_immediately():
    graph = EntityGraph.from_edges(5, [(0, 1), (1, 2), (2, 3), (3, 4)])
    result = run_until_plateau(graph, FAST, max_batches=10)
    assert result.reason == "lower-bound"
    assert result.batches == 0
    assert result.order == [0, 1, 2, 3, 4]
    assert result.cost == 4


def test_empty_graph():
    result = run_until_plateau(EntityGraph(), FAST)
    assert result.reason == "empty"
    assert result.order == []
    assert result.cost == 0


def test_single_node_graph():
    result = run_until_plateau(EntityGraph.from_edges(1, []), FAST)
    assert result.order == [0]
    assert result.cost == 0


def test_max_batches():
    graph = _scrambled_path()
    result = run_until_plateau(graph, FAST, max_batches=3)
    assert result.reason in ("max-batches", "lower-bound")
    assert result.batches <= 3
    assert sorted(result.order) == list(range(8))
    assert order_cost(graph, result.order) == result.cost
    assert result.cost < order_cost(graph, list(range(8)))


def test_time_limit():
    result = run_until_plateau(_scrambled_path(), FAST, max_ms=0.0)
    assert result.reason == "time-limit"
    assert result.order == list(range(8))


def test_plateau_stop():
    config = SolverConfig(batch_size=2, steps=5, seed=1, stop_after_plateau_ms=1e-6)
    graph = EntityGraph.from_edges(6, [(0, 3), (3, 1), (1, 4), (4, 2), (2, 5), (0, 5)])
    session = OrderSession(config)
    try:
        result = session.run_until_plateau(graph, max_batches=50)
    finally:
        session.close()
    assert result.reason in ("plateau", "max-batches")
    assert result.batches >= 1


def test_repeated_failures_raise():
    def factory(problem, config, seed):
        raise RuntimeError("no backend")

    session = OrderSession(FAST, runner_factory=factory)
    try:
        with pytest.raises(WorkerError, match="no backend"):
            session.run_until_plateau(_scrambled_path(), max_batches=20)
        assert session.failures == 3
    finally:
        session.close()


def test_pump_keeps_one_batch_in_flight():
    session = OrderSession(FAST)
    try:
        session.attach(_scrambled_path())
        assert session.pump() is None
        deadline = time.monotonic() + 10.0
        result = None
        while result is None and time.monotonic() < deadline:
            result = session.pump()
            time.sleep(0.01)
        assert result is not None and result.ok
        assert session.batches == 1
    finally:
        session.close()


def test_pump_without_worker():
    session = OrderSession(FAST)
    assert session.pump() is None
    assert session.finished
