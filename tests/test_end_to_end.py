"""End-to-end: order a small sparse graph, lay it out and route it."""

import pytest

from entity_metro.layout import compute_layout
from entity_metro.layout.routing import route_edges
from entity_metro.ordering import (
    SolverConfig,
    SolverProblem,
    initialize,
    order_cost,
    run_batch,
    run_until_plateau,
)
from entity_metro.parser.model import EntityGraph
from entity_metro.pipeline import compute_inspector
from layout_validator import Severity, validate_layout

# A path over nine nodes in scrambled label order, plus two shortcuts
# that close a five-node cycle through node 6.
PATH = [0, 5, 2, 8, 3, 9, 1, 7, 4]
SHORTCUTS = [(6, 0), (6, 8)]

# Optimal at cost 13: the five-node cycle spans at least 8, the five tail
# edges at least 1 each.
REFERENCE_ORDER = [6, 0, 5, 2, 8, 3, 9, 1, 7, 4]


@pytest.fixture
def graph() -> EntityGraph:
    return EntityGraph.from_edges(10, list(zip(PATH, PATH[1:])) + SHORTCUTS)


def test_graph_shape(graph):
    assert graph.node_count == 10
    assert graph.edge_count == 10
    assert order_cost(graph, list(range(10))) == 50
    assert order_cost(graph, REFERENCE_ORDER) == 13


def test_annealing_beats_identity_and_reference(graph):
    config = SolverConfig(seed=1, batch_size=32, steps=2000)
    result = run_until_plateau(graph, config, max_batches=5)
    identity = order_cost(graph, list(range(10)))

    assert sorted(result.order) == list(range(10))
    assert order_cost(graph, result.order) == result.cost
    assert result.cost < identity
    assert result.cost <= order_cost(graph, REFERENCE_ORDER)


def test_kernel_alone_reaches_reference(graph):
    problem = SolverProblem.from_graph(graph)
    state = initialize(problem, 32, seed=1)
    for _ in range(5):
        outcome = run_batch(state, 2000)
    assert outcome.best_cost <= order_cost(graph, REFERENCE_ORDER)


def test_two_column_layout_is_clean(graph):
    config = SolverConfig(seed=1, batch_size=32, steps=2000)
    order = run_until_plateau(graph, config, max_batches=5).order
    layout = compute_layout(graph, order, available_width=600, columns=2)
    routes = route_edges(layout, graph)

    assert layout.column_count == 2
    assert len(layout.tile_rects) == 10
    assert all(r.is_positive for r in layout.tile_rects)
    assert len(routes) == 10
    assert not any(r.used_fallback_track for r in routes)

    violations = validate_layout(graph, layout, routes)
    assert [v for v in violations if v.severity == Severity.ERROR] == []


def test_pipeline_stats(graph):
    result = compute_inspector(graph, REFERENCE_ORDER, width=600, columns=2)
    assert result.stats.linear_total == 13
    assert result.stats.fallback_tracks == 0
    assert result.stats.connected_components == 1
