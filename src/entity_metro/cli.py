"""CLI for entity-metro."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from entity_metro import __version__
from entity_metro.errors import EntityMetroError, ParseError
from entity_metro.layout import LayoutCache
from entity_metro.layout.constants import DEFAULT_CANVAS_WIDTH
from entity_metro.ordering import (
    SolverConfig,
    SolverProblem,
    best_random_order,
    order_cost,
    run_until_plateau,
)
from entity_metro.ordering.constants import DEFAULT_SAMPLE_BATCH
from entity_metro.parser import EntityGraph, parse_entity_mermaid
from entity_metro.pipeline import compute_inspector
from entity_metro.render import render_svg
from entity_metro.themes import THEMES

ORDER_METHODS = ("anneal", "random", "id")


def _load(input_file: Path) -> EntityGraph:
    try:
        return parse_entity_mermaid(input_file.read_text())
    except ParseError as e:
        raise click.ClickException(f"Parse error: {e}") from e


def _solve(
    graph: EntityGraph,
    method: str,
    seed: int | None,
    time_limit: float,
    batches: int | None,
    samples: int = DEFAULT_SAMPLE_BATCH,
) -> tuple[list[int], int]:
    """Return ``(order, cost)`` for ``graph`` using ``method``."""
    identity = list(range(graph.node_count))
    if graph.node_count == 0 or method == "id":
        return identity, order_cost(graph, identity)

    try:
        if method == "random":
            problem = SolverProblem.from_graph(graph)
            cost, order = best_random_order(
                problem, problem.seed() if seed is None else seed, samples
            )
            return order, cost
        result = run_until_plateau(
            graph,
            SolverConfig(seed=seed),
            max_ms=time_limit * 1000.0,
            max_batches=batches,
        )
    except EntityMetroError as e:
        raise click.ClickException(str(e)) from e
    return result.order, result.cost


def _order_options(func):
    func = click.option("--batches", type=int, default=None,
                        help="Stop annealing after this many batches")(func)
    func = click.option("--time-limit", type=float, default=5.0, show_default=True,
                        help="Annealing time budget in seconds")(func)
    func = click.option("--seed", type=int, default=None,
                        help="Solver seed (default: derived from the graph)")(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Log solver progress (-vv for debug)")
def cli(verbose: int) -> None:
    """entity-metro: Subway-style entity-relationship diagrams."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None,
              help="Output SVG file path. Defaults to <input>.svg")
@click.option("--theme", type=click.Choice(list(THEMES.keys())), default="metro",
              help="Visual theme (default: metro)")
@click.option("--width", type=float, default=DEFAULT_CANVAS_WIDTH,
              help="Available canvas width in pixels")
@click.option("--columns", type=int, default=0,
              help="Force the column count (default: fit to width)")
@click.option("--order", "method", type=click.Choice(ORDER_METHODS), default="anneal",
              help="Node ordering (default: anneal)")
@click.option("--no-title", is_flag=True, help="Omit the diagram title")
@_order_options
def render(
    input_file: Path,
    output: Path | None,
    theme: str,
    width: float,
    columns: int,
    method: str,
    no_title: bool,
    seed: int | None,
    time_limit: float,
    batches: int | None,
) -> None:
    """Render an entity diagram definition to SVG."""
    graph = _load(input_file)
    order, cost = _solve(graph, method, seed, time_limit, batches)
    result = compute_inspector(graph, order, width, columns)
    svg = render_svg(
        graph, result.layout, result.routes, THEMES[theme], show_title=not no_title
    )

    if output is None:
        output = input_file.with_suffix(".svg")

    if not svg.endswith("\n"):
        svg += "\n"
    output.write_text(svg)
    click.echo(f"Rendered {graph.node_count} entities, "
               f"{len(result.routes)} edges, "
               f"{result.layout.column_count} columns (span cost {cost}) -> {output}")


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("--method", type=click.Choice(ORDER_METHODS), default="anneal",
              help="Ordering method (default: anneal)")
@click.option("--samples", type=int, default=DEFAULT_SAMPLE_BATCH,
              help="Permutations tried by --method random")
@_order_options
def order(
    input_file: Path,
    method: str,
    samples: int,
    seed: int | None,
    time_limit: float,
    batches: int | None,
) -> None:
    """Find a node order with a small total edge span."""
    graph = _load(input_file)
    _, identity_cost = _solve(graph, "id", None, 0.0, None)
    best_order, cost = _solve(graph, method, seed, time_limit, batches, samples)

    click.echo(f"Identity cost: {identity_cost}")
    click.echo(f"Best cost ({method}): {cost}")
    click.echo("Order: " + " -> ".join(graph.nodes[i].id for i in best_order))


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option("--width", type=float, default=DEFAULT_CANVAS_WIDTH,
              help="Available canvas width in pixels")
@click.option("--columns", type=int, default=0,
              help="Force the column count (default: fit to width)")
@click.option("--order", "method", type=click.Choice(ORDER_METHODS), default="id",
              help="Node ordering (default: id)")
@_order_options
def info(
    input_file: Path,
    width: float,
    columns: int,
    method: str,
    seed: int | None,
    time_limit: float,
    batches: int | None,
) -> None:
    """Show layout statistics for an entity diagram definition."""
    graph = _load(input_file)
    order, _ = _solve(graph, method, seed, time_limit, batches)
    stats = compute_inspector(graph, order, width, columns, LayoutCache()).stats

    click.echo(f"Title: {graph.title or '(none)'}")
    for name, value in stats.as_dict().items():
        if isinstance(value, float):
            click.echo(f"{name}: {value:.2f}")
        else:
            click.echo(f"{name}: {value}")


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
def validate(input_file: Path) -> None:
    """Validate an entity diagram definition."""
    text = input_file.read_text()
    try:
        graph = parse_entity_mermaid(text)
    except ParseError as e:
        click.echo(f"Parse error: {e}", err=True)
        raise SystemExit(1)

    warnings = []
    for node in graph.nodes:
        for row in node.rows:
            if row.target == node.id:
                warnings.append(f"Entity '{node.id}' row '{row.attr}' references "
                                f"itself (shown as a row, not drawn as an edge)")

    if warnings:
        click.echo("Warnings:", err=True)
        for warning in warnings:
            click.echo(f"  - {warning}", err=True)

    rows = sum(node.row_count for node in graph.nodes)
    click.echo(f"Valid: {graph.node_count} entities, "
               f"{graph.edge_count} edges, "
               f"{rows} rows")
