#!/usr/bin/env python3
"""Batch render all test fixtures to SVG with a short layout report.

Outputs go to /tmp/entity_metro_renders/.

Usage:
    python scripts/render_fixtures.py [--order anneal|random|id] [--columns N]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from entity_metro.errors import EntityMetroError  # noqa: E402
from entity_metro.ordering import (  # noqa: E402
    SolverConfig,
    SolverProblem,
    best_random_order,
    run_until_plateau,
)
from entity_metro.parser.mermaid import parse_entity_mermaid  # noqa: E402
from entity_metro.pipeline import compute_inspector  # noqa: E402
from entity_metro.render.svg import render_svg  # noqa: E402
from entity_metro.themes import THEMES  # noqa: E402

OUTPUT_DIR = Path("/tmp/entity_metro_renders")
FIXTURES_DIR = project_root / "tests" / "fixtures"


def _order(graph, method: str, seed: int) -> list[int] | None:
    if method == "id" or graph.node_count == 0:
        return None
    if method == "random":
        return best_random_order(SolverProblem.from_graph(graph), seed)[1]
    return run_until_plateau(graph, SolverConfig(seed=seed), max_ms=2000.0).order


def render_file(
    mmd_path: Path, output_dir: Path, *, method: str, columns: int, theme: str
) -> tuple[str, list[str]]:
    """Parse, order, lay out and render a .mmd file to SVG.

    Returns (name, list_of_issues).
    """
    name = mmd_path.stem
    issues: list[str] = []

    try:
        graph = parse_entity_mermaid(mmd_path.read_text())
    except EntityMetroError as e:
        return name, [f"PARSE ERROR: {e}"]

    try:
        result = compute_inspector(graph, _order(graph, method, seed=1), columns=columns)
    except EntityMetroError as e:
        return name, [f"LAYOUT ERROR: {e}"]

    svg_str = render_svg(graph, result.layout, result.routes, THEMES[theme])
    (output_dir / f"{name}.svg").write_text(svg_str + "\n")

    stats = result.stats
    if stats.fallback_tracks:
        issues.append(f"{stats.fallback_tracks} edge(s) on fallback tracks")
    issues.append(
        f"{stats.nodes} nodes, {stats.edges} edges, {stats.columns} columns, "
        f"span {stats.linear_total}"
    )
    return name, issues


def main():
    parser = argparse.ArgumentParser(description="Batch render entity fixtures")
    parser.add_argument("--order", choices=("anneal", "random", "id"), default="anneal")
    parser.add_argument("--columns", type=int, default=0, help="Force the column count")
    parser.add_argument("--theme", choices=sorted(THEMES), default="metro")
    args = parser.parse_args()

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    all_files = sorted(FIXTURES_DIR.glob("*.mmd"))
    print(f"Rendering {len(all_files)} files to {OUTPUT_DIR}/")
    print()

    max_name_len = max(len(f.stem) for f in all_files)
    any_errors = False

    for mmd_path in all_files:
        name, issues = render_file(
            mmd_path, OUTPUT_DIR, method=args.order, columns=args.columns, theme=args.theme
        )
        status = "OK"
        if any("ERROR" in i for i in issues):
            status = "FAIL"
            any_errors = True
        elif any("fallback" in i for i in issues):
            status = "ISSUES"

        print(f"  {name:<{max_name_len}}  [{status}]")
        for issue in issues:
            print(f"    - {issue}")

    print(f"\nOutputs in: {OUTPUT_DIR}/")

    if any_errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
