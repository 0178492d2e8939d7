"""Choosing the y of a horizontal run that crosses a column.

A column's corridors are its free vertical intervals (see
:func:`entity_metro.layout.engine.free_intervals`). A track inside a
corridor never touches a tile; a track chosen any other way is reported
as a fallback.
"""

from __future__ import annotations

from collections.abc import Sequence

from entity_metro.layout.engine import Interval


def choose_track_y(corridors: Sequence[Interval], start_y: float, end_y: float) -> float:
    """Corridor midpoint minimising ``|start_y - y| + |end_y - y|``."""
    best = (corridors[0][0] + corridors[0][1]) * 0.5
    best_cost = float("inf")
    for top, bottom in corridors:
        y = (top + bottom) * 0.5
        cost = abs(start_y - y) + abs(end_y - y)
        if cost < best_cost:
            best_cost = cost
            best = y
    return best


def choose_track_y_monotonic(
    corridors: Sequence[Interval],
    current_y: float,
    end_y: float,
) -> tuple[float, bool]:
    """Pick a track y that keeps the route moving toward ``end_y``.

    Returns ``(y, used_fallback)``. Preference order:

    1. a y inside a corridor that overlaps the span between ``current_y``
       and ``end_y``, as close to ``current_y`` as possible;
    2. the nearest corridor y past ``current_y`` in the travel direction
       (fallback: the route may overshoot ``end_y``);
    3. the corridor midpoint closest to both ends (fallback).

    Without corridors the route keeps ``current_y`` (fallback).
    """
    if not corridors:
        return current_y, True

    going_down = end_y >= current_y

    best: float | None = None
    best_delta = float("inf")
    for top, bottom in corridors:
        if going_down:
            if bottom < current_y or top > end_y:
                continue
        elif top > current_y or bottom < end_y:
            continue
        y = min(max(current_y, top), bottom)
        delta = abs(y - current_y)
        if delta < best_delta:
            best_delta = delta
            best = y
            if delta == 0:
                break
    if best is not None:
        return best, False

    best_delta = float("inf")
    for top, bottom in corridors:
        if going_down and bottom < current_y:
            continue
        if not going_down and top > current_y:
            continue
        y = min(max(current_y, top), bottom)
        delta = abs(y - current_y)
        if delta < best_delta:
            best_delta = delta
            best = y
    if best is not None:
        return best, True

    return choose_track_y(corridors, current_y, end_y), True


def in_corridors(corridors: Sequence[Interval], y: float, tolerance: float = 1e-6) -> bool:
    return any(top - tolerance <= y <= bottom + tolerance for top, bottom in corridors)
