"""Rounded corners for display of orthogonal routes.

Each interior vertex is replaced by a circular arc tangent to both
adjacent segments. The radius is limited to half of either segment so
consecutive arcs never overlap; vertices on a straight line and
degenerate (near zero length) segments are kept unchanged.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from entity_metro.layout.constants import CURVE_RADIUS_MAX, CURVE_RADIUS_MIN, CURVE_SEGMENTS
from entity_metro.layout.engine import Point

_MIN_SEGMENT = 0.01
_COLLINEAR_DOT = 0.999


def corner_radius_for(row_height: float) -> float:
    """Display corner radius scaled to the row height."""
    return min(max(row_height * 0.25, CURVE_RADIUS_MIN), CURVE_RADIUS_MAX)


def round_polyline(
    points: Sequence[Point],
    radius: float,
    segments: int = CURVE_SEGMENTS,
) -> list[Point]:
    """Return ``points`` with every corner replaced by ``segments`` arc pieces."""
    if len(points) < 3 or radius <= 0 or segments <= 0:
        return list(points)

    out: list[Point] = [points[0]]
    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        vin = (curr[0] - prev[0], curr[1] - prev[1])
        vout = (nxt[0] - curr[0], nxt[1] - curr[1])
        len_in = math.hypot(*vin)
        len_out = math.hypot(*vout)
        if len_in <= _MIN_SEGMENT or len_out <= _MIN_SEGMENT:
            out.append(curr)
            continue

        din = (vin[0] / len_in, vin[1] / len_in)
        dout = (vout[0] / len_out, vout[1] / len_out)
        if abs(din[0] * dout[0] + din[1] * dout[1]) > _COLLINEAR_DOT:
            out.append(curr)
            continue

        r = min(radius, len_in * 0.5, len_out * 0.5)
        if r <= _MIN_SEGMENT:
            out.append(curr)
            continue

        p1 = (curr[0] - din[0] * r, curr[1] - din[1] * r)
        p2 = (curr[0] + dout[0] * r, curr[1] + dout[1] * r)
        last = out[-1]
        if (last[0] - p1[0]) ** 2 + (last[1] - p1[1]) ** 2 > 0.01:
            out.append(p1)

        # Only exact for right angles, which is what the router emits.
        center = (curr[0] + (dout[0] - din[0]) * r, curr[1] + (dout[1] - din[1]) * r)
        a1 = math.atan2(p1[1] - center[1], p1[0] - center[0])
        a2 = math.atan2(p2[1] - center[1], p2[0] - center[0])
        cross = din[0] * dout[1] - din[1] * dout[0]
        if cross > 0:
            if a2 <= a1:
                a2 += math.tau
        elif a2 >= a1:
            a2 -= math.tau
        step = (a2 - a1) / segments
        for s in range(1, segments + 1):
            angle = a1 + step * s
            out.append((center[0] + math.cos(angle) * r, center[1] + math.sin(angle) * r))

    out.append(points[-1])
    return out
