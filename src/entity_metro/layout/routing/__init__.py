"""Edge routing subpackage for entity layouts.

Public API:
- route_edges: Main edge routing dispatcher
- RoutedEdge: Routed edge dataclass
- choose_track_y_monotonic: Track selection inside column free space
- bundle_offsets: Per-gutter bundle lane offsets
- round_polyline: Rounded corners for display
- row_underline_segment: Start underline under a source row
"""

from entity_metro.layout.routing.common import RoutedEdge
from entity_metro.layout.routing.core import route_edges, row_underline_segment
from entity_metro.layout.routing.corners import corner_radius_for, round_polyline
from entity_metro.layout.routing.offsets import attribute_hash, bundle_offsets, palette_index
from entity_metro.layout.routing.tracks import choose_track_y, choose_track_y_monotonic

__all__ = [
    "RoutedEdge",
    "attribute_hash",
    "bundle_offsets",
    "choose_track_y",
    "choose_track_y_monotonic",
    "corner_radius_for",
    "palette_index",
    "round_polyline",
    "route_edges",
    "row_underline_segment",
]
