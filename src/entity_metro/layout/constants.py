"""Layout constants used across layout and routing modules.

Centralizes the tile metrics and spacing of the column engine and the
gutter geometry of the edge router.
"""

# ---------------------------------------------------------------------------
# Font / text metrics
# ---------------------------------------------------------------------------
CHAR_WIDTH: float = 7.0
"""Approximate pixel width of a single character at the row font size."""

TITLE_FONT_SIZE: float = 13.0
"""Font size of tile titles."""

ROW_FONT_SIZE: float = 11.0
"""Font size of attribute rows."""

# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------
DEFAULT_CANVAS_WIDTH: float = 1200.0
"""Available width assumed when the caller does not give one."""

COLUMN_GAP: float = 48.0
"""Width of the gutter between adjacent columns (also the outer margin)."""

MIN_TILE_WIDTH: float = 160.0
"""Narrowest tile before the column count is reduced."""

DESIRED_TILE_WIDTH: float = 220.0
"""Tile width used to derive the automatic column count."""

MAX_TILE_WIDTH: float = 260.0
"""Widest tile in a multi-column layout."""

SINGLE_COLUMN_MIN_WIDTH: float = 180.0
"""Lower clamp of the tile width when only one column fits."""

SINGLE_COLUMN_MAX_WIDTH: float = 520.0
"""Upper clamp of the tile width when only one column fits."""

# ---------------------------------------------------------------------------
# Tiles
# ---------------------------------------------------------------------------
TILE_PADDING: float = 8.0
"""Inner padding between a tile's border and its content."""

HEADER_HEIGHT: float = 22.0
"""Height of the title header inside a tile."""

ROW_HEIGHT: float = 18.0
"""Height of one attribute row."""

KEY_WIDTH_FRACTION: float = 0.42
"""Share of the inner tile width used by the attribute-name column."""

KEY_WIDTH_MIN: float = 56.0
"""Minimum width of the attribute-name column."""

KEY_WIDTH_MAX: float = 120.0
"""Maximum width of the attribute-name column."""

# ---------------------------------------------------------------------------
# Masonry packing
# ---------------------------------------------------------------------------
ROW_GAP: float = 24.0
"""Vertical gap between stacked tiles in a column."""

TOP_PAD: float = 24.0
"""Empty band above the first tile of every column."""

BOTTOM_PAD: float = 24.0
"""Empty band below the tallest column."""

TRACK_CLEARANCE: float = 4.0
"""Margin kept between a tile and any horizontal track crossing its column."""

# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------
LANE_MARGIN: float = 4.0
"""Distance kept between the outermost bundle lane and the gutter edge."""

UNDERLINE_INSET: float = 4.0
"""Gap between the key/value divider and the start underline."""

UNDERLINE_MIN_LENGTH: float = 6.0
"""Shortest start underline drawn under a source row."""

MERGE_DISTANCE_SQ: float = 0.01
"""Squared distance below which consecutive waypoints are merged."""

CURVE_RADIUS_MIN: float = 3.0
"""Smallest corner radius used when rounding routes for display."""

CURVE_RADIUS_MAX: float = 8.0
"""Largest corner radius used when rounding routes for display."""

CURVE_SEGMENTS: int = 4
"""Number of line segments approximating one rounded corner."""
