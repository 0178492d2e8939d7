"""Theme and style constants for entity diagram rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

# Line palette (RAL classic signal colours).
RAL_LINE_PALETTE: tuple[str, ...] = (
    "#f9a800",  # RAL 1003 signal yellow
    "#d05d28",  # RAL 2010 signal orange
    "#9b2423",  # RAL 3001 signal red
    "#844c82",  # RAL 4008 signal violet
    "#154889",  # RAL 5005 signal blue
    "#0f8558",  # RAL 6032 signal green
    "#cb7375",  # RAL 3014 antique pink
)


@dataclass
class Theme:
    """Visual theme for an entity diagram."""

    name: str
    background_color: str
    tile_fill: str
    tile_stroke: str
    grid_stroke: str
    hatch_color: str
    text_color: str
    title_color: str
    font_family: str
    tile_title_font_size: float
    row_font_size: float
    title_font_size: float
    line_width: float = 2.5
    line_palette: tuple[str, ...] = field(default_factory=lambda: RAL_LINE_PALETTE)
    hatch_spacing: float = 8.0
    # End dots are drawn at line_width * end_dot_scale.
    end_dot_scale: float = 2.5

    def line_color(self, index: int) -> str:
        if not self.line_palette:
            return self.text_color
        return self.line_palette[index % len(self.line_palette)]
