"""Light theme."""

from entity_metro.render.style import Theme

LIGHT_THEME = Theme(
    name="light",
    background_color="#f4f4f4",
    tile_fill="#ffffff",
    tile_stroke="#1c1c1c",
    grid_stroke="#1c1c1c",
    hatch_color="#cfd3d5",
    text_color="#1c1c1c",
    title_color="#111111",
    font_family="'JetBrains Mono', Menlo, Consolas, monospace",
    tile_title_font_size=13.0,
    row_font_size=11.0,
    title_font_size=20.0,
)
