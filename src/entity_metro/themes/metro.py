"""Dark "metro" theme (telegrey ink on a near-black canvas)."""

from entity_metro.render.style import Theme

METRO_THEME = Theme(
    name="metro",
    background_color="#1c1c1c",
    tile_fill="#262626",
    tile_stroke="#cfd3d5",
    grid_stroke="#5a5d5f",
    hatch_color="#6b6f71",
    text_color="#e6e8e9",
    title_color="#f4f4f4",
    font_family="'JetBrains Mono', Menlo, Consolas, monospace",
    tile_title_font_size=13.0,
    row_font_size=11.0,
    title_font_size=20.0,
)
