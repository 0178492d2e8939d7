"""SVG rendering of laid-out entity graphs."""

from entity_metro.render.style import Theme
from entity_metro.render.svg import render_svg

__all__ = ["Theme", "render_svg"]
