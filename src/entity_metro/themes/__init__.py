"""Theme definitions for entity diagrams."""

from entity_metro.themes.light import LIGHT_THEME
from entity_metro.themes.metro import METRO_THEME

THEMES = {
    "metro": METRO_THEME,
    "light": LIGHT_THEME,
}

__all__ = ["THEMES", "METRO_THEME", "LIGHT_THEME"]
