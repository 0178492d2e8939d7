"""Tests for SVG rendering."""

import xml.etree.ElementTree as ET
from pathlib import Path

from entity_metro.layout import LayoutCache
from entity_metro.parser.mermaid import parse_entity_mermaid
from entity_metro.render.style import RAL_LINE_PALETTE
from entity_metro.render.svg import _fit_text, render_svg
from entity_metro.themes import LIGHT_THEME, METRO_THEME

FIXTURES = Path(__file__).parent / "fixtures"


def _render(name: str, theme=METRO_THEME, **kwargs) -> str:
    graph = parse_entity_mermaid((FIXTURES / name).read_text())
    layout, routes = LayoutCache().get(graph, None, 1200)
    return render_svg(graph, layout, routes, theme, **kwargs)


def test_render_produces_valid_svg():
    svg = _render("library.mmd")
    root = ET.fromstring(svg)
    assert root.tag.endswith("svg") or "svg" in root.tag


def test_render_contains_title():
    svg = _render("library.mmd")
    assert "Library" in svg


def test_render_without_title():
    svg = _render("library.mmd", show_title=False)
    assert "Library" not in svg


def test_render_contains_tile_titles_and_rows():
    svg = _render("library.mmd")
    for text in ("Book", "Author", "Publisher", "Dune", "name"):
        assert text in svg


def test_render_one_path_per_edge():
    svg = _render("library.mmd")
    # Edge polylines are the only elements with a round line join.
    assert svg.count("stroke-linejoin=\"round\"") == 2


def test_hatched_values_never_shown():
    svg = _render("opaque.mmd")
    assert "0xdeadbeefcafe" not in svg
    assert "0x001122334455" not in svg
    assert "fingerprint" in svg
    assert METRO_THEME.hatch_color in svg


def test_edge_colours_from_palette():
    svg = _render("compiler.mmd")
    assert any(color in svg for color in RAL_LINE_PALETTE)


def test_themes():
    dark = _render("library.mmd")
    light = _render("library.mmd", theme=LIGHT_THEME)
    assert METRO_THEME.background_color in dark
    assert LIGHT_THEME.background_color in light
    assert dark != light


def test_line_color_wraps():
    assert METRO_THEME.line_color(0) == RAL_LINE_PALETTE[0]
    assert METRO_THEME.line_color(len(RAL_LINE_PALETTE)) == RAL_LINE_PALETTE[0]


def test_fit_text():
    assert _fit_text("short", 100.0) == "short"
    assert _fit_text("a very long attribute name", 49.0) == "a very…"
    assert _fit_text("abc", 1.0) == "…"
