"""Tests for SVG rendering."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET

import pytest

from import_atlas.graph.cycles import detect_cycles
from import_atlas.graph.model import ModuleGraph
from import_atlas.layout.colors import ColorAssigner
from import_atlas.layout.engine import Canvas, LayoutEngine
from import_atlas.layout.hierarchy import build_hierarchy
from import_atlas.layout.overlap import OverlapResolver
from import_atlas.render.styles import SHAPES, theme_css
from import_atlas.render.svg import SVG_NS, DiagramRenderer, dependency_link_path, fmt, structural_link_path
from import_atlas.schema import Classification, PrimitiveCategory, Theme


def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


def _group(root: ET.Element, cls: str) -> ET.Element:
    for element in root.iter(_tag("g")):
        if element.get("class") == cls:
            return element
    raise AssertionError(f"no <g class={cls!r}>")


def _draw(settings, root, rels, edges=(), *, canvas=None, resolver=None):
    """Lay out and render modules *rels* with import *edges* (pairs of rels)."""
    paths = {rel: os.path.join(str(root), *rel.split("/")) for rel in rels}
    graph = ModuleGraph.from_files(paths.values(), str(root))
    for source, target in edges:
        graph.add_edge(paths[source], paths[target])
    hierarchy = build_hierarchy(graph.nodes, str(root))
    engine = LayoutEngine(settings.layout)
    bounds = engine.position(hierarchy)
    if canvas is None:
        canvas = engine.fit_canvas(bounds, reserve_legend=settings.render.show_legend)
    colors = ColorAssigner().assign(hierarchy)
    svg = DiagramRenderer(settings).render(hierarchy, graph, detect_cycles(graph), colors, canvas, resolver)
    return ET.fromstring(svg), hierarchy, colors, paths


# ---------------------------------------------------------------------------
# Document structure
# ---------------------------------------------------------------------------


class TestDocument:
    def test_root_attributes(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js"])
        assert svg.tag == _tag("svg")
        assert svg.get("width") == "1800"
        assert svg.get("viewBox") == f"0 0 1800 {svg.get('height')}"

    def test_embeds_theme_stylesheet(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js"])
        style = svg.find(f"{_tag('defs')}/{_tag('style')}")
        assert style is not None
        assert "--bg-primary" in style.text

    def test_structural_link_per_parent_child_pair(self, settings, tmp_path):
        svg, hierarchy, *_ = _draw(settings, tmp_path, ["src/a.js", "src/b.js", "c.css"])
        links = _group(svg, "structural-links").findall(_tag("path"))
        assert len(links) == len(hierarchy) - 1
        assert all(link.get("class") == "link" for link in links)

    def test_node_group_per_hierarchy_node(self, settings, tmp_path):
        svg, hierarchy, *_ = _draw(settings, tmp_path, ["src/a.js", "b.css", "c.png"])
        nodes = _group(svg, "nodes").findall(_tag("g"))
        assert len(nodes) == len(hierarchy)
        classes = {n.get("class") for n in nodes}
        assert {"node node--directory", "node node--script", "node node--stylesheet", "node node--image"} == classes

    def test_marker_shapes_follow_classification(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js", "b.css"])
        nodes = _group(svg, "nodes")
        for node in nodes.findall(_tag("g")):
            kind = Classification(node.get("class").removeprefix("node node--"))
            marker = node[0]
            assert marker.tag == _tag(SHAPES[kind].tag)
            assert marker.get("class") == f"node-shape shape-{kind.value}"

    def test_directory_radius_configurable(self, settings, tmp_path):
        settings.render.node_radius = 12
        svg, *_ = _draw(settings, tmp_path, ["src/a.js"])
        circles = list(_group(svg, "nodes").iter(_tag("circle")))
        assert len(circles) == 2
        assert all(c.get("r") == "12" for c in circles)

    def test_labels_anchor_by_node_kind(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["src/a.js"])
        anchors = {}
        for node in _group(svg, "nodes").findall(_tag("g")):
            text = node.find(_tag("text"))
            anchors[text.text] = text.get("text-anchor")
        assert anchors == {tmp_path.name: "end", "src": "end", "a.js": "start"}

    def test_node_fill_matches_color_assignment(self, settings, tmp_path):
        svg, _, colors, paths = _draw(settings, tmp_path, ["a.js", "b.js"])
        fills = [node[0].get("fill") for node in _group(svg, "nodes").findall(_tag("g"))]
        assert colors[paths["a.js"]] in fills
        assert colors[paths["b.js"]] in fills


# ---------------------------------------------------------------------------
# Dependency links
# ---------------------------------------------------------------------------


class TestDependencyLinks:
    def test_one_path_per_edge(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js", "b.js", "c.js"], [("a.js", "b.js"), ("b.js", "c.js")])
        assert len(_group(svg, "dependency-links").findall(_tag("path"))) == 2

    def test_cycle_edges_highlighted(self, settings, tmp_path):
        svg, *_ = _draw(
            settings,
            tmp_path,
            ["a.js", "b.js", "c.js"],
            [("a.js", "b.js"), ("b.js", "a.js"), ("b.js", "c.js")],
        )
        links = _group(svg, "dependency-links").findall(_tag("path"))
        cyclic = [link for link in links if "cycle-link" in link.get("class").split()]
        plain = [link for link in links if "cycle-link" not in link.get("class").split()]
        assert len(cyclic) == 2
        assert len(plain) == 1
        assert all(link.get("stroke-width") == "3" for link in cyclic)
        assert plain[0].get("stroke-width") == "2"

    def test_stroke_uses_target_color(self, settings, tmp_path):
        svg, _, colors, paths = _draw(settings, tmp_path, ["a.js", "b.js"], [("a.js", "b.js")])
        (link,) = _group(svg, "dependency-links").findall(_tag("path"))
        assert link.get("stroke") == colors[paths["b.js"]]
        assert link.get("stroke-opacity") == "0.8"

    def test_no_edges_no_paths(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js"])
        assert _group(svg, "dependency-links").findall(_tag("path")) == []

    def test_primitives_registered_with_resolver(self, settings, tmp_path):
        resolver = OverlapResolver(settings.overlap)
        _, hierarchy, *_ = _draw(settings, tmp_path, ["a.js", "b.js"], [("a.js", "b.js")], resolver=resolver)
        stats = resolver.statistics()
        assert stats["categories"][PrimitiveCategory.INDICATOR.value] == len(hierarchy)
        assert stats["categories"][PrimitiveCategory.LABEL.value] == len(hierarchy)
        assert stats["categories"][PrimitiveCategory.DECORATION.value] == 1


# ---------------------------------------------------------------------------
# Legend
# ---------------------------------------------------------------------------


class TestLegend:
    def _texts(self, svg):
        legend = _group(svg, "legend")
        return [t.text for t in legend.iter(_tag("text"))]

    def test_present_by_default(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["src/a.js", "b.css"])
        texts = self._texts(svg)
        assert "Directory Colors" in texts
        assert "File Type Shapes" in texts
        assert "Script Files" in texts
        assert "Stylesheet" in texts
        assert "Directory/Folder" in texts
        assert "Image Files" not in texts

    def test_lists_root_children_by_distinct_color(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["src/a.js", "lib/b.js"])
        texts = self._texts(svg)
        assert "src" in texts
        assert "lib" in texts

    def test_disabled(self, settings, tmp_path):
        settings.render.show_legend = False
        svg, *_ = _draw(settings, tmp_path, ["a.js"])
        with pytest.raises(AssertionError):
            _group(svg, "legend")

    def test_skipped_on_narrow_canvas(self, settings, tmp_path):
        svg, *_ = _draw(settings, tmp_path, ["a.js"], canvas=Canvas(width=300, height=200, offset_x=0, offset_y=0))
        with pytest.raises(AssertionError):
            _group(svg, "legend")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestThemes:
    def test_auto_has_dark_override(self):
        css = theme_css(Theme.AUTO)
        assert "--bg-primary: #f7fafc" in css
        assert "prefers-color-scheme: dark" in css
        assert "--bg-primary: #1a1f36" in css

    def test_light_only(self):
        css = theme_css(Theme.LIGHT)
        assert "--bg-primary: #f7fafc" in css
        assert "prefers-color-scheme" not in css
        assert "#1a1f36" not in css

    def test_dark_only(self):
        css = theme_css(Theme.DARK)
        assert "--bg-primary: #1a1f36" in css
        assert "prefers-color-scheme" not in css

    def test_dark_theme_rendered(self, settings, tmp_path):
        settings.render.theme = Theme.DARK
        svg, *_ = _draw(settings, tmp_path, ["a.js"])
        assert "--bg-primary: #1a1f36" in svg.find(f"{_tag('defs')}/{_tag('style')}").text


class TestPaths:
    def test_fmt(self):
        assert fmt(2.0) == "2"
        assert fmt(-3) == "-3"
        assert fmt(1.23456) == "1.235"
        assert fmt(0.1) == "0.1"

    def test_structural_horizontal(self):
        assert structural_link_path(0, 0, 100, 50, horizontal=True) == "M0,0C50,0 50,50 100,50"

    def test_structural_vertical(self):
        assert structural_link_path(0, 0, 100, 50, horizontal=False) == "M0,0C0,25 100,25 100,50"

    def test_dependency_bend_scales_with_distance(self):
        assert dependency_link_path(0, 0, 100, 0, horizontal=True, max_offset=120) == "M0,0C25,0 75,0 100,0"

    def test_dependency_bend_capped(self):
        assert dependency_link_path(0, 0, 1000, 0, horizontal=True, max_offset=120) == "M0,0C120,0 880,0 1000,0"

    def test_dependency_vertical(self):
        assert dependency_link_path(0, 0, 0, 100, horizontal=False, max_offset=120) == "M0,0C0,25 0,75 0,100"
