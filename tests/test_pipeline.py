"""End-to-end tests for discovery, analysis and rendering."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from import_atlas.errors import NoSourceFilesError
from import_atlas.pipeline import analyze_project, discover, visualize, visualize_project
from import_atlas.render.svg import SVG_NS
from import_atlas.schema import ColorPolicy, LayoutStyle


def _resolved(path: str) -> str:
    return str(Path(path).resolve())


@pytest.fixture
def project(write):
    """Small TypeScript project with one circular import."""
    return {
        "index": write("src/index.ts", 'import { App } from "./app";\nimport "./styles";\n'),
        "app": write("src/app.tsx", 'import { api } from "./services/api";\nimport React from "react";\n'),
        "api": write("src/services/api.ts", 'import { App } from "../app";\nexport const api = {};\n'),
        "styles": write("src/styles.js", "export default {};\n"),
        "util": write("lib/util.js", "module.exports = {};\n"),
    }


# ---------------------------------------------------------------------------
# Discovery errors
# ---------------------------------------------------------------------------


def test_empty_directory_is_fatal(settings, tmp_path):
    with pytest.raises(NoSourceFilesError) as exc_info:
        visualize_project(tmp_path, settings)
    assert str(tmp_path.resolve()) in str(exc_info.value)


def test_directory_without_scripts_is_fatal(settings, write, tmp_path):
    write("styles.css", "body {}")
    write("README.md", "# hi")
    with pytest.raises(NoSourceFilesError):
        discover(tmp_path, settings)


def test_analyze_project_empty_is_fatal(settings, tmp_path):
    with pytest.raises(NoSourceFilesError):
        analyze_project(tmp_path, settings)


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestVisualizeProject:
    def test_produces_svg(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        root = ET.fromstring(diagram.svg)
        assert root.tag == f"{{{SVG_NS}}}svg"
        assert diagram.duration_s >= 0

    def test_graph_and_cycles(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        assert len(diagram.graph) == len(project)
        assert diagram.graph.has_edge(_resolved(project["index"]), _resolved(project["app"]))
        assert len(diagram.cycles) == 1
        assert set(diagram.cycles[0]) == {_resolved(project["app"]), _resolved(project["api"])}

    def test_external_imports_counted_not_drawn(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        assert diagram.analysis.stats.specifiers_external == 1
        assert diagram.graph.edge_count == 4

    def test_hierarchy_has_leaf_per_module(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        leaves = {leaf.path for leaf in diagram.hierarchy.leaves()}
        assert leaves == set(diagram.graph.nodes)

    def test_every_node_within_bounds_and_colored(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        for node in diagram.hierarchy:
            assert diagram.bounds.contains(node.x, node.y)
            assert node.path in diagram.colors

    def test_canvas_respects_limits(self, settings, project, tmp_path):
        diagram = visualize_project(tmp_path, settings)
        layout = settings.layout
        assert layout.min_width <= diagram.canvas.width <= layout.max_width
        assert layout.min_height <= diagram.canvas.height <= layout.max_height

    def test_first_writer_policy(self, settings, project, tmp_path):
        settings.colors.policy = ColorPolicy.FIRST_WRITER
        diagram = visualize_project(tmp_path, settings)
        src = str(tmp_path.resolve() / "src")
        first_terminal = next(p for p in diagram.graph.nodes if p.startswith(src))
        assert diagram.colors[src] == diagram.colors[first_terminal]

    @pytest.mark.parametrize("style", list(LayoutStyle))
    def test_every_layout_style(self, settings, project, tmp_path, style):
        settings.layout.style = style
        diagram = visualize_project(tmp_path, settings)
        assert diagram.svg.startswith("<svg")

    def test_scope_settings_apply(self, settings, project, tmp_path):
        settings.scope.exclude_patterns = ["lib/"]
        diagram = visualize_project(tmp_path, settings)
        assert _resolved(project["util"]) not in diagram.graph


def test_visualize_explicit_files(settings, write, tmp_path):
    a = write("a.js", 'import "./b";\n')
    b = write("b.js")
    diagram = visualize([a, b], tmp_path, settings)
    assert diagram.graph.has_edge(a, b)
    assert diagram.cycles == []


def test_analyze_project(settings, project, tmp_path):
    result = analyze_project(tmp_path, settings)
    assert result.root == str(tmp_path.resolve())
    assert len(result.graph) == len(project)
    assert len(result.cycles) == 1
