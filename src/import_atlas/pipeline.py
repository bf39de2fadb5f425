"""End-to-end visualization pipeline.

Stages run strictly in sequence, each owning its output until it is
handed to the next:

    discover → build graph → detect cycles → build hierarchy → layout
             → assign colors → resolve overlaps + render → SVG
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from import_atlas.errors import NoSourceFilesError
from import_atlas.graph.builder import BuildStats, build_module_graph
from import_atlas.graph.cycles import detect_cycles
from import_atlas.graph.model import normalize_path
from import_atlas.layout.colors import ColorAssigner, ColorAssignment
from import_atlas.layout.engine import LayoutEngine
from import_atlas.layout.hierarchy import Hierarchy, build_hierarchy
from import_atlas.layout.overlap import OverlapResolver
from import_atlas.render.svg import DiagramRenderer
from import_atlas.scanner import scan_files

if TYPE_CHECKING:
    from collections.abc import Sequence

    from import_atlas.graph.cycles import Cycle
    from import_atlas.graph.model import ModuleGraph
    from import_atlas.layout.engine import Canvas, LayoutBounds
    from import_atlas.settings import AtlasSettings


@dataclass
class AnalysisResult:
    """Graph and cycles for a file set (no layout)."""

    root: str
    graph: ModuleGraph
    cycles: list[Cycle]
    stats: BuildStats = field(default_factory=BuildStats)


@dataclass
class Diagram:
    """Everything produced by :func:`visualize`."""

    svg: str
    analysis: AnalysisResult
    hierarchy: Hierarchy
    bounds: LayoutBounds
    canvas: Canvas
    colors: ColorAssignment
    overlaps: OverlapResolver
    duration_s: float = 0.0

    @property
    def cycles(self) -> list[Cycle]:
        return self.analysis.cycles

    @property
    def graph(self) -> ModuleGraph:
        return self.analysis.graph


def discover(root: str | Path, settings: AtlasSettings) -> list[str]:
    """Find analyzable files; raises :class:`NoSourceFilesError` when there are none."""
    files = scan_files(root, settings.scope)
    if not files:
        raise NoSourceFilesError(str(root))
    return files


def analyze(files: Sequence[str], root: str | Path) -> AnalysisResult:
    """Build the module graph for *files* and detect its cycles."""
    stats = BuildStats()
    graph = build_module_graph(files, str(root), stats=stats)
    cycles = detect_cycles(graph)
    logger.info("Analyzed {} modules: {} import edge(s), {} cycle(s)", len(graph), graph.edge_count, len(cycles))
    return AnalysisResult(root=graph.root, graph=graph, cycles=cycles, stats=stats)


def visualize(files: Sequence[str], root: str | Path, settings: AtlasSettings) -> Diagram:
    """Run every stage after discovery and return the serialized diagram."""
    t0 = time.monotonic()
    analysis = analyze(files, root)
    graph = analysis.graph

    hierarchy = build_hierarchy(graph.nodes, normalize_path(root))
    engine = LayoutEngine(settings.layout)
    bounds = engine.position(hierarchy)
    canvas = engine.fit_canvas(bounds, reserve_legend=settings.render.show_legend)

    colors = ColorAssigner(settings.colors.policy).assign(hierarchy, order=graph.nodes)

    overlaps = OverlapResolver(settings.overlap)
    svg = DiagramRenderer(settings).render(hierarchy, graph, analysis.cycles, colors, canvas, overlaps)

    elapsed = time.monotonic() - t0
    logger.info(
        "Rendered {} nodes on a {:.0f}x{:.0f} canvas in {:.2f}s", len(hierarchy), canvas.width, canvas.height, elapsed
    )
    return Diagram(
        svg=svg,
        analysis=analysis,
        hierarchy=hierarchy,
        bounds=bounds,
        canvas=canvas,
        colors=colors,
        overlaps=overlaps,
        duration_s=elapsed,
    )


def visualize_project(root: str | Path, settings: AtlasSettings) -> Diagram:
    """Discover files under *root* and visualize them."""
    root = Path(root).resolve()
    files = discover(root, settings)
    return visualize(files, root, settings)


def analyze_project(root: str | Path, settings: AtlasSettings) -> AnalysisResult:
    """Discover files under *root* and analyze them without rendering."""
    root = Path(root).resolve()
    return analyze(discover(root, settings), root)
