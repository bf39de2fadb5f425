"""SVG serialization of a positioned module hierarchy.

The scene is assembled as an ``xml.etree.ElementTree`` tree:

    <svg>
      <defs><style/></defs>
      <g transform=...>        structural links, dependency links, nodes
      <g class="legend">       colors and shapes present in the diagram
    </svg>
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from loguru import logger

from import_atlas.graph.cycles import cycle_edges
from import_atlas.layout.colors import DEFAULT_COLOR
from import_atlas.layout.overlap import OverlapResolver
from import_atlas.render.styles import (
    LEGEND_ITEM_HEIGHT,
    LEGEND_MIN_CANVAS_PAD,
    LEGEND_PADDING,
    LEGEND_SPACING,
    LEGEND_SWATCH,
    LEGEND_X,
    LEGEND_Y,
    shape_for,
    theme_css,
)
from import_atlas.schema import LEGEND_LABELS, Classification, PrimitiveCategory

if TYPE_CHECKING:
    from import_atlas.graph.cycles import Cycle
    from import_atlas.graph.model import ModuleGraph
    from import_atlas.layout.colors import ColorAssignment
    from import_atlas.layout.engine import Canvas
    from import_atlas.layout.hierarchy import Hierarchy, HierarchyNode
    from import_atlas.settings import AtlasSettings

SVG_NS = "http://www.w3.org/2000/svg"

# Rough glyph metrics for label extents.
_CHAR_WIDTH = 7.0
_LABEL_HEIGHT = 12.0


def fmt(value: float) -> str:
    """Compact number formatting: integers without a decimal point, else ≤3 decimals."""
    if math.isclose(value, round(value), abs_tol=1e-9):
        return str(int(round(value)))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def _point(x: float, y: float) -> str:
    return f"{fmt(x)},{fmt(y)}"


# ---------------------------------------------------------------------------
# Link geometry
# ---------------------------------------------------------------------------


def structural_link_path(sx: float, sy: float, tx: float, ty: float, *, horizontal: bool) -> str:
    """Smooth S-curve between parent and child, tangent to the flow axis at both ends."""
    if horizontal:
        mx = (sx + tx) / 2
        return f"M{_point(sx, sy)}C{_point(mx, sy)} {_point(mx, ty)} {_point(tx, ty)}"
    my = (sy + ty) / 2
    return f"M{_point(sx, sy)}C{_point(sx, my)} {_point(tx, my)} {_point(tx, ty)}"


def dependency_link_path(
    sx: float, sy: float, tx: float, ty: float, *, horizontal: bool, max_offset: float
) -> str:
    """Cubic curve bent away from the straight line so it reads apart from structural links.

    The bend grows with distance (a quarter of it) up to *max_offset*.
    """
    dx = tx - sx
    dy = ty - sy
    intensity = min(math.hypot(dx, dy) * 0.25, max_offset)
    if horizontal:
        c1 = (sx + intensity, sy + dy * 0.3)
        c2 = (tx - intensity, ty + dy * 0.2)
    else:
        c1 = (sx + dx * 0.3, sy + intensity)
        c2 = (tx + dx * 0.2, ty - intensity)
    return f"M{_point(sx, sy)}C{_point(*c1)} {_point(*c2)} {_point(tx, ty)}"


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class DiagramRenderer:
    """Draws links, node markers, labels and the legend, then serializes to SVG."""

    def __init__(self, settings: AtlasSettings) -> None:
        self._render = settings.render
        self._layout = settings.layout
        self._overlap = settings.overlap

    def render(
        self,
        hierarchy: Hierarchy,
        graph: ModuleGraph,
        cycles: list[Cycle],
        colors: ColorAssignment,
        canvas: Canvas,
        resolver: OverlapResolver | None = None,
    ) -> str:
        """Serialize the complete diagram.

        *resolver* receives every drawn primitive; a fresh one is used when
        none is given.  Unresolved label overlaps are kept and summarised.
        """
        if resolver is None:
            resolver = OverlapResolver(self._overlap)
        horizontal = self._layout.flow.is_horizontal

        svg = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": fmt(canvas.width),
                "height": fmt(canvas.height),
                "viewBox": f"0 0 {fmt(canvas.width)} {fmt(canvas.height)}",
            },
        )
        style = ET.SubElement(ET.SubElement(svg, "defs"), "style")
        style.text = theme_css(self._render.theme)

        scene = ET.SubElement(svg, "g", {"transform": f"translate({fmt(canvas.offset_x)},{fmt(canvas.offset_y)})"})
        self._draw_structural_links(scene, hierarchy, horizontal)
        self._draw_dependency_links(scene, hierarchy, graph, cycles, colors, resolver, horizontal)
        self._draw_nodes(scene, hierarchy, colors, resolver)

        if self._render.show_legend and canvas.width > self._layout.legend_width + LEGEND_MIN_CANVAS_PAD:
            self._draw_legend(svg, hierarchy, colors, canvas)

        if resolver.conflicts:
            logger.warning("{} label overlap(s) could not be resolved", len(resolver.conflicts))
        logger.debug("Overlap statistics: {}", resolver.statistics())

        return ET.tostring(svg, encoding="unicode")

    # -- links ---------------------------------------------------------------

    def _draw_structural_links(self, scene: ET.Element, hierarchy: Hierarchy, horizontal: bool) -> None:
        group = ET.SubElement(scene, "g", {"class": "structural-links"})
        for parent, child in hierarchy.root.links():
            ET.SubElement(
                group,
                "path",
                {"class": "link", "d": structural_link_path(parent.x, parent.y, child.x, child.y, horizontal=horizontal)},
            )

    def _draw_dependency_links(
        self,
        scene: ET.Element,
        hierarchy: Hierarchy,
        graph: ModuleGraph,
        cycles: list[Cycle],
        colors: ColorAssignment,
        resolver: OverlapResolver,
        horizontal: bool,
    ) -> None:
        group = ET.SubElement(scene, "g", {"class": "dependency-links"})
        in_cycle = cycle_edges(cycles)
        for source_path, target_path in graph.iter_edges():
            source = hierarchy.by_path.get(source_path)
            target = hierarchy.by_path.get(target_path)
            if source is None or target is None:
                continue
            cyclic = (source_path, target_path) in in_cycle
            ET.SubElement(
                group,
                "path",
                {
                    "class": "link dependency-link cycle-link" if cyclic else "link dependency-link",
                    "d": dependency_link_path(
                        source.x,
                        source.y,
                        target.x,
                        target.y,
                        horizontal=horizontal,
                        max_offset=self._render.curve_offset,
                    ),
                    "stroke": colors.color_of(target_path),
                    "stroke-width": "3" if cyclic else "2",
                    "stroke-opacity": "0.8",
                },
            )
            resolver.add(
                f"link:{source_path}->{target_path}",
                (source.x + target.x) / 2,
                (source.y + target.y) / 2,
                PrimitiveCategory.DECORATION,
                width=abs(target.x - source.x),
                height=abs(target.y - source.y),
            )

    # -- nodes ---------------------------------------------------------------

    def _draw_nodes(
        self, scene: ET.Element, hierarchy: Hierarchy, colors: ColorAssignment, resolver: OverlapResolver
    ) -> None:
        nodes = list(hierarchy)
        # Markers go in first so that labels, not markers, get moved.
        for node in nodes:
            shape = shape_for(node.classification)
            resolver.add(
                f"marker:{node.path}",
                node.x,
                node.y,
                PrimitiveCategory.INDICATOR,
                width=shape.size,
                height=shape.size,
                owner=node.path,
            )

        group = ET.SubElement(scene, "g", {"class": "nodes"})
        for node in nodes:
            color = colors.color_of(node.path)
            element = ET.SubElement(
                group,
                "g",
                {
                    "class": f"node node--{node.classification.value}",
                    "transform": f"translate({_point(node.x, node.y)})",
                    "style": f"--color: {color}",
                },
            )
            self._draw_marker(element, node, color)
            self._draw_label(element, node, resolver)

    def _draw_marker(self, element: ET.Element, node: HierarchyNode, color: str) -> None:
        shape = shape_for(node.classification)
        attrs = shape.attributes()
        if node.classification is Classification.DIRECTORY:
            attrs["r"] = fmt(self._render.node_radius)
        attrs["class"] = f"node-shape shape-{node.classification.value}"
        attrs["fill"] = color
        ET.SubElement(element, shape.tag, attrs)

    def _draw_label(self, element: ET.Element, node: HierarchyNode, resolver: OverlapResolver) -> None:
        offset = self._render.label_offset
        before = not node.is_leaf
        anchor_x = node.x - offset if before else node.x + offset
        placed = resolver.add(
            f"label:{node.path}",
            anchor_x,
            node.y,
            PrimitiveCategory.LABEL,
            width=len(node.name) * _CHAR_WIDTH,
            height=_LABEL_HEIGHT,
            text=node.name,
            owner=node.path,
        )
        text = ET.SubElement(
            element,
            "text",
            {
                "dy": "0.31em",
                "x": fmt(placed.x - node.x),
                "y": fmt(placed.y - node.y),
                "text-anchor": "end" if before else "start",
            },
        )
        text.text = node.name

    # -- legend --------------------------------------------------------------

    def _legend_entries(
        self, hierarchy: Hierarchy, colors: ColorAssignment
    ) -> tuple[list[tuple[str, str]], list[Classification]]:
        """Colors of the root's children (first name per color) and the classifications drawn."""
        color_items: list[tuple[str, str]] = []
        seen_colors: set[str] = set()
        for child in hierarchy.root.children:
            color = colors.color_of(child.path)
            if color not in seen_colors:
                seen_colors.add(color)
                color_items.append((child.name, color))

        present = {node.classification for node in hierarchy}
        shape_items = [cls for cls in Classification if cls in present]
        return color_items, shape_items

    def _draw_legend(self, svg: ET.Element, hierarchy: Hierarchy, colors: ColorAssignment, canvas: Canvas) -> None:
        color_items, shape_items = self._legend_entries(hierarchy, colors)
        x = canvas.width - self._layout.margin_right + LEGEND_X
        legend = ET.SubElement(svg, "g", {"class": "legend", "transform": f"translate({fmt(x)},{fmt(LEGEND_Y)})"})

        rows = len(color_items) + len(shape_items) + 2
        ET.SubElement(
            legend,
            "rect",
            {
                "class": "legend-background",
                "x": fmt(-LEGEND_PADDING),
                "y": fmt(-LEGEND_PADDING - LEGEND_SWATCH),
                "width": fmt(self._layout.legend_width),
                "height": fmt(rows * LEGEND_ITEM_HEIGHT + 2 * LEGEND_PADDING),
                "rx": "4",
            },
        )

        y = 0.0
        title = ET.SubElement(legend, "text", {"class": "legend-title", "x": "0", "y": fmt(y)})
        title.text = "Directory Colors"
        y += LEGEND_ITEM_HEIGHT
        for name, color in color_items:
            item = ET.SubElement(legend, "g", {"class": "legend-item", "transform": f"translate(0,{fmt(y)})"})
            ET.SubElement(
                item, "rect", {"width": fmt(LEGEND_SWATCH), "height": fmt(LEGEND_SWATCH), "fill": color}
            )
            self._legend_text(item, name)
            y += LEGEND_ITEM_HEIGHT

        title = ET.SubElement(legend, "text", {"class": "legend-title", "x": "0", "y": fmt(y)})
        title.text = "File Type Shapes"
        y += LEGEND_ITEM_HEIGHT
        for classification in shape_items:
            item = ET.SubElement(legend, "g", {"class": "legend-item", "transform": f"translate(0,{fmt(y)})"})
            shape = shape_for(classification)
            icon = ET.SubElement(
                item, "g", {"transform": f"translate({fmt(LEGEND_SWATCH / 2)},{fmt(LEGEND_SWATCH / 2)})"}
            )
            attrs = shape.attributes()
            attrs["class"] = f"node-shape shape-{classification.value}"
            attrs["fill"] = DEFAULT_COLOR
            ET.SubElement(icon, shape.tag, attrs)
            self._legend_text(item, LEGEND_LABELS[classification])
            y += LEGEND_ITEM_HEIGHT

    @staticmethod
    def _legend_text(item: ET.Element, label: str) -> None:
        text = ET.SubElement(
            item,
            "text",
            {
                "class": "legend-text",
                "x": fmt(LEGEND_SWATCH + LEGEND_SPACING),
                "y": fmt(LEGEND_SWATCH / 2),
                "dy": "0.31em",
            },
        )
        text.text = label
