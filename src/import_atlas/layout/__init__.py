"""Layout package — hierarchy, positioning strategies, colors and overlap resolution."""

from __future__ import annotations

from import_atlas.layout.colors import ColorAssigner, ColorAssignment, color_distance
from import_atlas.layout.engine import Canvas, LayoutBounds, LayoutEngine
from import_atlas.layout.hierarchy import Hierarchy, HierarchyNode, build_hierarchy
from import_atlas.layout.overlap import Conflict, DrawPrimitive, OverlapResolver
from import_atlas.layout.strategies import (
    CircularStrategy,
    DiagonalStrategy,
    GridStrategy,
    LayoutStrategy,
    LinearStrategy,
    TreeStrategy,
    create_strategy,
    resolve_style,
)

__all__ = [
    "Canvas",
    "CircularStrategy",
    "ColorAssigner",
    "ColorAssignment",
    "Conflict",
    "DiagonalStrategy",
    "DrawPrimitive",
    "GridStrategy",
    "Hierarchy",
    "HierarchyNode",
    "LayoutBounds",
    "LayoutEngine",
    "LayoutStrategy",
    "LinearStrategy",
    "OverlapResolver",
    "TreeStrategy",
    "build_hierarchy",
    "color_distance",
    "create_strategy",
    "resolve_style",
]
