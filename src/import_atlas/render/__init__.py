"""Render package — SVG diagram serialization."""

from __future__ import annotations

from import_atlas.render.styles import SHAPES, Shape, shape_for, theme_css
from import_atlas.render.svg import SVG_NS, DiagramRenderer, dependency_link_path, structural_link_path

__all__ = [
    "SHAPES",
    "SVG_NS",
    "DiagramRenderer",
    "Shape",
    "dependency_link_path",
    "shape_for",
    "structural_link_path",
    "theme_css",
]
