"""Interchangeable node-placement strategies.

Every strategy is a pure mapping

    (depth, sibling_index, sibling_count, max_depth) -> (x, y)

expressed in the canonical left-to-right frame, where ``x`` grows with
depth and ``y`` separates nodes sharing a depth level.  The layout engine
rotates that frame to the requested flow direction, so strategies never
deal with screen orientation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from loguru import logger

from import_atlas.schema import LayoutStyle

if TYPE_CHECKING:
    from collections.abc import Callable


def _depth_divisor(max_depth: int) -> int:
    """``max_depth`` guarded against zero."""
    return max(max_depth, 1)


class LayoutStrategy(ABC):
    """Coordinate assignment for one hierarchy slot."""

    style: ClassVar[LayoutStyle]

    @abstractmethod
    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:
        """Return canonical ``(x, y)`` for the *index*-th of *count* nodes at *depth*."""


# ---------------------------------------------------------------------------
# Concrete strategies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TreeStrategy(LayoutStrategy):
    """Depth spread evenly across the available span; siblings centred on the axis."""

    style: ClassVar[LayoutStyle] = LayoutStyle.TREE

    span: float
    level_spacing: float = 80.0

    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:
        x = depth * (self.span / _depth_divisor(max_depth))
        y = (index - (count - 1) / 2) * self.level_spacing
        return x, y


@dataclass(frozen=True)
class LinearStrategy(LayoutStrategy):
    """Straight progression: fixed step per depth, siblings stacked from zero."""

    style: ClassVar[LayoutStyle] = LayoutStyle.LINEAR

    level_step: float = 100.0
    node_spacing: float = 40.0

    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:  # noqa: ARG002
        return depth * self.level_step, index * self.node_spacing


@dataclass(frozen=True)
class CircularStrategy(LayoutStrategy):
    """Concentric half-circles: depth sets the arc's base, rank sets the angle.

    Angles run from -90° to +90°, so a level never wraps past a half-turn.
    """

    style: ClassVar[LayoutStyle] = LayoutStyle.CIRCULAR

    span: float
    min_level_width: float = 200.0
    min_radius: float = 120.0
    radius_per_node: float = 20.0

    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:
        base = depth * max(self.span / _depth_divisor(max_depth), self.min_level_width)
        if count <= 1:
            return base, 0.0
        radius = max(self.min_radius, count * self.radius_per_node)
        angle = -math.pi / 2 + index * (math.pi / (count - 1))
        x = base + radius * (0.4 + 0.6 * abs(math.cos(angle)))
        y = radius * math.sin(angle)
        return x, y


@dataclass(frozen=True)
class DiagonalStrategy(LayoutStrategy):
    """Each level is indented on both axes; siblings step diagonally."""

    style: ClassVar[LayoutStyle] = LayoutStyle.DIAGONAL

    level_step: float = 80.0
    indent: float = 60.0
    sibling_step_x: float = 30.0
    sibling_step_y: float = 40.0

    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:  # noqa: ARG002
        x = depth * self.level_step + index * self.sibling_step_x
        y = depth * self.indent + index * self.sibling_step_y
        return x, y


@dataclass(frozen=True)
class GridStrategy(LayoutStrategy):
    """Fixed-pitch lattice: column = depth, row = sibling rank."""

    style: ClassVar[LayoutStyle] = LayoutStyle.GRID

    span: float
    max_pitch: float = 100.0

    def place(self, depth: int, index: int, count: int, max_depth: int) -> tuple[float, float]:  # noqa: ARG002
        pitch = min(self.span / (max_depth + 1), self.max_pitch)
        return depth * pitch, index * pitch


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_FACTORIES: dict[LayoutStyle, Callable[[float, float], LayoutStrategy]] = {
    LayoutStyle.TREE: lambda span, spacing: TreeStrategy(span=span, level_spacing=spacing),
    LayoutStyle.LINEAR: lambda _span, _spacing: LinearStrategy(),
    LayoutStyle.CIRCULAR: lambda span, _spacing: CircularStrategy(span=span),
    LayoutStyle.DIAGONAL: lambda _span, _spacing: DiagonalStrategy(),
    LayoutStyle.GRID: lambda span, _spacing: GridStrategy(span=span),
}

_missing = set(LayoutStyle) - {LayoutStyle.AUTO} - set(_FACTORIES)
if _missing:
    raise RuntimeError(f"LayoutStyles without a strategy: {sorted(_missing)}")

# Thresholds for automatic selection.
_AUTO_SMALL_GRAPH = 10
_AUTO_WIDE_RATIO = 2.0
_AUTO_DEEP_TREE = 5


def resolve_style(style: LayoutStyle, *, node_count: int, max_depth: int, span: float) -> LayoutStyle:
    """Map ``AUTO`` to a concrete style from the graph's size and shape."""
    if style is not LayoutStyle.AUTO:
        return style
    if node_count <= _AUTO_SMALL_GRAPH:
        return LayoutStyle.TREE
    if span / (_depth_divisor(max_depth) * 100) > _AUTO_WIDE_RATIO:
        return LayoutStyle.TREE
    if max_depth > _AUTO_DEEP_TREE:
        return LayoutStyle.CIRCULAR
    return LayoutStyle.DIAGONAL


def create_strategy(
    style: LayoutStyle,
    *,
    span: float,
    level_spacing: float = 80.0,
    node_count: int = 0,
    max_depth: int = 0,
) -> LayoutStrategy:
    """Instantiate the strategy for *style* (resolving ``AUTO`` first)."""
    concrete = resolve_style(style, node_count=node_count, max_depth=max_depth, span=span)
    if concrete is not style:
        logger.debug("Layout 'auto' resolved to '{}' ({} nodes, depth {})", concrete.value, node_count, max_depth)
    return _FACTORIES[concrete](span, level_spacing)
