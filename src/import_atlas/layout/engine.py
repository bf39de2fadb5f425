"""Hierarchy positioning and canvas sizing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from import_atlas.layout.strategies import LayoutStrategy, create_strategy
from import_atlas.schema import FlowDirection

if TYPE_CHECKING:
    from collections.abc import Iterable

    from import_atlas.layout.hierarchy import Hierarchy, HierarchyNode
    from import_atlas.settings import LayoutSettings

# Horizontal room around the legend panel inside the right margin.
LEGEND_INSET = 30.0


@dataclass(frozen=True)
class LayoutBounds:
    """Axis-aligned box enclosing every positioned node."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    @classmethod
    def of(cls, nodes: Iterable[HierarchyNode]) -> LayoutBounds:
        """Scan *nodes* once; an empty iterable yields a zero box at the origin."""
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for node in nodes:
            min_x = min(min_x, node.x)
            max_x = max(max_x, node.x)
            min_y = min(min_y, node.y)
            max_y = max(max_y, node.y)
        if min_x == math.inf:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(min_x, max_x, min_y, max_y)


@dataclass(frozen=True)
class Canvas:
    """Final drawing surface.

    ``offset_x``/``offset_y`` translate layout coordinates into canvas
    coordinates so that the bounds' corner lands on the top-left margin.
    """

    width: float
    height: float
    offset_x: float
    offset_y: float


def _orient(x: float, y: float, flow: FlowDirection) -> tuple[float, float]:
    """Rotate a canonical (depth-axis, sibling-axis) pair onto the screen."""
    if flow is FlowDirection.LEFT_TO_RIGHT:
        return x, y
    if flow is FlowDirection.RIGHT_TO_LEFT:
        return -x, y
    if flow is FlowDirection.TOP_TO_BOTTOM:
        return y, x
    return y, -x


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class LayoutEngine:
    """Assigns coordinates to a :class:`Hierarchy` and sizes the canvas.

    The strategy is fixed at construction time when one is passed in;
    otherwise it is derived per hierarchy from ``settings.style``.
    """

    def __init__(self, settings: LayoutSettings, strategy: LayoutStrategy | None = None) -> None:
        self._settings = settings
        self._strategy = strategy
        self.flow = settings.flow

    @property
    def span(self) -> float:
        """Room along the depth axis at the default canvas size."""
        s = self._settings
        if self.flow.is_horizontal:
            return max(s.default_width - s.margin_left - s.margin_right, 1.0)
        default_height = s.default_width / s.aspect_ratio
        return max(default_height - s.margin_top - s.margin_bottom, 1.0)

    def strategy_for(self, hierarchy: Hierarchy) -> LayoutStrategy:
        if self._strategy is not None:
            return self._strategy
        return create_strategy(
            self._settings.style,
            span=self.span,
            level_spacing=self._settings.level_spacing,
            node_count=len(hierarchy),
            max_depth=hierarchy.max_depth,
        )

    def position(self, hierarchy: Hierarchy) -> LayoutBounds:
        """Place every node of *hierarchy* and return the resulting bounds.

        Nodes sharing a depth level are siblings for the strategy; their
        rank is their breadth-first order within that level.
        """
        strategy = self.strategy_for(hierarchy)
        for depth, nodes in hierarchy.levels().items():
            count = len(nodes)
            for index, node in enumerate(nodes):
                x, y = strategy.place(depth, index, count, hierarchy.max_depth)
                node.set_position(*_orient(x, y, self.flow))

        bounds = LayoutBounds.of(hierarchy)
        logger.debug(
            "Positioned {} nodes with '{}' ({}): {:.0f}x{:.0f}",
            len(hierarchy),
            strategy.style.value,
            self.flow.value,
            bounds.width,
            bounds.height,
        )
        return bounds

    def fit_canvas(self, bounds: LayoutBounds, *, reserve_legend: bool = False) -> Canvas:
        """Size the canvas around *bounds* at the configured aspect ratio.

        Starts from the default width; grows on whichever axis the content
        overflows, rescales the other axis to keep the ratio, then clamps.
        """
        s = self._settings
        right = s.margin_right
        if reserve_legend:
            right = max(right, s.legend_width + LEGEND_INSET)
        needed_w = bounds.width + s.margin_left + right
        needed_h = bounds.height + s.margin_top + s.margin_bottom

        width = s.default_width
        height = width / s.aspect_ratio
        if needed_w > width:
            width = needed_w
            height = width / s.aspect_ratio
        if needed_h > height:
            height = needed_h
            width = height * s.aspect_ratio

        canvas = Canvas(
            width=_clamp(width, s.min_width, s.max_width),
            height=_clamp(height, s.min_height, s.max_height),
            offset_x=s.margin_left - bounds.min_x,
            offset_y=s.margin_top - bounds.min_y,
        )
        logger.debug("Canvas {:.0f}x{:.0f}", canvas.width, canvas.height)
        return canvas
