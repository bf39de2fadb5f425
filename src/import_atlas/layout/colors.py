"""Flow-based module coloring.

Each terminal module claims the candidate color farthest (in HSV space)
from every color claimed so far; the claim is then stamped on each
directory along the module's path up to the root.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from import_atlas.schema import ColorPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from import_atlas.layout.hierarchy import Hierarchy, HierarchyNode

# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------

PRIMARY_COLORS: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#0ea5e9",  # sky
    "#10b981",  # emerald
    "#22c55e",  # green
    "#f59e0b",  # amber
    "#ea580c",  # orange
    "#a855f7",  # purple
    "#ec4899",  # pink
    "#ef4444",  # red
    "#64748b",  # slate
    "#6b7280",  # gray
    "#737373",  # neutral
    "#495057",  # dark gray
    "#d97706",  # orange-amber
)

# Mid-range shades of the blue/cyan/green/purple/violet/red/orange/yellow families.
EXTENDED_COLORS: tuple[str, ...] = (
    "#7dabf8", "#6c8eef", "#5469d4", "#3d4eac",
    "#4db7e8", "#3a97d4", "#067ab8", "#075996",
    "#33c27f", "#1ea672", "#09825d", "#0e6245",
    "#b0a1e1", "#9c82db", "#8260c3", "#61469b",
    "#e28ddc", "#c96ed0", "#a450b5", "#7b3997",
    "#fa8389", "#ed5f74", "#cd3d64", "#a41c4e",
    "#f5925e", "#e56f4a", "#c44c34", "#9e2f28",
    "#e5993e", "#d97917", "#bb5504", "#983705",
)  # fmt: skip

DEFAULT_COLOR = "#8792a2"

_HUE_WEIGHT = 0.6
_SATURATION_WEIGHT = 0.2
_VALUE_WEIGHT = 0.2


def hex_to_hsv(color: str) -> tuple[float, float, float]:
    """``#rrggbb`` → (h, s, v), each in [0, 1]."""
    value = color.lstrip("#")
    r, g, b = (int(value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return colorsys.rgb_to_hsv(r, g, b)


def color_distance(a: str, b: str) -> float:
    """Weighted perceptual distance in [0, 1]; hue wraps around the circle."""
    h1, s1, v1 = hex_to_hsv(a)
    h2, s2, v2 = hex_to_hsv(b)
    hue = abs(h1 - h2)
    hue = min(hue, 1.0 - hue) * 2
    return _HUE_WEIGHT * hue + _SATURATION_WEIGHT * abs(s1 - s2) + _VALUE_WEIGHT * abs(v1 - v2)


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


@dataclass
class ColorAssignment:
    """Module path → color, for terminals and every directory above them."""

    colors: dict[str, str] = field(default_factory=dict)
    terminals: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, path: str) -> str:
        return self.colors[path]

    def __contains__(self, path: object) -> bool:
        return path in self.colors

    def color_of(self, path: str) -> str:
        return self.colors.get(path, DEFAULT_COLOR)


class ColorAssigner:
    """Picks maximally distinct colors for terminal modules.

    *policy* decides which terminal a shared ancestor directory keeps:
    ``LAST_WRITER`` lets every later terminal overwrite it,
    ``FIRST_WRITER`` keeps the first claim.
    """

    def __init__(
        self,
        policy: ColorPolicy = ColorPolicy.LAST_WRITER,
        candidates: Iterable[str] | None = None,
    ) -> None:
        self.policy = policy
        self._candidates = tuple(candidates) if candidates is not None else PRIMARY_COLORS + EXTENDED_COLORS
        self._used: list[str] = []

    def _next_color(self, ordinal: int) -> str:
        best: str | None = None
        best_score = -1.0
        for candidate in self._candidates:
            if candidate in self._used:
                continue
            score = min((color_distance(candidate, used) for used in self._used), default=float("inf"))
            if score > best_score:
                best, best_score = candidate, score
        if best is None:
            return PRIMARY_COLORS[ordinal % len(PRIMARY_COLORS)]
        return best

    def _stamp(self, assignment: ColorAssignment, node: HierarchyNode, color: str) -> None:
        assignment.terminals[node.path] = color
        assignment.colors[node.path] = color
        for ancestor in node.ancestors():
            if self.policy is ColorPolicy.FIRST_WRITER and ancestor.path in assignment.colors:
                continue
            assignment.colors[ancestor.path] = color

    def assign(self, hierarchy: Hierarchy, order: Iterable[str] | None = None) -> ColorAssignment:
        """Color the terminals of *hierarchy*.

        *order* is the terminal visiting order (module paths); it defaults
        to the hierarchy's breadth-first leaf order.  Paths that are not
        terminal nodes of the hierarchy are ignored.
        """
        self._used = []
        assignment = ColorAssignment()
        if order is None:
            terminals = hierarchy.leaves()
        else:
            terminals = [hierarchy.by_path[p] for p in order if p in hierarchy.by_path]
            terminals = [node for node in terminals if node.is_leaf and node is not hierarchy.root]

        for ordinal, node in enumerate(terminals):
            if node.path in assignment.terminals:
                continue
            color = self._next_color(ordinal)
            self._used.append(color)
            self._stamp(assignment, node, color)

        logger.debug(
            "Assigned {} distinct color(s) to {} terminal module(s) ({})",
            len(set(assignment.terminals.values())),
            len(assignment.terminals),
            self.policy.value,
        )
        return assignment
