"""Collision avoidance between drawn primitives.

Primitives fall into three categories with pairwise separation rules:

    label     / label      min distance = max(buffer_a, buffer_b)
    label     / indicator  min distance = buffer_a + buffer_b
    indicator / indicator  allowed
    decoration/ anything   allowed

Primitives sharing an ``owner`` (a node's marker and its own label) are
exempt from every rule and never displace each other.

A primitive violating a rule on insertion is moved along an outward
spiral until it fits; if no step fits it keeps its position and the
conflict is recorded.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from loguru import logger

from import_atlas.schema import PrimitiveCategory

if TYPE_CHECKING:
    from import_atlas.settings import OverlapSettings


@dataclass(frozen=True)
class DrawPrimitive:
    """A positioned element awaiting serialization.

    ``owner`` groups primitives drawn for the same node; primitives with the
    same owner never conflict with each other.
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    category: PrimitiveCategory
    buffer: float
    owner: str = ""


@dataclass(frozen=True)
class Conflict:
    """An unresolved separation violation."""

    primitive_id: str
    other_id: str
    kind: str  # "label-label" | "label-indicator"
    distance: float
    required: float

    @property
    def severity(self) -> float:
        return (self.required - self.distance) / self.required if self.required else 0.0


@dataclass
class CanvasExtent:
    """Running bounding box over every placed primitive (including buffers)."""

    min_x: float = math.inf
    max_x: float = -math.inf
    min_y: float = math.inf
    max_y: float = -math.inf

    def expand(self, p: DrawPrimitive) -> None:
        self.min_x = min(self.min_x, p.x - p.width / 2 - p.buffer)
        self.max_x = max(self.max_x, p.x + p.width / 2 + p.buffer)
        self.min_y = min(self.min_y, p.y - p.height / 2 - p.buffer)
        self.max_y = max(self.max_y, p.y + p.height / 2 + p.buffer)

    @property
    def area(self) -> float:
        if self.min_x == math.inf:
            return 0.0
        return (self.max_x - self.min_x) * (self.max_y - self.min_y)


@dataclass(frozen=True)
class PrimitiveChange:
    """Payload delivered to change callbacks."""

    primitive_id: str
    old: DrawPrimitive | None
    new: DrawPrimitive


ChangeCallback = Callable[[PrimitiveChange], Any]


class OverlapResolver:
    """Placed-primitive store with spiral relocation.

    One instance per render; nothing is shared between runs.
    """

    def __init__(self, settings: OverlapSettings) -> None:
        self._settings = settings
        self._primitives: dict[str, DrawPrimitive] = {}
        self._callbacks: list[ChangeCallback] = []
        self.conflicts: list[Conflict] = []
        self.relocations = 0
        self.extent = CanvasExtent()

    # -- buffers -------------------------------------------------------------

    def buffer_for(self, category: PrimitiveCategory, text: str = "") -> float:
        s = self._settings
        if category is PrimitiveCategory.LABEL:
            return max(s.text_buffer, len(text) * s.text_length_multiplier)
        if category is PrimitiveCategory.INDICATOR:
            return s.indicator_spacing
        return s.decoration_margin

    # -- rules ---------------------------------------------------------------

    @staticmethod
    def required_distance(a: DrawPrimitive, b: DrawPrimitive) -> tuple[str, float] | None:
        """Rule applying to the pair, as ``(kind, min_distance)``; None when overlap is allowed."""
        if a.owner and a.owner == b.owner:
            return None
        cats = {a.category, b.category}
        if cats == {PrimitiveCategory.LABEL}:
            return "label-label", max(a.buffer, b.buffer)
        if cats == {PrimitiveCategory.LABEL, PrimitiveCategory.INDICATOR}:
            return "label-indicator", a.buffer + b.buffer
        return None

    def _violations(self, candidate: DrawPrimitive) -> list[Conflict]:
        found: list[Conflict] = []
        for other in self._primitives.values():
            if other.id == candidate.id:
                continue
            rule = self.required_distance(candidate, other)
            if rule is None:
                continue
            kind, required = rule
            distance = math.hypot(candidate.x - other.x, candidate.y - other.y)
            if distance < required:
                found.append(Conflict(candidate.id, other.id, kind, distance, required))
        return found

    def _spiral_search(self, primitive: DrawPrimitive) -> DrawPrimitive | None:
        attempts = self._settings.attempts
        step = self._settings.max_distance / attempts
        for k in range(attempts):
            radius = (k + 1) * step
            angle = 2 * math.pi * k / attempts
            candidate = replace(
                primitive,
                x=primitive.x + math.cos(angle) * radius,
                y=primitive.y + math.sin(angle) * radius,
            )
            if not self._violations(candidate):
                return candidate
        return None

    # -- mutation ------------------------------------------------------------

    def place(self, primitive: DrawPrimitive) -> DrawPrimitive:
        """Insert *primitive*, relocating it if it violates a rule.

        Returns the primitive as stored (possibly moved).
        """
        old = self._primitives.get(primitive.id)
        placed = primitive
        violations = self._violations(primitive)
        if violations:
            moved = self._spiral_search(primitive)
            if moved is not None:
                placed = moved
                self.relocations += 1
                logger.trace(
                    "Moved {} by ({:.1f}, {:.1f})", primitive.id, moved.x - primitive.x, moved.y - primitive.y
                )
            else:
                self.conflicts.extend(violations)
                logger.debug("Unresolved overlap for {} ({} conflict(s))", primitive.id, len(violations))

        self._primitives[placed.id] = placed
        self.extent.expand(placed)
        if violations or old is not None:
            self._notify(PrimitiveChange(placed.id, old, placed))
        return placed

    def add(
        self,
        id: str,  # noqa: A002
        x: float,
        y: float,
        category: PrimitiveCategory,
        *,
        width: float = 16.0,
        height: float = 16.0,
        text: str = "",
        owner: str = "",
    ) -> DrawPrimitive:
        """Build a primitive with the category's buffer and :meth:`place` it."""
        return self.place(
            DrawPrimitive(
                id=id,
                x=x,
                y=y,
                width=width,
                height=height,
                category=category,
                buffer=self.buffer_for(category, text),
                owner=owner,
            )
        )

    def set_position(self, primitive_id: str, x: float, y: float) -> DrawPrimitive:
        """Move an existing primitive explicitly (no relocation) and notify listeners."""
        old = self._primitives[primitive_id]
        new = replace(old, x=x, y=y)
        return self._commit(old, new)

    def set_dimensions(self, primitive_id: str, width: float, height: float) -> DrawPrimitive:
        """Resize an existing primitive and notify listeners."""
        old = self._primitives[primitive_id]
        new = replace(old, width=width, height=height)
        return self._commit(old, new)

    def _commit(self, old: DrawPrimitive, new: DrawPrimitive) -> DrawPrimitive:
        self._primitives[new.id] = new
        self.extent.expand(new)
        self._notify(PrimitiveChange(new.id, old, new))
        return new

    def clear(self) -> None:
        self._primitives.clear()
        self.conflicts.clear()
        self.relocations = 0
        self.extent = CanvasExtent()

    # -- observers -----------------------------------------------------------

    def on_change(self, callback: ChangeCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_change(self, callback: ChangeCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, change: PrimitiveChange) -> None:
        for callback in list(self._callbacks):
            callback(change)

    # -- queries -------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._primitives)

    def __contains__(self, primitive_id: object) -> bool:
        return primitive_id in self._primitives

    def get(self, primitive_id: str) -> DrawPrimitive | None:
        return self._primitives.get(primitive_id)

    def primitives_by_category(self, category: PrimitiveCategory) -> list[DrawPrimitive]:
        return [p for p in self._primitives.values() if p.category is category]

    def statistics(self) -> dict[str, Any]:
        """Counts per category, conflicts, running bounds and density."""
        area = self.extent.area
        return {
            "total": len(self._primitives),
            "categories": {cat.value: len(self.primitives_by_category(cat)) for cat in PrimitiveCategory},
            "conflicts": len(self.conflicts),
            "relocations": self.relocations,
            "bounds": {
                "min_x": self.extent.min_x,
                "max_x": self.extent.max_x,
                "min_y": self.extent.min_y,
                "max_y": self.extent.max_y,
            },
            "density": len(self._primitives) / area if area > 0 else 0.0,
        }
