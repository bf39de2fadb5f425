"""Tests for primitive collision avoidance."""

from __future__ import annotations

import math

import pytest

from import_atlas.layout.overlap import DrawPrimitive, OverlapResolver
from import_atlas.schema import PrimitiveCategory
from import_atlas.settings import OverlapSettings

LABEL = PrimitiveCategory.LABEL
INDICATOR = PrimitiveCategory.INDICATOR
DECORATION = PrimitiveCategory.DECORATION


@pytest.fixture
def resolver():
    return OverlapResolver(OverlapSettings())


def _distance(a: DrawPrimitive, b: DrawPrimitive) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


# ---------------------------------------------------------------------------
# Buffers and rules
# ---------------------------------------------------------------------------


class TestRules:
    def test_buffers(self, resolver):
        assert resolver.buffer_for(LABEL, "short") == 18
        assert resolver.buffer_for(LABEL, "x" * 50) == pytest.approx(40)
        assert resolver.buffer_for(INDICATOR) == 24
        assert resolver.buffer_for(DECORATION) == 8

    def test_label_pair_uses_larger_buffer(self):
        a = DrawPrimitive("a", 0, 0, 10, 10, LABEL, buffer=18)
        b = DrawPrimitive("b", 0, 0, 10, 10, LABEL, buffer=30)
        assert OverlapResolver.required_distance(a, b) == ("label-label", 30)

    def test_label_indicator_sums_buffers(self):
        a = DrawPrimitive("a", 0, 0, 10, 10, LABEL, buffer=18)
        b = DrawPrimitive("b", 0, 0, 10, 10, INDICATOR, buffer=24)
        assert OverlapResolver.required_distance(a, b) == ("label-indicator", 42)
        assert OverlapResolver.required_distance(b, a) == ("label-indicator", 42)

    @pytest.mark.parametrize(
        ("first", "second"),
        [(INDICATOR, INDICATOR), (DECORATION, LABEL), (DECORATION, INDICATOR), (DECORATION, DECORATION)],
    )
    def test_allowed_pairs(self, first, second):
        a = DrawPrimitive("a", 0, 0, 10, 10, first, buffer=10)
        b = DrawPrimitive("b", 0, 0, 10, 10, second, buffer=10)
        assert OverlapResolver.required_distance(a, b) is None

    def test_same_owner_never_conflicts(self):
        a = DrawPrimitive("a", 0, 0, 10, 10, LABEL, buffer=18, owner="node")
        b = DrawPrimitive("b", 0, 0, 10, 10, INDICATOR, buffer=24, owner="node")
        assert OverlapResolver.required_distance(a, b) is None


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class TestPlacement:
    def test_free_spot_kept(self, resolver):
        placed = resolver.add("a", 10, 20, LABEL, text="a")
        assert (placed.x, placed.y) == (10, 20)
        assert resolver.relocations == 0

    def test_label_moved_off_label(self, resolver):
        first = resolver.add("a", 0, 0, LABEL, text="a")
        second = resolver.add("b", 5, 0, LABEL, text="b")
        assert (second.x, second.y) != (5, 0)
        assert _distance(first, second) >= 18
        assert resolver.relocations == 1
        assert resolver.conflicts == []

    def test_label_moved_off_indicator(self, resolver):
        marker = resolver.add("m", 0, 0, INDICATOR)
        label = resolver.add("l", 0, 0, LABEL, text="l")
        assert _distance(marker, label) >= 42

    def test_indicators_may_overlap(self, resolver):
        resolver.add("a", 0, 0, INDICATOR)
        b = resolver.add("b", 0, 0, INDICATOR)
        assert (b.x, b.y) == (0, 0)
        assert resolver.relocations == 0

    def test_decorations_may_overlap(self, resolver):
        resolver.add("label", 0, 0, LABEL, text="x")
        line = resolver.add("line", 0, 0, DECORATION)
        assert (line.x, line.y) == (0, 0)

    def test_same_owner_not_moved(self, resolver):
        resolver.add("marker", 0, 0, INDICATOR, owner="n")
        label = resolver.add("label", 1, 0, LABEL, text="n", owner="n")
        assert (label.x, label.y) == (1, 0)

    def test_unresolvable_overlap_is_recorded(self):
        resolver = OverlapResolver(OverlapSettings(attempts=1, max_distance=1))
        resolver.add("a", 0, 0, LABEL, text="a")
        stuck = resolver.add("b", 0, 0, LABEL, text="b")
        assert (stuck.x, stuck.y) == (0, 0)
        assert len(resolver.conflicts) == 1
        conflict = resolver.conflicts[0]
        assert (conflict.primitive_id, conflict.other_id, conflict.kind) == ("b", "a", "label-label")
        assert conflict.severity == pytest.approx(1.0)
        assert "b" in resolver

    def test_reinsert_replaces(self, resolver):
        resolver.add("a", 0, 0, INDICATOR)
        resolver.add("a", 50, 50, INDICATOR)
        assert len(resolver) == 1
        assert resolver.get("a").x == 50

    def test_clear(self, resolver):
        resolver.add("a", 0, 0, LABEL, text="a")
        resolver.add("b", 0, 0, LABEL, text="b")
        resolver.clear()
        assert len(resolver) == 0
        assert resolver.relocations == 0
        assert resolver.conflicts == []
        assert resolver.extent.area == 0


# ---------------------------------------------------------------------------
# Change notification
# ---------------------------------------------------------------------------


class TestCallbacks:
    def test_set_position_notifies(self, resolver):
        changes = []
        resolver.on_change(changes.append)
        resolver.add("a", 0, 0, INDICATOR)
        assert changes == []
        resolver.set_position("a", 30, 40)
        assert len(changes) == 1
        assert changes[0].old.x == 0
        assert (changes[0].new.x, changes[0].new.y) == (30, 40)

    def test_set_dimensions_notifies(self, resolver):
        changes = []
        resolver.on_change(changes.append)
        resolver.add("a", 0, 0, INDICATOR)
        resolver.set_dimensions("a", 40, 10)
        assert (changes[-1].new.width, changes[-1].new.height) == (40, 10)

    def test_relocation_notifies(self, resolver):
        changes = []
        resolver.on_change(changes.append)
        resolver.add("a", 0, 0, LABEL, text="a")
        resolver.add("b", 0, 0, LABEL, text="b")
        assert [c.primitive_id for c in changes] == ["b"]
        assert changes[0].old is None

    def test_off_change(self, resolver):
        changes = []
        resolver.on_change(changes.append)
        resolver.off_change(changes.append)
        resolver.add("a", 0, 0, INDICATOR)
        resolver.set_position("a", 1, 1)
        assert changes == []

    def test_unknown_primitive(self, resolver):
        with pytest.raises(KeyError):
            resolver.set_position("missing", 0, 0)


def test_statistics(resolver):
    resolver.add("m", 0, 0, INDICATOR, width=10, height=10)
    resolver.add("l", 100, 0, LABEL, text="l", width=10, height=10)
    resolver.add("d", 50, 0, DECORATION, width=100, height=0)
    stats = resolver.statistics()
    assert stats["total"] == 3
    assert stats["categories"] == {"label": 1, "indicator": 1, "decoration": 1}
    assert stats["conflicts"] == 0
    assert stats["bounds"]["min_x"] == pytest.approx(-29)
    assert stats["bounds"]["max_x"] == pytest.approx(123)
    assert stats["density"] > 0


def test_primitives_by_category(resolver):
    resolver.add("m", 0, 0, INDICATOR)
    resolver.add("l", 200, 0, LABEL, text="l")
    assert [p.id for p in resolver.primitives_by_category(LABEL)] == ["l"]
