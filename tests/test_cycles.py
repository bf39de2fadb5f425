"""Tests for circular import detection."""

from __future__ import annotations

import os

from import_atlas.graph.cycles import cycle_edges, dedupe_cycles, detect_cycles, format_cycle
from import_atlas.graph.model import ModuleGraph


def _graph(tmp_path, edges: list[tuple[str, str]], extra: tuple[str, ...] = ()) -> tuple[ModuleGraph, dict[str, str]]:
    """Graph over names like ``"a"`` mapped to ``tmp_path/a.js``."""
    names: list[str] = []
    for pair in edges:
        for name in pair:
            if name not in names:
                names.append(name)
    names.extend(n for n in extra if n not in names)
    paths = {n: str(tmp_path / f"{n}.js") for n in names}
    graph = ModuleGraph.from_files(paths.values(), str(tmp_path))
    for source, target in edges:
        graph.add_edge(paths[source], paths[target])
    return graph, paths


def _assert_closed(graph: ModuleGraph, cycle: list[str]) -> None:
    for i, source in enumerate(cycle):
        assert graph.has_edge(source, cycle[(i + 1) % len(cycle)])


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def test_acyclic_chain(tmp_path):
    graph, _ = _graph(tmp_path, [("a", "b"), ("b", "c")])
    assert detect_cycles(graph) == []


def test_acyclic_diamond(tmp_path):
    graph, _ = _graph(tmp_path, [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
    assert detect_cycles(graph) == []


def test_two_node_cycle(tmp_path):
    graph, p = _graph(tmp_path, [("a", "b"), ("b", "a")])
    cycles = detect_cycles(graph)
    assert cycles == [[p["a"], p["b"]]]


def test_three_node_cycle_is_closed(tmp_path):
    graph, p = _graph(tmp_path, [("a", "b"), ("b", "c"), ("c", "a"), ("c", "d")])
    cycles = detect_cycles(graph)
    assert len(cycles) == 1
    assert set(cycles[0]) == {p["a"], p["b"], p["c"]}
    _assert_closed(graph, cycles[0])


def test_self_import(tmp_path):
    graph, p = _graph(tmp_path, [("a", "a")])
    assert detect_cycles(graph) == [[p["a"]]]


def test_disconnected_components(tmp_path):
    graph, p = _graph(tmp_path, [("a", "b"), ("b", "a"), ("x", "y"), ("y", "x")], extra=("lonely",))
    cycles = detect_cycles(graph)
    assert [set(c) for c in cycles] == [{p["a"], p["b"]}, {p["x"], p["y"]}]


def test_every_cycle_is_closed_and_unique(tmp_path):
    edges = [("a", "b"), ("b", "c"), ("c", "a"), ("a", "c"), ("c", "b"), ("b", "a"), ("c", "d"), ("d", "a")]
    graph, _ = _graph(tmp_path, edges)
    cycles = detect_cycles(graph)
    assert cycles
    keys = [tuple(sorted(c)) for c in cycles]
    assert len(keys) == len(set(keys))
    for cycle in cycles:
        _assert_closed(graph, cycle)


def test_detection_is_deterministic(tmp_path):
    edges = [("a", "b"), ("b", "c"), ("c", "a"), ("b", "d"), ("d", "b")]
    graph, _ = _graph(tmp_path, edges)
    assert detect_cycles(graph) == detect_cycles(graph)


def test_long_chain_does_not_recurse(tmp_path):
    n = 5000
    edges = [(f"m{i}", f"m{i + 1}") for i in range(n)] + [(f"m{n}", "m0")]
    graph, _ = _graph(tmp_path, edges)
    cycles = detect_cycles(graph)
    assert len(cycles) == 1
    assert len(cycles[0]) == n + 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_dedupe_by_node_set_keeps_first():
    first = ["a", "b", "c"]
    rotated = ["b", "c", "a"]
    reversed_order = ["a", "c", "b"]
    assert dedupe_cycles([first, rotated, reversed_order, ["a", "b"]]) == [first, ["a", "b"]]


def test_cycle_edges_both_directions():
    edges = cycle_edges([["a", "b", "c"]])
    assert edges == {("a", "b"), ("b", "c"), ("c", "a"), ("b", "a"), ("c", "b"), ("a", "c")}


def test_cycle_edges_empty():
    assert cycle_edges([]) == set()


def test_format_cycle(tmp_path):
    root = str(tmp_path)
    cycle = [os.path.join(root, "a.js"), os.path.join(root, "lib", "b.js")]
    assert format_cycle(cycle, root) == f"a.js → {os.path.join('lib', 'b.js')} → a.js"


def test_format_empty_cycle(tmp_path):
    assert format_cycle([], str(tmp_path)) == ""
