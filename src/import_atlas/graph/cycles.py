"""Circular import detection.

Depth-first search with the classic three-color marking:

    WHITE (unvisited) → GRAY (on the current DFS path) → BLACK (done)

An edge into a GRAY node closes a cycle; the cycle is the slice of the
path stack from that node to the top.  The traversal is iterative (an
explicit stack of neighbor iterators mirrors the recursive call chain) so
long import chains cannot hit the recursion limit.
"""

from __future__ import annotations

import os
from enum import Enum, auto
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from import_atlas.graph.model import ModuleGraph

Cycle = list[str]

CYCLE_ARROW = " → "


class _Mark(Enum):
    WHITE = auto()
    GRAY = auto()
    BLACK = auto()


def _find_all_cycles(graph: ModuleGraph) -> list[Cycle]:
    """Every cycle closed by a back edge, in traversal order (may repeat node sets)."""
    marks: dict[str, _Mark] = dict.fromkeys(graph.nodes, _Mark.WHITE)
    path: list[str] = []
    position: dict[str, int] = {}  # node -> index in path (GRAY nodes only)
    found: list[Cycle] = []

    def _enter(node: str) -> tuple[str, Iterator[str]]:
        marks[node] = _Mark.GRAY
        position[node] = len(path)
        path.append(node)
        return node, iter(graph.targets(node))

    for start in graph.nodes:
        if marks[start] is not _Mark.WHITE:
            continue

        stack = [_enter(start)]
        while stack:
            node, neighbors = stack[-1]
            for target in neighbors:
                mark = marks.get(target, _Mark.BLACK)
                if mark is _Mark.WHITE:
                    stack.append(_enter(target))
                    break
                if mark is _Mark.GRAY:
                    found.append(path[position[target] :])
            else:
                stack.pop()
                marks[node] = _Mark.BLACK
                path.pop()
                del position[node]

    return found


def dedupe_cycles(cycles: Iterable[Cycle]) -> list[Cycle]:
    """Keep the first cycle for each distinct node set.

    Two cycles over the same nodes collapse even if they follow different
    edges; the canonical key is the sorted node list.
    """
    unique: list[Cycle] = []
    seen: set[tuple[str, ...]] = set()
    for cycle in cycles:
        key = tuple(sorted(cycle))
        if key not in seen:
            seen.add(key)
            unique.append(cycle)
    return unique


def detect_cycles(graph: ModuleGraph) -> list[Cycle]:
    """Return the distinct circular import chains in *graph*.

    Each cycle is an ordered list of module paths where every consecutive
    pair, including last → first, is a graph edge.
    """
    raw = _find_all_cycles(graph)
    cycles = dedupe_cycles(raw)
    logger.debug("Cycle detection: {} back edge(s), {} distinct cycle(s)", len(raw), len(cycles))
    return cycles


def cycle_edges(cycles: Iterable[Cycle]) -> set[tuple[str, str]]:
    """Edges belonging to any cycle, recorded in both directions."""
    edges: set[tuple[str, str]] = set()
    for cycle in cycles:
        for i, source in enumerate(cycle):
            target = cycle[(i + 1) % len(cycle)]
            edges.add((source, target))
            edges.add((target, source))
    return edges


def format_cycle(cycle: Cycle, root: str) -> str:
    """Human-readable cycle report, e.g. ``a.js → b.js → a.js``."""
    if not cycle:
        return ""
    rel = [os.path.relpath(p, root) for p in cycle]
    return CYCLE_ARROW.join([*rel, rel[0]])
