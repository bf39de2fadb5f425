"""Directory/file hierarchy built from the flat module set."""

from __future__ import annotations

import os
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from import_atlas.graph.model import Module, normalize_path, relative_parts
from import_atlas.schema import Classification

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(eq=False)
class HierarchyNode:
    """A positioned node in the directory tree.

    ``parent`` is a lookup-only back reference; ``children`` are owned.
    ``x``/``y`` are written by the layout engine.
    """

    module: Module
    parent: HierarchyNode | None = None
    children: list[HierarchyNode] = field(default_factory=list)
    x: float = 0.0
    y: float = 0.0

    @property
    def path(self) -> str:
        return self.module.path

    @property
    def name(self) -> str:
        return self.module.name

    @property
    def depth(self) -> int:
        return self.module.depth

    @property
    def classification(self) -> Classification:
        return self.module.classification

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def walk(self) -> Iterator[HierarchyNode]:
        """Breadth-first traversal starting at this node."""
        queue: deque[HierarchyNode] = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def links(self) -> Iterator[tuple[HierarchyNode, HierarchyNode]]:
        """Every (parent, child) pair below this node, breadth-first."""
        for node in self.walk():
            for child in node.children:
                yield node, child

    def ancestors(self) -> Iterator[HierarchyNode]:
        """Parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent


@dataclass
class Hierarchy:
    """Result of :func:`build_hierarchy`."""

    root: HierarchyNode
    max_depth: int
    by_path: dict[str, HierarchyNode]

    def __iter__(self) -> Iterator[HierarchyNode]:
        return self.root.walk()

    def __len__(self) -> int:
        return len(self.by_path)

    def leaves(self) -> list[HierarchyNode]:
        return [node for node in self.root.walk() if node.is_leaf and node is not self.root]

    def levels(self) -> dict[int, list[HierarchyNode]]:
        """Nodes grouped by depth, each level in breadth-first order."""
        grouped: dict[int, list[HierarchyNode]] = {}
        for node in self.root.walk():
            grouped.setdefault(node.depth, []).append(node)
        return grouped


def build_hierarchy(paths: Iterable[str], root: str) -> Hierarchy:
    """Convert flat module paths into a rooted directory tree.

    Every intermediate path segment becomes a directory node; the final
    segment becomes a leaf carrying the file's classification.  Building
    twice from the same input yields structurally identical trees.
    """
    root = normalize_path(root)
    root_node = HierarchyNode(
        Module(path=root, name=os.path.basename(root) or root, classification=Classification.DIRECTORY, depth=0)
    )
    by_path: dict[str, HierarchyNode] = {root: root_node}
    max_depth = 0

    for raw_path in paths:
        path = normalize_path(raw_path)
        parts = relative_parts(path, root)
        if not parts:
            continue
        max_depth = max(max_depth, len(parts))

        current = root_node
        for i, part in enumerate(parts):
            current_path = os.path.join(root, *parts[: i + 1])
            node = by_path.get(current_path)
            if node is None:
                is_last = i == len(parts) - 1
                module = (
                    Module.for_file(current_path, root)
                    if is_last
                    else Module(path=current_path, name=part, classification=Classification.DIRECTORY, depth=i + 1)
                )
                node = HierarchyNode(module, parent=current)
                current.children.append(node)
                by_path[current_path] = node
            current = node

    return Hierarchy(root=root_node, max_depth=max_depth, by_path=by_path)
