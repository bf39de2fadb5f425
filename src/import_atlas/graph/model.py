"""Module graph data structures."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING

from import_atlas.schema import Classification, classify_file

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Absolute, normalised string form used as a module identity."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def relative_parts(path: str, root: str) -> tuple[str, ...]:
    """Path segments of *path* relative to *root*."""
    rel = os.path.relpath(path, root)
    if rel == os.curdir:
        return ()
    return PurePath(rel).parts


@dataclass(frozen=True)
class Module:
    """One node of the dependency graph or of the directory hierarchy."""

    path: str
    name: str
    classification: Classification
    depth: int

    @property
    def is_directory(self) -> bool:
        return self.classification is Classification.DIRECTORY

    @classmethod
    def for_file(cls, path: str, root: str) -> Module:
        """Build the Module for a source file under *root*."""
        name = os.path.basename(path)
        return cls(
            path=path,
            name=name,
            classification=classify_file(name),
            depth=len(relative_parts(path, root)),
        )


@dataclass
class ModuleGraph:
    """Directed import graph keyed by absolute module path.

    ``edges`` maps a source path to an insertion-ordered set of target
    paths (a dict with ``None`` values), so that traversal order (and
    therefore cycle reporting order) is stable between runs.
    """

    root: str
    nodes: dict[str, Module] = field(default_factory=dict)
    edges: dict[str, dict[str, None]] = field(default_factory=dict)

    # -- construction --------------------------------------------------------

    @classmethod
    def from_files(cls, files: Iterable[str], root: str) -> ModuleGraph:
        """Create a graph holding one node per file and no edges."""
        graph = cls(root=normalize_path(root))
        for path in files:
            graph.add_module(Module.for_file(normalize_path(path), graph.root))
        return graph

    def add_module(self, module: Module) -> None:
        self.nodes[module.path] = module
        self.edges.setdefault(module.path, {})

    def add_edge(self, source: str, target: str) -> bool:
        """Add ``source → target``.  Returns False if it was already present.

        Raises KeyError if either endpoint is not a node.
        """
        if source not in self.nodes:
            raise KeyError(source)
        if target not in self.nodes:
            raise KeyError(target)
        targets = self.edges[source]
        if target in targets:
            return False
        targets[target] = None
        return True

    # -- queries -------------------------------------------------------------

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def targets(self, source: str) -> list[str]:
        """Outgoing edge targets of *source*, in insertion order."""
        return list(self.edges.get(source, ()))

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.edges.get(source, {})

    def iter_edges(self) -> Iterator[tuple[str, str]]:
        for source, targets in self.edges.items():
            for target in targets:
                yield source, target

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())
