"""Module graph construction.

Reads every candidate file, extracts its import/export specifiers with
tree-sitter, resolves them against the analyzed file set and records an
edge for each specifier that lands on a known module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from import_atlas.errors import NoSourceFilesError
from import_atlas.graph.model import ModuleGraph
from import_atlas.graph.resolver import ModuleResolver
from import_atlas.parsing.ast import parse_file

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass
class BuildStats:
    """Counters collected while building a graph."""

    files_parsed: int = 0
    files_unsupported: int = 0
    files_unreadable: list[str] = field(default_factory=list)
    specifiers_seen: int = 0
    specifiers_external: int = 0


def build_module_graph(
    files: Sequence[str],
    root: str,
    *,
    resolver: ModuleResolver | None = None,
    stats: BuildStats | None = None,
) -> ModuleGraph:
    """Build the import graph for *files* under *root*.

    The node set is exactly the input file set.  Unreadable files and
    unresolvable specifiers are skipped; only an empty input is fatal.
    """
    if not files:
        raise NoSourceFilesError(root)

    graph = ModuleGraph.from_files(files, root)
    if resolver is None:
        resolver = ModuleResolver.for_project(graph.nodes, graph.root)
    if stats is None:
        stats = BuildStats()

    for path in graph.nodes:
        try:
            with open(path, "rb") as fh:
                source = fh.read()
        except OSError as exc:
            logger.warning("Cannot read {}: {}", path, exc)
            stats.files_unreadable.append(path)
            continue

        parsed = parse_file(path, source)
        if parsed is None:
            stats.files_unsupported += 1
            continue
        stats.files_parsed += 1

        for spec in parsed.specifiers:
            stats.specifiers_seen += 1
            target = resolver.resolve(spec.specifier, path)
            if target is None or target not in graph:
                stats.specifiers_external += 1
                logger.trace("{}:{} '{}' is external — skipped", path, spec.line, spec.specifier)
                continue
            if graph.add_edge(path, target):
                logger.trace("{} -> {} ({})", path, target, spec.kind.value)

    logger.debug(
        "Built module graph: {} nodes, {} edges ({} parsed, {} unsupported, {} unreadable, {} external specifiers)",
        len(graph),
        graph.edge_count,
        stats.files_parsed,
        stats.files_unsupported,
        len(stats.files_unreadable),
        stats.specifiers_external,
    )
    return graph
