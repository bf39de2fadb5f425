"""Graph package — module graph model, construction and cycle analysis."""

from __future__ import annotations

from import_atlas.graph.builder import BuildStats, build_module_graph
from import_atlas.graph.cycles import Cycle, cycle_edges, detect_cycles, format_cycle
from import_atlas.graph.model import Module, ModuleGraph, normalize_path
from import_atlas.graph.resolver import ModuleResolver, PathMapping, load_path_mapping

__all__ = [
    "BuildStats",
    "Cycle",
    "Module",
    "ModuleGraph",
    "ModuleResolver",
    "PathMapping",
    "build_module_graph",
    "cycle_edges",
    "detect_cycles",
    "format_cycle",
    "load_path_mapping",
    "normalize_path",
]
