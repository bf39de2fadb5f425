"""Module specifier resolution.

Maps the literal specifier of an import (``"./util"``, ``"@app/core"``) to
an absolute file path the way the TypeScript compiler does for
``moduleResolution: node``:

1. Relative and absolute specifiers resolve against the importing file.
2. Bare specifiers go through ``compilerOptions.paths`` and then
   ``compilerOptions.baseUrl`` from the nearest ``tsconfig.json``.
3. A candidate path is tried as a file (with extension inference and the
   ``.js`` → ``.ts`` substitution), then as a directory (``package.json``
   entry fields, then ``index.*``).

Anything else is an external package and resolves to ``None``.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger

from import_atlas.graph.model import normalize_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

TSCONFIG_FILENAME = "tsconfig.json"

# Extensions tried, in order, when a specifier carries none.
_EXTENSION_ORDER: tuple[str, ...] = (".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mts", ".cts", ".mjs", ".cjs")

# ESM-style specifiers name the emitted file; try the TypeScript source first.
_TS_SUBSTITUTES: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx", ".d.ts"),
    ".jsx": (".tsx", ".d.ts"),
    ".mjs": (".mts", ".d.mts"),
    ".cjs": (".cts", ".d.cts"),
}

_PACKAGE_ENTRY_FIELDS: tuple[str, ...] = ("types", "typings", "module", "main")

_MAX_EXTENDS_DEPTH = 8

_JSONC_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


# ---------------------------------------------------------------------------
# tsconfig.json path mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PathMapping:
    """``baseUrl`` / ``paths`` compiler options from a tsconfig file."""

    config_dir: str
    base_url: str | None = None
    paths: dict[str, list[str]] = field(default_factory=dict)

    @property
    def paths_base(self) -> str:
        """Directory that ``paths`` substitutions are relative to."""
        return self.base_url or self.config_dir


def _strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas so that ``json`` accepts tsconfig files."""

    def _keep_strings(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    return _TRAILING_COMMA.sub(r"\1", _JSONC_TOKEN.sub(_keep_strings, text))


def _read_jsonc(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8-sig") as fh:
        data = json.loads(_strip_jsonc(fh.read()))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level value is not an object")
    return data


def find_tsconfig(start: str) -> str | None:
    """Walk up from *start* looking for ``tsconfig.json``."""
    current = normalize_path(start)
    while True:
        candidate = os.path.join(current, TSCONFIG_FILENAME)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _compiler_options(config_path: str, depth: int = 0) -> dict[str, Any]:
    """Merged ``compilerOptions`` following relative ``extends`` chains.

    ``baseUrl`` is made absolute against the file that declares it, which
    is what TypeScript does when options are inherited.
    """
    data = _read_jsonc(config_path)
    config_dir = os.path.dirname(config_path)
    merged: dict[str, Any] = {}

    extends = data.get("extends")
    if isinstance(extends, str) and extends.startswith(".") and depth < _MAX_EXTENDS_DEPTH:
        parent_path = os.path.join(config_dir, extends)
        if not parent_path.endswith(".json"):
            parent_path += ".json"
        if os.path.isfile(parent_path):
            merged.update(_compiler_options(parent_path, depth + 1))

    own = data.get("compilerOptions") or {}
    if not isinstance(own, dict):
        raise ValueError(f"{config_path}: compilerOptions is not an object")
    if not isinstance(own.get("paths") or {}, dict):
        raise ValueError(f"{config_path}: compilerOptions.paths is not an object")
    if isinstance(own.get("baseUrl"), str):
        own = {**own, "baseUrl": normalize_path(os.path.join(config_dir, own["baseUrl"]))}
    merged.update(own)
    return merged


def load_path_mapping(root: str) -> PathMapping | None:
    """Load path-mapping options from the tsconfig governing *root*.

    Returns None when there is no tsconfig or it cannot be read; a broken
    config only disables path mapping, it never aborts the run.
    """
    config_path = find_tsconfig(root)
    if config_path is None:
        return None
    try:
        options = _compiler_options(config_path)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable {}: {}", config_path, exc)
        return None

    raw_paths = options.get("paths") or {}
    paths = {
        pattern: [s for s in subs if isinstance(s, str)]
        for pattern, subs in raw_paths.items()
        if isinstance(pattern, str) and isinstance(subs, list)
    }
    mapping = PathMapping(
        config_dir=os.path.dirname(normalize_path(config_path)),
        base_url=options.get("baseUrl"),
        paths=paths,
    )
    logger.debug(
        "Loaded path mapping from {} (baseUrl={}, {} path pattern(s))",
        config_path,
        mapping.base_url,
        len(mapping.paths),
    )
    return mapping


def _match_path_pattern(pattern: str, specifier: str) -> str | None:
    """Match *specifier* against a ``paths`` key.

    Returns the text captured by ``*`` (empty for exact keys) or None.
    """
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, _, suffix = pattern.partition("*")
    if len(specifier) >= len(prefix) + len(suffix) and specifier.startswith(prefix) and specifier.endswith(suffix):
        return specifier[len(prefix) : len(specifier) - len(suffix)]
    return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def _is_relative(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../", ".\\", "..\\"))


class ModuleResolver:
    """Resolves import specifiers to absolute file paths.

    *known* is the analyzed file set; a candidate counts as existing if it
    is a member or is a regular file on disk.  Results are memoised per
    ``(specifier, importing directory)``.
    """

    def __init__(self, known: Iterable[str], mapping: PathMapping | None = None) -> None:
        self._known = frozenset(normalize_path(p) for p in known)
        self._known_dirs = frozenset(os.path.dirname(p) for p in self._known)
        self._mapping = mapping
        self._cache: dict[tuple[str, str], str | None] = {}

    @classmethod
    def for_project(cls, known: Iterable[str], root: str) -> ModuleResolver:
        """Resolver using the tsconfig path mapping that governs *root*."""
        return cls(known, load_path_mapping(root))

    # -- public API ----------------------------------------------------------

    def resolve(self, specifier: str, importer: str) -> str | None:
        """Resolve *specifier* as imported from the file *importer*."""
        importer_dir = os.path.dirname(normalize_path(importer))
        key = (specifier, importer_dir)
        if key not in self._cache:
            self._cache[key] = self._resolve_uncached(specifier, importer_dir)
        return self._cache[key]

    # -- private helpers -----------------------------------------------------

    def _resolve_uncached(self, specifier: str, importer_dir: str) -> str | None:
        # Query strings and fragments (``./x.svg?raw``) do not name files.
        specifier = specifier.split("?", 1)[0].split("#", 1)[0]
        if not specifier:
            return None

        if _is_relative(specifier):
            return self._resolve_path(os.path.join(importer_dir, specifier))
        if os.path.isabs(specifier):
            return self._resolve_path(specifier)
        return self._resolve_bare(specifier)

    def _resolve_bare(self, specifier: str) -> str | None:
        mapping = self._mapping
        if mapping is None:
            return None

        # Longest literal prefix wins, as in the TypeScript compiler.
        matches: list[tuple[int, str, str]] = []
        for pattern in mapping.paths:
            captured = _match_path_pattern(pattern, specifier)
            if captured is not None:
                matches.append((len(pattern.partition("*")[0]), pattern, captured))
        for _, pattern, captured in sorted(matches, key=lambda m: -m[0]):
            for substitution in mapping.paths[pattern]:
                target = substitution.replace("*", captured, 1)
                resolved = self._resolve_path(os.path.join(mapping.paths_base, target))
                if resolved is not None:
                    return resolved

        if mapping.base_url:
            return self._resolve_path(os.path.join(mapping.base_url, specifier))
        return None

    def _resolve_path(self, base: str) -> str | None:
        base = os.path.normpath(base)
        return self._resolve_as_file(base) or self._resolve_as_directory(base)

    def _resolve_as_file(self, base: str) -> str | None:
        for candidate in self._file_candidates(base):
            if self._exists(candidate):
                return candidate
        return None

    def _resolve_as_directory(self, base: str) -> str | None:
        if base not in self._known_dirs and not os.path.isdir(base):
            return None

        package_json = os.path.join(base, "package.json")
        if os.path.isfile(package_json):
            entry = self._package_entry(package_json)
            if entry:
                target = os.path.normpath(os.path.join(base, entry))
                resolved = self._resolve_as_file(target)
                if resolved is None and target != base:
                    resolved = self._resolve_index(target)
                if resolved is not None:
                    return resolved

        return self._resolve_index(base)

    def _resolve_index(self, directory: str) -> str | None:
        for ext in _EXTENSION_ORDER:
            candidate = os.path.join(directory, "index" + ext)
            if self._exists(candidate):
                return candidate
        return None

    @staticmethod
    def _file_candidates(base: str) -> Iterator[str]:
        stem, ext = os.path.splitext(base)
        for substitute in _TS_SUBSTITUTES.get(ext, ()):
            yield stem + substitute
        if ext:
            yield base
        for candidate_ext in _EXTENSION_ORDER:
            yield base + candidate_ext

    @staticmethod
    def _package_entry(package_json: str) -> str | None:
        try:
            with open(package_json, encoding="utf-8-sig") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.debug("Skipping unreadable {}: {}", package_json, exc)
            return None
        if not isinstance(data, dict):
            return None
        for key in _PACKAGE_ENTRY_FIELDS:
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
        return None

    def _exists(self, candidate: str) -> bool:
        return candidate in self._known or os.path.isfile(candidate)
