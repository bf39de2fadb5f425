"""Source file discovery."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec
from loguru import logger

if TYPE_CHECKING:
    from import_atlas.settings import ScopeSettings

# Directories skipped unless hidden entries are requested.
DEFAULT_IGNORE: frozenset[str] = frozenset({"node_modules", ".git", ".vscode", "dist", "build"})


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


class FileScope:
    """Decides which files under a root are analyzed.

    Exclusion order:
      1. Default ignored directories (``node_modules``, ``.git``, ...)
      2. Hidden entries (names starting with ``.``)
      3. ``scope.exclude_patterns`` (gitignore syntax, root-relative)
      4. ``scope.max_depth`` directory levels below the root
      5. ``scope.extensions``

    Steps 1 and 2 are skipped when ``scope.include_hidden`` is set.
    """

    def __init__(self, root: str | Path, scope: ScopeSettings) -> None:
        self._root = Path(root).resolve()
        self._scope = scope
        self._spec = pathspec.PathSpec.from_lines("gitignore", scope.exclude_patterns)
        self._extensions = {ext.lower() for ext in scope.extensions}

    @property
    def root(self) -> Path:
        return self._root

    # -- public API ----------------------------------------------------------

    def scan(self) -> list[str]:
        """Walk the tree and return sorted absolute file paths."""
        result: list[str] = []
        max_depth = self._scope.max_depth

        for dirpath, dirnames, filenames in os.walk(self._root):
            rel_dir = Path(dirpath).relative_to(self._root).as_posix()
            if rel_dir == ".":
                rel_dir = ""
            level = len(rel_dir.split("/")) if rel_dir else 0

            # Prune in place so os.walk never descends into excluded directories
            dirnames[:] = [
                d
                for d in dirnames
                if (max_depth is None or level + 1 <= max_depth)
                and not self._is_dir_excluded(d, f"{rel_dir}/{d}" if rel_dir else d)
                and not Path(dirpath, d).is_symlink()
            ]

            for fname in filenames:
                rel_path = f"{rel_dir}/{fname}" if rel_dir else fname
                if self.is_included(rel_path):
                    result.append(os.path.join(dirpath, fname))

        result.sort()
        logger.debug("Discovered {} source file(s) under {}", len(result), self._root)
        return result

    def is_included(self, rel_path: str) -> bool:
        """Check a root-relative POSIX file path against every filter except depth."""
        name = rel_path.rsplit("/", 1)[-1]
        if not self._scope.include_hidden and _is_hidden(name):
            logger.trace("EXCLUDE {}: hidden", rel_path)
            return False
        if os.path.splitext(name)[1].lower() not in self._extensions:
            return False
        if self._spec.match_file(rel_path):
            logger.trace("EXCLUDE {}: matched exclude pattern", rel_path)
            return False
        logger.trace("INCLUDE {}", rel_path)
        return True

    # -- private helpers -----------------------------------------------------

    def _is_dir_excluded(self, name: str, rel_dir: str) -> bool:
        if not self._scope.include_hidden and (name in DEFAULT_IGNORE or _is_hidden(name)):
            logger.trace("EXCLUDE {}/: ignored directory", rel_dir)
            return True
        return self._spec.match_file(f"{rel_dir}/")


def scan_files(root: str | Path, scope: ScopeSettings) -> list[str]:
    """Discover analyzable files under *root* (sorted absolute paths)."""
    return FileScope(root, scope).scan()
