"""Tree-sitter based extraction of module specifiers.

Parses source files using py-tree-sitter and extracts the literal module
specifier of every import/export declaration and call-style import
(``import("x")``, ``require("x")``) for graph construction.

Grammars are bundled in ``parsing.languages``; each module there calls
``register_language()`` once for every file extension it handles.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from loguru import logger
from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node

# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


class ImportKind(StrEnum):
    STATIC = "static"  # import ... from "x" / import "x"
    EXPORT = "export"  # export ... from "x"
    DYNAMIC = "dynamic"  # import("x")
    REQUIRE = "require"  # require("x") / import x = require("x")


@dataclass(frozen=True)
class ImportSpecifier:
    """A literal module specifier found in a source file."""

    specifier: str
    kind: ImportKind
    line: int


@dataclass(frozen=True)
class ParsedFile:
    """Specifiers extracted from one source file."""

    file_path: str
    language: str
    specifiers: list[ImportSpecifier]
    has_errors: bool = False


# ---------------------------------------------------------------------------
# Language config registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LanguageConfig:
    """A tree-sitter grammar plus the extractor that walks its trees."""

    name: str
    extensions: frozenset[str]
    language: Language
    parse_func: Callable[[str, Node], list[ImportSpecifier]]


_LANGUAGES: dict[str, LanguageConfig] = {}
_EXTENSION_MAP: dict[str, str] = {}


def register_language(config: LanguageConfig) -> None:
    """Make *config* the handler for each of its extensions."""
    _LANGUAGES[config.name] = config
    for ext in config.extensions:
        _EXTENSION_MAP[ext] = config.name


def get_language_for_file(path: str) -> LanguageConfig | None:
    """Return the grammar registered for *path*'s extension, if any."""
    from import_atlas.parsing.languages import load_builtin_languages  # noqa: PLC0415

    load_builtin_languages()

    name = _EXTENSION_MAP.get(PurePosixPath(path.replace("\\", "/")).suffix.lower())
    return _LANGUAGES.get(name) if name is not None else None


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def node_text(node: Node) -> str:
    """Decoded source text covered by *node*."""
    text = node.text
    if text is None:
        return ""
    return text.decode("utf-8", errors="replace")


def string_literal_value(node: Node | None) -> str | None:
    """Return the unquoted value of a plain string literal node.

    Template strings and any other expression are non-literal and yield
    ``None`` so that callers skip them.
    """
    if node is None or node.type != "string":
        return None
    raw = node_text(node)
    if len(raw) < 2:  # noqa: PLR2004
        return None
    return raw[1:-1]


# ---------------------------------------------------------------------------
# Core parse function
# ---------------------------------------------------------------------------


def parse_file(path: str, source: bytes) -> ParsedFile | None:
    """Parse a source file and extract its module specifiers.

    Returns None if the language is not supported.  Tree-sitter recovers
    from syntax errors, so a malformed file still yields whatever
    specifiers appear in its well-formed regions; ``has_errors`` flags it.
    """
    lang_config = get_language_for_file(path)
    if lang_config is None:
        return None

    parser = Parser(lang_config.language)
    tree = parser.parse(source)
    root = tree.root_node

    if root.has_error:
        logger.debug("Syntax errors in {} — extracting specifiers from recoverable regions", path)

    return ParsedFile(
        file_path=path,
        language=lang_config.name,
        specifiers=lang_config.parse_func(path, root),
        has_errors=root.has_error,
    )
