"""Parsing package — tree-sitter extraction of module specifiers."""

from __future__ import annotations

from import_atlas.parsing.ast import (
    ImportKind,
    ImportSpecifier,
    LanguageConfig,
    ParsedFile,
    get_language_for_file,
    parse_file,
    register_language,
)

__all__ = [
    "ImportKind",
    "ImportSpecifier",
    "LanguageConfig",
    "ParsedFile",
    "get_language_for_file",
    "parse_file",
    "register_language",
]
