"""JavaScript / TypeScript language support — tree-sitter specifier extraction."""

from __future__ import annotations

from typing import TYPE_CHECKING

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language

from import_atlas.parsing.ast import (
    ImportKind,
    ImportSpecifier,
    LanguageConfig,
    node_text,
    register_language,
    string_literal_value,
)

if TYPE_CHECKING:
    from tree_sitter import Node

# ---------------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------------

_JS_LANGUAGE = Language(tsjavascript.language())
_TS_LANGUAGE = Language(tstypescript.language_typescript())
_TSX_LANGUAGE = Language(tstypescript.language_tsx())

# Declarations whose ``source`` field holds the module specifier.
_SOURCE_NODES: dict[str, ImportKind] = {
    "import_statement": ImportKind.STATIC,
    "export_statement": ImportKind.EXPORT,
    "import_require_clause": ImportKind.REQUIRE,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _first_argument(call: Node) -> Node | None:
    """Return the first positional argument of a call expression."""
    args = call.child_by_field_name("arguments")
    if args is None or not args.named_children:
        return None
    return args.named_children[0]


def _call_import_kind(call: Node) -> ImportKind | None:
    """Classify a call expression as ``import(...)``, ``require(...)`` or neither."""
    func = call.child_by_field_name("function")
    if func is None:
        return None
    if func.type == "import":
        return ImportKind.DYNAMIC
    if func.type == "identifier" and node_text(func) == "require":
        return ImportKind.REQUIRE
    return None


# ---------------------------------------------------------------------------
# Parse entry point
# ---------------------------------------------------------------------------


def _extract_specifiers(path: str, root: Node) -> list[ImportSpecifier]:  # noqa: ARG001
    """Walk the parse tree and collect every literal module specifier.

    Uses an explicit stack so that deeply nested sources cannot exhaust
    the interpreter's recursion limit.  Results are in source order.
    """
    found: list[ImportSpecifier] = []
    stack: list[Node] = [root]

    while stack:
        node = stack.pop()

        kind = _SOURCE_NODES.get(node.type)
        if kind is not None:
            value = string_literal_value(node.child_by_field_name("source"))
            if value:
                found.append(ImportSpecifier(specifier=value, kind=kind, line=node.start_point[0] + 1))
        elif node.type == "call_expression":
            call_kind = _call_import_kind(node)
            if call_kind is not None:
                value = string_literal_value(_first_argument(node))
                if value:
                    found.append(ImportSpecifier(specifier=value, kind=call_kind, line=node.start_point[0] + 1))

        stack.extend(reversed(node.children))

    return found


# ---------------------------------------------------------------------------
# Language registration
# ---------------------------------------------------------------------------

register_language(
    LanguageConfig(
        name="javascript",
        extensions=frozenset({".js", ".mjs", ".cjs", ".jsx"}),
        language=_JS_LANGUAGE,
        parse_func=_extract_specifiers,
    )
)

register_language(
    LanguageConfig(
        name="typescript",
        extensions=frozenset({".ts", ".mts", ".cts"}),
        language=_TS_LANGUAGE,
        parse_func=_extract_specifiers,
    )
)

register_language(
    LanguageConfig(
        name="tsx",
        extensions=frozenset({".tsx"}),
        language=_TSX_LANGUAGE,
        parse_func=_extract_specifiers,
    )
)
