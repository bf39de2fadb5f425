"""Bundled grammars for Import Atlas.

Each language module registers itself with ``register_language()`` when
imported.  Loading is deferred to the first lookup so that importing the
package does not pull in every tree-sitter grammar.
"""

from __future__ import annotations

from functools import cache

from loguru import logger


@cache
def load_builtin_languages() -> None:
    """Register JavaScript, TypeScript and TSX (once per process)."""
    import import_atlas.parsing.languages.javascript  # noqa: PLC0415, F401

    logger.trace("Registered built-in JavaScript/TypeScript grammars")
