"""Exception types raised by Import Atlas."""

from __future__ import annotations


class AtlasError(Exception):
    """Base class for errors surfaced to the caller."""


class NoSourceFilesError(AtlasError):
    """Raised when discovery yields nothing to analyze."""

    def __init__(self, root: str) -> None:
        self.root = root
        super().__init__(
            f'No source files found in "{root}". Please specify a directory with JavaScript or TypeScript files.'
        )
