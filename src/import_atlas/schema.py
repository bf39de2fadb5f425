"""Shared enumerations and lookup tables for Import Atlas.

Defines module classifications, layout styles, flow directions, themes,
drawable-primitive categories and color policies, plus the extension
tables used to classify files.  Import-time validation ensures every
classification is covered by the extension and legend registries.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import PurePath

# ---------------------------------------------------------------------------
# Module classification
# ---------------------------------------------------------------------------


class Classification(StrEnum):
    DIRECTORY = "directory"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    IMAGE = "image"
    MULTIMEDIA = "multimedia"
    OTHER = "other"


_EXTENSIONS_BY_CLASSIFICATION: dict[Classification, frozenset[str]] = {
    Classification.SCRIPT: frozenset(
        {
            ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".mts", ".cts",
            ".py", ".rb", ".php", ".java", ".c", ".cpp", ".cs", ".go", ".rs",
            ".sh", ".bash", ".zsh", ".fish", ".ps1",
        }
    ),
    Classification.STYLESHEET: frozenset({".css", ".scss", ".sass", ".less", ".styl", ".stylus"}),
    Classification.IMAGE: frozenset(
        {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".bmp", ".tiff", ".tif"}
    ),
    Classification.MULTIMEDIA: frozenset(
        {".mp4", ".mp3", ".wav", ".ogg", ".webm", ".avi", ".mov", ".mkv", ".flv", ".m4a", ".flac"}
    ),
}  # fmt: skip

_CLASSIFICATION_BY_EXTENSION: dict[str, Classification] = {
    ext: cls for cls, exts in _EXTENSIONS_BY_CLASSIFICATION.items() for ext in exts
}

# Human-readable legend entries, keyed by classification.
LEGEND_LABELS: dict[Classification, str] = {
    Classification.DIRECTORY: "Directory/Folder",
    Classification.SCRIPT: "Script Files",
    Classification.STYLESHEET: "Stylesheet",
    Classification.IMAGE: "Image Files",
    Classification.MULTIMEDIA: "Media Files",
    Classification.OTHER: "Other Files",
}


def classify_file(name: str) -> Classification:
    """Classify a (non-directory) file name by its extension.

    Files with no recognised extension fall back to ``OTHER``.
    """
    return _CLASSIFICATION_BY_EXTENSION.get(PurePath(name).suffix.lower(), Classification.OTHER)


# ---------------------------------------------------------------------------
# Layout / rendering selectors
# ---------------------------------------------------------------------------


class LayoutStyle(StrEnum):
    AUTO = "auto"
    TREE = "tree"
    LINEAR = "linear"
    CIRCULAR = "circular"
    DIAGONAL = "diagonal"
    GRID = "grid"


class FlowDirection(StrEnum):
    LEFT_TO_RIGHT = "left-to-right"
    RIGHT_TO_LEFT = "right-to-left"
    TOP_TO_BOTTOM = "top-to-bottom"
    BOTTOM_TO_TOP = "bottom-to-top"

    @property
    def is_horizontal(self) -> bool:
        """True when depth grows along the x axis."""
        return self in (FlowDirection.LEFT_TO_RIGHT, FlowDirection.RIGHT_TO_LEFT)

    @property
    def is_reversed(self) -> bool:
        return self in (FlowDirection.RIGHT_TO_LEFT, FlowDirection.BOTTOM_TO_TOP)


class Theme(StrEnum):
    AUTO = "auto"
    LIGHT = "light"
    DARK = "dark"


class PrimitiveCategory(StrEnum):
    LABEL = "label"  # text
    INDICATOR = "indicator"  # shapes, markers, icons
    DECORATION = "decoration"  # lines, borders, containers


class ColorPolicy(StrEnum):
    LAST_WRITER = "last-writer"
    FIRST_WRITER = "first-writer"


# ---------------------------------------------------------------------------
# Import-time validation
# ---------------------------------------------------------------------------


def _validate_registries() -> None:
    """Ensure the lookup tables cover every classification."""
    file_classes = set(Classification) - {Classification.DIRECTORY, Classification.OTHER}
    missing_ext = file_classes - set(_EXTENSIONS_BY_CLASSIFICATION)
    if missing_ext:
        raise RuntimeError(f"Classifications missing extension tables: {sorted(missing_ext)}")
    missing_legend = set(Classification) - set(LEGEND_LABELS)
    if missing_legend:
        raise RuntimeError(f"Classifications missing legend labels: {sorted(missing_legend)}")


_validate_registries()
