"""Theme stylesheets, node marker shapes and legend geometry."""

from __future__ import annotations

from dataclasses import dataclass

from import_atlas.schema import Classification, Theme

# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------

_LIGHT_VARS = """
    --bg-primary: #f7fafc;
    --text-primary: #2a2f45;
    --link-stroke: #c1c9d2;
    --cycle-stroke: #cd3d64;
    --dependency-stroke: #067ab8;
    --legend-bg: rgba(255, 255, 255, 0.95);
    --legend-border: #e2e8f0;"""

_DARK_VARS = """
    --bg-primary: #1a1f36;
    --text-primary: #f7fafc;
    --link-stroke: #4f566b;
    --cycle-stroke: #ed5f74;
    --dependency-stroke: #4db7e8;
    --legend-bg: rgba(26, 31, 54, 0.95);
    --legend-border: #4f566b;"""

_BASE_RULES = """
  svg {
    background-color: var(--bg-primary);
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
    font-size: 12px;
  }
  .link {
    fill: none;
    stroke: var(--link-stroke);
    stroke-opacity: 0.6;
    stroke-width: 1px;
  }
  .dependency-link {
    stroke-opacity: 0.8;
  }
  .cycle-link {
    stroke: var(--cycle-stroke) !important;
    stroke-opacity: 1;
  }
  .node-shape {
    stroke: none;
  }
  .node text {
    fill: var(--text-primary);
    paint-order: stroke;
    stroke: var(--bg-primary);
    stroke-width: 2px;
    stroke-linecap: butt;
    stroke-linejoin: miter;
  }
  .legend-title {
    font-size: 16px;
    font-weight: bold;
    fill: var(--text-primary);
  }
  .legend-background {
    fill: var(--legend-bg);
    stroke: var(--legend-border);
    stroke-width: 1px;
  }
  .legend-text {
    fill: var(--text-primary);
    font-size: 13px;
  }
"""


def theme_css(theme: Theme) -> str:
    """Stylesheet embedded in ``<defs><style>``.

    ``AUTO`` ships the light palette with a ``prefers-color-scheme: dark``
    override; ``LIGHT`` and ``DARK`` ship only their own palette.
    """
    if theme is Theme.LIGHT:
        variables = f"  :root {{{_LIGHT_VARS}\n  }}\n"
    elif theme is Theme.DARK:
        variables = f"  :root {{{_DARK_VARS}\n  }}\n"
    else:
        variables = (
            f"  :root {{{_LIGHT_VARS}\n  }}\n"
            f"  @media (prefers-color-scheme: dark) {{\n  :root {{{_DARK_VARS}\n  }}\n  }}\n"
        )
    return "\n" + variables + _BASE_RULES


# ---------------------------------------------------------------------------
# Marker shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Shape:
    """SVG element (tag + geometry attributes) drawn at a node's origin."""

    tag: str
    attrs: tuple[tuple[str, str], ...]
    size: float = 16.0

    def attributes(self) -> dict[str, str]:
        return dict(self.attrs)


SHAPES: dict[Classification, Shape] = {
    Classification.DIRECTORY: Shape("circle", (("r", "8"),)),
    Classification.SCRIPT: Shape("path", (("d", "M0,-8 L8,0 L0,8 L-8,0 Z"),)),
    Classification.STYLESHEET: Shape(
        "rect", (("x", "-6"), ("y", "-6"), ("width", "12"), ("height", "12")), size=12.0
    ),
    Classification.IMAGE: Shape("path", (("d", "M0,-8 L2.4,-2.4 L8,0 L2.4,2.4 L0,8 L-2.4,2.4 L-8,0 L-2.4,-2.4 Z"),)),
    Classification.MULTIMEDIA: Shape("path", (("d", "M-6,-4 L6,-4 L4,4 L-4,4 Z"),), size=12.0),
    Classification.OTHER: Shape("path", (("d", "M-8,-4 L4,-4 L8,0 L4,4 L-8,4 Z"),)),
}

_missing_shapes = set(Classification) - set(SHAPES)
if _missing_shapes:
    raise RuntimeError(f"Classifications without a marker shape: {sorted(_missing_shapes)}")


def shape_for(classification: Classification) -> Shape:
    return SHAPES[classification]


# ---------------------------------------------------------------------------
# Legend geometry
# ---------------------------------------------------------------------------

LEGEND_X = 30.0  # from the start of the right margin
LEGEND_Y = 50.0
LEGEND_ITEM_HEIGHT = 25.0
LEGEND_SWATCH = 12.0
LEGEND_SPACING = 8.0
LEGEND_PADDING = 15.0
LEGEND_MIN_CANVAS_PAD = 100.0  # canvas must exceed legend width by this much
