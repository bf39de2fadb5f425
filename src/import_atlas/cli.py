"""CLI entrypoint for Import Atlas."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from loguru import logger

from import_atlas.errors import AtlasError
from import_atlas.graph.cycles import format_cycle
from import_atlas.schema import ColorPolicy, FlowDirection, LayoutStyle, Theme

if TYPE_CHECKING:
    from import_atlas.settings import AtlasSettings

app = typer.Typer(
    name="import-atlas",
    help="Map the module dependencies of a JavaScript/TypeScript project as an SVG diagram.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output (-v debug, -vv trace)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings and errors."),
) -> None:
    """Configure logging for every command."""
    if quiet:
        level = "WARNING"
    elif verbose >= 2:
        level = "TRACE"
    elif verbose == 1:
        level = "DEBUG"
    else:
        level = "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level)


def _load_settings(
    path: Path | None,
    *,
    depth: int | None = None,
    hidden: bool | None = None,
    exclude: list[str] | None = None,
) -> AtlasSettings:
    from pydantic import ValidationError

    from import_atlas.settings import AtlasSettings

    # No PATH: fall back to the configured project root.
    overrides = {"project_root": path.resolve()} if path is not None else {}
    try:
        settings = AtlasSettings(**overrides)
    except ValidationError as exc:
        logger.error("Invalid configuration: {}", exc)
        raise typer.Exit(code=1) from exc
    if depth is not None:
        settings.scope.max_depth = depth
    if hidden is not None:
        settings.scope.include_hidden = hidden
    if exclude:
        settings.scope.exclude_patterns = [*settings.scope.exclude_patterns, *exclude]
    return settings


def _report_cycles(cycles: list[list[str]], root: str) -> None:
    if not cycles:
        logger.info("No circular dependencies found.")
        return
    logger.warning("Found {} circular dependenc(ies):", len(cycles))
    for cycle in cycles:
        logger.warning("  {}", format_cycle(cycle, root))


@app.command()
def render(
    path: Path | None = typer.Argument(
        None,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Project directory to visualize. Defaults to the configured project root.",
    ),
    output: Path = typer.Option(Path("dependency-graph.svg"), "--output", "-o", help="Where to write the SVG."),
    depth: int | None = typer.Option(None, "--depth", "-d", min=0, help="Maximum directory depth to scan."),
    hidden: bool | None = typer.Option(None, "--hidden/--no-hidden", help="Include hidden and ignored directories."),
    exclude: list[str] | None = typer.Option(None, "--exclude", "-e", help="Exclude pattern (repeatable)."),
    layout: LayoutStyle | None = typer.Option(None, "--layout", "-l", help="Layout strategy."),
    direction: FlowDirection | None = typer.Option(None, "--direction", help="Direction in which depth grows."),
    theme: Theme | None = typer.Option(None, "--theme", help="Color theme."),
    color_policy: ColorPolicy | None = typer.Option(
        None, "--color-policy", help="Which terminal's color shared directories keep."
    ),
    no_legend: bool = typer.Option(False, "--no-legend", help="Do not draw the legend."),
) -> None:
    """Render the module dependency diagram of a project to SVG."""
    from import_atlas.pipeline import visualize_project

    settings = _load_settings(path, depth=depth, hidden=hidden, exclude=exclude)
    if layout is not None:
        settings.layout.style = layout
    if direction is not None:
        settings.layout.flow = direction
    if theme is not None:
        settings.render.theme = theme
    if color_policy is not None:
        settings.colors.policy = color_policy
    if no_legend:
        settings.render.show_legend = False

    try:
        diagram = visualize_project(settings.project_root, settings)
    except AtlasError as exc:
        logger.error("{}", exc)
        raise typer.Exit(code=1) from exc

    _report_cycles(diagram.cycles, diagram.analysis.root)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(diagram.svg, encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot write {}: {}", output, exc)
        raise typer.Exit(code=1) from exc
    logger.info("Visualization saved to {}", output.resolve())


@app.command()
def cycles(
    path: Path | None = typer.Argument(
        None,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Project directory to analyze. Defaults to the configured project root.",
    ),
    depth: int | None = typer.Option(None, "--depth", "-d", min=0, help="Maximum directory depth to scan."),
    hidden: bool | None = typer.Option(None, "--hidden/--no-hidden", help="Include hidden and ignored directories."),
    exclude: list[str] | None = typer.Option(None, "--exclude", "-e", help="Exclude pattern (repeatable)."),
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 when cycles are found."),
) -> None:
    """Report circular imports without rendering."""
    from import_atlas.pipeline import analyze_project

    settings = _load_settings(path, depth=depth, hidden=hidden, exclude=exclude)
    try:
        result = analyze_project(settings.project_root, settings)
    except AtlasError as exc:
        logger.error("{}", exc)
        raise typer.Exit(code=1) from exc

    _report_cycles(result.cycles, result.root)
    if strict and result.cycles:
        raise typer.Exit(code=1)
