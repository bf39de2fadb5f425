"""Configuration management for Import Atlas."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, TomlConfigSettingsSource

from import_atlas.schema import ColorPolicy, FlowDirection, LayoutStyle, Theme

CONFIG_FILENAME = "import-atlas.toml"

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _find_upwards(name: str, start: Path | None = None) -> Path | None:
    """First ``<dir>/<name>`` that exists, checking *start* (default: cwd) and then each parent."""
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / name
        if candidate.exists():
            return candidate
    return None


def find_git_root(start: Path | None = None) -> Path | None:
    """Directory holding the nearest ``.git`` at or above *start*, or ``None``."""
    marker = _find_upwards(".git", start)
    return marker.parent if marker is not None else None


def _default_project_root() -> Path:
    return find_git_root() or Path.cwd()


def _find_config_toml() -> Path | None:
    """Nearest ``import-atlas.toml`` at or above the working directory."""
    found = _find_upwards(CONFIG_FILENAME)
    return found if found is not None and found.is_file() else None


class ScopeSettings(BaseSettings):
    """Which files under the project root are analyzed."""

    max_depth: int | None = Field(
        default=None, description="Maximum directory depth below the root to descend into (None = unlimited)."
    )
    include_hidden: bool = Field(
        default=False, description="Include hidden entries and default-ignored directories (node_modules, .git, ...)."
    )
    exclude_patterns: list[str] = Field(
        default_factory=list, description="Additional gitignore-style patterns to exclude."
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx", ".mts", ".cts"],
        description="File extensions treated as analyzable modules.",
    )


class LayoutSettings(BaseSettings):
    """Node placement and canvas sizing."""

    style: LayoutStyle = Field(default=LayoutStyle.AUTO, description="Layout strategy used to position nodes.")
    flow: FlowDirection = Field(
        default=FlowDirection.LEFT_TO_RIGHT, description="Screen direction in which depth increases."
    )
    default_width: float = Field(default=1800.0, gt=0, description="Initial canvas width in pixels.")
    aspect_ratio: float = Field(default=16 / 9, gt=0, description="Target canvas width / height ratio.")
    margin_top: float = Field(default=120.0, description="Top canvas margin in pixels.")
    margin_right: float = Field(default=350.0, description="Right canvas margin in pixels (hosts the legend).")
    margin_bottom: float = Field(default=120.0, description="Bottom canvas margin in pixels.")
    margin_left: float = Field(default=150.0, description="Left canvas margin in pixels.")
    legend_width: float = Field(default=250.0, description="Width reserved for the legend panel.")
    level_spacing: float = Field(default=80.0, description="Distance between siblings on the same depth level.")
    min_width: float = Field(default=640.0, gt=0, description="Smallest allowed canvas width.")
    max_width: float = Field(default=16000.0, description="Largest allowed canvas width.")
    min_height: float = Field(default=360.0, gt=0, description="Smallest allowed canvas height.")
    max_height: float = Field(default=9000.0, description="Largest allowed canvas height.")


class RenderSettings(BaseSettings):
    """SVG styling."""

    theme: Theme = Field(default=Theme.AUTO, description="Color theme: 'auto', 'light' or 'dark'.")
    node_radius: float = Field(default=8.0, description="Radius of directory markers in pixels.")
    label_offset: float = Field(default=12.0, description="Distance between a node marker and its label.")
    curve_offset: float = Field(default=120.0, description="Maximum bend of dependency curves in pixels.")
    show_legend: bool = Field(default=True, description="Draw the color/shape legend when there is room.")


class ColorSettings(BaseSettings):
    """Flow-based module coloring."""

    policy: ColorPolicy = Field(
        default=ColorPolicy.LAST_WRITER,
        description="Which terminal's color a shared ancestor directory keeps: 'last-writer' or 'first-writer'.",
    )


class OverlapSettings(BaseSettings):
    """Collision avoidance between drawn labels and markers."""

    attempts: int = Field(default=20, ge=1, description="Spiral search steps before giving up on a placement.")
    max_distance: float = Field(default=100.0, gt=0, description="Search radius reached on the final spiral step.")
    text_buffer: float = Field(default=18.0, ge=0, description="Minimum separation buffer around text labels.")
    indicator_spacing: float = Field(default=24.0, ge=0, description="Separation buffer around node markers.")
    decoration_margin: float = Field(default=8.0, ge=0, description="Buffer around lines and containers.")
    text_length_multiplier: float = Field(
        default=0.8, ge=0, description="Per-character growth of a label's buffer beyond ``text_buffer``."
    )


class AtlasSettings(BaseSettings):
    """Root configuration for Import Atlas."""

    model_config = SettingsConfigDict(
        toml_file=CONFIG_FILENAME,
        env_prefix="IMPORT_ATLAS_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_path = _find_config_toml()
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        if toml_path:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_path))
        sources.append(file_secret_settings)
        return tuple(sources)

    project_root: Path = Field(default_factory=_default_project_root, description="Project root path.")
    scope: ScopeSettings = Field(default_factory=ScopeSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    colors: ColorSettings = Field(default_factory=ColorSettings)
    overlap: OverlapSettings = Field(default_factory=OverlapSettings)
