"""Shared test fixtures for Import Atlas."""

from __future__ import annotations

from pathlib import Path

import pytest

from import_atlas.settings import AtlasSettings


@pytest.fixture
def settings(tmp_path):
    """Create test settings pointing to a temporary directory."""
    return AtlasSettings(project_root=tmp_path)


@pytest.fixture
def write(tmp_path):
    """Return a helper that writes ``tmp_path/rel_path`` and returns its absolute path."""

    def _write(rel_path: str, content: str = "") -> str:
        p: Path = tmp_path / rel_path
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return str(p)

    return _write
