"""Shared pytest fixtures for the mvscript test suite."""

from __future__ import annotations

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path):
    """Create a minimal mvscript project in a temp dir."""
    toml = tmp_path / "mvscript.toml"
    toml.write_text(
        '[package]\nname = "testproj"\nversion = "1.0.0"\n'
        '[parse]\nentry = "program"\nsources = "src"\n'
        "[diagnostics]\ncolor = false\n"
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.mvs").write_text("let x: int = 1 + 2;\nlet y;\nx * (y - 3)\n")
    return tmp_path
