"""Shared fixtures for CLI tests.

Provides a Click runner and small on-disk projects: one depending on a
local library, and one whose library carries its own manifest (nested).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from tests.helpers import local_dep, make_library, write_manifest


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def simple_project(tmp_path: Path) -> Path:
    """A project with one local library dependency."""
    lib = make_library(tmp_path / "src", "lib")
    project = tmp_path / "app"
    write_manifest(project, {
        "name": "app",
        "dependencies": {"lib": local_dep(lib)},
        "environments": {"production": {"dependencySettings": {"installDevDependencies": False}}},
    })
    return project


@pytest.fixture
def nested_project(tmp_path: Path) -> Path:
    """A project whose library declares a dependency of its own."""
    src = tmp_path / "src"
    make_library(src, "inner")
    outer = make_library(src, "outer", {"inner": local_dep(src / "inner")})
    project = tmp_path / "app"
    write_manifest(project, {"dependencies": {"outer": local_dep(outer)}})
    return project
