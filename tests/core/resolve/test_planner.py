"""Tests for dry-run planning: decisions without side effects."""

from __future__ import annotations

from pathlib import Path

import pytest

from depsmith import LOCKFILE_NAME
from depsmith.core.installers import InstallContext
from depsmith.core.resolve import (
    Action,
    DryRunPlanner,
    InstallOptions,
    ProjectGraphWalker,
)
from depsmith.exceptions import UnknownEnvironmentError
from depsmith.settings import Settings
from tests.helpers import local_dep, make_library, write_manifest


def snapshot(root: Path) -> list[str]:
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


@pytest.fixture
def nested_workspace(tmp_path: Path) -> Path:
    """Root project depending on a local library that has its own manifest."""
    src = tmp_path / "src"
    make_library(src, "inner")
    make_library(src, "outer", {"inner": local_dep(src / "inner")})
    project = tmp_path / "project"
    write_manifest(project, {
        "dependencies": {
            "outer": local_dep(src / "outer"),
            "legacy": {"source": "forgebox", "version": "1.0"},
        },
        "devDependencies": {"testbox": {"url": "https://github.com/org/testbox.git"}},
    })
    return tmp_path


class TestDryRun:
    def test_plans_without_touching_disk(
        self, install_context: InstallContext, nested_workspace: Path, cache_root: Path
    ) -> None:
        before = snapshot(nested_workspace)
        plan = DryRunPlanner(install_context, max_nested_depth=3).plan(
            nested_workspace / "project", InstallOptions()
        )

        assert [(i.name, i.action) for i in plan.items] == [
            ("outer", Action.INSTALL),
            ("legacy", Action.SKIP),
            ("testbox", Action.INSTALL),
        ]
        assert [i.name for i in plan.to_install()] == ["outer", "testbox"]
        assert plan.nested == []
        assert snapshot(nested_workspace) == before
        assert not cache_root.exists()

    def test_include_nested_uses_local_source_manifest(
        self, install_context: InstallContext, nested_workspace: Path
    ) -> None:
        plan = DryRunPlanner(install_context, max_nested_depth=3).plan(
            nested_workspace / "project", InstallOptions(include_nested=True)
        )
        assert len(plan.nested) == 1
        nested = plan.nested[0]
        assert nested.project_dir == nested_workspace / "src" / "outer"
        assert nested.depth == 1
        assert [i.name for i in nested.items] == ["inner"]
        assert not (nested_workspace / "project" / LOCKFILE_NAME).exists()

    def test_depth_limit_applies(
        self, install_context: InstallContext, nested_workspace: Path
    ) -> None:
        plan = DryRunPlanner(install_context, max_nested_depth=0).plan(
            nested_workspace / "project", InstallOptions(include_nested=True)
        )
        assert plan.nested == []
        assert "not planning nested project" in plan.warnings[0]

    def test_production_skips_dev(
        self, install_context: InstallContext, nested_workspace: Path
    ) -> None:
        plan = DryRunPlanner(install_context, max_nested_depth=3).plan(
            nested_workspace / "project", InstallOptions(production=True)
        )
        assert "testbox" not in [i.name for i in plan.items]

    def test_unknown_environment_is_fatal(
        self, install_context: InstallContext, nested_workspace: Path
    ) -> None:
        with pytest.raises(UnknownEnvironmentError):
            DryRunPlanner(install_context, max_nested_depth=3).plan(
                nested_workspace / "project", InstallOptions(environment="qa")
            )

    def test_reflects_previous_install(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, tmp_path: Path
    ) -> None:
        lib = make_library(tmp_path / "src", "lib")
        write_manifest(project_dir, {"dependencies": {"lib": local_dep(lib)}})
        ProjectGraphWalker(settings, install_context).install(project_dir, InstallOptions())

        plan = DryRunPlanner(install_context, max_nested_depth=3).plan(
            project_dir, InstallOptions()
        )
        assert [(i.action, i.reason) for i in plan.items] == [(Action.REUSE, "up to date")]
        forced = DryRunPlanner(install_context, max_nested_depth=3).plan(
            project_dir, InstallOptions(force=True)
        )
        assert forced.to_install()[0].reason == "forced"
