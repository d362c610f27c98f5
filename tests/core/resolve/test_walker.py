"""Tests for installing a project and the nested projects it reaches.

Workspaces are laid out as siblings: each library source lives under
``src/`` and is installed next to the root project with ``installPath:
../<name>``, so every nested project resolves its own paths against its own
directory.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import httpx
import pytest

from depsmith import LOCKFILE_NAME
from depsmith.core.cache import DownloadCache
from depsmith.core.installers import InstallContext
from depsmith.core.resolve import InstallOptions, Outcome, ProjectGraphWalker
from depsmith.exceptions import ManifestError, UnknownEnvironmentError
from depsmith.settings import Settings
from tests.helpers import local_dep, make_library, read_lock, write_manifest


@pytest.fixture
def src(tmp_path: Path) -> Path:
    return tmp_path / "src"


@pytest.fixture
def ws(tmp_path: Path) -> Path:
    return tmp_path / "ws"


def walker(settings: Settings, context: InstallContext, **overrides) -> ProjectGraphWalker:
    return ProjectGraphWalker(replace(settings, **overrides), context)


# ===========================================================================
# Single project
# ===========================================================================


class TestRootProject:
    def test_install_then_reuse(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        lib = make_library(src, "lib")
        write_manifest(project_dir, {"dependencies": {"lib": local_dep(lib)}})

        first = walker(settings, install_context).install(project_dir, InstallOptions())
        assert first.totals()[Outcome.REINSTALLED] == 1
        assert first.root.lock_path == project_dir / LOCKFILE_NAME
        entry = read_lock(project_dir)["dependencies"]["lib"]
        assert entry["installPath"] == "dependencies/lib"

        second = walker(settings, install_context).install(project_dir, InstallOptions())
        assert second.totals()[Outcome.REUSED] == 1
        assert second.succeeded

    def test_dev_dependencies_follow_settings_and_production_flag(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        lib = make_library(src, "lib")
        tool = make_library(src, "tool")
        write_manifest(project_dir, {
            "dependencies": {"lib": local_dep(lib)},
            "devDependencies": {"tool": local_dep(tool)},
        })

        prod = walker(settings, install_context).install(
            project_dir, InstallOptions(production=True)
        )
        assert [r.name for r in prod.root.results] == ["lib"]
        assert "devDependencies" not in read_lock(project_dir)

        full = walker(settings, install_context).install(project_dir, InstallOptions())
        assert [r.name for r in full.root.results] == ["lib", "tool"]
        assert "tool" in read_lock(project_dir)["devDependencies"]

    def test_declaration_errors_do_not_fail_the_run(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        lib = make_library(src, "lib")
        write_manifest(project_dir, {"dependencies": {
            "broken": {"type": "plugin"},
            "lib": local_dep(lib),
        }})
        report = walker(settings, install_context).install(project_dir, InstallOptions())
        assert report.succeeded
        assert len(report.declaration_errors) == 1
        assert report.declaration_errors[0].dependency == "broken"
        assert [r.name for r in report.root.results] == ["lib"]

    def test_failed_dependency_is_left_out_of_the_lock(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        lib = make_library(src, "lib")
        write_manifest(project_dir, {"dependencies": {
            "ghost": local_dep(src / "ghost"),
            "lib": local_dep(lib),
        }})
        report = walker(settings, install_context).install(project_dir, InstallOptions())
        assert not report.succeeded
        assert report.totals()[Outcome.FAILED] == 1
        assert set(read_lock(project_dir)["dependencies"]) == {"lib"}

    def test_nothing_installed_writes_no_lock(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        write_manifest(project_dir, {"dependencies": {"ghost": local_dep(src / "ghost")}})
        report = walker(settings, install_context).install(project_dir, InstallOptions())
        assert report.root.lock_path is None
        assert not (project_dir / LOCKFILE_NAME).exists()

    def test_missing_manifest(
        self, settings: Settings, install_context: InstallContext, project_dir: Path
    ) -> None:
        with pytest.raises(ManifestError):
            walker(settings, install_context).install(project_dir, InstallOptions())

    def test_unknown_root_environment_is_fatal(
        self, settings: Settings, install_context: InstallContext, project_dir: Path
    ) -> None:
        write_manifest(project_dir, {"environments": {"prod": {}}})
        with pytest.raises(UnknownEnvironmentError):
            walker(settings, install_context).install(
                project_dir, InstallOptions(environment="qa")
            )

    def test_environment_changes_install_location(
        self, settings: Settings, install_context: InstallContext, project_dir: Path, src: Path
    ) -> None:
        lib = make_library(src, "lib")
        write_manifest(project_dir, {
            "dependencies": {"lib": local_dep(lib)},
            "environments": {
                "staging": {"dependencySettings": {"installLocation": "staging_deps"}},
            },
        })
        report = walker(settings, install_context).install(
            project_dir, InstallOptions(environment="staging")
        )
        assert report.root.environment == "staging"
        assert (project_dir / "staging_deps" / "lib" / "Lib.cfc").is_file()


# ===========================================================================
# Nested projects
# ===========================================================================


class TestNestedProjects:
    def test_nested_projects_install_with_their_own_lock(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "c")
        make_library(src, "b", {"c": local_dep(src / "c", "../c")})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(src / "b", "../b")}})

        report = walker(settings, install_context).install(ws / "a", InstallOptions())

        assert [(p.project_dir.name, p.depth) for p in report.projects()] == [("a", 0), ("b", 1)]
        assert (ws / "c" / "C.cfc").is_file()
        assert "c" in read_lock(ws / "b")["dependencies"]
        assert report.totals()[Outcome.REINSTALLED] == 2

    def test_depth_limit_stops_descent_with_warning(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "d")
        make_library(src, "c", {"d": local_dep(src / "d", "../d")})
        make_library(src, "b", {"c": local_dep(src / "c", "../c")})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(src / "b", "../b")}})

        report = walker(settings, install_context, max_nested_depth=1).install(
            ws / "a", InstallOptions()
        )

        assert [p.project_dir.name for p in report.projects()] == ["a", "b"]
        assert (ws / "c").is_dir()
        assert not (ws / "d").exists()
        assert not (ws / "c" / LOCKFILE_NAME).exists()
        assert len(report.warnings) == 1
        assert "Maximum nested depth (1) reached" in report.warnings[0]
        assert report.succeeded

    def test_depth_zero_installs_only_the_root(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "c")
        make_library(src, "b", {"c": local_dep(src / "c", "../c")})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(src / "b", "../b")}})
        report = walker(settings, install_context, max_nested_depth=0).install(
            ws / "a", InstallOptions()
        )
        assert len(report.projects()) == 1
        assert not (ws / "c").exists()

    def test_cycle_terminates(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        # a -> b (at ws/shared) -> c -> b again (same ws/shared manifest)
        make_library(src, "c", {"b-again": local_dep(src / "b", "../shared")})
        make_library(src, "b", {"c": local_dep(src / "c", "../c")})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(src / "b", "../shared")}})

        report = walker(settings, install_context, max_nested_depth=10).install(
            ws / "a", InstallOptions()
        )

        assert [p.project_dir.name for p in report.projects()] == ["a", "shared", "c"]
        assert report.warnings == []
        assert report.succeeded

    def test_nested_projects_skip_dev_dependencies(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "tool")
        b = make_library(src, "b")
        write_manifest(b, {"devDependencies": {"tool": local_dep(src / "tool", "../tool")},
                           "dependencies": {}})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(b, "../b")}})

        report = walker(settings, install_context).install(ws / "a", InstallOptions())
        assert [p.project_dir.name for p in report.projects()] == ["a", "b"]
        assert not (ws / "tool").exists()

    def test_unknown_environment_is_lenient_when_nested(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "b", {})
        write_manifest(ws / "a", {
            "dependencies": {"b": local_dep(src / "b", "../b")},
            "environments": {"prod": {}},
        })
        report = walker(settings, install_context).install(
            ws / "a", InstallOptions(environment="prod")
        )
        nested = report.root.nested[0]
        assert nested.environment is None
        assert any("'prod' not found" in w for w in nested.warnings)
        assert report.succeeded

    def test_broken_nested_manifest_is_a_warning(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        b = make_library(src, "b")
        (b / "depsmith.json").write_text("{not json")
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(b, "../b")}})

        report = walker(settings, install_context).install(ws / "a", InstallOptions())
        assert report.succeeded
        assert len(report.projects()) == 1
        assert "Skipping nested project" in report.warnings[0]


# ===========================================================================
# Repeated runs over nested projects
# ===========================================================================


class TestNestedReruns:
    """A second run over an unchanged nested graph reuses everything."""

    @pytest.mark.parametrize("layout", ["default", "sibling"])
    def test_second_run_reuses_everything(
        self,
        settings: Settings,
        install_context: InstallContext,
        ws: Path,
        src: Path,
        layout: str,
    ) -> None:
        sibling = layout == "sibling"
        make_library(src, "c")
        make_library(src, "b", {"c": local_dep(src / "c", "../c" if sibling else None)})
        write_manifest(ws / "a", {
            "dependencies": {"b": local_dep(src / "b", "../b" if sibling else None)},
        })
        nested_dir = ws / "b" if sibling else ws / "a" / "dependencies" / "b"

        first = walker(settings, install_context).install(ws / "a", InstallOptions())
        assert first.totals()[Outcome.REINSTALLED] == 2
        nested_lock = (nested_dir / LOCKFILE_NAME).read_text()

        second = walker(settings, install_context).install(ws / "a", InstallOptions())
        assert second.totals()[Outcome.REINSTALLED] == 0
        assert second.totals()[Outcome.REUSED] == 2
        assert [p.project_dir for p in second.projects()] == [ws / "a", nested_dir]
        assert read_lock(nested_dir)["dependencies"]["c"] == json.loads(nested_lock)[
            "dependencies"]["c"]

    def test_edited_nested_library_is_still_reinstalled(
        self, settings: Settings, install_context: InstallContext, ws: Path, src: Path
    ) -> None:
        make_library(src, "c")
        make_library(src, "b", {"c": local_dep(src / "c")})
        write_manifest(ws / "a", {"dependencies": {"b": local_dep(src / "b")}})
        walker(settings, install_context).install(ws / "a", InstallOptions())

        (ws / "a" / "dependencies" / "b" / "B.cfc").write_text("edited")
        report = walker(settings, install_context).install(ws / "a", InstallOptions())

        assert report.root.results[0].outcome is Outcome.REINSTALLED
        assert (ws / "a" / "dependencies" / "b" / "B.cfc").read_text() == "component {}\n"


# ===========================================================================
# Forced installs
# ===========================================================================


class TestForcedInstall:
    def test_force_downloads_registry_artifacts_again(
        self,
        settings: Settings,
        install_context: InstallContext,
        project_dir: Path,
        cache_root: Path,
    ) -> None:
        upstream = {"body": b"v1"}
        requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(str(request.url))
            return httpx.Response(200, content=upstream["body"])

        transport = httpx.MockTransport(handler)
        context = replace(
            install_context,
            transport=transport,
            downloads=DownloadCache(cache_root, transport=transport),
        )
        write_manifest(project_dir, {"dependencies": {
            "g": {"groupId": "org.x", "artifactId": "g", "version": "1.0"},
        }})
        jar = project_dir / "lib" / "g-1.0.jar"

        walker(settings, context).install(project_dir, InstallOptions())
        upstream["body"] = b"v2"
        walker(settings, context).install(project_dir, InstallOptions())
        assert len(requests) == 1
        assert jar.read_bytes() == b"v1"

        report = walker(settings, context).install(project_dir, InstallOptions(force=True))
        assert report.totals()[Outcome.REINSTALLED] == 1
        assert len(requests) == 2
        assert jar.read_bytes() == b"v2"
