"""Shared test helpers: manifests on disk and throw-away git repositories."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest

from depsmith.core.lockfile import LockedDependency

requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available"
)


def git(cwd: Path, *args: str) -> str:
    """Run git with a fixed identity and return stdout."""
    proc = subprocess.run(
        [
            "git",
            "-c", "user.name=depsmith-tests",
            "-c", "user.email=tests@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "tag.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return proc.stdout


def commit_all(repo: Path, message: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "--quiet", "-m", message)
    return git(repo, "rev-parse", "HEAD").strip()


def make_upstream_repo(root: Path, name: str = "lib") -> Path:
    """Create a repository with a ``v2.0`` tag behind the ``main`` branch.

    ``README.md`` reads ``v2`` at the tag and ``main`` at the branch head.
    """
    repo = root / name
    repo.mkdir(parents=True)
    git(repo, "init", "--quiet")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "src").mkdir()
    (repo / "src" / "Lib.cfc").write_text("component {}\n")
    (repo / "README.md").write_text("v1\n")
    commit_all(repo, "first")
    (repo / "README.md").write_text("v2\n")
    commit_all(repo, "second")
    git(repo, "tag", "v2.0")
    (repo / "README.md").write_text("main\n")
    commit_all(repo, "third")
    return repo


def write_manifest(project_dir: Path, data: dict[str, Any]) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / "depsmith.json"
    path.write_text(json.dumps(data, indent=2))
    return path


def read_lock(project_dir: Path) -> dict[str, Any]:
    return json.loads((project_dir / "depsmith-lock.json").read_text())


def make_locked(
    name: str = "fw1",
    version: str | None = "v4.3.0",
    source: str = "https://github.com/org/fw1.git",
    install_path: str | None = "dependencies/fw1",
    **fields: Any,
) -> LockedDependency:
    """Convenience factory for LockedDependency instances."""
    fields.setdefault("installed_at", "2026-01-01T00:00:00+00:00")
    return LockedDependency(
        name=name, version=version, source=source, install_path=install_path, **fields
    )


def local_dep(source: Path, install_path: str | None = None) -> dict[str, Any]:
    """A file dependency on ``source`` (absolute), optionally relocated."""
    entry: dict[str, Any] = {"path": str(source)}
    if install_path is not None:
        entry["installPath"] = install_path
    return entry


def make_library(root: Path, name: str, dependencies: dict[str, Any] | None = None) -> Path:
    """A library directory, with its own manifest when it has dependencies."""
    lib = root / name
    lib.mkdir(parents=True, exist_ok=True)
    (lib / f"{name.capitalize()}.cfc").write_text("component {}\n")
    if dependencies is not None:
        write_manifest(lib, {"name": name, "dependencies": dependencies})
    return lib
