"""Shared fixtures for depsmith tests."""

import pathlib

import pytest

from depsmith.core.cache import DownloadCache, GitCacheManager
from depsmith.core.installers import InstallContext
from depsmith.registry import ExtensionCatalog
from depsmith.settings import Settings


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Point DEPSMITH_HOME at a temporary directory for every test."""
    home = tmp_path / "depsmith-home"
    monkeypatch.setenv("DEPSMITH_HOME", str(home))
    monkeypatch.delenv("DEPSMITH_CACHE_DIR", raising=False)
    return home


@pytest.fixture
def cache_root(isolated_home: pathlib.Path) -> pathlib.Path:
    return isolated_home / "cache"


@pytest.fixture
def settings(isolated_home: pathlib.Path, cache_root: pathlib.Path) -> Settings:
    return Settings(home=isolated_home, cache_root=cache_root)


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def install_context(project_dir: pathlib.Path, cache_root: pathlib.Path) -> InstallContext:
    """Install context without network access (no transport configured)."""
    return InstallContext(
        project_dir=project_dir,
        git_cache=GitCacheManager(cache_root),
        downloads=DownloadCache(cache_root),
        catalog=ExtensionCatalog.load_default(),
    )
