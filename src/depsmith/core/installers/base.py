"""Base interface shared by all source installers.

Every installer implements the ``DependencyInstaller`` abstract base class:

- ``supports(dep)`` -- cheap type check on the declaration variant.
- ``install(dep)`` -- fetch the source, place it at the install path
  (deleting whatever was there), and return the ``LockedDependency`` that
  describes what is now on disk.

Installers never read or write the lock file; the reconciler decides
whether to call them and records what they return.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path

import httpx

from depsmith.core.cache import DownloadCache, GitCacheManager
from depsmith.core.declaration import (
    ArtifactDependency,
    Declaration,
    ExtensionDependency,
    FileDependency,
    GitDependency,
    HttpDependency,
    normalize_relative,
)
from depsmith.core.lockfile import EXTENSION_PROVIDER, LockedDependency, compute_integrity
from depsmith.exceptions import InstallError
from depsmith.registry import ExtensionCatalog, registry_descriptor
from depsmith.registry.http_client import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class InstallContext:
    """Everything an installer needs besides the declaration itself.

    Attributes:
        project_dir: Directory of the project being installed; relative
            install paths and local sources resolve against it.
        git_cache: Shared git clone cache.
        downloads: Shared cache of immutable downloads.
        catalog: Extension catalog for slug resolution.
        http_timeout: Timeout for direct (uncached) downloads.
        transport: Optional httpx transport override (tests).
        refresh_downloads: Download again even when the download cache
            already holds the file (forced installs).
    """

    project_dir: Path
    git_cache: GitCacheManager
    downloads: DownloadCache
    catalog: ExtensionCatalog
    http_timeout: float = DEFAULT_TIMEOUT
    transport: httpx.BaseTransport | None = None
    refresh_downloads: bool = False

    def for_project(self, project_dir: Path, force: bool = False) -> InstallContext:
        return replace(self, project_dir=project_dir, refresh_downloads=force)


def resolve_local(project_dir: Path, path: str) -> Path:
    """Resolve a manifest path against ``project_dir`` (absolute paths kept)."""
    candidate = Path(os.path.expanduser(path))
    if not candidate.is_absolute():
        candidate = project_dir / candidate
    return Path(os.path.normpath(candidate))


def source_descriptor(dep: Declaration, project_dir: Path) -> str:
    """Normalized source string recorded in, and compared against, the lock file."""
    if isinstance(dep, GitDependency):
        return dep.url
    if isinstance(dep, FileDependency):
        return f"file:{normalize_relative(dep.path)}"
    if isinstance(dep, HttpDependency):
        return dep.url
    if isinstance(dep, ArtifactDependency):
        return registry_descriptor(dep)
    if isinstance(dep, ExtensionDependency):
        if dep.url:
            return dep.url
        if dep.path:
            return f"path:{resolve_local(project_dir, dep.path)}"
        return EXTENSION_PROVIDER
    return str(dep.source)


class DependencyInstaller(ABC):
    """Abstract base class for source installers."""

    def __init__(self, context: InstallContext) -> None:
        self.context = context

    @property
    def project_dir(self) -> Path:
        return self.context.project_dir

    @abstractmethod
    def supports(self, dep: Declaration) -> bool:
        """Return True if this installer handles ``dep``'s variant."""

    @abstractmethod
    def install(self, dep: Declaration) -> LockedDependency:
        """Install ``dep`` and describe the result.

        Raises:
            SourceFetchError: If the source cannot be fetched.
            InstallError: If the fetched content cannot be placed on disk.
        """

    def unsupported(self, dep: Declaration) -> InstallError:
        return InstallError(
            f"{dep.name}: {type(self).__name__} cannot install {type(dep).__name__}"
        )

    def fetch(self, url: str) -> Path:
        """Fetch ``url`` through the download cache."""
        return self.context.downloads.fetch(url, refresh=self.context.refresh_downloads)

    def target_path(self, dep: Declaration) -> Path:
        if not dep.install_path:
            raise InstallError(f"{dep.name}: no install path")
        return resolve_local(self.project_dir, dep.install_path)

    def locked(self, dep: Declaration, target: Path | None, **fields) -> LockedDependency:
        """Build the lock entry for a finished install of ``dep``."""
        values = {
            "name": dep.name,
            "version": dep.version_hint,
            "source": source_descriptor(dep, self.project_dir),
            "install_path": dep.install_path,
            "kind": dep.kind.value,
            "mapping": dep.mapping,
        }
        if target is not None:
            values["integrity"] = compute_integrity(target)
        values.update(fields)
        return LockedDependency(**values)
