"""Install registry artifacts addressed by group/artifact/version."""

from __future__ import annotations

from depsmith.core.declaration import ArtifactDependency, Declaration
from depsmith.core.fsutil import copy_file
from depsmith.core.installers.base import DependencyInstaller
from depsmith.core.lockfile import LockedDependency
from depsmith.registry import artifact_url


class ArtifactInstaller(DependencyInstaller):
    """Fetch ``<artifact>-<version>.jar`` through the download cache."""

    def supports(self, dep: Declaration) -> bool:
        return isinstance(dep, ArtifactDependency)

    def install(self, dep: Declaration) -> LockedDependency:
        if not isinstance(dep, ArtifactDependency):
            raise self.unsupported(dep)
        url = artifact_url(dep)
        cached = self.fetch(url)
        target = self.target_path(dep)
        copy_file(cached, target)
        return self.locked(dep, target, version=dep.version, resolved=url)
