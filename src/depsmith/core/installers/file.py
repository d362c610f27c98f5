"""Install libraries and archives from local paths."""

from __future__ import annotations

from depsmith.core.declaration import Declaration, DependencyKind, FileDependency
from depsmith.core.fsutil import copy_file, copy_tree, extract_archive, is_extractable
from depsmith.core.installers.base import DependencyInstaller, resolve_local
from depsmith.core.lockfile import LockedDependency
from depsmith.exceptions import InstallError, SourceFetchError


class FileInstaller(DependencyInstaller):
    """Copy a local directory or file into the project.

    Libraries may point at a directory (copied as a tree) or at a zip/tar
    archive (extracted). Archives are copied as single files.
    """

    def supports(self, dep: Declaration) -> bool:
        return isinstance(dep, FileDependency)

    def install(self, dep: Declaration) -> LockedDependency:
        if not isinstance(dep, FileDependency):
            raise self.unsupported(dep)
        source = resolve_local(self.project_dir, dep.path)
        if not source.exists():
            raise SourceFetchError(f"Source path not found: {source}")
        target = self.target_path(dep)
        if source == target:
            raise InstallError(f"{dep.name}: source and install path are the same")

        if dep.kind is DependencyKind.ARCHIVE:
            if not source.is_file():
                raise InstallError(f"{dep.name}: archive source {source} is not a file")
            copy_file(source, target)
        elif source.is_dir():
            copy_tree(source, target)
        elif is_extractable(source.name):
            extract_archive(source, target)
        else:
            raise InstallError(
                f"{dep.name}: library source {source} must be a directory or an archive"
            )
        return self.locked(dep, target, resolved=str(source))
