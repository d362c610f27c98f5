"""Install libraries from git repositories through the shared clone cache."""

from __future__ import annotations

import logging

from depsmith.core.declaration import Declaration, GitDependency
from depsmith.core.fsutil import copy_tree
from depsmith.core.installers.base import DependencyInstaller
from depsmith.core.lockfile import LockedDependency

logger = logging.getLogger(__name__)


class GitInstaller(DependencyInstaller):
    """Copy a checked-out tree (or its ``subPath``) to the install path.

    The lock entry records the ref as the version, ``<url>#<ref>`` as the
    resolved origin and the checked-out commit.
    """

    def supports(self, dep: Declaration) -> bool:
        return isinstance(dep, GitDependency)

    def install(self, dep: Declaration) -> LockedDependency:
        if not isinstance(dep, GitDependency):
            raise self.unsupported(dep)
        target = self.target_path(dep)
        with self.context.git_cache.acquire(
            dep.name, dep.url, dep.ref, dep.sub_path
        ) as checkout:
            logger.debug(
                "Installing %s at %s (%s) to %s",
                dep.name, dep.ref, checkout.commit[:8], target,
            )
            copy_tree(checkout.source_dir, target)
        return self.locked(
            dep,
            target,
            version=dep.ref,
            resolved=f"{dep.url}#{dep.ref}",
            git_commit=checkout.commit,
            sub_path=dep.sub_path,
        )
