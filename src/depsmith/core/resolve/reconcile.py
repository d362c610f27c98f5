"""Reconciliation: decide per dependency whether to reuse or reinstall.

A dependency is reused when all of the following hold:

- ``--force`` is not set;
- the previous lock file has an entry for it in the same scope;
- the entry matches the declaration (same source descriptor and install
  path; git also compares the ref, extensions the resolved ID);
- the recorded install path still exists (catalog extensions install
  nothing and always count as present);
- with ``verifyIntegrity`` on, the installed content still hashes to the
  recorded integrity.

Anything else reinstalls. Declarations no installer supports are skipped.
Installer failures become ``FAILED`` results; they never abort the run.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from depsmith.core.declaration import (
    Declaration,
    ExtensionDependency,
    GitDependency,
    Scope,
    UnsupportedDependency,
)
from depsmith.core.installers import (
    InstallerRegistry,
    expected_extension_id,
    resolve_local,
    source_descriptor,
)
from depsmith.core.lockfile import LockedDependency, LockFile, verify_integrity
from depsmith.core.resolve.models import Action, Assessment, DependencyResult, Outcome
from depsmith.exceptions import DepsmithError

logger = logging.getLogger(__name__)


class Reconciler:
    """Reconcile the declarations of one project against its previous lock.

    Args:
        project_dir: Project directory.
        existing_lock: Lock file read at the start of the run (may be empty).
        installers: Installer registry bound to ``project_dir``.
        force: Reinstall everything.
        verify_integrity: Re-hash installed content before reusing it.
    """

    def __init__(
        self,
        project_dir: Path,
        existing_lock: LockFile,
        installers: InstallerRegistry,
        force: bool = False,
        verify_integrity: bool = True,
    ) -> None:
        self.project_dir = project_dir
        self.existing_lock = existing_lock
        self.installers = installers
        self.force = force
        self.verify_integrity = verify_integrity

    def matches(self, dep: Declaration, locked: LockedDependency) -> bool:
        """Return True if ``locked`` describes an install of ``dep``."""
        if locked.source != source_descriptor(dep, self.project_dir):
            return False
        if locked.install_path != dep.install_path:
            return False
        if isinstance(dep, GitDependency):
            return locked.version == dep.ref
        if isinstance(dep, ExtensionDependency):
            expected = expected_extension_id(self.installers.context.catalog, dep)
            return locked.id == expected
        return True

    def is_present(self, locked: LockedDependency) -> bool:
        if not locked.install_path:
            return locked.kind == "extension"
        target = resolve_local(self.project_dir, locked.install_path)
        if not target.exists():
            return False
        if self.verify_integrity and locked.integrity:
            return verify_integrity(target, locked.integrity)
        return True

    def assess(self, dep: Declaration, scope: Scope) -> Assessment:
        """Decide what to do with ``dep`` without touching the filesystem."""
        if isinstance(dep, UnsupportedDependency):
            return Assessment(Action.SKIP, f"unsupported source {dep.source_name!r}")
        if self.installers.for_dependency(dep) is None:
            return Assessment(Action.SKIP, "no installer for this source")

        locked = self.existing_lock.get(scope, dep.name)
        if self.force:
            return Assessment(Action.INSTALL, "forced", locked)
        if locked is None:
            return Assessment(Action.INSTALL, "not in lock file")
        if not self.matches(dep, locked):
            return Assessment(Action.INSTALL, "declaration changed", locked)
        if not self.is_present(locked):
            return Assessment(Action.INSTALL, "installed content missing or modified", locked)
        return Assessment(Action.REUSE, "up to date", locked)

    def reconcile(self, dep: Declaration, scope: Scope) -> DependencyResult:
        """Bring ``dep`` to its declared state and report the outcome."""
        assessment = self.assess(dep, scope)
        result = DependencyResult(name=dep.name, scope=scope, outcome=Outcome.SKIPPED,
                                  description=dep.describe())
        installer = self.installers.for_dependency(dep)
        if assessment.action is Action.SKIP or installer is None:
            result.message = assessment.reason
            logger.info("Skipping %s: %s", dep.name, assessment.reason)
            return result
        if assessment.action is Action.REUSE:
            result.outcome = Outcome.REUSED
            result.locked = assessment.locked
            return result

        logger.info("Installing %s (%s)", dep.name, assessment.reason)
        try:
            result.locked = installer.install(dep)
        except (DepsmithError, OSError, httpx.HTTPError) as exc:
            logger.debug("Install of %s failed", dep.name, exc_info=True)
            result.outcome = Outcome.FAILED
            result.message = str(exc)
            return result
        result.outcome = Outcome.REINSTALLED
        return result
