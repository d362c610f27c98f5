"""Dry-run planning: what an install would do, without doing it.

The planner loads and environment-merges the manifest, reads the previous
lock file and runs the same reconciliation decision the installer uses,
but never calls an installer. Nothing is cloned, downloaded, copied or
written.

Nested projects are only planned when asked for. Since nothing is
installed, a nested project is found where it already is: the recorded or
default install directory, or the source directory of a local library.
The same depth limit and visited-set rules as a real install apply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from depsmith.core.declaration import Declaration, DependencyKind, FileDependency, Scope
from depsmith.core.installers import InstallContext, default_registry, resolve_local
from depsmith.core.lockfile import LockFile
from depsmith.core.manifest import (
    ProjectManifest,
    apply_environment_lenient,
    apply_environment_strict,
    find_manifest,
    load_manifest,
)
from depsmith.core.resolve.models import Action, InstallOptions
from depsmith.core.resolve.reconcile import Reconciler
from depsmith.core.resolve.walker import declarations_for, nested_manifest_dir
from depsmith.exceptions import DeclarationError, ManifestError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedDependency:
    name: str
    scope: Scope
    action: Action
    reason: str
    description: str


@dataclass
class ProjectPlan:
    """Plan for one project directory (and, optionally, nested ones)."""

    manifest: ProjectManifest
    depth: int = 0
    items: list[PlannedDependency] = field(default_factory=list)
    declaration_errors: list[DeclarationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    nested: list[ProjectPlan] = field(default_factory=list)

    @property
    def project_dir(self) -> Path:
        return self.manifest.project_dir

    def to_install(self) -> list[PlannedDependency]:
        return [item for item in self.items if item.action is Action.INSTALL]


def _candidate_dir(project_dir: Path, dep: Declaration, install_path: str | None) -> Path | None:
    found = nested_manifest_dir(project_dir, install_path)
    if found is None and isinstance(dep, FileDependency) and dep.kind is DependencyKind.LIBRARY:
        found = nested_manifest_dir(project_dir, dep.path)
    return found


class DryRunPlanner:
    """Build a ``ProjectPlan`` tree for a project.

    Args:
        context: Install context; only its catalog and installer registry
            are consulted, never the caches.
        max_nested_depth: Same depth limit a real install applies.
    """

    def __init__(self, context: InstallContext, max_nested_depth: int) -> None:
        self.context = context
        self.max_nested_depth = max_nested_depth

    def plan(self, project_dir: Path, options: InstallOptions) -> ProjectPlan:
        """Plan an install of ``project_dir``.

        Raises:
            ManifestError: If the root manifest is missing or invalid.
            UnknownEnvironmentError: If the root manifest does not define
                ``options.environment``.
        """
        manifest = apply_environment_strict(
            load_manifest(project_dir.resolve()), options.environment
        )
        return self._plan_project(manifest, options, 0, {manifest.path})

    def _plan_project(
        self,
        manifest: ProjectManifest,
        options: InstallOptions,
        depth: int,
        visited: set[Path],
        warnings: list[str] | None = None,
    ) -> ProjectPlan:
        project_dir = manifest.project_dir
        existing = LockFile.read_or_empty(project_dir)
        reconciler = Reconciler(
            project_dir,
            existing,
            default_registry(self.context.for_project(project_dir)),
            force=options.force,
            verify_integrity=manifest.settings.verify_integrity is not False,
        )
        plan = ProjectPlan(manifest=manifest, depth=depth, warnings=list(warnings or []))

        for scope, declarations, errors in declarations_for(manifest, depth, options.production):
            plan.declaration_errors.extend(errors)
            for dep in declarations:
                assessment = reconciler.assess(dep, scope)
                plan.items.append(PlannedDependency(
                    name=dep.name,
                    scope=scope,
                    action=assessment.action,
                    reason=assessment.reason,
                    description=dep.describe(),
                ))
                if not options.include_nested or assessment.action is Action.SKIP:
                    continue
                install_path = assessment.locked.install_path if assessment.locked else None
                child_dir = _candidate_dir(project_dir, dep, install_path or dep.install_path)
                if child_dir is not None:
                    child = self._plan_nested(child_dir, options, depth, visited, plan)
                    if child is not None:
                        plan.nested.append(child)
        return plan

    def _plan_nested(
        self,
        child_dir: Path,
        options: InstallOptions,
        depth: int,
        visited: set[Path],
        plan: ProjectPlan,
    ) -> ProjectPlan | None:
        manifest_path = find_manifest(child_dir)
        if manifest_path is None or manifest_path.resolve() in visited:
            return None
        if depth >= self.max_nested_depth:
            plan.warnings.append(
                f"Maximum nested depth ({self.max_nested_depth}) reached; "
                f"not planning nested project at {child_dir}"
            )
            return None
        visited.add(manifest_path.resolve())
        try:
            child = load_manifest(child_dir)
        except ManifestError as exc:
            plan.warnings.append(f"Skipping nested project at {child_dir}: {exc}")
            return None
        child_warnings: list[str] = []
        child = apply_environment_lenient(child, options.environment, child_warnings)
        return self._plan_project(child, options, depth + 1, visited, child_warnings)
