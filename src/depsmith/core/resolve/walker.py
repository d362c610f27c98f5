"""Nested project graph walker.

Installing a project can place other projects on disk: a library whose
install directory carries its own manifest. The walker installs the root
project, then descends into every such directory that was installed or
reused, and so on, depth first.

Rules for nested projects:

- the root is depth 0; the children of a project at depth ``d`` are only
  installed while ``d < max_nested_depth``, otherwise a warning is recorded
  and that branch stops;
- each manifest file is installed at most once per run (a visited set of
  resolved manifest paths, seeded with the root), which also makes cyclic
  graphs terminate;
- nested projects install only their production ``dependencies``, resolve
  relative paths against their own directory and write their own lock file;
- an unknown environment is fatal at the root and a warning when nested.

A failed lock write aborts the whole run (``LockWriteError`` propagates).
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from depsmith.core.cache import DownloadCache, GitCacheManager
from depsmith.core.declaration import Declaration, Scope
from depsmith.core.installers import InstallContext, default_registry, resolve_local
from depsmith.core.lockfile import LockedDependency, LockFile
from depsmith.core.manifest import (
    ProjectManifest,
    apply_environment_lenient,
    apply_environment_strict,
    find_manifest,
    load_manifest,
)
from depsmith.core.resolve.models import (
    InstallOptions,
    ProjectReport,
    RunReport,
)
from depsmith.core.resolve.reconcile import Reconciler
from depsmith.exceptions import DeclarationError, ManifestError
from depsmith.registry import ExtensionCatalog
from depsmith.settings import Settings

logger = logging.getLogger(__name__)


def build_context(
    settings: Settings,
    project_dir: Path,
    catalog: ExtensionCatalog | None = None,
    transport: httpx.BaseTransport | None = None,
) -> InstallContext:
    """Wire the shared caches and catalog described by ``settings``."""
    return InstallContext(
        project_dir=project_dir,
        git_cache=GitCacheManager(settings.cache_root, use_cache=settings.use_git_cache),
        downloads=DownloadCache(
            settings.cache_root, timeout=settings.http_timeout, transport=transport
        ),
        catalog=catalog or ExtensionCatalog.load_default(settings.extension_catalog),
        http_timeout=settings.http_timeout,
        transport=transport,
    )


def declarations_for(
    manifest: ProjectManifest, depth: int, production: bool
) -> list[tuple[Scope, list[Declaration], list[DeclarationError]]]:
    """The scopes a project installs: dev scope only at the root, when enabled."""
    scopes = [(Scope.PRODUCTION, *manifest.parse_dependencies())]
    if depth == 0 and manifest.should_install_dev(production):
        scopes.append((Scope.DEVELOPMENT, *manifest.parse_dev_dependencies()))
    return scopes


def nested_manifest_dir(project_dir: Path, install_path: str | None) -> Path | None:
    """Return the install directory if it holds a project manifest."""
    if not install_path:
        return None
    candidate = resolve_local(project_dir, install_path)
    if candidate.is_dir() and find_manifest(candidate) is not None:
        return candidate
    return None


class ProjectGraphWalker:
    """Install a project and every nested project it reaches.

    Args:
        settings: Run settings (cache root, depth limit, timeouts).
        context: Prebuilt install context; built from ``settings`` when
            omitted. Its ``project_dir`` is replaced per project.
    """

    def __init__(self, settings: Settings, context: InstallContext | None = None) -> None:
        self.settings = settings
        self.context = context

    def install(self, project_dir: Path, options: InstallOptions) -> RunReport:
        """Install the project in ``project_dir``.

        Raises:
            ManifestError: If the root manifest is missing or invalid.
            UnknownEnvironmentError: If the root manifest does not define
                ``options.environment``.
            LockWriteError: If any project's lock file cannot be written.
        """
        project_dir = project_dir.resolve()
        manifest = apply_environment_strict(load_manifest(project_dir), options.environment)
        if self.context is None:
            self.context = build_context(self.settings, project_dir)
        visited = {manifest.path}
        root = self._install_project(self.context, manifest, options, depth=0, visited=visited)
        return RunReport(root=root)

    def _install_project(
        self,
        context: InstallContext,
        manifest: ProjectManifest,
        options: InstallOptions,
        depth: int,
        visited: set[Path],
        warnings: list[str] | None = None,
    ) -> ProjectReport:
        project_dir = manifest.project_dir
        installers = default_registry(context.for_project(project_dir, force=options.force))
        reconciler = Reconciler(
            project_dir,
            LockFile.read_or_empty(project_dir),
            installers,
            force=options.force,
            verify_integrity=manifest.settings.verify_integrity is not False,
        )
        report = ProjectReport(
            project_dir=project_dir,
            depth=depth,
            environment=manifest.environment,
            warnings=list(warnings or []),
        )
        new_lock = LockFile()

        for scope, declarations, errors in declarations_for(manifest, depth, options.production):
            report.declaration_errors.extend(errors)
            for dep in declarations:
                result = reconciler.reconcile(dep, scope)
                report.results.append(result)
                if not result.succeeded or result.locked is None:
                    continue
                new_lock.set(scope, result.locked)
                child = self._descend(
                    context, project_dir, result.locked, options, depth, visited, report
                )
                if child is not None:
                    report.nested.append(child)

        if not new_lock.is_empty():
            report.lock_path = new_lock.write(project_dir)
            logger.debug("Wrote %s", report.lock_path)
        return report

    def _descend(
        self,
        context: InstallContext,
        project_dir: Path,
        locked: LockedDependency,
        options: InstallOptions,
        depth: int,
        visited: set[Path],
        report: ProjectReport,
    ) -> ProjectReport | None:
        child_dir = nested_manifest_dir(project_dir, locked.install_path)
        if child_dir is None:
            return None
        manifest_path = find_manifest(child_dir)
        if manifest_path is None:
            return None
        if manifest_path.resolve() in visited:
            logger.debug("Nested project %s already visited", child_dir)
            return None
        if depth >= self.settings.max_nested_depth:
            message = (
                f"Maximum nested depth ({self.settings.max_nested_depth}) reached; "
                f"not installing nested project at {child_dir}"
            )
            logger.warning("%s", message)
            report.warnings.append(message)
            return None

        visited.add(manifest_path.resolve())
        try:
            child = load_manifest(child_dir)
        except ManifestError as exc:
            message = f"Skipping nested project at {child_dir}: {exc}"
            logger.warning("%s", message)
            report.warnings.append(message)
            return None

        child_warnings: list[str] = []
        child = apply_environment_lenient(child, options.environment, child_warnings)
        logger.info("Installing nested project %s (depth %d)", child_dir, depth + 1)
        return self._install_project(
            context, child, options, depth + 1, visited, child_warnings
        )
