"""Install engine extensions.

Three shapes are handled:

1. Catalog extensions (slug, name, alias or ID only): the identifier is
   resolved through the extension catalog and recorded; nothing is written
   to the project. An unknown slug is a warning, not a failure, and the
   entry is recorded without an ID.
2. URL extensions: downloaded once into the shared download cache and
   copied to the install path.
3. Path extensions: the file must exist and be a regular file; it is copied
   to the install path and its absolute location recorded.
"""

from __future__ import annotations

import logging

from depsmith.core.declaration import Declaration, ExtensionDependency
from depsmith.core.fsutil import copy_file
from depsmith.core.installers.base import DependencyInstaller, resolve_local
from depsmith.core.lockfile import LockedDependency
from depsmith.exceptions import SourceFetchError
from depsmith.registry import ExtensionCatalog

logger = logging.getLogger(__name__)


def expected_extension_id(catalog: ExtensionCatalog, dep: ExtensionDependency) -> str | None:
    """The identifier an install of ``dep`` records.

    URL and path extensions only carry an ID when one is declared.
    """
    if dep.is_catalog_resolved or dep.extension_id:
        return catalog.resolve_id(dep.lookup_key)
    return None


class ExtensionInstaller(DependencyInstaller):
    def supports(self, dep: Declaration) -> bool:
        return isinstance(dep, ExtensionDependency)

    def resolve_id(self, dep: ExtensionDependency) -> str | None:
        """Resolve the extension identifier, warning when it is unknown."""
        resolved = expected_extension_id(self.context.catalog, dep)
        if resolved is None and dep.is_catalog_resolved:
            logger.warning(
                "Extension %r was not found in the extension catalog; "
                "it is recorded without an ID",
                dep.lookup_key,
            )
        return resolved

    def install(self, dep: Declaration) -> LockedDependency:
        if not isinstance(dep, ExtensionDependency):
            raise self.unsupported(dep)
        if dep.is_catalog_resolved:
            return self.locked(dep, None, id=self.resolve_id(dep), install_path=None)

        extension_id = self.resolve_id(dep)
        target = self.target_path(dep)
        if dep.url:
            cached = self.fetch(dep.url)
            copy_file(cached, target)
            return self.locked(dep, target, id=extension_id, resolved=dep.url)

        source = resolve_local(self.project_dir, dep.path or "")
        if not source.exists():
            raise SourceFetchError(f"Extension file not found: {source}")
        if not source.is_file():
            raise SourceFetchError(f"Extension path is not a file: {source}")
        copy_file(source, target)
        return self.locked(dep, target, id=extension_id, resolved=str(source))
