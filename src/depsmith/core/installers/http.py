"""Install libraries and archives downloaded over HTTP."""

from __future__ import annotations

import tempfile
from pathlib import Path

from depsmith.core.cache.downloads import filename_from_url
from depsmith.core.declaration import Declaration, DependencyKind, HttpDependency
from depsmith.core.fsutil import copy_file, extract_archive, is_extractable
from depsmith.core.installers.base import DependencyInstaller
from depsmith.core.lockfile import LockedDependency
from depsmith.registry import download


class HttpInstaller(DependencyInstaller):
    """Download ``url`` and place it at the install path.

    A library whose URL ends in ``.zip``, ``.tar.gz`` or ``.tgz`` is
    extracted; everything else is written as a raw file. Direct URLs are
    not cached because their content may change between runs.
    """

    def supports(self, dep: Declaration) -> bool:
        return isinstance(dep, HttpDependency)

    def install(self, dep: Declaration) -> LockedDependency:
        if not isinstance(dep, HttpDependency):
            raise self.unsupported(dep)
        target = self.target_path(dep)
        with tempfile.TemporaryDirectory(prefix="depsmith-http-") as tmp:
            fetched = download(
                dep.url,
                Path(tmp) / filename_from_url(dep.url, dep.name),
                timeout=self.context.http_timeout,
                transport=self.context.transport,
            )
            if dep.kind is DependencyKind.LIBRARY and is_extractable(dep.url):
                extract_archive(fetched, target)
            else:
                copy_file(fetched, target)
        return self.locked(dep, target, resolved=dep.url)
