"""Source installers: place one dependency on disk and describe the result.

- ``base``: ``DependencyInstaller`` ABC, ``InstallContext`` and the shared
  source-descriptor rules.
- ``git``, ``file``, ``http``, ``artifact``, ``extension``: one installer
  per source.
- ``registry``: ``InstallerRegistry`` and ``default_registry()``.
"""

from depsmith.core.installers.artifact import ArtifactInstaller
from depsmith.core.installers.base import (
    DependencyInstaller,
    InstallContext,
    resolve_local,
    source_descriptor,
)
from depsmith.core.installers.extension import ExtensionInstaller, expected_extension_id
from depsmith.core.installers.file import FileInstaller
from depsmith.core.installers.git import GitInstaller
from depsmith.core.installers.http import HttpInstaller
from depsmith.core.installers.registry import InstallerRegistry, default_registry

__all__ = [
    "ArtifactInstaller",
    "DependencyInstaller",
    "ExtensionInstaller",
    "FileInstaller",
    "GitInstaller",
    "HttpInstaller",
    "InstallContext",
    "InstallerRegistry",
    "default_registry",
    "expected_extension_id",
    "resolve_local",
    "source_descriptor",
]
