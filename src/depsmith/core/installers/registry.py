"""Installer registry: pick the installer for a declaration.

``InstallerRegistry`` keeps an ordered list of ``DependencyInstaller``
instances and returns the first whose ``supports()`` accepts a declaration.
``default_registry()`` pre-registers the built-in installers; declarations
no installer supports (``UnsupportedDependency``) get None and are reported
as skipped.
"""

from __future__ import annotations

from depsmith.core.declaration import Declaration
from depsmith.core.installers.artifact import ArtifactInstaller
from depsmith.core.installers.base import DependencyInstaller, InstallContext
from depsmith.core.installers.extension import ExtensionInstaller
from depsmith.core.installers.file import FileInstaller
from depsmith.core.installers.git import GitInstaller
from depsmith.core.installers.http import HttpInstaller


class InstallerRegistry:
    """Ordered registry of installers.

    Attributes:
        context: Shared install context of the project being installed.
        installers: Registered installers, tried in registration order.
    """

    def __init__(self, context: InstallContext) -> None:
        self.context = context
        self.installers: list[DependencyInstaller] = []

    def register(self, installer: DependencyInstaller) -> None:
        self.installers.append(installer)

    def for_dependency(self, dep: Declaration) -> DependencyInstaller | None:
        for installer in self.installers:
            if installer.supports(dep):
                return installer
        return None


def default_registry(context: InstallContext) -> InstallerRegistry:
    """Create a registry with every built-in installer registered."""
    registry = InstallerRegistry(context)
    registry.register(GitInstaller(context))
    registry.register(ExtensionInstaller(context))
    registry.register(FileInstaller(context))
    registry.register(HttpInstaller(context))
    registry.register(ArtifactInstaller(context))
    return registry
