"""Project manifest data models.

The manifest expresses intent: which dependencies a project wants and how
they should be installed. It is never consulted to learn what is actually
on disk; that is the lock file's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from depsmith.core.declaration import (
    DEFAULT_INSTALL_LOCATION,
    Declaration,
    parse_dependency_map,
)
from depsmith.exceptions import DeclarationError, ManifestError

# Manifest key -> DependencySettings attribute.
_SETTINGS_KEYS: dict[str, str] = {
    "installDevDependencies": "install_dev_dependencies",
    "installLocation": "install_location",
    "verifyIntegrity": "verify_integrity",
}


@dataclass(frozen=True)
class DependencySettings:
    """The ``dependencySettings`` section of a manifest.

    Every field is optional (None = not set) so that environment overrides
    can be merged field by field: only fields the override actually sets
    replace the base value.

    Attributes:
        install_dev_dependencies: Whether ``devDependencies`` install.
            None leaves the decision to the ``--production`` flag.
        install_location: Directory under which libraries install by
            default (``dependencies``).
        verify_integrity: Re-hash installed content before reusing it.
    """

    install_dev_dependencies: bool | None = None
    install_location: str | None = None
    verify_integrity: bool | None = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "dependencySettings") -> DependencySettings:
        """Build settings from a manifest section; a non-mapping means unset.

        Raises:
            ManifestError: If a flag is not a boolean or ``installLocation``
                is not a non-empty path. ``where`` prefixes the message.
        """
        if not isinstance(data, dict):
            return cls()
        values: dict[str, Any] = {}
        for key, attr in _SETTINGS_KEYS.items():
            value = data.get(key)
            if value is None:
                continue
            if attr == "install_location":
                location = value.strip().rstrip("/") if isinstance(value, str) else ""
                if not location:
                    raise ManifestError(f"{where}: {key} must be a non-empty path, got {value!r}")
                value = location
            elif not isinstance(value, bool):
                raise ManifestError(f"{where}: {key} must be true or false, got {value!r}")
            values[attr] = value
        return cls(**values)

    def merged(self, override: DependencySettings) -> DependencySettings:
        """Return these settings with every field ``override`` sets applied."""
        changes = {
            f.name: getattr(override, f.name)
            for f in fields(override)
            if getattr(override, f.name) is not None
        }
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, attr in _SETTINGS_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @property
    def effective_install_location(self) -> str:
        return self.install_location or DEFAULT_INSTALL_LOCATION


@dataclass(frozen=True)
class ProjectManifest:
    """A loaded project manifest.

    Attributes:
        path: Absolute path of the manifest file.
        name: Optional project name.
        dependencies: Raw production dependency entries (name -> entry).
        dev_dependencies: Raw development dependency entries.
        settings: Effective dependency settings (after any environment).
        environments: Environment name -> raw override settings.
        environment: Name of the applied environment, if any.
    """

    path: Path
    name: str | None = None
    dependencies: dict[str, Any] = field(default_factory=dict)
    dev_dependencies: dict[str, Any] = field(default_factory=dict)
    settings: DependencySettings = field(default_factory=DependencySettings)
    environments: dict[str, DependencySettings] = field(default_factory=dict)
    environment: str | None = None

    @property
    def project_dir(self) -> Path:
        return self.path.parent

    def parse_dependencies(self) -> tuple[list[Declaration], list[DeclarationError]]:
        return parse_dependency_map(
            self.dependencies, self.settings.effective_install_location
        )

    def parse_dev_dependencies(self) -> tuple[list[Declaration], list[DeclarationError]]:
        return parse_dependency_map(
            self.dev_dependencies, self.settings.effective_install_location
        )

    def should_install_dev(self, production: bool) -> bool:
        """Decide whether ``devDependencies`` install for this run.

        ``--production`` always wins; otherwise an explicit
        ``installDevDependencies`` setting applies, defaulting to True.
        """
        if production:
            return False
        if self.settings.install_dev_dependencies is not None:
            return self.settings.install_dev_dependencies
        return True

    def to_dict(self) -> dict[str, Any]:
        """Render the realized configuration (used by dry runs)."""
        out: dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.environment:
            out["environment"] = self.environment
        out["dependencies"] = self.dependencies
        out["devDependencies"] = self.dev_dependencies
        out["dependencySettings"] = self.settings.to_dict()
        return out
