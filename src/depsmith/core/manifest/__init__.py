"""Project manifests and environment overrides."""

from depsmith.core.manifest.environment import (
    apply_environment_lenient,
    apply_environment_strict,
)
from depsmith.core.manifest.loader import find_manifest, load_manifest
from depsmith.core.manifest.models import DependencySettings, ProjectManifest

__all__ = [
    "DependencySettings",
    "ProjectManifest",
    "apply_environment_lenient",
    "apply_environment_strict",
    "find_manifest",
    "load_manifest",
]
