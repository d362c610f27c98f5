"""Dependency declarations --- the typed form of manifest entries.

- ``models``: the declaration variants (one per kind/source combination)
  and the ``DependencyKind`` / ``SourceType`` / ``Scope`` enums.
- ``parser``: ``parse_declaration`` and ``parse_dependency_map``.
"""

from depsmith.core.declaration.models import (
    DEFAULT_INSTALL_LOCATION,
    MAVEN_CENTRAL,
    ArtifactDependency,
    Declaration,
    DependencyKind,
    ExtensionDependency,
    FileDependency,
    GitDependency,
    HttpDependency,
    Scope,
    SourceType,
    UnsupportedDependency,
    location_suffix,
    normalize_relative,
)
from depsmith.core.declaration.parser import (
    looks_like_git,
    parse_declaration,
    parse_dependency_map,
)

__all__ = [
    "DEFAULT_INSTALL_LOCATION",
    "MAVEN_CENTRAL",
    "ArtifactDependency",
    "Declaration",
    "DependencyKind",
    "ExtensionDependency",
    "FileDependency",
    "GitDependency",
    "HttpDependency",
    "Scope",
    "SourceType",
    "UnsupportedDependency",
    "location_suffix",
    "looks_like_git",
    "normalize_relative",
    "parse_declaration",
    "parse_dependency_map",
]
