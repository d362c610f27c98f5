"""Dependency declaration variants.

A declaration is the parsed, normalized form of one manifest entry before
anything is fetched. Each supported (kind, source) combination has its own
frozen dataclass, so "exactly one source location is set" holds by
construction: a ``GitDependency`` always has a URL and never a local path,
an ``ArtifactDependency`` always has full coordinates, and so on.

``apply_defaults()`` returns a new declaration with ``install_path`` and
``mapping`` filled from the name and kind. Explicit values are kept, which
makes the operation idempotent.
"""

from __future__ import annotations

import os
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union


class DependencyKind(str, Enum):
    """What the installed dependency is to the consuming runtime."""

    LIBRARY = "library"
    EXTENSION = "extension"
    ARCHIVE = "archive"


class SourceType(str, Enum):
    """Where a dependency is fetched from."""

    GIT = "git"
    FILE = "file"
    HTTP = "http"
    REGISTRY = "registry"


class Scope(str, Enum):
    """Lock file partition a dependency belongs to."""

    PRODUCTION = "dependencies"
    DEVELOPMENT = "devDependencies"


MAVEN_CENTRAL = "https://repo1.maven.org/maven2/"
EXTENSION_SUFFIX = ".lex"
DEFAULT_ARCHIVE_SUFFIX = ".jar"
DEFAULT_INSTALL_LOCATION = "dependencies"

# Suffixes recognised on a URL or path, longest first so ".tar.gz" wins.
_KNOWN_SUFFIXES = (".tar.gz", ".tgz", ".zip", ".jar", ".war", ".lex")


def location_suffix(location: str | None) -> str:
    """Return the recognised file suffix of a URL or path, or ""."""
    if not location:
        return ""
    tail = location.split("?", 1)[0].split("#", 1)[0].rstrip("/").lower()
    for suffix in _KNOWN_SUFFIXES:
        if tail.endswith(suffix):
            return suffix
    return ""


def normalize_relative(path: str) -> str:
    """Normalize a manifest path for comparison (``./a/../b`` -> ``b``)."""
    return posixpath.normpath(path.strip().replace(os.sep, "/"))


@dataclass(frozen=True, kw_only=True)
class _BaseDependency(ABC):
    name: str
    kind: DependencyKind
    version_hint: str | None = None
    install_path: str | None = None
    mapping: str | None = None

    @property
    @abstractmethod
    def source(self) -> SourceType | str:
        """Where the dependency is fetched from."""

    def default_install_path(self, install_location: str) -> str | None:
        if self.kind is DependencyKind.LIBRARY:
            return f"{install_location}/{self.name}"
        return None

    def apply_defaults(
        self, install_location: str = DEFAULT_INSTALL_LOCATION
    ) -> Declaration:
        """Return a copy with ``install_path`` and ``mapping`` defaulted."""
        install_path = self.install_path
        if install_path is None:
            install_path = self.default_install_path(install_location)
        mapping = self.mapping
        if mapping is None and self.kind is DependencyKind.LIBRARY:
            mapping = f"/{self.name}"
        if install_path == self.install_path and mapping == self.mapping:
            return self  # type: ignore[return-value]
        return replace(self, install_path=install_path, mapping=mapping)  # type: ignore[return-value]

    def describe(self) -> str:
        return str(self.source.value if isinstance(self.source, SourceType) else self.source)


@dataclass(frozen=True, kw_only=True)
class GitDependency(_BaseDependency):
    """A library cloned from a git repository at ``ref``."""

    url: str
    ref: str = "main"
    sub_path: str | None = None

    @property
    def source(self) -> SourceType:
        return SourceType.GIT

    def describe(self) -> str:
        where = f"{self.url}@{self.ref}"
        if self.sub_path:
            where += f" ({self.sub_path})"
        return where


@dataclass(frozen=True, kw_only=True)
class FileDependency(_BaseDependency):
    """A library directory or raw archive copied from a local path."""

    path: str

    @property
    def source(self) -> SourceType:
        return SourceType.FILE

    def default_install_path(self, install_location: str) -> str | None:
        if self.kind is DependencyKind.ARCHIVE:
            suffix = location_suffix(self.path) or DEFAULT_ARCHIVE_SUFFIX
            return f"lib/{self.name}{suffix}"
        return super().default_install_path(install_location)

    def describe(self) -> str:
        return f"file:{self.path}"


@dataclass(frozen=True, kw_only=True)
class HttpDependency(_BaseDependency):
    """A library archive or raw artifact downloaded from a URL."""

    url: str

    @property
    def source(self) -> SourceType:
        return SourceType.HTTP

    def default_install_path(self, install_location: str) -> str | None:
        if self.kind is DependencyKind.ARCHIVE:
            suffix = location_suffix(self.url) or DEFAULT_ARCHIVE_SUFFIX
            return f"lib/{self.name}{suffix}"
        return super().default_install_path(install_location)

    def describe(self) -> str:
        return self.url


@dataclass(frozen=True, kw_only=True)
class ArtifactDependency(_BaseDependency):
    """A versioned archive addressed by registry coordinates."""

    group_id: str
    artifact_id: str
    version: str
    repository: str = MAVEN_CENTRAL

    @property
    def source(self) -> SourceType:
        return SourceType.REGISTRY

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def default_install_path(self, install_location: str) -> str | None:
        return f"lib/{self.artifact_id}-{self.version}.jar"

    def describe(self) -> str:
        return self.coordinates


@dataclass(frozen=True, kw_only=True)
class ExtensionDependency(_BaseDependency):
    """An engine extension.

    Resolved through the extension catalog when neither ``url`` nor ``path``
    is set; otherwise downloaded from ``url`` or copied from ``path``.
    ``extension_id`` is the slug, alias, name or UUID to look up; the
    dependency name is used when it is absent.
    """

    extension_id: str | None = None
    url: str | None = None
    path: str | None = None

    @property
    def source(self) -> SourceType:
        if self.url:
            return SourceType.HTTP
        if self.path:
            return SourceType.FILE
        return SourceType.REGISTRY

    @property
    def lookup_key(self) -> str:
        return self.extension_id or self.name

    @property
    def is_catalog_resolved(self) -> bool:
        return not self.url and not self.path

    def default_install_path(self, install_location: str) -> str | None:
        if self.is_catalog_resolved:
            return None
        return f"extensions/{self.name}{EXTENSION_SUFFIX}"

    def describe(self) -> str:
        if self.url:
            return self.url
        if self.path:
            return f"path:{self.path}"
        return f"catalog:{self.lookup_key}"


@dataclass(frozen=True, kw_only=True)
class UnsupportedDependency(_BaseDependency):
    """A dependency whose source no installer handles (reported as skipped)."""

    source_name: str

    @property
    def source(self) -> str:
        return self.source_name

    def default_install_path(self, install_location: str) -> str | None:
        return None

    def apply_defaults(
        self, install_location: str = DEFAULT_INSTALL_LOCATION
    ) -> Declaration:
        return self


Declaration = Union[
    GitDependency,
    FileDependency,
    HttpDependency,
    ArtifactDependency,
    ExtensionDependency,
    UnsupportedDependency,
]
