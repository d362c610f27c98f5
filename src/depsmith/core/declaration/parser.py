"""Parse raw manifest entries into dependency declarations.

A manifest entry is either a bare version string (shorthand) or a mapping
of camelCase fields. Missing ``type`` and ``source`` values are inferred
from the fields that are present:

- ``groupId`` + ``artifactId``            -> archive from the registry
- ``url`` / ``path`` ending in ``.jar``   -> archive
- ``url`` / ``path`` ending in ``.lex``   -> extension
- a git-looking ``url``                   -> git
- any other ``url``                       -> http
- ``path``                                -> file
- an extension with no location           -> extension catalog

Anything else falls back to git, which then needs a ``url``. An entry with
no recognisable source location is rejected with a ``DeclarationError``
naming the dependency; entries with an explicit but unknown ``source``
(e.g. ``forgebox``) become ``UnsupportedDependency`` and are skipped later.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from depsmith.core.declaration.models import (
    DEFAULT_INSTALL_LOCATION,
    EXTENSION_SUFFIX,
    MAVEN_CENTRAL,
    ArtifactDependency,
    Declaration,
    DependencyKind,
    ExtensionDependency,
    FileDependency,
    GitDependency,
    HttpDependency,
    SourceType,
    UnsupportedDependency,
    location_suffix,
)
from depsmith.exceptions import DeclarationError

logger = logging.getLogger(__name__)

_KIND_ALIASES: dict[str, DependencyKind] = {
    "library": DependencyKind.LIBRARY,
    "cfml": DependencyKind.LIBRARY,
    "module": DependencyKind.LIBRARY,
    "archive": DependencyKind.ARCHIVE,
    "jar": DependencyKind.ARCHIVE,
    "java": DependencyKind.ARCHIVE,
    "extension": DependencyKind.EXTENSION,
    "lex": DependencyKind.EXTENSION,
}

_SOURCE_ALIASES: dict[str, SourceType] = {
    "git": SourceType.GIT,
    "file": SourceType.FILE,
    "path": SourceType.FILE,
    "http": SourceType.HTTP,
    "https": SourceType.HTTP,
    "url": SourceType.HTTP,
    "registry": SourceType.REGISTRY,
    "maven": SourceType.REGISTRY,
}

_GIT_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")


def looks_like_git(url: str) -> bool:
    """Return True if a URL points at a git repository rather than a file."""
    lowered = url.lower()
    if lowered.startswith(("git@", "git://", "ssh://", "git+")):
        return True
    if lowered.rstrip("/").endswith(".git"):
        return True
    if location_suffix(lowered):
        return False
    return any(host in lowered for host in _GIT_HOSTS)


def _str_field(name: str, raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise DeclarationError(name, f"field {key!r} must be a string")
    text = str(value).strip()
    return text or None


def _infer_kind(name: str, raw: Mapping[str, Any]) -> DependencyKind:
    explicit = _str_field(name, raw, "type") or _str_field(name, raw, "kind")
    if explicit is not None:
        kind = _KIND_ALIASES.get(explicit.lower())
        if kind is None:
            raise DeclarationError(
                name,
                f"unknown type {explicit!r} "
                f"(expected one of: library, extension, archive)",
            )
        return kind
    if raw.get("groupId") and raw.get("artifactId"):
        return DependencyKind.ARCHIVE
    location = _str_field(name, raw, "url") or _str_field(name, raw, "path")
    suffix = location_suffix(location)
    if suffix in (".jar", ".war"):
        return DependencyKind.ARCHIVE
    if suffix == EXTENSION_SUFFIX:
        return DependencyKind.EXTENSION
    return DependencyKind.LIBRARY


def _infer_source(
    name: str, raw: Mapping[str, Any], kind: DependencyKind
) -> SourceType | str:
    explicit = _str_field(name, raw, "source")
    if explicit is not None:
        return _SOURCE_ALIASES.get(explicit.lower(), explicit)
    url = _str_field(name, raw, "url")
    if raw.get("groupId") and raw.get("artifactId"):
        return SourceType.REGISTRY
    if url is not None:
        if kind is not DependencyKind.EXTENSION and looks_like_git(url):
            return SourceType.GIT
        return SourceType.HTTP
    if _str_field(name, raw, "path") is not None:
        return SourceType.FILE
    if kind is DependencyKind.EXTENSION:
        return SourceType.REGISTRY
    return SourceType.GIT


def parse_declaration(name: str, raw: Any) -> Declaration:
    """Parse one manifest entry.

    Args:
        name: Dependency name (the key in the manifest mapping).
        raw: A version string (shorthand) or a mapping of fields. Unknown
            fields are ignored.

    Returns:
        The matching declaration variant, without defaults applied.

    Raises:
        DeclarationError: If the entry has no recognisable source location,
            lacks a field its source requires, or combines a kind and source
            that no installer handles.
    """
    if not isinstance(name, str) or not name.strip():
        raise DeclarationError(str(name), "dependency name must be a non-empty string")
    name = name.strip()

    if isinstance(raw, (str, int, float)) and not isinstance(raw, bool):
        raw = {"version": str(raw)}
    elif raw is None:
        raw = {}
    elif not isinstance(raw, Mapping):
        raise DeclarationError(
            name, f"expected a version string or an object, got {type(raw).__name__}"
        )

    kind = _infer_kind(name, raw)
    source = _infer_source(name, raw, kind)
    common: dict[str, Any] = {
        "name": name,
        "kind": kind,
        "version_hint": _str_field(name, raw, "version"),
        "install_path": _str_field(name, raw, "installPath"),
        "mapping": _str_field(name, raw, "mapping"),
    }

    if not isinstance(source, SourceType):
        return UnsupportedDependency(source_name=source, **common)

    url = _str_field(name, raw, "url")
    path = _str_field(name, raw, "path")

    if kind is DependencyKind.EXTENSION:
        if source is SourceType.GIT:
            raise DeclarationError(name, "extensions cannot be installed from git")
        if url and path:
            raise DeclarationError(name, "extension declares both 'url' and 'path'")
        if source is SourceType.HTTP and not url:
            raise DeclarationError(name, "http extension requires 'url'")
        if source is SourceType.FILE and not path:
            raise DeclarationError(name, "file extension requires 'path'")
        return ExtensionDependency(
            extension_id=_str_field(name, raw, "id"),
            url=url if source is SourceType.HTTP else None,
            path=path if source is SourceType.FILE else None,
            **common,
        )

    if source is SourceType.GIT:
        if kind is not DependencyKind.LIBRARY:
            raise DeclarationError(name, f"{kind.value} dependencies cannot come from git")
        if not url:
            raise DeclarationError(
                name,
                "no source location declared "
                "(expected one of: url, path, groupId/artifactId)",
            )
        return GitDependency(
            url=url,
            ref=_str_field(name, raw, "ref") or "main",
            sub_path=_str_field(name, raw, "subPath"),
            **common,
        )

    if source is SourceType.FILE:
        if not path:
            raise DeclarationError(name, "file source requires 'path'")
        return FileDependency(path=path, **common)

    if source is SourceType.HTTP:
        if not url:
            raise DeclarationError(name, "http source requires 'url'")
        return HttpDependency(url=url, **common)

    # SourceType.REGISTRY
    group_id = _str_field(name, raw, "groupId")
    artifact_id = _str_field(name, raw, "artifactId")
    version = common["version_hint"]
    if kind is not DependencyKind.ARCHIVE:
        raise DeclarationError(name, "registry coordinates are only valid for archives")
    if not (group_id and artifact_id and version):
        raise DeclarationError(
            name, "registry source requires 'groupId', 'artifactId' and 'version'"
        )
    return ArtifactDependency(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        repository=_str_field(name, raw, "repository") or MAVEN_CENTRAL,
        **common,
    )


def parse_dependency_map(
    raw_map: Mapping[str, Any] | None,
    install_location: str = DEFAULT_INSTALL_LOCATION,
) -> tuple[list[Declaration], list[DeclarationError]]:
    """Parse a ``dependencies`` / ``devDependencies`` mapping.

    Per-entry errors are collected rather than raised so one malformed entry
    never hides the others.

    Returns:
        Tuple of (declarations with defaults applied, declaration errors),
        both in manifest order.
    """
    declarations: list[Declaration] = []
    errors: list[DeclarationError] = []
    if not raw_map:
        return declarations, errors
    for name, raw in raw_map.items():
        try:
            dep = parse_declaration(name, raw)
        except DeclarationError as exc:
            logger.warning("%s", exc)
            errors.append(exc)
            continue
        declarations.append(dep.apply_defaults(install_location))
    return declarations, errors
