"""Maven repository layout for registry artifacts."""

from __future__ import annotations

from depsmith.core.declaration import ArtifactDependency


def artifact_url(dep: ArtifactDependency) -> str:
    """Build ``<repo>/<group path>/<artifact>/<version>/<artifact>-<version>.jar``."""
    repo = dep.repository.rstrip("/")
    group_path = dep.group_id.replace(".", "/")
    filename = f"{dep.artifact_id}-{dep.version}.jar"
    return f"{repo}/{group_path}/{dep.artifact_id}/{dep.version}/{filename}"


def registry_descriptor(dep: ArtifactDependency) -> str:
    """Source descriptor recorded in the lock file for an artifact."""
    return f"registry:{dep.coordinates}"
