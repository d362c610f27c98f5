"""Environment override merging.

An environment is a named override of ``dependencySettings``. Applying one
merges it field by field into the base settings; the rest of the manifest is
untouched.

Two entry points exist because the two callers need different failure
behaviour for the same operation:

- ``apply_environment_strict`` for the root project: an unknown name is a
  hard error listing the environments that do exist.
- ``apply_environment_lenient`` for nested projects: an unknown name logs a
  warning and the nested project keeps its base configuration.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from depsmith.core.manifest.models import ProjectManifest
from depsmith.exceptions import UnknownEnvironmentError

logger = logging.getLogger(__name__)


def _merge(manifest: ProjectManifest, env_name: str) -> ProjectManifest:
    override = manifest.environments[env_name]
    return replace(
        manifest,
        settings=manifest.settings.merged(override),
        environment=env_name,
    )


def apply_environment_strict(
    manifest: ProjectManifest, env_name: str | None
) -> ProjectManifest:
    """Apply ``env_name`` or fail.

    Raises:
        UnknownEnvironmentError: If ``env_name`` is not defined.
    """
    if not env_name:
        return manifest
    if env_name not in manifest.environments:
        raise UnknownEnvironmentError(env_name, sorted(manifest.environments))
    return _merge(manifest, env_name)


def apply_environment_lenient(
    manifest: ProjectManifest,
    env_name: str | None,
    warnings: list[str] | None = None,
) -> ProjectManifest:
    """Apply ``env_name`` if the manifest defines it.

    Args:
        manifest: The nested project's manifest.
        env_name: Requested environment (may be None).
        warnings: Optional list that receives the warning message when the
            environment is unknown.

    Returns:
        The merged manifest, or ``manifest`` unchanged when the environment
        is not defined.
    """
    if not env_name:
        return manifest
    if env_name not in manifest.environments:
        message = (
            f"Environment {env_name!r} not found in nested project at "
            f"{manifest.project_dir}; using base configuration"
        )
        logger.warning("%s", message)
        if warnings is not None:
            warnings.append(message)
        return manifest
    return _merge(manifest, env_name)
