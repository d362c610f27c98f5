"""Locate and load project manifests (``depsmith.json`` / ``depsmith.yaml``)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from depsmith import MANIFEST_FILENAMES
from depsmith.core.manifest.models import DependencySettings, ProjectManifest
from depsmith.exceptions import ManifestError

logger = logging.getLogger(__name__)


def find_manifest(project_dir: Path) -> Path | None:
    """Return the manifest file inside ``project_dir``, or None.

    ``depsmith.json`` wins when several manifest files are present.
    """
    for filename in MANIFEST_FILENAMES:
        candidate = project_dir / filename
        if candidate.is_file():
            return candidate
    return None


def _parse_text(path: Path, text: str) -> Any:
    if path.suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestError(f"Invalid JSON in {path}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid YAML in {path}: {exc}") from exc


def _mapping(path: Path, data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{path}: {key!r} must be an object")
    return dict(value)


def load_manifest(project_dir: Path) -> ProjectManifest:
    """Load the manifest of ``project_dir``.

    Unknown top-level keys are ignored. Environments accept either a
    ``dependencySettings`` or a legacy ``packages`` override.

    Raises:
        ManifestError: If no manifest exists or it cannot be parsed.
    """
    path = find_manifest(project_dir)
    if path is None:
        names = ", ".join(MANIFEST_FILENAMES)
        raise ManifestError(f"No manifest ({names}) found in {project_dir}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Could not read {path}: {exc}") from exc

    data = _parse_text(path, text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(f"{path}: top level must be an object")

    environments: dict[str, DependencySettings] = {}
    for env_name, env_data in _mapping(path, data, "environments").items():
        override: Any = None
        if isinstance(env_data, dict):
            override = env_data.get("dependencySettings", env_data.get("packages"))
        environments[str(env_name)] = DependencySettings.from_dict(
            override, f"{path}: environment {env_name!r}"
        )

    name = data.get("name")
    manifest = ProjectManifest(
        path=path.resolve(),
        name=str(name) if name is not None else None,
        dependencies=_mapping(path, data, "dependencies"),
        dev_dependencies=_mapping(path, data, "devDependencies"),
        settings=DependencySettings.from_dict(
            data.get("dependencySettings"), f"{path}: dependencySettings"
        ),
        environments=environments,
    )
    logger.debug(
        "Loaded %s (%d dependencies, %d devDependencies)",
        manifest.path,
        len(manifest.dependencies),
        len(manifest.dev_dependencies),
    )
    return manifest
