"""Lock file operations --- deserialization, verification, and diffing.

This module extends the ``LockFile`` class (defined in ``lockfile.py``) with
classmethods and instance methods for:

- **Deserialization:** ``from_dict``, ``from_json``, ``read`` (disk) and
  ``read_or_empty`` (the start-of-run entry point).
- **Verification:** re-hash installed content against recorded integrity.
- **Diffing:** structured comparison of two lock files.

These are attached to the ``LockFile`` class at import time (in
``__init__.py``) to keep each source file focused while presenting a single
unified API to callers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from depsmith import LOCKFILE_NAME
from depsmith.core.declaration import Scope
from depsmith.core.lockfile.integrity import verify_integrity
from depsmith.core.lockfile.models import LockedDependency
from depsmith.exceptions import LockfileError

logger = logging.getLogger(__name__)


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lock file from a dict (parsed JSON).

    Raises:
        LockfileError: If ``data`` or one of its sections is not an object.
    """
    if not isinstance(data, dict):
        raise LockfileError("Lock file must contain a JSON object")
    lock = cls()
    lock.lockfile_version = int(data.get("lockfileVersion", cls.LOCKFILE_VERSION))
    lock.generated_at = str(data.get("generatedAt", lock.generated_at))
    lock.tool_version = str(data.get("toolVersion", lock.tool_version))

    for scope in (Scope.PRODUCTION, Scope.DEVELOPMENT):
        section = data.get(scope.value) or {}
        if not isinstance(section, dict):
            raise LockfileError(f"Lock file section {scope.value!r} must be an object")
        for name, entry in section.items():
            if not isinstance(entry, dict):
                raise LockfileError(f"Lock file entry {name!r} must be an object")
            lock.set(scope, LockedDependency.from_dict(name, entry))
    return lock


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON or has the wrong shape.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Invalid lock file JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, project_dir: Path) -> Any:
    """Read ``depsmith-lock.json`` from ``project_dir``.

    Raises:
        FileNotFoundError: If the lock file does not exist.
        LockfileError: If the lock file cannot be parsed.
    """
    text = (project_dir / LOCKFILE_NAME).read_text(encoding="utf-8")
    return cls.from_json(text)


def _read_or_empty(cls: type, project_dir: Path) -> Any:
    """Read the lock file, or return an empty one.

    A missing lock file is normal for a first install. An unreadable one is
    logged and treated as empty, which makes every dependency reinstall.
    """
    path = project_dir / LOCKFILE_NAME
    if not path.exists():
        return cls()
    try:
        return cls.read(project_dir)
    except (OSError, LockfileError, ValueError) as exc:
        logger.warning("Could not read %s, starting from an empty lock: %s", path, exc)
        return cls()


def _verify(self: Any, project_dir: Path) -> list[str]:
    """Check installed content against recorded integrity hashes.

    Entries without an install path or without a recorded hash are not
    checked.

    Returns:
        List of problem descriptions. Empty means everything matches.
    """
    problems: list[str] = []
    for scope in (Scope.PRODUCTION, Scope.DEVELOPMENT):
        for name, locked in sorted(self.entries(scope).items()):
            if not locked.install_path or not locked.integrity:
                continue
            target = project_dir / locked.install_path
            if not target.exists():
                problems.append(f"{name}: install path {locked.install_path} is missing")
            elif not verify_integrity(target, locked.integrity):
                problems.append(f"{name}: content does not match recorded integrity")
    return problems


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lock files and return differences.

    - **added**: ``scope/name`` present in ``other`` but not in ``self``.
    - **removed**: present in ``self`` but not in ``other``.
    - **changed**: present in both with a different version, source or
      install path.
    """
    added: list[str] = []
    removed: list[str] = []
    changes: list[dict[str, Any]] = []
    for scope in (Scope.PRODUCTION, Scope.DEVELOPMENT):
        mine = self.entries(scope)
        theirs = other.entries(scope)
        added += [f"{scope.value}/{n}" for n in sorted(theirs.keys() - mine.keys())]
        removed += [f"{scope.value}/{n}" for n in sorted(mine.keys() - theirs.keys())]
        for name in sorted(mine.keys() & theirs.keys()):
            old, new = mine[name], theirs[name]
            for attr in ("version", "source", "install_path"):
                if getattr(old, attr) != getattr(new, attr):
                    changes.append({
                        "name": f"{scope.value}/{name}",
                        "field": attr,
                        "old": getattr(old, attr),
                        "new": getattr(new, attr),
                    })
    return {"added": added, "removed": removed, "changed": changes}
