"""Lock file core class --- dependency management and serialization.

The ``LockFile`` class is the in-memory form of ``depsmith-lock.json``. It
provides:

- **Entry management:** set, get, and list entries per scope.
- **Serialization:** deterministic ``to_dict``, ``to_json``, and an atomic
  ``write``.

The lock file is the sole record of what is actually installed. Downstream
processes read it, never the manifest, to learn the resolved state.

Determinism guarantee: entries are sorted by name and all keys are sorted,
so two lock files with the same content and timestamp produce byte-identical
JSON.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from depsmith import LOCKFILE_NAME, __version__
from depsmith.core.declaration import Scope
from depsmith.core.lockfile.models import LockedDependency, utc_timestamp
from depsmith.exceptions import LockWriteError


class LockFile:
    """Per-project lock file.

    Example::

        lock = LockFile()
        lock.set(Scope.PRODUCTION, LockedDependency(
            name="fw1", version="v4.3.0",
            source="https://github.com/org/fw1.git",
            install_path="dependencies/fw1",
        ))
        lock.write(project_dir)
    """

    LOCKFILE_VERSION: int = 1

    def __init__(self) -> None:
        self._entries: dict[Scope, dict[str, LockedDependency]] = {
            Scope.PRODUCTION: {},
            Scope.DEVELOPMENT: {},
        }
        self.lockfile_version: int = self.LOCKFILE_VERSION
        self.generated_at: str = utc_timestamp()
        self.tool_version: str = __version__

    # -- Entry management ---------------------------------------------------

    def set(self, scope: Scope, locked: LockedDependency) -> None:
        """Add or replace the entry for ``locked.name`` in ``scope``."""
        self._entries[scope][locked.name] = locked

    def get(self, scope: Scope, name: str) -> LockedDependency | None:
        return self._entries[scope].get(name)

    def entries(self, scope: Scope) -> dict[str, LockedDependency]:
        """Return a copy of the entries of ``scope`` (name -> entry)."""
        return dict(self._entries[scope])

    @property
    def dependencies(self) -> dict[str, LockedDependency]:
        return self.entries(Scope.PRODUCTION)

    @property
    def dev_dependencies(self) -> dict[str, LockedDependency]:
        return self.entries(Scope.DEVELOPMENT)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def is_empty(self) -> bool:
        return len(self) == 0

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the lock file to a dict matching the on-disk schema."""
        data: dict[str, Any] = {
            "lockfileVersion": self.lockfile_version,
            "generatedAt": self.generated_at,
            "toolVersion": self.tool_version,
        }
        for scope in (Scope.PRODUCTION, Scope.DEVELOPMENT):
            entries = self._entries[scope]
            data[scope.value] = {
                name: entries[name].to_dict() for name in sorted(entries)
            }
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, project_dir: Path) -> Path:
        """Write ``depsmith-lock.json`` into ``project_dir``.

        The generation timestamp and tool version are refreshed. The file
        is written to a temporary sibling and moved into place, so an
        interrupted write never leaves a truncated lock file behind.

        Returns:
            Path of the written lock file.

        Raises:
            LockWriteError: If the file cannot be written.
        """
        self.generated_at = utc_timestamp()
        self.tool_version = __version__
        path = project_dir / LOCKFILE_NAME
        try:
            project_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{LOCKFILE_NAME}.", suffix=".tmp", dir=project_dir
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(self.to_json())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise LockWriteError(f"Failed to write {path}: {exc}") from exc
        return path
