"""Lock file data models --- LockedDependency.

Defines the record stored per installed dependency in
``depsmith-lock.json``. This is a pure data holder with no business logic,
making it safe to import without circular-dependency concerns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# ---------------------------------------------------------------------------
# Integrity hash format: "sha512-<128-hex-characters>"
# ---------------------------------------------------------------------------

INTEGRITY_RE = re.compile(r"^sha512-[0-9a-f]{128}$")

# Source descriptor used for extensions resolved through the catalog.
EXTENSION_PROVIDER = "extension-provider"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ---------------------------------------------------------------------------
# LockedDependency: A single entry in the lock file
# ---------------------------------------------------------------------------


@dataclass
class LockedDependency:
    """A single dependency entry in the lock file.

    Attributes:
        name: Dependency name (the key under ``dependencies``).
        version: What was actually resolved: the git ref, the registry
            version, or the declared version hint. None when the source
            carries no version (e.g. a local directory without a hint).
        source: Normalized source descriptor compared during reconciliation
            (``<url>``, ``file:<path>``, ``registry:<g>:<a>:<v>``,
            ``path:<abs path>`` or ``extension-provider``).
        install_path: Install location relative to the project directory
            (absolute for nothing but catalog extensions, which have None).
        kind: Dependency kind ("library", "archive", "extension").
        id: Resolved extension identifier; None for other kinds.
        resolved: Fully qualified origin (e.g. ``<url>#<ref>``).
        integrity: ``sha512-<hex>`` hash of the installed content.
        mapping: Logical alias exposed to the consuming runtime.
        git_commit: Commit checked out for git dependencies.
        sub_path: Repository sub-directory that was installed.
        installed_at: UTC timestamp of the install.
    """

    name: str
    version: str | None
    source: str
    install_path: str | None = None
    kind: str = "library"
    id: str | None = None
    resolved: str | None = None
    integrity: str | None = None
    mapping: str | None = None
    git_commit: str | None = None
    sub_path: str | None = None
    installed_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase lock file entry (name is the key)."""
        entry: dict[str, Any] = {
            "version": self.version,
            "source": self.source,
            "type": self.kind,
            "installPath": self.install_path,
            "installedAt": self.installed_at,
        }
        optional = {
            "id": self.id,
            "resolved": self.resolved,
            "integrity": self.integrity,
            "mapping": self.mapping,
            "gitCommit": self.git_commit,
            "subPath": self.sub_path,
        }
        for key, value in optional.items():
            if value is not None:
                entry[key] = value
        return entry

    @classmethod
    def from_dict(cls, name: str, entry: dict[str, Any]) -> LockedDependency:
        """Deserialize one lock file entry.

        Fields not present use defaults, enabling forward compatibility
        with older lock files.
        """
        return cls(
            name=name,
            version=entry.get("version"),
            source=entry.get("source") or "",
            install_path=entry.get("installPath"),
            kind=entry.get("type") or "library",
            id=entry.get("id"),
            resolved=entry.get("resolved"),
            integrity=entry.get("integrity"),
            mapping=entry.get("mapping"),
            git_commit=entry.get("gitCommit"),
            sub_path=entry.get("subPath"),
            installed_at=entry.get("installedAt") or "",
        )
