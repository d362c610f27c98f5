"""Project Lock File --- what is actually installed.

This package implements the ``depsmith-lock.json`` format. The lock file
captures the resolved state of one project directory: every direct
dependency with its resolved version, source descriptor, install path and
content integrity hash, partitioned into production and development scope.

The package is split into focused submodules:

- ``models``: the ``LockedDependency`` data class.
- ``lockfile``: the ``LockFile`` class with entry management and
  serialization.
- ``integrity``: SHA-512 content hashing of installed files/directories.
- ``operations``: deserialization (``from_dict``, ``from_json``, ``read``,
  ``read_or_empty``), verification and diffing.

All public names are re-exported here so callers can write
``from depsmith.core.lockfile import LockFile``.
"""

# Re-export data models
from depsmith.core.lockfile.models import (
    EXTENSION_PROVIDER,
    INTEGRITY_RE,
    LockedDependency,
    utc_timestamp,
)

# Re-export the LockFile class
from depsmith.core.lockfile.lockfile import LockFile
from depsmith.core.lockfile.integrity import compute_integrity, verify_integrity

# Attach operations to LockFile as methods/classmethods
from depsmith.core.lockfile import operations as _ops

LockFile.from_dict = classmethod(_ops._from_dict)
LockFile.from_json = classmethod(_ops._from_json)
LockFile.read = classmethod(_ops._read)
LockFile.read_or_empty = classmethod(_ops._read_or_empty)
LockFile.verify = _ops._verify
LockFile.diff = _ops._diff

__all__ = [
    "EXTENSION_PROVIDER",
    "INTEGRITY_RE",
    "LockFile",
    "LockedDependency",
    "compute_integrity",
    "utc_timestamp",
    "verify_integrity",
]
