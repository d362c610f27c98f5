"""depsmith: Dependency resolution and lock reconciliation for project graphs."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# File names shared by every project directory depsmith touches.
MANIFEST_FILENAMES: tuple[str, ...] = ("depsmith.json", "depsmith.yaml", "depsmith.yml")
LOCKFILE_NAME = "depsmith-lock.json"
