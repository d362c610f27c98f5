"""Content integrity hashing for installed dependencies.

A directory hash covers every regular file below it, visited in sorted
relative-path order so the result is stable across platforms and filesystem
iteration order. A single file is hashed on its own. Both produce
``sha512-<hex>``.

Some content below an installed directory is not part of the dependency and
is left out of the hash:

- version-control metadata (``.git``);
- when the directory is itself a project, what installing it produces: its
  ``depsmith-lock.json`` and every install path that lock file records
  inside the directory.
"""

from __future__ import annotations

import hashlib
import json
import posixpath
from pathlib import Path

from depsmith import LOCKFILE_NAME

_CHUNK = 1 << 16
_SKIPPED_DIRS = {".git"}
_LOCK_SECTIONS = ("dependencies", "devDependencies")


def _update_from_file(digest: "hashlib._Hash", path: Path) -> None:
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK), b""):
            digest.update(chunk)


def generated_paths(root: Path) -> set[str]:
    """Relative paths below ``root`` written by installing ``root`` as a project.

    Read from the raw lock file so a damaged lock never breaks hashing; only
    the lock file itself is excluded then.
    """
    lock_path = root / LOCKFILE_NAME
    if not lock_path.is_file():
        return set()
    excluded = {LOCKFILE_NAME}
    try:
        data = json.loads(lock_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return excluded
    if not isinstance(data, dict):
        return excluded
    for section in _LOCK_SECTIONS:
        entries = data.get(section)
        if not isinstance(entries, dict):
            continue
        for entry in entries.values():
            install_path = entry.get("installPath") if isinstance(entry, dict) else None
            if not isinstance(install_path, str) or not install_path:
                continue
            relative = posixpath.normpath(install_path.replace("\\", "/"))
            if posixpath.isabs(relative) or relative in (".", "..") or relative.startswith("../"):
                continue
            excluded.add(relative)
    return excluded


def _is_excluded(relative: str, excluded: set[str]) -> bool:
    return any(relative == path or relative.startswith(path + "/") for path in excluded)


def _iter_files(root: Path) -> list[Path]:
    excluded = generated_paths(root)
    files = []
    for p in root.rglob("*"):
        relative = p.relative_to(root)
        if not p.is_file() or _SKIPPED_DIRS.intersection(relative.parts):
            continue
        if excluded and _is_excluded(relative.as_posix(), excluded):
            continue
        files.append(p)
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def compute_integrity(path: Path) -> str:
    """Compute the integrity string of an installed file or directory.

    Args:
        path: Installed file or directory.

    Returns:
        Integrity string in ``sha512-<128-hex-chars>`` format.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    digest = hashlib.sha512()
    if path.is_dir():
        for file in _iter_files(path):
            digest.update(file.relative_to(path).as_posix().encode("utf-8"))
            digest.update(b"\0")
            _update_from_file(digest, file)
    elif path.is_file():
        _update_from_file(digest, path)
    else:
        raise FileNotFoundError(path)
    return f"sha512-{digest.hexdigest()}"


def verify_integrity(path: Path, expected: str) -> bool:
    """Return True if the content at ``path`` hashes to ``expected``."""
    try:
        return compute_integrity(path) == expected
    except OSError:
        return False
