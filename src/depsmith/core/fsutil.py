"""Filesystem helpers shared by the cache and the installers."""

from __future__ import annotations

import os
import shutil
import stat
import sys
import tarfile
import zipfile
from pathlib import Path

from depsmith.exceptions import InstallError

IGNORED_NAMES = {".git"}
ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz")


def _make_writable_and_retry(func, path, _exc) -> None:  # noqa: ANN001
    # git marks pack files read-only.
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_path(path: Path) -> None:
    """Delete a file, symlink or directory tree if it exists."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=_make_writable_and_retry)
        else:
            shutil.rmtree(path, onerror=_make_writable_and_retry)


def copy_tree(source: Path, target: Path) -> None:
    """Copy ``source`` to ``target`` (replaced), skipping ``.git``."""
    remove_path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, target, ignore=shutil.ignore_patterns(*IGNORED_NAMES))


def copy_file(source: Path, target: Path) -> None:
    """Copy a single file to ``target`` (replaced)."""
    remove_path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)


def is_extractable(location: str) -> bool:
    lowered = location.split("?", 1)[0].lower()
    return lowered.endswith(ARCHIVE_SUFFIXES)


def resolve_within(root: Path, relative: str) -> Path:
    """Resolve ``relative`` under ``root``, refusing paths that escape it.

    Raises:
        InstallError: If the resolved path lies outside ``root``.
    """
    resolved = (root / relative).resolve()
    try:
        resolved.relative_to(root.resolve())
    except ValueError:
        raise InstallError(f"Path {relative!r} escapes {root}") from None
    return resolved


def extract_archive(archive: Path, target: Path) -> None:
    """Extract a zip or tar archive into ``target`` (replaced).

    An archive whose entries all live under one top-level directory is
    unwrapped, so ``pkg-1.0/src/...`` installs as ``<target>/src/...``.

    Raises:
        InstallError: If the archive is unreadable or has unsafe members.
    """
    remove_path(target)
    staging = target.parent / f".{target.name}.extract"
    remove_path(staging)
    staging.mkdir(parents=True)
    try:
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                for member in zf.namelist():
                    resolve_within(staging, member)
                zf.extractall(staging)
        elif tarfile.is_tarfile(archive):
            with tarfile.open(archive) as tf:
                for member in tf.getmembers():
                    resolve_within(staging, member.name)
                    if member.issym() or member.islnk():
                        raise InstallError(f"Archive {archive.name} contains links")
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(staging, filter="data")
                else:
                    tf.extractall(staging)
        else:
            raise InstallError(f"{archive.name} is not a zip or tar archive")

        entries = list(staging.iterdir())
        root = entries[0] if len(entries) == 1 and entries[0].is_dir() else staging
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(root), str(target))
    except (OSError, zipfile.BadZipFile, tarfile.TarError) as exc:
        raise InstallError(f"Could not extract {archive.name}: {exc}") from exc
    finally:
        remove_path(staging)
