"""Shared git clone cache.

One persistent clone per (dependency name, repository URL) lives under
``<cache_root>/git-cache/<key>``. The key combines a filesystem-safe form
of the name with the first 16 hex characters of
``sha256(name + NUL + url)``, so two different URLs never share a clone.

An existing entry is refreshed with ``git fetch --tags --force`` and then
checked out at the requested ref; branch refs are reset to the fetched
``origin/<ref>`` so a cached clone never serves a stale branch head.

Corruption handling: an entry whose ``.git`` is missing or unreadable, whose
fetch fails, or whose checkout fails with broken metadata is deleted and
cloned again, exactly once. If the fresh clone fails too the error surfaces
as ``CacheCorruptionError``. A ref that does not exist in a healthy clone is
reported as a plain fetch error without re-cloning.
"""

from __future__ import annotations

import hashlib
import logging
import re
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from depsmith.core.cache.git import GitClient
from depsmith.core.fsutil import remove_path
from depsmith.exceptions import CacheCorruptionError, SourceFetchError

logger = logging.getLogger(__name__)

GIT_CACHE_DIRNAME = "git-cache"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class _CorruptEntry(Exception):
    """Internal signal: the cache entry must be rebuilt."""


@dataclass(frozen=True)
class Checkout:
    """A prepared working tree.

    Attributes:
        root: Repository working tree.
        source_dir: Directory to install from (``root`` or its sub path).
        commit: Commit hash checked out.
    """

    root: Path
    source_dir: Path
    commit: str


class GitCacheManager:
    """Owns the ``git-cache`` directory under a cache root.

    Args:
        cache_root: Shared cache root (``<home>/cache`` by default).
        use_cache: Reuse persistent clones. When False every ``acquire``
            clones into a throw-away directory removed afterwards.
        git: Command runner, replaceable in tests.
    """

    def __init__(
        self,
        cache_root: Path,
        use_cache: bool = True,
        git: GitClient | None = None,
    ) -> None:
        self.cache_root = cache_root
        self.use_cache = use_cache
        self.git = git or GitClient()

    @property
    def git_cache_dir(self) -> Path:
        return self.cache_root / GIT_CACHE_DIRNAME

    @staticmethod
    def cache_key(name: str, url: str) -> str:
        safe = _UNSAFE_CHARS.sub("-", name).strip("-.") or "dep"
        digest = hashlib.sha256(f"{name}\0{url}".encode("utf-8")).hexdigest()[:16]
        return f"{safe}-{digest}"

    def entry_path(self, name: str, url: str) -> Path:
        return self.git_cache_dir / self.cache_key(name, url)

    @contextmanager
    def acquire(
        self,
        name: str,
        url: str,
        ref: str,
        sub_path: str | None = None,
    ) -> Iterator[Checkout]:
        """Yield a working tree of ``url`` checked out at ``ref``.

        Raises:
            SourceFetchError: If the repository cannot be cloned, the ref
                does not exist, or ``sub_path`` is missing.
            CacheCorruptionError: If a corrupted entry cannot be rebuilt.
        """
        if not self.use_cache:
            self.git_cache_dir.mkdir(parents=True, exist_ok=True)
            scratch = Path(tempfile.mkdtemp(
                prefix=f"{self.cache_key(name, url)}-tmp-", dir=self.git_cache_dir
            ))
            try:
                repo = scratch / "repo"
                self.git.clone(url, repo)
                yield self._checkout(repo, ref, sub_path)
            finally:
                remove_path(scratch)
            return

        entry = self.entry_path(name, url)
        try:
            checkout = self._refresh(entry, url, ref, sub_path)
        except _CorruptEntry as exc:
            logger.warning("Git cache entry for %s is invalid (%s); re-cloning", name, exc)
            checkout = self._rebuild(entry, url, ref, sub_path)
        yield checkout

    def _refresh(
        self, entry: Path, url: str, ref: str, sub_path: str | None
    ) -> Checkout:
        if not entry.exists():
            logger.info("Cloning %s", url)
            self.git.clone(url, entry)
            return self._checkout(entry, ref, sub_path)

        if not self.git.is_valid_repository(entry):
            raise _CorruptEntry("missing or unreadable .git metadata")
        try:
            self.git.fetch(entry)
        except SourceFetchError as exc:
            raise _CorruptEntry(f"fetch failed: {exc}") from exc
        try:
            return self._checkout(entry, ref, sub_path)
        except SourceFetchError as exc:
            if not self.git.is_valid_repository(entry):
                raise _CorruptEntry(f"checkout failed: {exc}") from exc
            raise

    def _rebuild(
        self, entry: Path, url: str, ref: str, sub_path: str | None
    ) -> Checkout:
        remove_path(entry)
        try:
            self.git.clone(url, entry)
            return self._checkout(entry, ref, sub_path)
        except SourceFetchError as exc:
            raise CacheCorruptionError(
                f"Git cache for {url} could not be rebuilt: {exc}"
            ) from exc

    def _checkout(self, repo: Path, ref: str, sub_path: str | None) -> Checkout:
        self.git.checkout(repo, ref)
        if self.git.has_remote_branch(repo, ref):
            self.git.reset_hard(repo, f"origin/{ref}")
        commit = self.git.head_commit(repo)

        source_dir = repo
        if sub_path:
            source_dir = (repo / sub_path).resolve()
            if not source_dir.is_dir() or not source_dir.is_relative_to(repo.resolve()):
                raise SourceFetchError(f"subPath {sub_path!r} not found in repository")
        return Checkout(root=repo, source_dir=source_dir, commit=commit)

    def prune(self) -> bool:
        """Delete the whole cache root.

        Returns:
            True if something was deleted, False if there was nothing to
            prune.
        """
        if not self.cache_root.exists():
            return False
        remove_path(self.cache_root)
        logger.info("Pruned cache at %s", self.cache_root)
        return True
