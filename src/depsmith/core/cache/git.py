"""Thin subprocess runner for the git commands the cache needs."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from depsmith.exceptions import GitCommandError, SourceFetchError

logger = logging.getLogger(__name__)

# Never block on a credential prompt; a missing credential is a fetch error.
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


class GitClient:
    """Run git commands, raising ``GitCommandError`` on non-zero exit."""

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def run(self, *args: str, cwd: Path | None = None) -> str:
        """Run ``git <args>`` (inside ``cwd`` when given) and return stdout."""
        cmd = [self.executable]
        if cwd is not None:
            cmd += ["-C", str(cwd)]
        cmd += list(args)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env={**os.environ, **_GIT_ENV},
            )
        except FileNotFoundError as exc:
            raise SourceFetchError(f"git executable not found: {self.executable}") from exc
        if proc.returncode != 0:
            raise GitCommandError(cmd, proc.returncode, proc.stderr or proc.stdout)
        return proc.stdout

    def clone(self, url: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        self.run("clone", "--quiet", url, str(target))

    def fetch(self, repo: Path) -> None:
        self.run("fetch", "--quiet", "--tags", "--force", "origin", cwd=repo)

    def checkout(self, repo: Path, ref: str) -> None:
        self.run("checkout", "--quiet", "--force", ref, cwd=repo)

    def has_remote_branch(self, repo: Path, ref: str) -> bool:
        try:
            self.run("rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{ref}", cwd=repo)
        except GitCommandError:
            return False
        return True

    def reset_hard(self, repo: Path, target: str) -> None:
        self.run("reset", "--quiet", "--hard", target, cwd=repo)

    def head_commit(self, repo: Path) -> str:
        return self.run("rev-parse", "HEAD", cwd=repo).strip()

    def is_valid_repository(self, repo: Path) -> bool:
        """Return True if ``repo`` is a readable git working tree."""
        git_dir = repo / ".git"
        if not git_dir.exists():
            return False
        try:
            found = self.run("rev-parse", "--absolute-git-dir", cwd=repo).strip()
        except GitCommandError:
            return False
        # A broken .git makes git walk up to an enclosing repository.
        return Path(found).resolve() == git_dir.resolve()
