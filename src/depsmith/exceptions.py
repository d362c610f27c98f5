"""depsmith exception hierarchy.

All public exceptions inherit from DepsmithError, giving callers a single
base class to catch when they want to handle any depsmith-specific failure
without swallowing unrelated errors.
"""

from __future__ import annotations


class DepsmithError(Exception):
    """Base exception for all depsmith errors."""


class ConfigError(DepsmithError):
    """Raised when the user settings file cannot be read or is malformed."""


class ManifestError(DepsmithError):
    """Raised when a project manifest is missing or cannot be parsed."""


class DeclarationError(DepsmithError):
    """Raised when a single manifest dependency entry is invalid.

    Covers entries with no recognizable source location, missing required
    fields, and kind/source combinations that no installer handles. The
    offending dependency name is kept on ``dependency`` so callers can
    report per-entry errors and keep processing the rest of the manifest.
    """

    def __init__(self, dependency: str, message: str) -> None:
        super().__init__(f"Dependency {dependency!r}: {message}")
        self.dependency = dependency
        self.reason = message


class UnknownEnvironmentError(DepsmithError):
    """Raised when a requested environment is not defined in the manifest."""

    def __init__(self, environment: str, available: list[str]) -> None:
        if available:
            detail = "Available environments: " + ", ".join(available)
        else:
            detail = "No environments are defined in the manifest"
        super().__init__(f"Environment {environment!r} not found. {detail}")
        self.environment = environment
        self.available = available


class SourceFetchError(DepsmithError):
    """Raised when a dependency source cannot be fetched.

    Covers network failures, authentication failures, missing refs, and
    missing local source paths.
    """


class GitCommandError(SourceFetchError):
    """Raised when a git subprocess exits with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, output: str) -> None:
        command = " ".join(args)
        super().__init__(f"git command failed ({returncode}): {command}\n{output.strip()}")
        self.args_list = args
        self.returncode = returncode
        self.output = output


class CacheCorruptionError(SourceFetchError):
    """Raised when a git cache entry is still unusable after one re-clone."""


class InstallError(DepsmithError):
    """Raised when an installer cannot place a fetched dependency on disk."""


class LockfileError(DepsmithError):
    """Raised for lock file parsing or integrity failures."""


class LockWriteError(LockfileError):
    """Raised when a new lock file cannot be persisted.

    This aborts the whole run: the run's primary side effect cannot be
    committed.
    """
