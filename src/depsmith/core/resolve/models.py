"""Result and option models for install runs.

A run produces a tree of ``ProjectReport`` objects (root project plus any
nested projects it reached), wrapped in a ``RunReport`` with totals.
Reports are plain data: the walker builds them and returns them rather than
mutating shared state.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

from depsmith.core.declaration import Scope
from depsmith.core.lockfile import LockedDependency
from depsmith.exceptions import DeclarationError


class Outcome(str, Enum):
    """Terminal state of one dependency in one run."""

    REUSED = "unchanged"
    REINSTALLED = "installed"
    FAILED = "failed"
    SKIPPED = "skipped"


class Action(str, Enum):
    """What reconciliation would do with a dependency."""

    REUSE = "reuse"
    INSTALL = "install"
    SKIP = "skip"


@dataclass(frozen=True)
class Assessment:
    """Reconciliation decision for one declaration, before any side effect."""

    action: Action
    reason: str
    locked: LockedDependency | None = None


@dataclass
class InstallOptions:
    """Per-run switches.

    Attributes:
        production: Skip ``devDependencies`` regardless of settings.
        force: Reinstall every dependency even if the lock file matches,
            downloading cached registry artifacts again.
        environment: Environment name applied to the root (strict) and to
            nested projects (lenient).
        include_nested: Dry runs only: also plan nested projects.
    """

    production: bool = False
    force: bool = False
    environment: str | None = None
    include_nested: bool = False


@dataclass
class DependencyResult:
    name: str
    scope: Scope
    outcome: Outcome
    description: str = ""
    locked: LockedDependency | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (Outcome.REUSED, Outcome.REINSTALLED)


@dataclass
class ProjectReport:
    """Outcome of installing one project directory.

    Attributes:
        project_dir: Project directory.
        depth: 0 for the root project, parent depth + 1 for nested ones.
        environment: Environment applied to this project's manifest.
        results: One result per declared dependency, in manifest order.
        warnings: Non-fatal problems (depth limit, unknown nested
            environment, unreadable nested manifest).
        declaration_errors: Manifest entries that could not be parsed.
            They are reported but do not fail the run.
        nested: Reports of nested projects reached from this one.
        lock_path: Written lock file, or None if nothing was locked.
    """

    project_dir: Path
    depth: int = 0
    environment: str | None = None
    results: list[DependencyResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    declaration_errors: list[DeclarationError] = field(default_factory=list)
    nested: list[ProjectReport] = field(default_factory=list)
    lock_path: Path | None = None

    def counts(self) -> Counter[Outcome]:
        return Counter(result.outcome for result in self.results)

    def walk(self) -> Iterator[ProjectReport]:
        """This report followed by every nested report, depth first."""
        yield self
        for child in self.nested:
            yield from child.walk()


@dataclass
class RunReport:
    """Outcome of a whole run."""

    root: ProjectReport

    def projects(self) -> list[ProjectReport]:
        return list(self.root.walk())

    def totals(self) -> Counter[Outcome]:
        total: Counter[Outcome] = Counter()
        for project in self.projects():
            total.update(project.counts())
        return total

    @property
    def warnings(self) -> list[str]:
        return [w for project in self.projects() for w in project.warnings]

    @property
    def declaration_errors(self) -> list[DeclarationError]:
        return [e for project in self.projects() for e in project.declaration_errors]

    @property
    def succeeded(self) -> bool:
        return self.totals()[Outcome.FAILED] == 0
