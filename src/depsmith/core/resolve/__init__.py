"""Resolution: reconcile declarations with the lock file, walk nested projects.

- ``models``: outcomes, options and reports.
- ``reconcile``: per-dependency reuse/reinstall decisions.
- ``walker``: installs a project and its nested projects.
- ``planner``: dry-run plans.
"""

from depsmith.core.resolve.models import (
    Action,
    Assessment,
    DependencyResult,
    InstallOptions,
    Outcome,
    ProjectReport,
    RunReport,
)
from depsmith.core.resolve.planner import DryRunPlanner, PlannedDependency, ProjectPlan
from depsmith.core.resolve.reconcile import Reconciler
from depsmith.core.resolve.walker import ProjectGraphWalker, build_context

__all__ = [
    "Action",
    "Assessment",
    "DependencyResult",
    "DryRunPlanner",
    "InstallOptions",
    "Outcome",
    "PlannedDependency",
    "ProjectGraphWalker",
    "ProjectPlan",
    "ProjectReport",
    "Reconciler",
    "RunReport",
    "build_context",
]
