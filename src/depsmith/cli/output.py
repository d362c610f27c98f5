"""Rich output formatting helpers for the depsmith CLI.

Provides consistent, outcome-colored terminal output for install reports,
dry-run plans, lock file listings and integrity verification.

Outcome Color Mapping:
    installed = green, unchanged = dim, skipped = yellow, failed = bold red
"""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depsmith.core.declaration import Scope
from depsmith.core.lockfile import LockFile
from depsmith.core.resolve import Action, Outcome, ProjectPlan, ProjectReport, RunReport

_OUTCOME_STYLES: dict[Outcome, str] = {
    Outcome.REINSTALLED: "green",
    Outcome.REUSED: "dim",
    Outcome.SKIPPED: "yellow",
    Outcome.FAILED: "bold red",
}

_ACTION_STYLES: dict[Action, str] = {
    Action.INSTALL: "green",
    Action.REUSE: "dim",
    Action.SKIP: "yellow",
}

console = Console()


def outcome_style(outcome: Outcome) -> str:
    """Return the Rich style string for a given outcome."""
    return _OUTCOME_STYLES.get(outcome, "white")


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root)) or "."
    except ValueError:
        return str(path)


def _print_project(project: ProjectReport, root_dir: Path) -> None:
    title = "Dependencies"
    if project.depth > 0:
        title = f"Nested: {_display_path(project.project_dir, root_dir)}"
    if project.environment:
        title += f" (environment: {project.environment})"

    if not project.results:
        console.print(f"[bold]{escape(title)}[/bold]: [dim]no dependencies[/dim]")
    else:
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Dependency", style="bold")
        table.add_column("Scope", style="dim")
        table.add_column("Source")
        table.add_column("Result", justify="center")
        table.add_column("Details", style="dim")
        for result in project.results:
            scope = "dev" if result.scope is Scope.DEVELOPMENT else "prod"
            table.add_row(
                result.name,
                scope,
                result.description,
                Text(result.outcome.value, style=outcome_style(result.outcome)),
                result.message or "",
            )
        console.print(table)

    for error in project.declaration_errors:
        console.print(f"[red]Invalid declaration:[/red] {escape(str(error))}")
    for warning in project.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
    if project.lock_path is not None:
        console.print(f"[dim]Lock file written to {project.lock_path}[/dim]")

    for child in project.nested:
        _print_project(child, root_dir)


def print_install_report(report: RunReport) -> None:
    """Print per-project result tables followed by the run summary."""
    _print_project(report.root, report.root.project_dir)
    print_summary(report)


def print_summary(report: RunReport) -> None:
    """Print the one-line installed / unchanged / skipped / failed summary."""
    totals = report.totals()
    parts = [
        f"[green]{totals[Outcome.REINSTALLED]} installed[/green]",
        f"{totals[Outcome.REUSED]} unchanged",
        f"[yellow]{totals[Outcome.SKIPPED]} skipped[/yellow]",
        f"[red]{totals[Outcome.FAILED]} failed[/red]",
    ]
    if report.declaration_errors:
        parts.append(f"[red]{len(report.declaration_errors)} invalid[/red]")
    console.print(" | ".join(parts))


def _print_plan_items(plan: ProjectPlan) -> None:
    would_install = plan.to_install()
    if not would_install:
        console.print("[dim]Nothing to install.[/dim]")
    for item in would_install:
        console.print(
            f"  [green]+[/green] [bold]{escape(item.name)}[/bold] "
            f"[dim]({item.scope.value})[/dim] {escape(item.description)} "
            f"[dim]- {escape(item.reason)}[/dim]"
        )
    for item in plan.items:
        if item.action is not Action.INSTALL:
            style = _ACTION_STYLES[item.action]
            console.print(
                f"  [{style}]{item.action.value}[/{style}] {escape(item.name)} "
                f"[dim]- {escape(item.reason)}[/dim]"
            )
    for error in plan.declaration_errors:
        console.print(f"  [red]invalid[/red] {escape(str(error))}")
    for warning in plan.warnings:
        console.print(f"  [yellow]Warning:[/yellow] {escape(warning)}")


def print_plan(plan: ProjectPlan, root_dir: Path | None = None) -> None:
    """Print the realized configuration and the would-install list."""
    root_dir = root_dir or plan.project_dir
    if plan.depth == 0:
        console.print(Panel(
            json.dumps(plan.manifest.to_dict(), indent=2, sort_keys=True),
            title="Configuration (dry run)",
        ))
        console.print("[bold]Would install:[/bold]")
    else:
        console.print(
            f"\n[bold]\\[Nested: {escape(_display_path(plan.project_dir, root_dir))}][/bold]"
        )
    _print_plan_items(plan)
    for child in plan.nested:
        print_plan(child, root_dir)
    if plan.depth == 0:
        console.print("\n[dim]Dry run: nothing was installed and no lock file was written.[/dim]")


def print_lock_table(lock: LockFile, lock_path: Path) -> None:
    """Print every lock file entry as a table."""
    if lock.is_empty():
        console.print(f"[dim]No dependencies locked in {lock_path}.[/dim]")
        return
    table = Table(title=str(lock_path), show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Scope", style="dim")
    table.add_column("Type")
    table.add_column("Version")
    table.add_column("Source")
    table.add_column("Install Path", style="dim")
    for scope in (Scope.PRODUCTION, Scope.DEVELOPMENT):
        for name, locked in sorted(lock.entries(scope).items()):
            table.add_row(
                name,
                "dev" if scope is Scope.DEVELOPMENT else "prod",
                locked.kind,
                locked.version or "-",
                locked.source,
                locked.install_path or "-",
            )
    console.print(table)
    console.print(f"[bold]{len(lock)}[/bold] locked dependencies")


def print_verify_result(problems: list[str], lock_path: Path) -> None:
    if not problems:
        console.print(Panel(
            Text("All installed dependencies match the lock file.", style="bold green"),
            title=str(lock_path),
        ))
        return
    for problem in problems:
        console.print(f"[red]MISMATCH[/red] {escape(problem)}")
    console.print(f"[bold red]{len(problems)} problem(s) found[/bold red]")
