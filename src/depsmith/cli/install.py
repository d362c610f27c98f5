"""``depsmith install [PATH]`` -- Install dependencies and write lock files.

Loads the project manifest, applies the requested environment, reconciles
every dependency against the previous lock file, installs what changed,
recurses into nested projects and writes ``depsmith-lock.json`` per
project.

Exit Codes:
    0 -- Every dependency was installed, unchanged or skipped.
    1 -- At least one dependency failed, or a lock file write failed.
    2 -- Manifest missing or invalid, unknown environment, or bad settings.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from depsmith.core.resolve import (
    DryRunPlanner,
    InstallOptions,
    ProjectGraphWalker,
    build_context,
)
from depsmith.exceptions import (
    ConfigError,
    LockWriteError,
    ManifestError,
    UnknownEnvironmentError,
)
from depsmith.settings import Settings

logger = logging.getLogger(__name__)


@click.command("install")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--production", is_flag=True, help="Skip devDependencies.")
@click.option("--force", is_flag=True, help="Reinstall every dependency.")
@click.option("--env", "environment", default=None, help="Environment to apply.")
@click.option(
    "--dry-run", is_flag=True,
    help="Show the configuration and what would be installed; change nothing.",
)
@click.option(
    "--include-nested", is_flag=True,
    help="With --dry-run, also plan nested projects.",
)
@click.option(
    "--no-git-cache", is_flag=True,
    help="Use throw-away clones instead of the shared git cache.",
)
@click.option(
    "--cache-dir", type=click.Path(file_okay=False), default=None,
    help="Shared cache directory (default: $DEPSMITH_CACHE_DIR or ~/.depsmith/cache).",
)
def install_command(
    path: str,
    production: bool,
    force: bool,
    environment: str | None,
    dry_run: bool,
    include_nested: bool,
    no_git_cache: bool,
    cache_dir: str | None,
) -> None:
    """Install the dependencies declared in PATH (default: current directory).

    Exit code 0 on success, 1 if a dependency or lock write failed, 2 on
    manifest, environment or settings errors.
    """
    from depsmith.cli.output import console, print_install_report, print_plan

    target = Path(path).resolve()
    options = InstallOptions(
        production=production,
        force=force,
        environment=environment,
        include_nested=include_nested,
    )
    try:
        settings = Settings.load(cache_root=Path(cache_dir) if cache_dir else None)
        if no_git_cache:
            settings.use_git_cache = False
        context = build_context(settings, target)

        if dry_run:
            planner = DryRunPlanner(context, settings.max_nested_depth)
            print_plan(planner.plan(target, options))
            sys.exit(0)

        report = ProjectGraphWalker(settings, context).install(target, options)
    except (ManifestError, UnknownEnvironmentError, ConfigError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    except LockWriteError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    print_install_report(report)
    if not report.succeeded:
        console.print("[bold red]Install finished with failures.[/bold red]")
        sys.exit(1)
    sys.exit(0)
