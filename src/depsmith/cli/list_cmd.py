"""``depsmith list [PATH]`` -- Show what the lock file says is installed."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from depsmith import LOCKFILE_NAME
from depsmith.core.lockfile import LockFile
from depsmith.exceptions import LockfileError


@click.command("list")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def list_command(path: str, output_format: str) -> None:
    """List the dependencies recorded in PATH's lock file.

    Exit code 0 on success, 2 if there is no readable lock file.
    """
    project_dir = Path(path)
    lock_path = project_dir / LOCKFILE_NAME
    try:
        lock = LockFile.read(project_dir)
    except FileNotFoundError:
        click.echo(f"Error: no {LOCKFILE_NAME} in {project_dir}; run 'depsmith install' first.")
        sys.exit(2)
    except (OSError, LockfileError) as exc:
        click.echo(f"Error: {exc}")
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps(lock.to_dict(), indent=2, sort_keys=True))
    else:
        from depsmith.cli.output import print_lock_table
        print_lock_table(lock, lock_path)
    sys.exit(0)
