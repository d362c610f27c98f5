"""``depsmith verify [PATH]`` -- Check installed content against the lock file.

Re-hashes every installed dependency that has a recorded integrity hash and
reports missing or modified installs.

Exit Codes:
    0 -- Everything matches.
    1 -- One or more installs are missing or modified.
    2 -- No readable lock file.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from depsmith import LOCKFILE_NAME
from depsmith.core.lockfile import LockFile
from depsmith.exceptions import LockfileError


@click.command("verify")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def verify_command(path: str, output_format: str) -> None:
    """Verify installed dependencies in PATH against recorded integrity.

    Exit code 0 if everything matches, 1 on mismatches.
    """
    project_dir = Path(path)
    try:
        lock = LockFile.read(project_dir)
    except FileNotFoundError:
        message = f"no {LOCKFILE_NAME} in {project_dir}"
        if output_format == "json":
            click.echo(json.dumps({"error": message}))
        else:
            click.echo(f"Error: {message}")
        sys.exit(2)
    except (OSError, LockfileError) as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}")
        sys.exit(2)

    problems = lock.verify(project_dir)
    if output_format == "json":
        click.echo(json.dumps({"ok": not problems, "problems": problems}, indent=2))
    else:
        from depsmith.cli.output import print_verify_result
        print_verify_result(problems, project_dir / LOCKFILE_NAME)

    sys.exit(0 if not problems else 1)
