"""depsmith CLI -- Reproducible dependency installs from declarative manifests.

Entry point for the ``depsmith`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    install -- Install dependencies and write depsmith-lock.json.
    prune   -- Delete the shared git/download cache.
    list    -- Show the dependencies recorded in a lock file.
    verify  -- Check installed content against recorded integrity.

Usage::

    depsmith install                          # Current directory
    depsmith install ./app --env production   # Apply an environment
    depsmith install --dry-run --include-nested
    depsmith install --production --force
    depsmith prune
    depsmith list ./app
    depsmith verify ./app
"""

from __future__ import annotations

import logging

import click

from depsmith import __version__
from depsmith.cli.install import install_command
from depsmith.cli.list_cmd import list_command
from depsmith.cli.prune import prune_command
from depsmith.cli.verify import verify_command


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def cli(verbose: bool) -> None:
    """depsmith: dependency resolution and lock reconciliation.

    Installs git, file, HTTP, registry and extension dependencies declared
    in depsmith.json, reuses what the lock file says is already in place,
    and follows nested projects.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(install_command)
cli.add_command(prune_command)
cli.add_command(list_command)
cli.add_command(verify_command)
