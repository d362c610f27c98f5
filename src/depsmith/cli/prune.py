"""``depsmith prune`` -- Delete the shared cache directory."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depsmith.core.cache import GitCacheManager
from depsmith.exceptions import ConfigError
from depsmith.settings import Settings


@click.command("prune")
@click.option(
    "--cache-dir", type=click.Path(file_okay=False), default=None,
    help="Shared cache directory (default: $DEPSMITH_CACHE_DIR or ~/.depsmith/cache).",
)
def prune_command(cache_dir: str | None) -> None:
    """Delete every cached clone and download.

    Safe to run repeatedly: with no cache present it reports that there is
    nothing to prune.
    """
    try:
        settings = Settings.load(cache_root=Path(cache_dir) if cache_dir else None)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if GitCacheManager(settings.cache_root).prune():
        click.echo(f"Pruned cache at {settings.cache_root}")
    else:
        click.echo("Nothing to prune")
