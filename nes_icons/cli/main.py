"""
Main CLI entry point for nes-icons.
"""

import asyncio
import sys
from pathlib import Path

import click

from nes_icons import __version__


@click.command()
@click.version_option(version=__version__)
@click.option(
    "-w",
    "--watch",
    is_flag=True,
    help="Watch files and recompile when changes are made.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.option("-s", "--silent", is_flag=True, help="Suppress all logging.")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory containing icons/, scss/ and templates/.",
)
def cli(watch, verbose, silent, project_dir):
    """Build the nes-icons font and stylesheets."""
    if verbose and silent:
        raise click.UsageError("--verbose and --silent are mutually exclusive")

    from nes_icons.config.settings import BuildConfig
    from nes_icons.pipeline.runner import build
    from nes_icons.utils.logging import set_verbosity

    set_verbosity(verbose=verbose, silent=silent)
    config = BuildConfig.from_environment(project_dir, watch=watch)

    sys.exit(asyncio.run(build(config)))


if __name__ == "__main__":
    cli()
