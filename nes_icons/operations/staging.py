"""
Filesystem staging.

Creates the output directory and copies the style sources into it, so the
stylesheet stage compiles them next to the generated variable files.
"""

import asyncio
import shutil
from pathlib import Path

from nes_icons.config.settings import BuildConfig
from nes_icons.pipeline.tasks import Leaf, Sequential, Task
from nes_icons.utils.errors import StagingError
from nes_icons.utils.logging import logger


def create_output_dir(path: Path) -> None:
    """
    Create the output directory.

    An existing directory is fine; any other failure is fatal.

    Args:
        path: Directory to create
    """
    try:
        path.mkdir(parents=True)
        logger.debug(f"Created {path}/")
    except FileExistsError:
        if not path.is_dir():
            raise StagingError(f"{path} exists and is not a directory")
        logger.debug(f"{path}/ already exists (skipped)")
    except OSError as e:
        raise StagingError(f"Failed to create {path}/: {e}") from e


def copy_file(source: Path, destination: Path) -> None:
    """Copy one file byte-for-byte, overwriting the destination."""
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise StagingError(f"Failed to copy {source.name}: {e}") from e


async def copy_style_sources(source_dir: Path, output_dir: Path) -> int:
    """
    Copy every style source file into the output directory concurrently.

    Args:
        source_dir: Directory holding the style sources
        output_dir: Staging directory

    Returns:
        Number of files copied

    Raises:
        StagingError: If listing the sources or any single copy fails
    """
    try:
        sources = sorted(p for p in source_dir.iterdir() if p.is_file())
    except OSError as e:
        raise StagingError(f"Failed to list {source_dir}/: {e}") from e

    await asyncio.gather(
        *(
            asyncio.to_thread(copy_file, source, output_dir / source.name)
            for source in sources
        )
    )
    logger.debug(f"Copied {len(sources)} files to {output_dir}/")
    return len(sources)


async def prepare_output(config: BuildConfig) -> None:
    """Create the output directory and stage the style sources."""
    create_output_dir(config.output_dir)
    await copy_style_sources(config.scss_dir, config.output_dir)


def prepare_files_task(config: BuildConfig) -> Task:
    """Task graph for the staging stage."""
    output_name = config.output_dir.name
    return Sequential(
        "Prepare files",
        [
            Sequential(
                "Create folders",
                [Leaf(f"`{output_name}/`", lambda ctx: create_output_dir(config.output_dir))],
            ),
            Leaf(
                f"Copy Sass to `{output_name}/`",
                lambda ctx: copy_style_sources(config.scss_dir, config.output_dir),
            ),
        ],
    )
