"""
Output file writing with consistent error handling.
"""

import asyncio
from pathlib import Path

from nes_icons.utils.errors import OutputError
from nes_icons.utils.logging import logger


def write_output(path: Path, data: bytes | str) -> None:
    """
    Write a build artifact, replacing any previous version.

    Args:
        path: Destination file
        data: Bytes, or text written as UTF-8

    Raises:
        OutputError: If the file cannot be written
    """
    try:
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_bytes(data)
    except OSError as e:
        raise OutputError(f"Failed to write {path.name}: {e}") from e
    logger.debug(f"Wrote {path.name} ({len(data)} {'chars' if isinstance(data, str) else 'bytes'})")


async def save_output(path: Path, data: bytes | str) -> None:
    """Write a build artifact without blocking the event loop."""
    await asyncio.to_thread(write_output, path, data)
