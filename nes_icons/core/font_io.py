"""
Font I/O utilities for locating icon sources and re-encoding font data.
"""

import glob
from io import BytesIO
from pathlib import Path

from fontTools.ttLib import TTFont


def iter_icons(pattern: str) -> list[Path]:
    """
    Find icon files matching a glob pattern, sorted by name.

    Args:
        pattern: Glob pattern, e.g. "/project/icons/*.svg"

    Returns:
        Matching files
    """
    return sorted((Path(p) for p in glob.glob(pattern)), key=lambda p: p.name)


def save_font(font: TTFont, *, flavor: str | None = None) -> bytes:
    """
    Serialize a font to bytes.

    Args:
        font: Font to serialize
        flavor: None for plain sfnt, or "woff" / "woff2"

    Returns:
        Font file contents
    """
    font.flavor = flavor
    buffer = BytesIO()
    font.save(buffer)
    return buffer.getvalue()


def reflavor(ttf_data: bytes, flavor: str) -> bytes:
    """Re-encode TrueType data as WOFF or WOFF2."""
    font = TTFont(BytesIO(ttf_data), recalcTimestamp=False)
    try:
        return save_font(font, flavor=flavor)
    finally:
        font.close()


def get_size_kb(data: bytes) -> float:
    """Get payload size in kilobytes."""
    return len(data) / 1024
