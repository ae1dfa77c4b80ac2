"""
Glyph naming and codepoint assignment.

The same icon file set always produces the same names and codepoints, which
keeps the binary fonts and both variable files in agreement.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from nes_icons.config.formats import START_CODEPOINT
from nes_icons.utils.errors import GenerationError

# "uEA05-heart.svg" pins the heart icon to U+EA05
EXPLICIT_CODEPOINT = re.compile(r"^u([0-9a-fA-F]{4,6})-(.+)$")
INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class GlyphInfo:
    """An icon as it appears in the generated font."""

    name: str
    codepoint: int
    source: Path

    @property
    def hex(self) -> str:
        """Lowercase hex codepoint, as used in CSS escapes."""
        return f"{self.codepoint:x}"


def glyph_name(stem: str) -> str:
    """
    Convert an icon file stem to a glyph name.

    Args:
        stem: File name without extension

    Returns:
        Name usable both as a glyph name and in CSS identifiers
    """
    match = EXPLICIT_CODEPOINT.match(stem)
    if match:
        stem = match.group(2)
    return INVALID_NAME_CHARS.sub("-", stem).strip("-")


def assign_codepoints(
    files: Iterable[Path], start: int = START_CODEPOINT
) -> list[GlyphInfo]:
    """
    Assign a name and codepoint to every icon.

    Files are processed in name order. Icons with an explicit codepoint keep
    it; the rest are numbered from start, skipping taken codepoints.

    Args:
        files: Icon source files
        start: First codepoint for automatic numbering

    Returns:
        Glyphs sorted by file name

    Raises:
        GenerationError: If two icons share a name or a codepoint
    """
    ordered = sorted(files, key=lambda p: p.name)

    pinned: dict[Path, int] = {}
    for path in ordered:
        match = EXPLICIT_CODEPOINT.match(path.stem)
        if match:
            pinned[path] = int(match.group(1), 16)

    taken = set(pinned.values())
    if len(taken) != len(pinned):
        raise GenerationError("Duplicate explicit codepoints in icon file names")

    glyphs: list[GlyphInfo] = []
    names: set[str] = set()
    next_codepoint = start
    for path in ordered:
        name = glyph_name(path.stem)
        if not name:
            raise GenerationError(f"Cannot derive a glyph name from {path.name}")
        if name in names:
            raise GenerationError(f"Duplicate glyph name: {name}")
        names.add(name)

        codepoint = pinned.get(path)
        if codepoint is None:
            while next_codepoint in taken:
                next_codepoint += 1
            codepoint = next_codepoint
            taken.add(codepoint)
        glyphs.append(GlyphInfo(name, codepoint, path))

    return glyphs
