"""
Font format and glyph numbering definitions.
"""

from enum import Enum


class FontFormat(str, Enum):
    """Binary font formats produced by the generator."""

    EOT = "eot"
    SVG = "svg"
    TTF = "ttf"
    WOFF = "woff"
    WOFF2 = "woff2"


FONT_NAME = "nes-icons"

# All five formats, in the order they are written
FONT_FORMATS = tuple(FontFormat)

UNITS_PER_EM = 1000

# First codepoint handed out to icons without an explicit one (Private Use Area)
START_CODEPOINT = 0xEA01

# Fixed head.created / head.modified so repeated builds are byte-identical
FONT_TIMESTAMP = 0
