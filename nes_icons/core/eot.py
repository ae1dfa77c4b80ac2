"""
Embedded OpenType (EOT) wrapping.

Produces an uncompressed version 0x00020001 EOT file: a little-endian header
describing the font followed by the unmodified TrueType data.
"""

import struct
from io import BytesIO

from fontTools.misc import sstruct
from fontTools.ttLib import TTFont
from fontTools.ttLib.tables.O_S_2f_2 import panoseFormat

EOT_VERSION = 0x00020001
EOT_MAGIC = 0x504C
DEFAULT_CHARSET = 0x01

# EOTSize .. Padding1, everything before the variable-length names
HEADER_FORMAT = "<IIII10sBBIHHIIIIIIIIIIIH"

# nameID for family, style, version and full name
NAME_IDS = (1, 2, 5, 4)


def _name_block(text: str) -> bytes:
    encoded = text.encode("utf-16-le")
    return struct.pack("<H", len(encoded)) + encoded


def ttf_to_eot(ttf_data: bytes) -> bytes:
    """
    Wrap TrueType font data in an EOT header.

    Args:
        ttf_data: Complete TrueType font file

    Returns:
        EOT file contents
    """
    font = TTFont(BytesIO(ttf_data), recalcTimestamp=False)
    try:
        os2 = font["OS/2"]
        names = [font["name"].getDebugName(name_id) or "" for name_id in NAME_IDS]
        check_sum_adjustment = font["head"].checkSumAdjustment
    finally:
        font.close()

    # Names are separated by a zero USHORT padding field; the root string is empty
    tail = b"".join(_name_block(name) + b"\x00\x00" for name in names)
    tail += struct.pack("<H", 0)

    header_size = struct.calcsize(HEADER_FORMAT)
    eot_size = header_size + len(tail) + len(ttf_data)

    header = struct.pack(
        HEADER_FORMAT,
        eot_size,
        len(ttf_data),
        EOT_VERSION,
        0,  # flags
        sstruct.pack(panoseFormat, os2.panose),
        DEFAULT_CHARSET,
        os2.fsSelection & 0x01,  # italic
        os2.usWeightClass,
        os2.fsType,
        EOT_MAGIC,
        os2.ulUnicodeRange1,
        os2.ulUnicodeRange2,
        os2.ulUnicodeRange3,
        os2.ulUnicodeRange4,
        os2.ulCodePageRange1,
        os2.ulCodePageRange2,
        check_sum_adjustment,
        0,
        0,
        0,
        0,  # reserved
        0,  # padding
    )
    return header + tail + ttf_data
