"""
Icon font generator.

Turns a set of SVG icons into binary fonts (eot, svg, ttf, woff, woff2) and
renders variable-file templates from the same glyph metadata.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from html import escape
from pathlib import Path

import jinja2
from fontTools.fontBuilder import FontBuilder
from fontTools.misc import etree
from fontTools.misc.transform import Transform
from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.svgLib import SVGPath

from nes_icons.config.formats import (
    FONT_FORMATS,
    FONT_TIMESTAMP,
    UNITS_PER_EM,
    FontFormat,
)
from nes_icons.core.eot import ttf_to_eot
from nes_icons.core.font_io import iter_icons, reflavor, save_font
from nes_icons.core.naming import GlyphInfo, assign_codepoints
from nes_icons.utils.errors import GenerationError

NOTDEF = ".notdef"

# Maximum error in font units when approximating cubic curves with quadratics
CU2QU_MAX_ERR = 1.0


@dataclass
class IconOutline:
    """A glyph outline in font units."""

    glyph: GlyphInfo
    advance: int
    recording: RecordingPen


@dataclass
class WebfontResult:
    """
    Generator output.

    Font bytes are keyed by format name; template holds the rendered
    template text when one was requested.
    """

    fonts: dict[str, bytes] = field(default_factory=dict)
    glyphs: list[GlyphInfo] = field(default_factory=list)
    template: str | None = None

    def __getitem__(self, fmt: str) -> bytes:
        return self.fonts[FontFormat(fmt).value]


def _view_box(root) -> tuple[float, float, float, float]:
    """Read the SVG viewBox, falling back to width/height."""
    view_box = root.get("viewBox")
    if view_box:
        values = [float(v) for v in view_box.replace(",", " ").split()]
        if len(values) == 4:
            return values[0], values[1], values[2], values[3]

    def _length(value: str | None) -> float:
        return float((value or "0").strip().removesuffix("px") or 0)

    return 0.0, 0.0, _length(root.get("width")), _length(root.get("height"))


def read_outline(glyph: GlyphInfo) -> IconOutline:
    """
    Read an SVG icon and convert its paths to font coordinates.

    The viewBox height is scaled to the em square and the y axis is flipped.

    Args:
        glyph: Glyph whose source file to read

    Returns:
        Recorded outline and advance width

    Raises:
        GenerationError: If the file is not a readable SVG
    """
    try:
        svg = SVGPath(str(glyph.source))
    except (OSError, etree.ParseError) as e:
        raise GenerationError(f"Cannot read {glyph.source.name}: {e}") from e

    min_x, min_y, width, height = _view_box(svg.root)
    if height <= 0:
        raise GenerationError(f"{glyph.source.name} has no usable viewBox or height")

    scale = UNITS_PER_EM / height
    transform = Transform(scale, 0, 0, -scale, -min_x * scale, (min_y + height) * scale)

    recording = RecordingPen()
    try:
        svg.draw(TransformPen(recording, transform))
    except (ValueError, IndexError) as e:
        raise GenerationError(f"Invalid path data in {glyph.source.name}: {e}") from e

    return IconOutline(glyph, round(width * scale), recording)


def build_ttf(font_name: str, outlines: list[IconOutline]) -> bytes:
    """
    Build a TrueType font from icon outlines.

    Timestamps are fixed so the same outlines always give the same bytes.
    """
    glyph_order = [NOTDEF] + [o.glyph.name for o in outlines]

    glyphs = {NOTDEF: TTGlyphPen(None).glyph()}
    for outline in outlines:
        tt_pen = TTGlyphPen(None)
        outline.recording.replay(
            Cu2QuPen(tt_pen, CU2QU_MAX_ERR, reverse_direction=True)
        )
        glyphs[outline.glyph.name] = tt_pen.glyph()

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.updateHead(created=FONT_TIMESTAMP, modified=FONT_TIMESTAMP)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap({o.glyph.codepoint: o.glyph.name for o in outlines})
    fb.setupGlyf(glyphs)

    glyf = fb.font["glyf"]
    advances = {NOTDEF: 0, **{o.glyph.name: o.advance for o in outlines}}
    fb.setupHorizontalMetrics(
        {name: (advances[name], getattr(glyf[name], "xMin", 0)) for name in glyph_order}
    )
    fb.setupHorizontalHeader(ascent=UNITS_PER_EM, descent=0)
    fb.setupNameTable(
        {
            "familyName": font_name,
            "styleName": "Regular",
            "uniqueFontIdentifier": f"{font_name}-Regular",
            "fullName": font_name,
            "psName": font_name.replace(" ", ""),
            "version": "Version 1.0",
        },
        mac=False,
    )
    fb.setupOS2(
        sTypoAscender=UNITS_PER_EM,
        sTypoDescender=0,
        usWinAscent=UNITS_PER_EM,
        usWinDescent=0,
    )
    fb.setupPost()

    data = save_font(fb.font)
    fb.font.close()
    return data


def build_svg_font(font_name: str, outlines: list[IconOutline]) -> bytes:
    """Write an SVG font document with one glyph element per icon."""
    lines = [
        '<?xml version="1.0" standalone="no"?>',
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
        '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">',
        '<svg xmlns="http://www.w3.org/2000/svg">',
        "<defs>",
        f'  <font id="{escape(font_name)}" horiz-adv-x="{UNITS_PER_EM}">',
        f'    <font-face font-family="{escape(font_name)}" '
        f'units-per-em="{UNITS_PER_EM}" ascent="{UNITS_PER_EM}" descent="0" />',
        '    <missing-glyph horiz-adv-x="0" />',
    ]
    for outline in outlines:
        pen = SVGPathPen(None)
        outline.recording.replay(pen)
        lines.append(
            f'    <glyph glyph-name="{escape(outline.glyph.name)}" '
            f'unicode="&#x{outline.glyph.hex};" '
            f'horiz-adv-x="{outline.advance}" d="{pen.getCommands()}" />'
        )
    lines += ["  </font>", "</defs>", "</svg>", ""]
    return "\n".join(lines).encode("utf-8")


def render_template(
    template: Path,
    font_name: str,
    glyphs: list[GlyphInfo],
    formats: Iterable[str] = FONT_FORMATS,
) -> str:
    """
    Render a variable-file template with glyph metadata.

    Args:
        template: Jinja template file
        font_name: Font family name
        glyphs: Glyphs in font order
        formats: Font formats the stylesheet may reference

    Returns:
        Rendered text
    """
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(template.parent)),
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
    )
    try:
        return env.get_template(template.name).render(
            font_name=font_name,
            glyphs=glyphs,
            formats=[FontFormat(f).value for f in formats],
        )
    except jinja2.TemplateError as e:
        raise GenerationError(f"Cannot render {template.name}: {e}") from e


def generate_webfont(
    files: str,
    font_name: str,
    formats: Iterable[str] = FONT_FORMATS,
    template: Path | None = None,
) -> WebfontResult:
    """
    Generate icon fonts and/or a rendered template from SVG icons.

    With an empty formats list only glyph metadata is computed, which is
    enough to render a template.

    Args:
        files: Glob matching the icon files
        font_name: Font family name
        formats: Binary formats to produce
        template: Optional template to render

    Returns:
        WebfontResult with bytes per requested format

    Raises:
        GenerationError: If no icons match or an icon cannot be converted
    """
    icons = iter_icons(files)
    if not icons:
        raise GenerationError(f"No icons found matching {files}")

    glyphs = assign_codepoints(icons)
    requested = [FontFormat(f) for f in formats]
    result = WebfontResult(glyphs=glyphs)

    if requested:
        outlines = [read_outline(glyph) for glyph in glyphs]
        ttf = build_ttf(font_name, outlines)
        for fmt in requested:
            if fmt is FontFormat.TTF:
                data = ttf
            elif fmt is FontFormat.WOFF:
                data = reflavor(ttf, "woff")
            elif fmt is FontFormat.WOFF2:
                data = reflavor(ttf, "woff2")
            elif fmt is FontFormat.EOT:
                data = ttf_to_eot(ttf)
            else:
                data = build_svg_font(font_name, outlines)
            result.fonts[fmt.value] = data

    if template is not None:
        result.template = render_template(template, font_name, glyphs)

    return result
