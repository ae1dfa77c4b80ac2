"""Tests for the fontTools-based icon font generator."""

import struct
from io import BytesIO

import pytest
from fontTools.ttLib import TTFont

from nes_icons.config.formats import FONT_FORMATS
from nes_icons.config.paths import DEFAULT_TEMPLATES_DIR
from nes_icons.core.eot import EOT_MAGIC, EOT_VERSION
from nes_icons.core.generator import generate_webfont
from nes_icons.utils.errors import GenerationError


@pytest.fixture
def generated(config):
    return generate_webfont(config.icon_glob, "nes-icons")


def test_all_formats_generated(generated):
    """Test every format has non-empty font data."""
    assert sorted(generated.fonts) == sorted(f.value for f in FONT_FORMATS)
    assert all(generated.fonts.values())


def test_ttf_cmap(generated):
    """Test glyphs are mapped from U+EA01 in file name order."""
    font = TTFont(BytesIO(generated["ttf"]))

    assert font.getBestCmap() == {0xEA01: "heart", 0xEA02: "square"}
    assert font["head"].unitsPerEm == 1000
    assert font["name"].getDebugName(1) == "nes-icons"


def test_outlines_are_in_em_square(generated):
    """Test the 16x16 viewBox is scaled to the 1000 unit em."""
    font = TTFont(BytesIO(generated["ttf"]))
    glyf = font["glyf"]
    square = glyf["square"]

    # M2 2H14V14H2Z scaled by 1000/16 with the y axis flipped
    assert (square.xMin, square.yMin, square.xMax, square.yMax) == (125, 125, 875, 875)
    assert font["hmtx"]["square"][0] == 1000


def test_generation_is_deterministic(config):
    """Test identical icons give byte-identical fonts."""
    first = generate_webfont(config.icon_glob, "nes-icons")
    second = generate_webfont(config.icon_glob, "nes-icons")

    assert first.fonts == second.fonts


def test_woff_flavors(generated):
    """Test WOFF and WOFF2 data load with the right flavor."""
    assert TTFont(BytesIO(generated["woff"])).flavor == "woff"
    assert TTFont(BytesIO(generated["woff2"])).flavor == "woff2"


def test_eot_header(generated):
    """Test the EOT header wraps the TrueType data."""
    eot = generated["eot"]
    ttf = generated["ttf"]

    eot_size, font_data_size, version = struct.unpack_from("<III", eot, 0)
    (magic,) = struct.unpack_from("<H", eot, 34)

    assert eot_size == len(eot)
    assert font_data_size == len(ttf)
    assert version == EOT_VERSION
    assert magic == EOT_MAGIC
    assert eot.endswith(ttf)


def test_svg_font(generated):
    """Test the SVG font lists each glyph with its codepoint."""
    svg = generated["svg"].decode("utf-8")

    assert 'glyph-name="heart" unicode="&#xea01;"' in svg
    assert 'glyph-name="square" unicode="&#xea02;"' in svg


def test_template_only(config):
    """Test rendering a template without producing binary fonts."""
    result = generate_webfont(
        config.icon_glob,
        "nes-icons",
        formats=(),
        template=DEFAULT_TEMPLATES_DIR / "variables.scss.njk",
    )

    assert result.fonts == {}
    assert '$nes-icons-font-name: "nes-icons";' in result.template
    assert '$nes-icons-heart: "\\ea01";' in result.template
    assert '$nes-icons-square: "\\ea02";' in result.template


def test_css_template(config):
    """Test the CSS variable template uses custom properties."""
    result = generate_webfont(
        config.icon_glob,
        "nes-icons",
        formats=(),
        template=DEFAULT_TEMPLATES_DIR / "variables.css.njk",
    )

    assert '--nes-icons-heart: "\\ea01";' in result.template


def test_no_icons(tmp_path):
    """Test an empty glob is a GenerationError."""
    with pytest.raises(GenerationError, match="No icons found"):
        generate_webfont(str(tmp_path / "*.svg"), "nes-icons")


def test_invalid_svg(tmp_path):
    """Test a malformed icon file is a GenerationError."""
    (tmp_path / "broken.svg").write_text("<svg")

    with pytest.raises(GenerationError, match="broken.svg"):
        generate_webfont(str(tmp_path / "*.svg"), "nes-icons")
