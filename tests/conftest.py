"""Shared pytest fixtures."""

import json
import logging
from pathlib import Path

import pytest

from nes_icons.config.formats import FontFormat
from nes_icons.config.settings import BuildConfig
from nes_icons.core.font_io import iter_icons
from nes_icons.core.generator import WebfontResult
from nes_icons.core.naming import assign_codepoints
from nes_icons.core.sass_compiler import CompileResult
from nes_icons.pipeline.toolchain import Toolchain

SQUARE_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16">
  <path d="M2 2H14V14H2Z"/>
</svg>
"""

HEART_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16">
  <path d="M8 14C4 10 1 8 1 5C1 3 3 1 5 1C6.5 1 7.5 2 8 3C8.5 2 9.5 1 11 1C13 1 15 3 15 5C15 8 12 10 8 14Z"/>
</svg>
"""

STYLE_SCSS = """@import "nes-icons-variables";

.nes-icon {
  font-family: $nes-icons-font-name;
  user-select: none;
}
"""


@pytest.fixture(autouse=True)
def reset_log_level():
    """Undo verbosity changes made by CLI tests."""
    yield
    logging.getLogger("nes_icons").setLevel(logging.NOTSET)


@pytest.fixture
def project_dir(tmp_path):
    """A project directory with two icons and one stylesheet."""
    icons = tmp_path / "icons"
    icons.mkdir()
    (icons / "heart.svg").write_text(HEART_SVG)
    (icons / "square.svg").write_text(SQUARE_SVG)

    scss = tmp_path / "scss"
    scss.mkdir()
    (scss / "style.scss").write_text(STYLE_SCSS)
    (scss / "_mixins.scss").write_text("@mixin pixelated { image-rendering: pixelated; }\n")
    return tmp_path


@pytest.fixture
def config(project_dir):
    """Configuration for the test project, outside watch mode."""
    return BuildConfig.from_environment(project_dir, environ={})


class StubGenerator:
    """
    Deterministic font generator.

    Font bytes are derived from the font name, format and icon names, so equal
    inputs give equal bytes.
    """

    def __init__(self):
        self.calls: list[dict] = []

    def __call__(self, files, font_name, formats=(), template=None):
        self.calls.append(
            {"files": files, "font_name": font_name, "formats": tuple(formats), "template": template}
        )
        glyphs = assign_codepoints(iter_icons(files))
        names = ",".join(g.name for g in glyphs)
        result = WebfontResult(glyphs=glyphs)
        for fmt in formats:
            name = FontFormat(fmt).value
            result.fonts[name] = f"{font_name}.{name}:{names}".encode()
        if template is not None:
            result.template = f"/* {Path(template).name} */ {names}\n"
        return result


class StubCompiler:
    """Sass compiler that passes the staged stylesheet through unchanged."""

    def __init__(self, css: str | None = None):
        self.css = css
        self.calls: list[dict] = []

    def __call__(self, file, functions, output_style, output_file=None):
        self.calls.append({"file": file, "output_style": output_style})
        css = self.css if self.css is not None else Path(file).read_text()
        source_map = json.dumps(
            {"version": 3, "sources": [Path(file).name], "names": [], "mappings": "AAAA"}
        )
        return CompileResult(css, source_map)


@pytest.fixture
def stub_generator():
    return StubGenerator()


@pytest.fixture
def stub_compiler():
    return StubCompiler()


@pytest.fixture
def stub_toolchain(stub_generator, stub_compiler):
    """Toolchain with stubbed generator and compiler and the real CSS plugins."""
    return Toolchain(generate=stub_generator, compile=stub_compiler)
