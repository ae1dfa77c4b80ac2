"""
Sass compilation.

Wraps libsass and provides the custom function table available to the
project's stylesheets.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import sass

from nes_icons.utils.errors import CompileError

OUTPUT_STYLE = "expanded"

# Base font size for px to em conversion
BASE_FONT_SIZE = 16

# Extensions preferred over a plain .css file of the same name
SASS_EXTENSIONS = (".scss", ".sass")


@dataclass(frozen=True)
class CompileResult:
    """Compiled CSS and its source map."""

    css: str
    map: str


def _number(value, name: str) -> float:
    if not isinstance(value, sass.SassNumber):
        raise TypeError(f"${name} must be a number, got {value!r}")
    return float(value.value)


def em(pixels, context):
    """em($pixels, $context): convert a pixel length to ems."""
    base = _number(context, "context") or BASE_FONT_SIZE
    return sass.SassNumber(_number(pixels, "pixels") / base, "em")


def strip_unit(number):
    """strip-unit($number): drop the unit of a number."""
    return sass.SassNumber(_number(number, "number"), "")


def pixel_size(scale):
    """pixel-size($scale): size of one icon pixel for a scale factor."""
    return sass.SassNumber(_number(scale, "scale") * 2, "px")


SASS_FUNCTIONS: dict[str, Callable] = {
    "em": em,
    "strip-unit": strip_unit,
    "pixel-size": pixel_size,
}


def resolve_import(path: str, prev: str):
    """
    Resolve @import "name" to a Sass file when a .css file shares its name.

    libsass rejects such imports as ambiguous, but the font stage writes
    nes-icons-variables.scss and nes-icons-variables.css side by side.
    Every other import is left to libsass.

    Args:
        path: Import path as written in the stylesheet
        prev: Resolved path of the importing file

    Returns:
        [(filename, source)] for libsass, or None to fall through
    """
    target = Path(prev).parent / path
    if target.suffix in (*SASS_EXTENSIONS, ".css"):
        return None

    names = (target.name, f"_{target.name}")
    if not any((target.parent / f"{name}.css").is_file() for name in names):
        return None

    found = [
        target.parent / f"{name}{ext}"
        for name in names
        for ext in SASS_EXTENSIONS
        if (target.parent / f"{name}{ext}").is_file()
    ]
    if len(found) != 1:
        return None

    return [(str(found[0]), found[0].read_text(encoding="utf-8"))]


def compile_stylesheet(
    file: Path,
    functions: Mapping[str, Callable] = SASS_FUNCTIONS,
    output_style: str = OUTPUT_STYLE,
    output_file: Path | None = None,
) -> CompileResult:
    """
    Compile a Sass file to CSS with a source map.

    Blocks until libsass finishes.

    Args:
        file: Primary stylesheet
        functions: Custom functions, keyed by Sass name
        output_style: libsass output style
        output_file: Where the CSS will be written; source map paths are
            made relative to it. Defaults to the input with a .css suffix.

    Returns:
        CompileResult with CSS text and source map JSON

    Raises:
        CompileError: On syntax or resolution errors
    """
    output_file = output_file or file.with_suffix(".css")
    try:
        css, source_map = sass.compile(
            filename=str(file),
            output_style=output_style,
            custom_functions=dict(functions),
            importers=[(0, resolve_import)],
            source_map_filename=f"{output_file}.map",
            output_filename_hint=str(output_file),
            omit_source_map_url=True,
        )
    except sass.CompileError as e:
        raise CompileError(str(e)) from e
    except OSError as e:
        raise CompileError(f"Cannot read {file}: {e}") from e
    return CompileResult(css, source_map)
