"""
External tools used by the build stages.

Stages call the font generator, Sass compiler and CSS plugins only through a
Toolchain, so any of them can be replaced (tests use stubs).
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from nes_icons.core.generator import WebfontResult, generate_webfont
from nes_icons.core.sass_compiler import SASS_FUNCTIONS, CompileResult, compile_stylesheet
from nes_icons.core.transforms import BrowserNormalize, Minify, UsageLint

CssPlugin = Callable[[str], str]


@dataclass(frozen=True)
class Toolchain:
    """
    Font generator, style compiler and CSS plugin factories.

    generate(files=, font_name=, formats=, template=) -> WebfontResult
    compile(file=, functions=, output_style=, output_file=) -> CompileResult
    normalize() -> plugin
    lint(browsers, on_feature_usage) -> plugin
    minify() -> plugin
    """

    generate: Callable[..., WebfontResult] = generate_webfont
    compile: Callable[..., CompileResult] = compile_stylesheet
    functions: Mapping[str, Callable] = field(default_factory=lambda: dict(SASS_FUNCTIONS))
    normalize: Callable[[], CssPlugin] = BrowserNormalize
    lint: Callable[..., CssPlugin] = UsageLint
    minify: Callable[[], CssPlugin] = Minify
