"""
Font generation stage.

Three sub-pipelines run concurrently, each Generate -> Save:
  1. binary fonts, one file per format
  2. Sass variable file
  3. CSS variable file

All three pass the same icon glob and font name to the generator so glyph
names and codepoints agree between the fonts and both variable files.
"""

import asyncio
from pathlib import Path

from nes_icons.config.settings import BuildConfig
from nes_icons.core.font_io import get_size_kb
from nes_icons.core.generator import WebfontResult
from nes_icons.pipeline.context import BuildContext
from nes_icons.pipeline.tasks import Dynamic, Leaf, Parallel, Sequential, Task
from nes_icons.pipeline.toolchain import Toolchain
from nes_icons.utils.errors import GenerationError
from nes_icons.utils.files import save_output
from nes_icons.utils.logging import logger


async def generate(
    config: BuildConfig,
    toolchain: Toolchain,
    *,
    formats=(),
    template: Path | None = None,
) -> WebfontResult:
    """
    Run the font generator over the configured icon set.

    Raises:
        GenerationError: If the generator fails for any reason
    """
    try:
        result = await asyncio.to_thread(
            toolchain.generate,
            files=config.icon_glob,
            font_name=config.font_name,
            formats=tuple(formats),
            template=template,
        )
    except GenerationError:
        raise
    except Exception as e:
        raise GenerationError(f"Font generator failed: {e}") from e

    logger.debug(f"Generated {len(result.glyphs)} glyphs")
    for name, data in result.fonts.items():
        logger.debug(f"  {name}: {get_size_kb(data):.1f} KB")
    return result


def save_fonts(config: BuildConfig, ctx: BuildContext) -> list[Task]:
    """One write task per font format, bound to the bytes generated earlier."""
    result: WebfontResult = ctx.require("webfonts")
    tasks = []
    for fmt in config.formats:
        try:
            data = result[fmt]
        except KeyError as e:
            raise GenerationError(f"Font generator produced no {fmt.value} data") from e
        tasks.append(
            Leaf(fmt.value, lambda _, path=config.font_path(fmt), data=data: save_output(path, data))
        )
    return tasks


def _template_text(ctx: BuildContext, name: str) -> str:
    text = ctx.require(name).template
    if text is None:
        raise GenerationError(f"Font generator rendered no template for {name}")
    return text


def create_webfonts_task(config: BuildConfig, toolchain: Toolchain) -> Task:
    """Task graph for the font generation stage."""

    async def generate_fonts(ctx: BuildContext) -> None:
        ctx.webfonts = await generate(config, toolchain, formats=config.formats)

    async def generate_scss_variables(ctx: BuildContext) -> None:
        ctx.scss_variables = await generate(config, toolchain, template=config.scss_template)

    async def generate_css_variables(ctx: BuildContext) -> None:
        ctx.css_variables = await generate(config, toolchain, template=config.css_template)

    return Parallel(
        "Create webfonts",
        [
            Sequential(
                "Create font files",
                [
                    Leaf("Generate", generate_fonts),
                    Dynamic("Save", lambda ctx: save_fonts(config, ctx), concurrent=True),
                ],
            ),
            Sequential(
                "Create Sass variable file",
                [
                    Leaf("Generate", generate_scss_variables),
                    Leaf(
                        "Save",
                        lambda ctx: save_output(
                            config.scss_variables_path, _template_text(ctx, "scss_variables")
                        ),
                    ),
                ],
            ),
            Sequential(
                "Create CSS variable file",
                [
                    Leaf("Generate", generate_css_variables),
                    Leaf(
                        "Save",
                        lambda ctx: save_output(
                            config.css_variables_path, _template_text(ctx, "css_variables")
                        ),
                    ),
                ],
            ),
        ],
    )
