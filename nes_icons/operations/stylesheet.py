"""
Stylesheet build stage.

Compile -> Transform -> Save CSS and source map (concurrently) -> Minify -> Save.

The minifier consumes the transformed CSS, never the raw compiler output, so
the minified stylesheet carries the same browser fallbacks.
"""

from nes_icons.config.settings import BuildConfig
from nes_icons.core.sass_compiler import OUTPUT_STYLE
from nes_icons.core.transforms import Processor, UsageFinding
from nes_icons.pipeline.context import BuildContext, StylesheetPhase
from nes_icons.pipeline.tasks import Leaf, Parallel, Sequential, Task
from nes_icons.pipeline.toolchain import Toolchain
from nes_icons.utils.errors import CompileError
from nes_icons.utils.files import save_output
from nes_icons.utils.logging import logger


def transform_processor(
    config: BuildConfig, toolchain: Toolchain, ctx: BuildContext
) -> Processor:
    """
    Build the transform chain for one run.

    The usage lint is left out in watch mode; otherwise its findings are
    collected into the context.
    """
    lint = None
    if not config.watch:
        lint = toolchain.lint(config.browsers, ctx.usage.append)
    return Processor([toolchain.normalize(), lint])


def report_usage(config: BuildConfig, findings: list[UsageFinding]) -> None:
    """Log feature-usage findings. Findings never fail the build."""
    if not findings:
        return
    log = logger.warning if config.production else logger.debug
    for finding in findings:
        log(finding.message)
    logger.info(f"{len(findings)} feature usage findings for the configured browsers")


def create_stylesheets_task(config: BuildConfig, toolchain: Toolchain) -> Task:
    """Task graph for the stylesheet stage."""

    def compile_sass(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.COMPILING)
        try:
            ctx.compiled = toolchain.compile(
                file=config.staged_stylesheet,
                functions=toolchain.functions,
                output_style=OUTPUT_STYLE,
                output_file=config.css_path,
            )
        except CompileError:
            raise
        except Exception as e:
            raise CompileError(f"Sass compiler failed: {e}") from e

    def process_css(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.TRANSFORMING)
        compiled = ctx.require("compiled")
        ctx.processed = transform_processor(config, toolchain, ctx).process(
            compiled.css,
            to_path=config.css_path,
            prev_map=compiled.map,
        )
        report_usage(config, ctx.usage)

    async def save_css(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.SAVING_PLAIN)
        await save_output(config.css_path, ctx.require("processed").css)

    async def save_map(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.SAVING_PLAIN)
        await save_output(config.map_path, ctx.require("processed").map or "")

    def minify_css(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.MINIFYING)
        ctx.minified = Processor([toolchain.minify()]).process(
            ctx.require("processed").css,
            to_path=config.min_css_path,
            map=False,
        )

    async def save_minified(ctx: BuildContext) -> None:
        ctx.enter(StylesheetPhase.SAVING_MINIFIED)
        await save_output(config.min_css_path, ctx.require("minified").css)

    return Sequential(
        "Create stylesheets",
        [
            Leaf("Compile Sass", compile_sass),
            Leaf("Process CSS", process_css),
            Parallel(
                "Save non-minified files",
                [Leaf("Save CSS", save_css), Leaf("Save sourcemap", save_map)],
            ),
            Sequential(
                "Minify CSS",
                [Leaf("Generate", minify_css), Leaf("Save", save_minified)],
            ),
        ],
    )
