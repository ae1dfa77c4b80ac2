"""
Build pipeline orchestration.

Runs the three stages in order: staging, font generation, stylesheets.
"""

from nes_icons.config.settings import BuildConfig
from nes_icons.operations.staging import prepare_files_task
from nes_icons.operations.stylesheet import create_stylesheets_task
from nes_icons.operations.webfont import create_webfonts_task
from nes_icons.pipeline.context import BuildContext, StylesheetPhase
from nes_icons.pipeline.tasks import Task, run_graph
from nes_icons.pipeline.toolchain import Toolchain
from nes_icons.utils.errors import TaskError
from nes_icons.utils.logging import logger


def log_failure(error: TaskError) -> None:
    """Report a failed run, naming the task that failed."""
    logger.error(f"{error.task_title} failed: {error.cause}")
    logger.debug("Failure details", exc_info=error.cause)


class BuildPipeline:
    """
    The fixed three-stage build.

    Task graphs are built once and re-run for every build; each run gets a
    fresh BuildContext.
    """

    def __init__(self, config: BuildConfig, toolchain: Toolchain | None = None):
        self.config = config
        self.toolchain = toolchain or Toolchain()
        self.prepare_files = prepare_files_task(config)
        self.webfonts = create_webfonts_task(config, self.toolchain)
        self.stylesheets = create_stylesheets_task(config, self.toolchain)

    @property
    def stages(self) -> list[tuple[str, Task]]:
        return [
            ("prepare", self.prepare_files),
            ("webfonts", self.webfonts),
            ("stylesheets", self.stylesheets),
        ]

    async def run_stylesheets(self, ctx: BuildContext | None = None) -> BuildContext:
        """
        Run the stylesheet stage alone.

        Raises:
            TaskError: If any step fails
        """
        ctx = ctx if ctx is not None else BuildContext()
        try:
            await run_graph(self.stylesheets, ctx)
        except TaskError:
            ctx.enter(StylesheetPhase.FAILED)
            raise
        ctx.enter(StylesheetPhase.DONE)
        return ctx

    async def rebuild_styles(self) -> BuildContext:
        """
        Re-stage the style sources and run the stylesheet stage.

        The compiler reads the staged copies, so they are refreshed first.
        Font generation is skipped.
        """
        ctx = BuildContext()
        await run_graph(self.prepare_files, ctx)
        return await self.run_stylesheets(ctx)

    async def run_all(self) -> BuildContext:
        """
        Run all stages in order against one fresh context.

        Raises:
            TaskError: If any stage fails; later stages are not started
        """
        ctx = BuildContext()
        total = len(self.stages)
        logger.info("Running all build steps")

        for i, (name, graph) in enumerate(self.stages, 1):
            logger.info(f"[{i}/{total}] Running {name}")
            if graph is self.stylesheets:
                await self.run_stylesheets(ctx)
            else:
                await run_graph(graph, ctx)
            logger.info(f"{name} completed")

        logger.info("All steps completed successfully")
        return ctx


async def build(config: BuildConfig, toolchain: Toolchain | None = None) -> int:
    """
    Run the initial build and, in watch mode, keep rebuilding on changes.

    Returns:
        Process exit code: 0 on success, 1 if the initial build failed
        outside watch mode
    """
    pipeline = BuildPipeline(config, toolchain)

    try:
        await pipeline.run_all()
        succeeded = True
    except TaskError as e:
        log_failure(e)
        succeeded = False

    if not config.watch:
        return 0 if succeeded else 1

    # Watch mode starts even when the initial build failed
    from nes_icons.pipeline.watch import WatchCoordinator

    await WatchCoordinator(pipeline).run()
    return 0
