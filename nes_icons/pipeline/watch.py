"""
Watch mode.

Each watched tree has its own queue. A producer task pushes change batches
from watchfiles into it; a worker task pulls one batch at a time and runs the
matching rebuild to completion before pulling the next, so a tree never has
two rebuilds in flight. Both workers also share a lock, so an icon rebuild
and a style rebuild never write the same outputs at once.

  style tree change -> re-stage style sources, then the stylesheet stage
  icon tree change  -> full pipeline

SIGINT, SIGTERM, SIGUSR1, SIGUSR2, interpreter exit and unhandled event loop
errors all call shutdown(), which runs once.
"""

import asyncio
import atexit
import signal
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import watchfiles

from nes_icons.pipeline.runner import BuildPipeline, log_failure
from nes_icons.utils.errors import TaskError
from nes_icons.utils.logging import logger

Changes = set[tuple[watchfiles.Change, str]]
ChangeSource = Callable[[Path, asyncio.Event], AsyncIterator[Changes]]

SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM", "SIGUSR1", "SIGUSR2")


class WatchedTree(str, Enum):
    STYLES = "styles"
    ICONS = "icons"


def watchfiles_source(path: Path, stop_event: asyncio.Event) -> AsyncIterator[Changes]:
    """Recursive change batches for a directory, until stop_event is set."""
    return watchfiles.awatch(path, stop_event=stop_event, recursive=True)


@dataclass
class WatchSubscription:
    """A watched directory, its change queue and the task feeding it."""

    tree: WatchedTree
    path: Path
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    producer: asyncio.Task | None = None
    closed: bool = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.producer is not None:
            self.producer.cancel()


class WatchCoordinator:
    """Rebuilds on source changes until shut down."""

    def __init__(
        self,
        pipeline: BuildPipeline,
        *,
        source: ChangeSource = watchfiles_source,
    ):
        self.pipeline = pipeline
        self.source = source
        self.subscriptions: list[WatchSubscription] = []
        self.rebuilds: dict[WatchedTree, Callable[[], Awaitable[object]]] = {
            WatchedTree.STYLES: pipeline.rebuild_styles,
            WatchedTree.ICONS: pipeline.run_all,
        }
        self.closed = False
        self._workers: list[asyncio.Task] = []
        self._stop_event: asyncio.Event | None = None
        self._finished: asyncio.Future | None = None
        self._rebuild_lock: asyncio.Lock | None = None

    def start(self) -> None:
        """Subscribe to both trees. Must be called from the running event loop."""
        loop = asyncio.get_running_loop()
        config = self.pipeline.config
        self._stop_event = asyncio.Event()
        self._finished = loop.create_future()
        self._rebuild_lock = asyncio.Lock()

        for tree, path in (
            (WatchedTree.STYLES, config.scss_dir),
            (WatchedTree.ICONS, config.icons_dir),
        ):
            subscription = WatchSubscription(tree, path)
            subscription.producer = asyncio.create_task(self._produce(subscription))
            subscription.producer.add_done_callback(self._on_task_done)
            worker = asyncio.create_task(self._consume(subscription))
            worker.add_done_callback(self._on_task_done)
            self.subscriptions.append(subscription)
            self._workers.append(worker)

        # Stays registered until shutdown, so an interpreter exit while watching
        # still tears the subscriptions down
        atexit.register(self.shutdown)

        logger.info("Watching for file changes...")

    def notify(self, tree: WatchedTree, changes: Changes | None = None) -> None:
        """Queue a change notification for a tree."""
        for subscription in self.subscriptions:
            if subscription.tree is tree and not subscription.closed:
                subscription.queue.put_nowait(changes or set())

    async def wait_idle(self) -> None:
        """Wait until every queued change has been rebuilt."""
        await asyncio.gather(*(s.queue.join() for s in self.subscriptions))

    async def _produce(self, subscription: WatchSubscription) -> None:
        async for changes in self.source(subscription.path, self._stop_event):
            subscription.queue.put_nowait(changes)

    async def _consume(self, subscription: WatchSubscription) -> None:
        queue = subscription.queue
        while True:
            changes = set(await queue.get())
            batches = 1
            # Changes that piled up while waiting are covered by this rebuild
            while not queue.empty():
                changes |= queue.get_nowait()
                batches += 1

            try:
                async with self._rebuild_lock:
                    logger.info(
                        f"Detected a change to {subscription.tree.value}. Rebuilding..."
                    )
                    for change, path in sorted(changes, key=lambda c: c[1]):
                        logger.debug(f"  {change.name}: {path}")
                    await self._rebuild(subscription.tree)
            finally:
                for _ in range(batches):
                    queue.task_done()

            logger.info("Watching for file changes...")

    async def _rebuild(self, tree: WatchedTree) -> None:
        try:
            await self.rebuilds[tree]()
        except TaskError as e:
            # Previous outputs stay in place; keep watching
            log_failure(e)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Watcher stopped unexpectedly: {error}")
            self.shutdown()

    def _on_loop_error(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        loop.default_exception_handler(context)
        self.shutdown()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        installed = []
        for name in SHUTDOWN_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                loop.add_signal_handler(signum, self.shutdown)
            except (NotImplementedError, RuntimeError):
                # No loop signal support on this platform or thread
                continue
            installed.append(signum)
        return installed

    def shutdown(self) -> None:
        """
        Stop both subscriptions and release run().

        Safe to call any number of times; only the first call has an effect.
        In-flight rebuilds are not awaited.
        """
        if self.closed:
            return
        self.closed = True
        atexit.unregister(self.shutdown)
        logger.info("Cleaning up...")

        if self._stop_event is not None:
            self._stop_event.set()
        for subscription in self.subscriptions:
            subscription.close()
        for worker in self._workers:
            worker.cancel()
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(None)

    async def run(self) -> None:
        """Watch until a termination signal or shutdown() call."""
        loop = asyncio.get_running_loop()
        self.start()

        signals = self._install_signal_handlers(loop)
        previous_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._on_loop_error)
        try:
            await self._finished
        finally:
            loop.set_exception_handler(previous_handler)
            for signum in signals:
                loop.remove_signal_handler(signum)
            self.shutdown()
