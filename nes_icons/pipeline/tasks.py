"""
Task graph engine.

A graph is built from four node types:

    Leaf(title, action)                 performs an effect
    Sequential(title, children)         runs children one after another
    Parallel(title, children)           runs children concurrently
    Dynamic(title, factory, concurrent) builds its children from the context
                                        just before running them

Graphs are static and can be run any number of times, each time against the
context passed to run_graph. Concurrency is cooperative: parallel children
are asyncio tasks on the running event loop.

Failure semantics:
  - A leaf that raises fails with TaskError(title, cause).
  - A Sequential node stops at the first failing child.
  - A Parallel node lets children that already started run to completion,
    then raises the first failure in completion order. Later failures are
    logged. An error not raised by a leaf is attributed to the Parallel node
    itself. Which failure is first is nondeterministic when children fail
    concurrently.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from nes_icons.utils.errors import TaskError
from nes_icons.utils.logging import logger

Action = Callable[[Any], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class Leaf:
    title: str
    action: Action


@dataclass(frozen=True)
class Sequential:
    title: str
    children: Sequence["Task"]


@dataclass(frozen=True)
class Parallel:
    title: str
    children: Sequence["Task"]


@dataclass(frozen=True)
class Dynamic:
    """A composite whose children depend on context produced by earlier tasks."""

    title: str
    factory: Callable[[Any], Sequence["Task"]]
    concurrent: bool = False


Task = Union[Leaf, Sequential, Parallel, Dynamic]


async def run_graph(task: Task, context: Any) -> None:
    """
    Run a task graph to completion.

    Args:
        task: Root of the graph
        context: Object passed to every leaf action and dynamic factory

    Raises:
        TaskError: If any task fails
    """
    await _run(task, context, 0)


async def _run(task: Task, context: Any, depth: int) -> None:
    indent = "  " * depth
    logger.info(f"{indent}{task.title}")
    start = time.perf_counter()

    if isinstance(task, Leaf):
        await _run_leaf(task, context)
    elif isinstance(task, Sequential):
        await _run_sequential(task.children, context, depth + 1)
    elif isinstance(task, Parallel):
        await _run_parallel(task.title, task.children, context, depth + 1)
    elif isinstance(task, Dynamic):
        try:
            children = list(task.factory(context))
        except Exception as e:
            raise TaskError(task.title, e) from e
        if task.concurrent:
            await _run_parallel(task.title, children, context, depth + 1)
        else:
            await _run_sequential(children, context, depth + 1)
    else:
        raise TypeError(f"Not a task: {task!r}")

    logger.debug(f"{indent}{task.title} completed ({time.perf_counter() - start:.2f}s)")


async def _run_leaf(task: Leaf, context: Any) -> None:
    try:
        result = task.action(context)
        if inspect.isawaitable(result):
            await result
    except TaskError:
        raise
    except Exception as e:
        raise TaskError(task.title, e) from e


async def _run_sequential(children: Sequence[Task], context: Any, depth: int) -> None:
    for child in children:
        await _run(child, context, depth)


async def _run_parallel(
    title: str, children: Sequence[Task], context: Any, depth: int
) -> None:
    running = [asyncio.ensure_future(_run(child, context, depth)) for child in children]
    first_error: TaskError | None = None

    try:
        for finished in asyncio.as_completed(running):
            try:
                await finished
            except Exception as e:
                if not isinstance(e, TaskError):
                    # Not raised by a leaf, so attribute it to this composite
                    e = TaskError(title, e)
                if first_error is None:
                    first_error = e
                else:
                    logger.error(f"Concurrent task also failed: {e}")
    except asyncio.CancelledError:
        for child in running:
            child.cancel()
        raise

    if first_error is not None:
        raise first_error
