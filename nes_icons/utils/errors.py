"""
Exception types raised by the build pipeline.
"""


class BuildError(Exception):
    """Base class for all build failures."""


class StagingError(BuildError):
    """Output directory creation or style source copy failed."""


class GenerationError(BuildError):
    """Font or variable file generation failed."""


class CompileError(BuildError):
    """The Sass compiler rejected the stylesheet."""


class TransformError(BuildError):
    """A CSS transform plugin failed."""


class OutputError(BuildError):
    """Writing a build artifact failed."""


class ContextError(BuildError):
    """A task read a context field that no earlier task populated."""


class TaskError(BuildError):
    """
    A task in the graph failed.

    Wraps the original exception together with the title of the leaf task
    that raised it.
    """

    def __init__(self, task_title: str, cause: BaseException):
        super().__init__(f"{task_title}: {cause}")
        self.task_title = task_title
        self.cause = cause
