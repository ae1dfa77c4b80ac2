"""
Typed build context shared by the tasks of one pipeline run.

Each field is populated by exactly one task and read by later tasks; graph
ordering guarantees a field is set before it is read.
"""

from dataclasses import dataclass, field
from enum import Enum

from nes_icons.core.generator import WebfontResult
from nes_icons.core.sass_compiler import CompileResult
from nes_icons.core.transforms import ProcessResult, UsageFinding
from nes_icons.utils.errors import ContextError


class StylesheetPhase(str, Enum):
    """Progress of the stylesheet stage within one run."""

    IDLE = "idle"
    COMPILING = "compiling"
    TRANSFORMING = "transforming"
    SAVING_PLAIN = "saving-plain"
    MINIFYING = "minifying"
    SAVING_MINIFIED = "saving-minified"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildContext:
    """Artifacts produced during one pipeline run."""

    webfonts: WebfontResult | None = None
    scss_variables: WebfontResult | None = None
    css_variables: WebfontResult | None = None
    compiled: CompileResult | None = None
    processed: ProcessResult | None = None
    minified: ProcessResult | None = None
    usage: list[UsageFinding] = field(default_factory=list)
    stylesheet_phase: StylesheetPhase = StylesheetPhase.IDLE

    def require(self, name: str):
        """
        Read a field that an earlier task must have populated.

        Raises:
            ContextError: If the field is still unset
        """
        value = getattr(self, name)
        if value is None:
            raise ContextError(f"Build context field '{name}' has not been produced yet")
        return value

    def enter(self, phase: StylesheetPhase) -> None:
        """Advance the stylesheet state machine. DONE and FAILED are terminal."""
        if self.stylesheet_phase in (StylesheetPhase.FAILED, StylesheetPhase.DONE):
            return
        self.stylesheet_phase = phase
