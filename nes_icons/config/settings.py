"""
Build configuration.

A single BuildConfig is constructed at process start and passed to every
stage; no stage looks paths or flags up on its own.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nes_icons.config.browsers import DEFAULT_BROWSERS, BrowserTarget
from nes_icons.config.formats import FONT_FORMATS, FONT_NAME, FontFormat
from nes_icons.config.paths import (
    CSS_TEMPLATE,
    DEFAULT_TEMPLATES_DIR,
    DIST_DIR,
    ENTRY_STYLESHEET,
    ICON_PATTERN,
    ICONS_DIR,
    SCSS_DIR,
    SCSS_TEMPLATE,
    TEMPLATES_DIR,
)

ENVIRONMENT_VARIABLE = "NES_ICONS_ENV"


def resolve_template(project_root: Path, name: str) -> Path:
    """Prefer the project's template, falling back to the packaged default."""
    candidate = project_root / TEMPLATES_DIR / name
    if candidate.is_file():
        return candidate
    return DEFAULT_TEMPLATES_DIR / name


@dataclass(frozen=True)
class BuildConfig:
    """Resolved paths and flags for one build process."""

    project_root: Path
    output_dir: Path
    icons_dir: Path
    scss_dir: Path
    scss_template: Path
    css_template: Path
    font_name: str = FONT_NAME
    formats: tuple[FontFormat, ...] = FONT_FORMATS
    icon_pattern: str = ICON_PATTERN
    entry_stylesheet: str = ENTRY_STYLESHEET
    browsers: tuple[BrowserTarget, ...] = DEFAULT_BROWSERS
    watch: bool = False
    production: bool = False

    @classmethod
    def from_environment(
        cls,
        project_root: Path,
        *,
        watch: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> "BuildConfig":
        """
        Build the configuration for a project directory.

        Args:
            project_root: Directory holding icons/, scss/ and templates/
            watch: Whether watch mode is enabled
            environ: Environment to read the production flag from

        Returns:
            BuildConfig with all paths absolute
        """
        environ = os.environ if environ is None else environ
        root = Path(project_root).resolve()
        return cls(
            project_root=root,
            output_dir=root / DIST_DIR,
            icons_dir=root / ICONS_DIR,
            scss_dir=root / SCSS_DIR,
            scss_template=resolve_template(root, SCSS_TEMPLATE),
            css_template=resolve_template(root, CSS_TEMPLATE),
            watch=watch,
            production=environ.get(ENVIRONMENT_VARIABLE, "").lower() == "production",
        )

    @property
    def icon_glob(self) -> str:
        """Glob matching every icon source file."""
        return str(self.icons_dir / self.icon_pattern)

    def font_path(self, fmt: FontFormat) -> Path:
        """Output path of one binary font format."""
        return self.output_dir / f"{self.font_name}.{FontFormat(fmt).value}"

    @property
    def scss_variables_path(self) -> Path:
        return self.output_dir / f"{self.font_name}-variables.scss"

    @property
    def css_variables_path(self) -> Path:
        return self.output_dir / f"{self.font_name}-variables.css"

    @property
    def staged_stylesheet(self) -> Path:
        """The primary stylesheet after staging copied it to the output directory."""
        return self.output_dir / self.entry_stylesheet

    @property
    def css_path(self) -> Path:
        return self.output_dir / f"{self.font_name}.css"

    @property
    def map_path(self) -> Path:
        return self.output_dir / f"{self.font_name}.css.map"

    @property
    def min_css_path(self) -> Path:
        return self.output_dir / f"{self.font_name}.min.css"
