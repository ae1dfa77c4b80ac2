"""
Project layout names.

Centralizes directory and file names so stages never hardcode them.
Absolute paths are resolved once by BuildConfig.
"""

from pathlib import Path

PACKAGE_ROOT = Path(__file__).parent.parent
DEFAULT_TEMPLATES_DIR = PACKAGE_ROOT / "templates"

# Input directories, relative to the project directory
ICONS_DIR = "icons"
SCSS_DIR = "scss"
TEMPLATES_DIR = "templates"

# Output directory, relative to the project directory
DIST_DIR = "dist"

ICON_PATTERN = "*.svg"
ENTRY_STYLESHEET = "style.scss"

# Variable file templates
SCSS_TEMPLATE = "variables.scss.njk"
CSS_TEMPLATE = "variables.css.njk"
