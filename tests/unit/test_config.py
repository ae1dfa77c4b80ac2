"""Tests for build configuration."""

from pathlib import Path

from nes_icons.config.browsers import BrowserTarget, Feature
from nes_icons.config.formats import FontFormat
from nes_icons.config.paths import DEFAULT_TEMPLATES_DIR
from nes_icons.config.settings import BuildConfig, resolve_template


def test_from_environment_resolves_paths(project_dir):
    """Test every path is anchored at the project root."""
    config = BuildConfig.from_environment(project_dir, environ={})

    root = project_dir.resolve()
    assert config.output_dir == root / "dist"
    assert config.icons_dir == root / "icons"
    assert config.scss_dir == root / "scss"
    assert config.icon_glob == str(root / "icons" / "*.svg")
    assert config.staged_stylesheet == root / "dist" / "style.scss"


def test_output_paths(config):
    """Test output file names derive from the font name."""
    assert config.font_path(FontFormat.WOFF2).name == "nes-icons.woff2"
    assert config.font_path("eot").name == "nes-icons.eot"
    assert config.css_path.name == "nes-icons.css"
    assert config.map_path.name == "nes-icons.css.map"
    assert config.min_css_path.name == "nes-icons.min.css"
    assert config.scss_variables_path.name == "nes-icons-variables.scss"
    assert config.css_variables_path.name == "nes-icons-variables.css"


def test_formats_cover_all_five(config):
    """Test the default format list."""
    assert [f.value for f in config.formats] == ["eot", "svg", "ttf", "woff", "woff2"]


def test_production_flag(project_dir):
    """Test NES_ICONS_ENV=production switches on production mode."""
    assert BuildConfig.from_environment(project_dir, environ={}).production is False
    assert (
        BuildConfig.from_environment(
            project_dir, environ={"NES_ICONS_ENV": "production"}
        ).production
        is True
    )
    assert (
        BuildConfig.from_environment(
            project_dir, environ={"NES_ICONS_ENV": "development"}
        ).production
        is False
    )


def test_watch_flag(project_dir):
    """Test the watch flag is carried through."""
    assert BuildConfig.from_environment(project_dir, watch=True, environ={}).watch is True


def test_resolve_template_falls_back_to_packaged(tmp_path):
    """Test packaged templates are used when the project has none."""
    path = resolve_template(tmp_path, "variables.scss.njk")
    assert path == DEFAULT_TEMPLATES_DIR / "variables.scss.njk"
    assert path.is_file()


def test_resolve_template_prefers_project(tmp_path):
    """Test a project template overrides the packaged one."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "variables.css.njk").write_text("custom\n")

    assert resolve_template(tmp_path, "variables.css.njk") == templates / "variables.css.njk"


def test_feature_unsupported_in():
    """Test browsers older than the first supported version are listed."""
    feature = Feature("f", "Feature", ("gap",), {"chrome": 84, "firefox": 63})
    targets = (
        BrowserTarget("chrome", 80),
        BrowserTarget("firefox", 115),
        BrowserTarget("ie", 11),
    )
    assert feature.unsupported_in(targets) == ("chrome 80", "ie 11")


def test_feature_matches_keyword_values():
    """Test value-restricted features only match the listed keywords."""
    feature = Feature("grid", "Grid", ("display",), {}, values=("grid",))
    assert feature.matches("display", {"grid"})
    assert not feature.matches("display", {"block"})
    assert not feature.matches("position", {"grid"})


def test_browser_target_str():
    """Test BrowserTarget renders without trailing zeros."""
    assert str(BrowserTarget("safari", 14.1)) == "safari 14.1"
    assert str(BrowserTarget("ie", 11)) == "ie 11"


def test_config_is_absolute_for_relative_root(monkeypatch, project_dir):
    """Test a relative project root is resolved."""
    monkeypatch.chdir(project_dir)
    config = BuildConfig.from_environment(Path("."), environ={})
    assert config.project_root == project_dir.resolve()
