"""Tests for the CSS transform chain."""

import json
from pathlib import Path

import pytest

from nes_icons.config.browsers import DEFAULT_BROWSERS, BrowserTarget
from nes_icons.core.transforms import (
    BrowserNormalize,
    Minify,
    Processor,
    UsageLint,
    iter_declarations,
    parse_stylesheet,
)
from nes_icons.utils.errors import TransformError


def test_normalize_adds_prefixes_before_standard_property():
    """Test prefixed fallbacks precede the standard declaration."""
    css = BrowserNormalize()(".a { user-select: none; }")

    assert "-webkit-user-select: none;" in css
    assert "-moz-user-select: none;" in css
    assert "-ms-user-select: none;" in css
    assert css.index("-webkit-user-select") < css.index(" user-select: none")


def test_normalize_keeps_existing_prefix():
    """Test an author-written prefix is not duplicated."""
    css = BrowserNormalize()(".a { -webkit-user-select: none; user-select: none; }")
    assert css.count("-webkit-user-select") == 1


def test_normalize_pixelated_fallbacks():
    """Test image-rendering: pixelated gets legacy fallbacks."""
    css = BrowserNormalize()(".a { image-rendering: pixelated; }")

    assert "-ms-interpolation-mode: nearest-neighbor;" in css
    assert "image-rendering: -moz-crisp-edges;" in css
    assert "image-rendering: crisp-edges;" in css
    assert css.rstrip().endswith("image-rendering: pixelated; }")


def test_normalize_preserves_line_count():
    """Test fallbacks are inserted on the line of the declaration they precede."""
    source = ".a {\n  user-select: none;\n  position: sticky;\n}\n"
    css = BrowserNormalize()(source)

    assert css.count("\n") == source.count("\n")
    assert "position: -webkit-sticky;" in css.splitlines()[2]


def test_normalize_descends_into_media_and_prefixed_at_rules():
    """Test declarations inside conditional and vendor at-rules are rewritten."""
    css = BrowserNormalize()(
        "@media (min-width: 10px) { .a { appearance: none; } }\n"
        "@-webkit-keyframes blink { from { user-select: none; } }\n"
    )
    assert "-webkit-appearance: none;" in css
    assert "-webkit-user-select: none;" in css


def test_normalize_leaves_unrelated_css_alone():
    """Test CSS without matching declarations round-trips unchanged."""
    source = "/* comment */\n.a {\n  color: red;\n}\n"
    assert BrowserNormalize()(source) == source


def test_parse_error_is_transform_error():
    """Test unparseable CSS fails with TransformError."""
    with pytest.raises(TransformError, match="CSS syntax error"):
        parse_stylesheet(".a { color: red; } .b")


def test_iter_declarations_in_source_order():
    """Test declarations are found in nested blocks in order."""
    nodes = parse_stylesheet(
        ".a { color: red; } @media print { .b { display: none; } } .c { gap: 1px; }"
    )
    assert [d.lower_name for d in iter_declarations(nodes)] == ["color", "display", "gap"]


def test_lint_reports_unsupported_features():
    """Test findings are reported for each feature with missing support."""
    findings = []
    lint = UsageLint(DEFAULT_BROWSERS, findings.append)
    source = ".a { display: grid; gap: 4px; --size: 1px; width: var(--size); color: red; }"

    assert lint(source) == source
    assert [f.feature for f in findings] == [
        "css-grid",
        "flexbox-gap",
        "css-variables",
        "css-variables",
    ]
    assert "ie 11" in findings[0].browsers
    assert findings[0].line == 1


def test_lint_respects_browser_list():
    """Test no findings when every target supports the feature."""
    findings = []
    lint = UsageLint((BrowserTarget("chrome", 120), BrowserTarget("firefox", 120)), findings.append)

    lint(".a { display: grid; gap: 4px; }")

    assert findings == []


def test_lint_finding_message():
    """Test the human-readable finding text."""
    findings = []
    UsageLint((BrowserTarget("ie", 11),), findings.append)(".a {\n  user-select: none;\n}")

    assert findings[0].message == (
        "CSS user-select: none not supported by: ie 11 (user-select-none) at 2:3"
    )


def test_minify_keeps_bang_comments():
    """Test the minifier drops ordinary comments only."""
    css = Minify()("/*! keep */\n.a {\n  color: red;\n}\n/* drop */\n")

    assert "/*! keep */" in css
    assert ".a{color:red}" in css
    assert "drop" not in css


def test_processor_runs_plugins_in_order_and_skips_none():
    """Test plugin order and disabled plugins."""
    processor = Processor([lambda css: css + "a", None, lambda css: css + "b"])
    result = processor.process("", to_path=Path("out.css"), map=False)

    assert result.css == "ab"
    assert result.map is None


def test_processor_carries_source_map():
    """Test the previous map is kept and pointed at the output file."""
    prev_map = json.dumps({"version": 3, "sources": ["style.scss"], "names": [], "mappings": "AAAA"})

    result = Processor([]).process(
        ".a{}", to_path=Path("dist/nes-icons.css"), prev_map=prev_map
    )

    data = json.loads(result.map)
    assert data["file"] == "nes-icons.css"
    assert data["sources"] == ["style.scss"]
    assert result.css.endswith("/*# sourceMappingURL=nes-icons.css.map */\n")


def test_processor_wraps_plugin_errors():
    """Test a failing plugin surfaces as TransformError naming the plugin."""

    class Broken:
        name = "broken"

        def __call__(self, css):
            raise ValueError("no")

    with pytest.raises(TransformError, match="broken: no"):
        Processor([Broken()]).process(".a{}", to_path=Path("x.css"))


def test_processor_rejects_invalid_source_map():
    """Test a malformed incoming map is a TransformError."""
    with pytest.raises(TransformError, match="Invalid source map"):
        Processor([]).process(".a{}", to_path=Path("x.css"), prev_map="{not json")
