"""
CSS transform chain.

A Processor runs CSS text through an ordered list of plugins and attaches
source map metadata to the result. Three plugins are provided:

- BrowserNormalize adds vendor-prefixed fallbacks for the target browsers
- UsageLint reports features the target browsers do not support
- Minify strips whitespace and comments (keeping /*! ... */ comments)
"""

import json
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import rcssmin
import tinycss2
from tinycss2.ast import Declaration, WhitespaceToken

from nes_icons.config.browsers import (
    CUSTOM_PROPERTY_FEATURE,
    FEATURES,
    BrowserTarget,
    Feature,
)
from nes_icons.utils.errors import TransformError

# At-rules whose block holds further rules
RULE_AT_RULES = {"media", "supports", "document", "layer", "container", "keyframes"}

# At-rules whose block holds declarations
DECLARATION_AT_RULES = {"font-face", "page"}

# Property -> prefixed fallbacks, emitted before the standard declaration
PROPERTY_PREFIXES = {
    "user-select": ("-webkit-user-select", "-moz-user-select", "-ms-user-select"),
    "appearance": ("-webkit-appearance", "-moz-appearance"),
    "backdrop-filter": ("-webkit-backdrop-filter",),
    "text-size-adjust": ("-webkit-text-size-adjust", "-moz-text-size-adjust"),
    "mask-image": ("-webkit-mask-image",),
}

# (property, keyword) -> fallback declarations
VALUE_FALLBACKS = {
    ("image-rendering", "pixelated"): (
        ("-ms-interpolation-mode", "nearest-neighbor"),
        ("image-rendering", "-moz-crisp-edges"),
        ("image-rendering", "crisp-edges"),
    ),
    ("position", "sticky"): (("position", "-webkit-sticky"),),
}


@dataclass(frozen=True)
class UsageFinding:
    """A declaration using a feature some target browsers lack."""

    feature: str
    title: str
    browsers: tuple[str, ...]
    line: int
    column: int

    @property
    def message(self) -> str:
        return (
            f"{self.title} not supported by: {', '.join(self.browsers)} "
            f"({self.feature}) at {self.line}:{self.column}"
        )


@dataclass(frozen=True)
class ProcessResult:
    """Processor output: CSS text and an optional source map."""

    css: str
    map: str | None = None


def _raise_on_errors(nodes: list) -> None:
    for node in nodes:
        if node.type == "error":
            raise TransformError(
                f"CSS syntax error at {node.source_line}:{node.source_column}: "
                f"{node.message}"
            )


def parse_stylesheet(css: str) -> list:
    """Parse CSS, keeping comments and whitespace so serialization is lossless."""
    nodes = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
    _raise_on_errors(nodes)
    return nodes


def _parse_declarations(content: list) -> list:
    nodes = tinycss2.parse_blocks_contents(content)
    _raise_on_errors(nodes)
    return nodes


def _parse_rules(content: list) -> list:
    nodes = tinycss2.parse_rule_list(content)
    _raise_on_errors(nodes)
    return nodes


def _at_keyword(node) -> str:
    """At-rule name without any vendor prefix."""
    keyword = node.lower_at_keyword
    if keyword.startswith("-"):
        keyword = keyword.split("-", 2)[-1]
    return keyword


def rewrite_declaration_blocks(nodes: list, rewrite: Callable[[list], list]) -> list:
    """
    Apply rewrite to every declaration block in a rule list.

    Args:
        nodes: Parsed rule list; modified in place
        rewrite: Receives a block's nodes and returns the replacement nodes

    Returns:
        The same rule list
    """
    for node in nodes:
        if node.type == "qualified-rule":
            node.content = rewrite(_parse_declarations(node.content))
        elif node.type == "at-rule" and node.content is not None:
            keyword = _at_keyword(node)
            if keyword in DECLARATION_AT_RULES:
                node.content = rewrite(_parse_declarations(node.content))
            elif keyword in RULE_AT_RULES:
                node.content = rewrite_declaration_blocks(
                    _parse_rules(node.content), rewrite
                )
    return nodes


def iter_declarations(nodes: list) -> Iterator[Declaration]:
    """Yield every declaration in a rule list, in source order."""
    collected: list[Declaration] = []

    def _collect(block: list) -> list:
        collected.extend(n for n in block if n.type == "declaration")
        return block

    rewrite_declaration_blocks(nodes, _collect)
    return iter(collected)


def _keywords(declaration: Declaration) -> set[str]:
    return {token.lower_value for token in declaration.value if token.type == "ident"}


def _uses_var(tokens: Iterable) -> bool:
    for token in tokens:
        if token.type == "function":
            if token.lower_name == "var" or _uses_var(token.arguments):
                return True
    return False


def _declaration(template: Declaration, name: str, value: list) -> Declaration:
    return Declaration(
        template.source_line,
        template.source_column,
        name,
        name.lower(),
        value,
        template.important,
    )


class BrowserNormalize:
    """
    Add vendor-prefixed fallbacks before standard declarations.

    Fallbacks are placed on the same line as the declaration they precede so
    line numbers of the incoming source map stay valid.
    """

    name = "browser-normalize"

    def _rewrite_block(self, block: list) -> list:
        present = {n.lower_name for n in block if n.type == "declaration"}
        result: list = []
        for node in block:
            if node.type == "declaration":
                for fallback in self._fallbacks(node, present):
                    result.append(fallback)
                    result.append(
                        WhitespaceToken(node.source_line, node.source_column, " ")
                    )
            result.append(node)
        return result

    def _fallbacks(self, node: Declaration, present: set[str]) -> list[Declaration]:
        fallbacks = [
            _declaration(node, prefixed, node.value)
            for prefixed in PROPERTY_PREFIXES.get(node.lower_name, ())
            if prefixed not in present
        ]
        for keyword in _keywords(node):
            for prop, value in VALUE_FALLBACKS.get((node.lower_name, keyword), ()):
                if prop != node.lower_name and prop in present:
                    continue
                tokens = tinycss2.parse_component_value_list(f" {value}")
                fallbacks.append(_declaration(node, prop, tokens))
        return fallbacks

    def __call__(self, css: str) -> str:
        nodes = rewrite_declaration_blocks(parse_stylesheet(css), self._rewrite_block)
        return tinycss2.serialize(nodes)


class UsageLint:
    """
    Report declarations that use features unsupported by the target browsers.

    The CSS passes through unchanged.
    """

    name = "usage-lint"

    def __init__(
        self,
        browsers: tuple[BrowserTarget, ...],
        on_feature_usage: Callable[[UsageFinding], None],
        features: tuple[Feature, ...] = FEATURES,
    ):
        self.browsers = browsers
        self.on_feature_usage = on_feature_usage
        self.features = features

    def _report(self, feature: Feature, node: Declaration) -> None:
        missing = feature.unsupported_in(self.browsers)
        if missing:
            self.on_feature_usage(
                UsageFinding(
                    feature.id,
                    feature.title,
                    missing,
                    node.source_line,
                    node.source_column,
                )
            )

    def __call__(self, css: str) -> str:
        by_id = {feature.id: feature for feature in self.features}
        for node in iter_declarations(parse_stylesheet(css)):
            keywords = _keywords(node)
            for feature in self.features:
                if feature.matches(node.lower_name, keywords):
                    self._report(feature, node)
            custom = by_id.get(CUSTOM_PROPERTY_FEATURE)
            if custom and (node.name.startswith("--") or _uses_var(node.value)):
                self._report(custom, node)
        return css


class Minify:
    """Minify CSS, keeping /*! ... */ comments."""

    name = "minify"

    def __call__(self, css: str) -> str:
        return rcssmin.cssmin(css, keep_bang_comments=True)


def _chain_map(prev_map: str | None, to_path: Path) -> str:
    """Carry the previous map forward, pointing it at the new output file."""
    if prev_map:
        try:
            data = json.loads(prev_map)
        except json.JSONDecodeError as e:
            raise TransformError(f"Invalid source map: {e}") from e
    else:
        data = {"version": 3, "sources": [], "names": [], "mappings": ""}
    data["file"] = to_path.name
    return json.dumps(data)


class Processor:
    """
    An ordered chain of CSS plugins.

    A plugin is any callable taking and returning CSS text. None entries are
    accepted and skipped, which is how a plugin is disabled.
    """

    def __init__(self, plugins: Iterable[Callable[[str], str] | None]):
        self.plugins = [plugin for plugin in plugins if plugin is not None]

    def process(
        self,
        css: str,
        *,
        to_path: Path,
        prev_map: str | None = None,
        map: bool = True,
    ) -> ProcessResult:
        """
        Run every plugin over css.

        Args:
            css: Input CSS
            to_path: Path the output will be written to
            prev_map: Source map of the input, carried into the output map
            map: Whether to produce a source map and a sourceMappingURL comment

        Returns:
            ProcessResult

        Raises:
            TransformError: If any plugin fails
        """
        for plugin in self.plugins:
            name = getattr(plugin, "name", type(plugin).__name__)
            try:
                css = plugin(css)
            except TransformError:
                raise
            except Exception as e:
                raise TransformError(f"{name}: {e}") from e

        if not map:
            return ProcessResult(css)

        source_map = _chain_map(prev_map, to_path)
        css = f"{css.rstrip()}\n\n/*# sourceMappingURL={to_path.name}.map */\n"
        return ProcessResult(css, source_map)
