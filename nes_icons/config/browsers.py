"""
Browser support matrix and feature-usage data for the stylesheet lint.

A target browser is listed as (name, oldest supported version). A feature is
reported when any target browser is older than the first version that
supports it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BrowserTarget:
    """A browser that the stylesheet must support."""

    name: str
    version: float

    def __str__(self) -> str:
        return f"{self.name} {self.version:g}"


@dataclass(frozen=True)
class Feature:
    """
    A CSS feature with limited browser support.

    Matches declarations by property name and, when values is set, by any of
    the given keyword values.
    """

    id: str
    title: str
    properties: tuple[str, ...]
    supported_since: dict[str, float]
    values: tuple[str, ...] = ()

    def matches(self, prop: str, keywords: set[str]) -> bool:
        """Check whether a declaration uses this feature."""
        if prop not in self.properties:
            return False
        if not self.values:
            return True
        return any(value in keywords for value in self.values)

    def unsupported_in(self, targets: tuple[BrowserTarget, ...]) -> tuple[str, ...]:
        """List targets that lack support for this feature."""
        missing = []
        for target in targets:
            since = self.supported_since.get(target.name)
            if since is None or target.version < since:
                missing.append(str(target))
        return tuple(missing)


# Roughly the browsers above 1% global usage
DEFAULT_BROWSERS = (
    BrowserTarget("chrome", 109),
    BrowserTarget("edge", 18),
    BrowserTarget("firefox", 115),
    BrowserTarget("safari", 14),
    BrowserTarget("ios_saf", 14),
    BrowserTarget("samsung", 20),
    BrowserTarget("ie", 11),
)

FEATURES = (
    Feature(
        "css-grid",
        "CSS Grid Layout",
        ("display",),
        {"chrome": 57, "edge": 16, "firefox": 52, "safari": 10.1, "ios_saf": 10.3, "samsung": 6.2},
        values=("grid", "inline-grid"),
    ),
    Feature(
        "flexbox-gap",
        "gap property for Flexbox",
        ("gap", "row-gap", "column-gap"),
        {"chrome": 84, "edge": 84, "firefox": 63, "safari": 14.1, "ios_saf": 14.5, "samsung": 14},
    ),
    Feature(
        "css-variables",
        "CSS Variables (Custom Properties)",
        (),
        {"chrome": 49, "edge": 15, "firefox": 31, "safari": 9.1, "ios_saf": 9.3, "samsung": 5},
    ),
    Feature(
        "css-sticky",
        "CSS position:sticky",
        ("position",),
        {"chrome": 56, "edge": 16, "firefox": 59, "safari": 13, "ios_saf": 13, "samsung": 6.2},
        values=("sticky",),
    ),
    Feature(
        "object-fit",
        "CSS3 object-fit/object-position",
        ("object-fit", "object-position"),
        {"chrome": 32, "edge": 79, "firefox": 36, "safari": 10, "ios_saf": 10, "samsung": 4},
    ),
    Feature(
        "css-filters",
        "CSS Filter Effects",
        ("filter", "backdrop-filter"),
        {"chrome": 53, "edge": 12, "firefox": 35, "safari": 9.1, "ios_saf": 9.3, "samsung": 6.2},
    ),
    Feature(
        "css-crisp-edges",
        "Disable CSS image resampling",
        ("image-rendering",),
        {"chrome": 41, "edge": 79, "firefox": 65, "safari": 10, "ios_saf": 10, "samsung": 4},
        values=("pixelated", "crisp-edges"),
    ),
    Feature(
        "user-select-none",
        "CSS user-select: none",
        ("user-select",),
        {"chrome": 54, "edge": 79, "firefox": 69, "samsung": 6.2},
    ),
    Feature(
        "css-appearance",
        "CSS Appearance",
        ("appearance",),
        {"chrome": 84, "edge": 84, "firefox": 80, "safari": 15.4, "ios_saf": 15.4, "samsung": 14},
    ),
)

# Custom properties are matched by name prefix rather than a property list
CUSTOM_PROPERTY_FEATURE = "css-variables"
