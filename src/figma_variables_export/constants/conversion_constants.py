"""Defaults used while converting design-tool values to CSS."""

from typing import Final


class ConversionDefaults:
    """Numeric defaults for value conversion and batching."""

    BASE_FONT_SIZE: Final[int] = 16  # px per rem
    VARIABLE_BATCH_SIZE: Final[int] = 10
    SYNTAX_BATCH_SIZE: Final[int] = 5
    MAX_CACHE_SIZE: Final[int] = 500
    MIN_FONT_WEIGHT: Final[int] = 100
    MAX_FONT_WEIGHT: Final[int] = 900
    CODE_SYNTAX_PLATFORM: Final[str] = "WEB"


class FallbackValues:
    """Deterministic values emitted when a variable cannot be converted."""

    COLOR: Final[str] = "oklch(0 0 0)"
    NUMBER: Final[str] = "0"
    TEXT: Final[str] = ""


class OutputDefaults:
    """Stylesheet output settings."""

    COLOR_FORMAT: Final[str] = "oklch/1"
    SINGLE_THEME_SLUG: Final[str] = "theme"
    LIGHT_SUFFIX: Final[str] = "-light"
    SINGLE_FILE_NAME: Final[str] = "variables.css"
    EMPTY_FILE_CONTENT: Final[str] = "/* No variables exported */"
    HEADER_SOURCE: Final[str] = "Design tokens exported from Figma"
