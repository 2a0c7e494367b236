"""Constants module for the Figma variables exporter.

Constants are grouped in small classes so related values travel together:

    conversion_constants: value conversion defaults, fallbacks and batch sizes
    token_patterns: keyword sets used to classify and convert variables
    github_constants: GitHub Git Data API defaults and file layout

Usage examples:
    >>> from figma_variables_export.constants import ConversionDefaults
    >>> ConversionDefaults.BASE_FONT_SIZE
    16
"""

from .conversion_constants import ConversionDefaults, FallbackValues, OutputDefaults
from .github_constants import GitHubAPIDefaults, GitHubExportDefaults
from .token_patterns import (
    DURATION_KEYWORDS,
    FONTS_KEYWORDS,
    GRADIENT_KEYWORDS,
    OPACITY_KEYWORDS,
    SHADOWS_KEYWORDS,
    WEIGHT_KEYWORDS,
    ZINDEX_KEYWORDS,
)

__all__ = [
    "ConversionDefaults",
    "FallbackValues",
    "OutputDefaults",
    "GitHubAPIDefaults",
    "GitHubExportDefaults",
    "DURATION_KEYWORDS",
    "FONTS_KEYWORDS",
    "GRADIENT_KEYWORDS",
    "OPACITY_KEYWORDS",
    "SHADOWS_KEYWORDS",
    "WEIGHT_KEYWORDS",
    "ZINDEX_KEYWORDS",
]
