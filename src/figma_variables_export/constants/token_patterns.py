"""Keyword sets used for variable classification and numeric conversion.

All keywords are lower-case; callers lower-case the variable name first.
"""

from typing import Final, Tuple

FONTS_KEYWORDS: Final[Tuple[str, ...]] = (
    "fontfamily",
    "fontweight",
    "fontsize",
    "font",
    "weight",
    "family",
    "typeface",
    "bold",
    "light",
    "medium",
    "regular",
    "textcase",
    "textdecoration",
    "underline",
)

SHADOWS_KEYWORDS: Final[Tuple[str, ...]] = (
    "shadow",
    "elevation",
    "depth",
    "boxshadow",
    "innershadow",
)

GRADIENT_KEYWORDS: Final[Tuple[str, ...]] = (
    "gradient",
    "linear",
    "radial",
)

OPACITY_KEYWORDS: Final[Tuple[str, ...]] = ("opacity", "alpha")

WEIGHT_KEYWORDS: Final[Tuple[str, ...]] = ("weight", "fontweight")

DURATION_KEYWORDS: Final[Tuple[str, ...]] = ("duration", "timing")

ZINDEX_KEYWORDS: Final[Tuple[str, ...]] = ("zindex", "z-index")
