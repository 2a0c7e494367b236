"""Name-based variable classification.

Precedence is fixed and load-bearing, a name matching several keyword sets
always lands in the first one:

1. ``color`` substring            -> Category.COLOR
2. font keywords                  -> Category.FONT
3. shadow keywords (effects only) -> Category.SHADOW
4. gradient keywords (effects)    -> Category.GRADIENT
5. anything else                  -> Category.MEASURE
"""

from typing import Iterable

from ..constants import FONTS_KEYWORDS, GRADIENT_KEYWORDS, SHADOWS_KEYWORDS
from ..models import Category


def _contains_any(name: str, keywords: Iterable[str]) -> bool:
    return any(keyword in name for keyword in keywords)


def classify(name: str, include_effects: bool = False) -> Category:
    """Map a variable name to its stylesheet category (case-insensitive)."""
    lower_name = name.lower()

    if "color" in lower_name:
        return Category.COLOR

    if _contains_any(lower_name, FONTS_KEYWORDS):
        return Category.FONT

    if include_effects:
        if _contains_any(lower_name, SHADOWS_KEYWORDS):
            return Category.SHADOW
        if _contains_any(lower_name, GRADIENT_KEYWORDS):
            return Category.GRADIENT

    return Category.MEASURE


class TypeClassifier:
    """Classifier bound to one category variant."""

    def __init__(self, include_effects: bool = False):
        self.include_effects = include_effects

    def __call__(self, name: str) -> Category:
        return classify(name, self.include_effects)
