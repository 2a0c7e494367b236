"""Tests for name-based variable classification."""

import pytest

from figma_variables_export.conversion import TypeClassifier, classify
from figma_variables_export.models import Category


class TestClassify:
    """Test the fixed precedence of classify()."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("borderColor", Category.COLOR),
            ("spacing-md", Category.MEASURE),
            ("fontWeightBold", Category.FONT),
            ("typography/family", Category.FONT),
            ("radius/lg", Category.MEASURE),
        ],
    )
    def test_basic_categories(self, name, expected):
        assert classify(name) == expected

    def test_color_wins_over_font_keywords(self):
        """A name matching both sets always lands in the first one."""
        assert classify("fontColor") == Category.COLOR
        assert classify("text/boldColor") == Category.COLOR

    def test_case_insensitive(self):
        assert classify("BRAND/PRIMARY-COLOR") == Category.COLOR
        assert classify("Font/Size") == Category.FONT

    def test_effect_categories_only_when_enabled(self):
        assert classify("card/shadow") == Category.MEASURE
        assert classify("card/shadow", include_effects=True) == Category.SHADOW
        assert classify("hero/gradient", include_effects=True) == Category.GRADIENT

    def test_shadow_precedes_gradient(self):
        assert classify("shadow/gradient", include_effects=True) == Category.SHADOW

    def test_font_precedes_effects(self):
        assert classify("font/shadow", include_effects=True) == Category.FONT

    def test_deterministic(self):
        names = ["borderColor", "fontWeightBold", "elevation/1", "spacing/2"]
        first = [classify(n, True) for n in names]
        assert first == [classify(n, True) for n in names]


class TestTypeClassifier:
    def test_bound_variant(self):
        classifier = TypeClassifier(include_effects=True)
        assert classifier("box/shadow") == Category.SHADOW
        assert TypeClassifier()("box/shadow") == Category.MEASURE
