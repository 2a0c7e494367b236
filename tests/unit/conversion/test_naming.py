"""Tests for CSS names and theme slugs."""

import pytest

from figma_variables_export.conversion.naming import (
    clean_variable_name,
    css_variable_name,
    theme_slug,
    to_kebab_case,
)


class TestVariableNames:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("btn/large/paddingBlock", "BtnLargePaddingBlock"),
            ("spacing-btn-large", "SpacingBtnLarge"),
            ("spacing/16", "Spacing16"),
            ("brand primary_color", "BrandPrimaryColor"),
        ],
    )
    def test_clean_variable_name(self, name, expected):
        assert clean_variable_name(name) == expected

    def test_css_variable_name_has_no_category_prefix(self):
        assert css_variable_name("btn/large/paddingBlock") == "--btnLargePaddingBlock"
        assert css_variable_name("brand/primaryColor") == "--brandPrimaryColor"

    def test_repeated_separators(self):
        assert css_variable_name("a//b--c") == "--aBC"


class TestThemeSlug:
    def test_kebab_case(self):
        assert to_kebab_case("Koop Dark") == "koop-dark"
        assert to_kebab_case("  High  Contrast!! ") == "high-contrast"

    def test_no_suffix_to_strip(self):
        assert theme_slug("Dark Mode") == "dark-mode"

    def test_light_suffix_stripped_after_kebab(self):
        assert theme_slug("Brand Light") == "brand"
        assert theme_slug("Brand_Light") == "brand"

    def test_plain_light_is_kept(self):
        assert theme_slug("Light") == "light"

    def test_suffix_only_at_end(self):
        assert theme_slug("Light Brand") == "light-brand"
