"""CSS custom-property names and theme slugs."""

import re

from ..constants import OutputDefaults

_NAME_SEPARATORS = re.compile(r"[/\-_\s]+")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def clean_variable_name(name: str) -> str:
    """
    PascalCase a design-tool variable name.

    Examples:
        - "btn/large/paddingBlock" -> "BtnLargePaddingBlock"
        - "spacing-btn-large" -> "SpacingBtnLarge"
        - "spacing/16" -> "Spacing16"
    """
    parts = [part for part in _NAME_SEPARATORS.split(name) if part]
    return "".join(part if part.isdigit() else part[0].upper() + part[1:] for part in parts)


def css_variable_name(variable_name: str) -> str:
    """``--camelCase`` custom property name, without a category prefix."""
    clean = clean_variable_name(variable_name)
    if clean:
        clean = clean[0].lower() + clean[1:]
    return f"--{clean}"


def to_kebab_case(value: str) -> str:
    """Kebab-case a display name: "Koop Dark" -> "koop-dark"."""
    return _NON_SLUG.sub("-", value.strip().lower()).strip("-")


def theme_slug(mode_name: str) -> str:
    """Kebab-case the full mode name, then strip a trailing ``-light``."""
    slug = to_kebab_case(mode_name)
    suffix = OutputDefaults.LIGHT_SUFFIX
    if slug.endswith(suffix) and len(slug) > len(suffix):
        slug = slug[: -len(suffix)]
    return slug
