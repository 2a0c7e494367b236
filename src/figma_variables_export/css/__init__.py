from .assembler import (
    CssAssembler,
    ThemeDocument,
    assemble,
    assign_theme_slugs,
    iso_timestamp,
    render_files,
)

__all__ = [
    "CssAssembler",
    "ThemeDocument",
    "assemble",
    "assign_theme_slugs",
    "iso_timestamp",
    "render_files",
]
