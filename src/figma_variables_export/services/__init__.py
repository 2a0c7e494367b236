from .export_service import (
    ConversionOutcome,
    build_theme_files,
    convert_variables,
    export_variables,
)

__all__ = [
    "ConversionOutcome",
    "build_theme_files",
    "convert_variables",
    "export_variables",
]
