"""
Data models for the Figma variables exporter.

Input models (pydantic) validate design-tool variable snapshots; the
resolution types describe what conversion produces.
"""

from .resolution import (
    BASE_SECTION_ORDER,
    EFFECT_SECTION_ORDER,
    Category,
    Diagnostic,
    DiagnosticCode,
    DiagnosticLevel,
    Resolution,
    ResolvedEntry,
    section_order,
)
from .variables import (
    AliasRef,
    Color,
    Mode,
    ResolvedType,
    Variable,
    VariableCollection,
    VariableValue,
)

__all__ = [
    "AliasRef",
    "Color",
    "Mode",
    "ResolvedType",
    "Variable",
    "VariableCollection",
    "VariableValue",
    "BASE_SECTION_ORDER",
    "EFFECT_SECTION_ORDER",
    "Category",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticLevel",
    "Resolution",
    "ResolvedEntry",
    "section_order",
]
