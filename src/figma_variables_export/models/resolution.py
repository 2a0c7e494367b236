"""Types produced by variable resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class Category(str, Enum):
    """Stylesheet section a variable belongs to."""

    COLOR = "color"
    FONT = "font"
    MEASURE = "measure"
    SHADOW = "shadow"
    GRADIENT = "gradient"

    @property
    def label(self) -> str:
        return _SECTION_LABELS[self]

    @property
    def file_name(self) -> str:
        return f"{self.label.lower()}.css"


_SECTION_LABELS = {
    Category.COLOR: "Colors",
    Category.FONT: "Fonts",
    Category.MEASURE: "Measures",
    Category.SHADOW: "Shadows",
    Category.GRADIENT: "Gradients",
}

# Fixed section order; never alphabetical.
BASE_SECTION_ORDER: Tuple[Category, ...] = (
    Category.COLOR,
    Category.FONT,
    Category.MEASURE,
)
EFFECT_SECTION_ORDER: Tuple[Category, ...] = BASE_SECTION_ORDER + (
    Category.SHADOW,
    Category.GRADIENT,
)


def section_order(include_effects: bool = False) -> Tuple[Category, ...]:
    return EFFECT_SECTION_ORDER if include_effects else BASE_SECTION_ORDER


class DiagnosticLevel(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class DiagnosticCode(str, Enum):
    CLAMPED = "clamped"
    OUT_OF_RANGE = "out_of_range"
    NEGATIVE_VALUE = "negative_value"
    INVALID_VALUE = "invalid_value"
    UNSAFE_CHARACTERS = "unsafe_characters"
    EMPTY_VALUE = "empty_value"
    MISSING_MODE_VALUE = "missing_mode_value"
    MISSING_ALIAS_TARGET = "missing_alias_target"
    UNRESOLVED_ALIAS = "unresolved_alias"
    CYCLE_DETECTED = "cycle_detected"
    UNSUPPORTED_TYPE = "unsupported_type"
    VARIABLE_UNAVAILABLE = "variable_unavailable"


@dataclass(frozen=True)
class Diagnostic:
    level: DiagnosticLevel
    code: DiagnosticCode
    variable_name: str
    message: str

    @classmethod
    def warning(cls, code: DiagnosticCode, variable_name: str, message: str) -> "Diagnostic":
        return cls(DiagnosticLevel.WARNING, code, variable_name, message)

    @classmethod
    def error(cls, code: DiagnosticCode, variable_name: str, message: str) -> "Diagnostic":
        return cls(DiagnosticLevel.ERROR, code, variable_name, message)

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.variable_name}: {self.message}"


class Resolution(NamedTuple):
    """Stylesheet-ready text for one variable and mode."""

    text: str
    diagnostic: Optional[Diagnostic] = None


@dataclass(frozen=True)
class ResolvedEntry:
    """One custom property of a theme.

    ``source_id`` only points back at the design-tool variable so the tool
    can annotate it; it is never used to compute anything.
    """

    name: str
    value: str
    category: Category
    source_id: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None

    def declaration(self) -> str:
        return f"{self.name}: {self.value};"
