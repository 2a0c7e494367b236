"""Type-directed conversion of literal variable values to CSS text.

Each converter returns a ``Resolution``; malformed input raises
``ResolutionError`` which the resolver turns into a fallback plus an
error-level diagnostic.
"""

import math
from typing import Any, List, Optional, Tuple

from ..constants import (
    DURATION_KEYWORDS,
    OPACITY_KEYWORDS,
    WEIGHT_KEYWORDS,
    ZINDEX_KEYWORDS,
    ConversionDefaults,
)
from ..error_handling import ResolutionError
from ..models import Color, Diagnostic, DiagnosticCode, Resolution
from .color import rgba_to_css


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    """Shortest text for a number: 16.0 -> "16", 0.75 -> "0.75"."""
    if value == int(value):
        return str(int(value))
    return repr(float(value))


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def px_to_rem(px: float) -> str:
    """Convert pixels to rem against the fixed 16px base."""
    return f"{format_number(px / ConversionDefaults.BASE_FONT_SIZE)}rem"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _matches(lower_name: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in lower_name for keyword in keywords)


def convert_color(value: Any, variable_name: str) -> Resolution:
    if not isinstance(value, Color):
        raise ResolutionError(f"Invalid color value for {variable_name}: {value!r}")

    adjusted: List[str] = []
    channels = {"r": value.r, "g": value.g, "b": value.b}
    if value.a is not None:
        channels["a"] = value.a

    clamped = {}
    for channel, raw in channels.items():
        if not math.isfinite(raw):
            clamped[channel] = 0.0
            adjusted.append(f"{channel}={raw}")
            continue
        clamped[channel] = clamp(raw, 0.0, 1.0)
        if clamped[channel] != raw:
            adjusted.append(f"{channel}={raw}")

    text = rgba_to_css(
        clamped["r"], clamped["g"], clamped["b"], clamped.get("a", 1.0)
    )
    diagnostic: Optional[Diagnostic] = None
    if adjusted:
        diagnostic = Diagnostic.warning(
            DiagnosticCode.CLAMPED,
            variable_name,
            f"Color channels outside [0, 1] clamped ({', '.join(adjusted)})",
        )
    return Resolution(text, diagnostic)


def convert_number(value: Any, variable_name: str) -> Resolution:
    if not _is_number(value) or not math.isfinite(value):
        raise ResolutionError(f"Invalid number value for {variable_name}: {value!r}")

    lower_name = variable_name.lower()

    if _matches(lower_name, OPACITY_KEYWORDS):
        clamped = clamp(value, 0.0, 1.0)
        diagnostic = None
        if clamped != value:
            diagnostic = Diagnostic.warning(
                DiagnosticCode.CLAMPED,
                variable_name,
                f"Opacity value clamped: {format_number(value)} -> {format_number(clamped)}",
            )
        return Resolution(f"{round_half_up(clamped * 100)}%", diagnostic)

    if _matches(lower_name, WEIGHT_KEYWORDS):
        weight = round_half_up(value)
        diagnostic = None
        if not ConversionDefaults.MIN_FONT_WEIGHT <= weight <= ConversionDefaults.MAX_FONT_WEIGHT:
            diagnostic = Diagnostic.warning(
                DiagnosticCode.OUT_OF_RANGE,
                variable_name,
                f"Font weight out of standard range: {weight}",
            )
        return Resolution(str(weight), diagnostic)

    if _matches(lower_name, DURATION_KEYWORDS):
        if value < 0:
            return Resolution(
                "0ms",
                Diagnostic.warning(
                    DiagnosticCode.NEGATIVE_VALUE,
                    variable_name,
                    f"Negative duration {format_number(value)}, using 0ms",
                ),
            )
        return Resolution(f"{format_number(value)}ms")

    if _matches(lower_name, ZINDEX_KEYWORDS):
        return Resolution(str(round_half_up(value)))

    if value < 0:
        return Resolution(
            px_to_rem(abs(value)),
            Diagnostic.warning(
                DiagnosticCode.NEGATIVE_VALUE,
                variable_name,
                f"Negative pixel value {format_number(value)}, using absolute value",
            ),
        )
    return Resolution(px_to_rem(value))


def convert_text(value: Any, variable_name: str) -> Resolution:
    if _is_number(value):
        value = format_number(value)
    if not isinstance(value, str):
        raise ResolutionError(f"Invalid string value for {variable_name}: {value!r}")

    text = value.strip()
    if not text:
        return Resolution(
            "",
            Diagnostic.warning(
                DiagnosticCode.EMPTY_VALUE, variable_name, "Empty string value"
            ),
        )
    if any(char in text for char in ";{}"):
        return Resolution(
            text,
            Diagnostic.warning(
                DiagnosticCode.UNSAFE_CHARACTERS,
                variable_name,
                f"Potentially unsafe CSS characters in value: {text}",
            ),
        )
    # Unquoted; the caller decides on quoting
    return Resolution(text)
