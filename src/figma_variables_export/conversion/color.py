"""
Pure-Python sRGB to OKLCH conversion.

The canonical output is ``oklch(L C H)`` or ``oklch(L C H / A)``: space
separated, at most three decimals, trailing zeros removed. Channels are
quantized to 8 bit first so equal design-tool colors always print equally.
"""

from __future__ import annotations

import math
from typing import Tuple


def format_component(value: float) -> str:
    """1.000 -> "1", 0.750 -> "0.75", 29.2339 -> "29.234"."""
    formatted = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if formatted in ("-0", "") else formatted


def _srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def quantize(channel: float) -> int:
    """Unit-range channel to its 8-bit value (round half up)."""
    return int(math.floor(channel * 255 + 0.5))


def rgb_to_oklch(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Convert unit-range sRGB to (lightness 0-1, chroma, hue 0-360)."""
    lr, lg, lb = (_srgb_to_linear(quantize(c) / 255) for c in (r, g, b))

    l_ = 0.4122214708 * lr + 0.5363325363 * lg + 0.0514459929 * lb
    m_ = 0.2119034982 * lr + 0.6806995451 * lg + 0.1073969566 * lb
    s_ = 0.0883024619 * lr + 0.2817188376 * lg + 0.6299787005 * lb

    l_, m_, s_ = (math.copysign(abs(v) ** (1 / 3), v) for v in (l_, m_, s_))

    lightness = 0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_
    a = 1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_
    bb = 0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_

    chroma = math.hypot(a, bb)
    hue = math.degrees(math.atan2(bb, a)) % 360
    return lightness, chroma, hue


def oklch_to_css(lightness: float, chroma: float, hue: float, alpha: float = 1.0) -> str:
    """Format an OKLCH color as the canonical CSS string."""
    c_fmt = format_component(chroma)
    # Achromatic colors have no meaningful hue
    h_fmt = "0" if c_fmt == "0" else format_component(hue)
    body = f"{format_component(lightness)} {c_fmt} {h_fmt}"
    if alpha < 1.0:
        return f"oklch({body} / {format_component(alpha)})"
    return f"oklch({body})"


def rgba_to_css(r: float, g: float, b: float, alpha: float = 1.0) -> str:
    """Unit-range (already clamped) RGBA to canonical ``oklch()`` text."""
    return oklch_to_css(*rgb_to_oklch(r, g, b), alpha=alpha)
