"""Clamping and unit conversion. No engine imports."""

from __future__ import annotations

# The container's fixed-point unit: 20 twips per pixel.
TWIPS_PER_PIXEL = 20


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def opacity_to_alpha(opacity: float) -> int:
    """Map an SVG opacity to an 8-bit alpha. Out-of-range opacities clamp."""
    return int(round(clamp(opacity, 0.0, 1.0) * 255))


def to_twips(value: float, factor: int = TWIPS_PER_PIXEL) -> int:
    """Scale a pixel coordinate to integer twips, rounding to nearest."""
    return int(round(value * factor))
