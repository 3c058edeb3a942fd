"""Geometry and document constants for the patch engine."""

from __future__ import annotations

from dataclasses import dataclass

from swfpatcher.utils.math_helpers import TWIPS_PER_PIXEL


@dataclass
class PipelineConfig:
    """Constants shared by the geometry compiler and the mutation steps."""

    # Fixed-point scale applied when committing coordinates
    twips_per_pixel: int = TWIPS_PER_PIXEL

    # Padding added around computed shape bounds, in twips. Keeps round caps
    # and anti-aliased edges from being clipped.
    bounds_padding: int = 10

    # Close-path draws a closing edge only beyond this distance (device pixels)
    close_tolerance: float = 1.0

    # Widest sub-arc approximated by one quadratic curve, in degrees
    max_arc_sweep: float = 90.0

    # Lowest format version whose shape tags carry alpha fills
    alpha_min_version: int = 8
