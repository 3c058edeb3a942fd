"""Leaf-node geometry helpers: 2D affine matrices and boxes. No engine imports.

Matrices are 3x3 numpy arrays acting on column vectors (x, y, 1). Points are
complex numbers (x + iy), matching svgpathtools.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

Affine = NDArray[np.float64]


def identity() -> Affine:
    return np.identity(3)


def from_svg_matrix(a: float, b: float, c: float, d: float, e: float, f: float) -> Affine:
    """SVG ``matrix(a b c d e f)``."""
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])


def translation(tx: float, ty: float = 0.0) -> Affine:
    return from_svg_matrix(1.0, 0.0, 0.0, 1.0, tx, ty)


def scaling(sx: float, sy: float | None = None) -> Affine:
    return from_svg_matrix(sx, 0.0, 0.0, sx if sy is None else sy, 0.0, 0.0)


def rotation(degrees: float, cx: float = 0.0, cy: float = 0.0) -> Affine:
    """Rotation about (cx, cy)."""
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    rot = from_svg_matrix(cos, sin, -sin, cos, 0.0, 0.0)
    if cx == 0.0 and cy == 0.0:
        return rot
    return translation(cx, cy) @ rot @ translation(-cx, -cy)


def skew_x(degrees: float) -> Affine:
    return from_svg_matrix(1.0, 0.0, math.tan(math.radians(degrees)), 1.0, 0.0, 0.0)


def skew_y(degrees: float) -> Affine:
    return from_svg_matrix(1.0, math.tan(math.radians(degrees)), 0.0, 1.0, 0.0, 0.0)


def apply_affine(matrix: Affine, point: complex) -> complex:
    x = matrix[0, 0] * point.real + matrix[0, 1] * point.imag + matrix[0, 2]
    y = matrix[1, 0] * point.real + matrix[1, 1] * point.imag + matrix[1, 2]
    return complex(float(x), float(y))


def bbox(points: NDArray[np.int64]) -> tuple[int, int, int, int]:
    """Compute (xmin, ymin, xmax, ymax) of an Nx2 integer point array."""
    if len(points) == 0:
        return (0, 0, 0, 0)
    return (
        int(np.min(points[:, 0])),
        int(np.min(points[:, 1])),
        int(np.max(points[:, 0])),
        int(np.max(points[:, 1])),
    )
