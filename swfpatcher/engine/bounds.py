"""Padded bounding box of a Shape's records."""

from __future__ import annotations

import numpy as np

from swfpatcher.models.document import Edge, Rect, Shape, StyleChange
from swfpatcher.utils.geometry import bbox

DEFAULT_PADDING = 10


def shape_points(shape: Shape) -> list[tuple[int, int]]:
    """Every anchor and control point visited by the records, in absolute twips."""
    points: list[tuple[int, int]] = []
    x = y = 0
    for record in shape.records:
        if isinstance(record, StyleChange):
            if record.move_to is not None:
                x, y = record.move_to.x, record.move_to.y
                points.append((x, y))
        elif isinstance(record, Edge):
            if record.control_delta is not None:
                points.append((x + record.control_delta.x, y + record.control_delta.y))
            x, y = x + record.delta.x, y + record.delta.y
            points.append((x, y))
    return points


def calculate_shape_bounds(shape: Shape, padding: int = DEFAULT_PADDING) -> Rect:
    """Bounding box over anchors and control points, grown by ``padding`` on every side.

    Returns the zero rect when no point is visited.
    """
    points = shape_points(shape)
    if not points:
        return Rect()
    x_min, y_min, x_max, y_max = bbox(np.array(points, dtype=np.int64))
    return Rect(
        x_min=x_min - padding,
        x_max=x_max + padding,
        y_min=y_min - padding,
        y_max=y_max + padding,
    )
