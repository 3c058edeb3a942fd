"""Geometry compiler — SVG text → Shape records in twips.

Every drawable element becomes one Shape. Curves are emitted as quadratic
edges only: cubics split once at t = 0.5, arcs split into sub-arcs of at most
``max_arc_sweep`` degrees. Coordinates are transformed to device space first,
then scaled and rounded when committed; edge deltas are taken from the
committed integer pen so rounding never accumulates.
"""

from __future__ import annotations

import logging
import math

from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier

from swfpatcher.engine.config import PipelineConfig
from swfpatcher.models.document import (
    Edge,
    LineStyle,
    Shape,
    ShapeStyles,
    SolidFill,
    StraightSRgba8,
    StyleChange,
    Vector2D,
)
from swfpatcher.svg.parser import RGB, SvgPath, parse_svg
from swfpatcher.svg.path_data import ClosePath, MoveTo, PathCommand, parse_path_data
from swfpatcher.utils.geometry import apply_affine
from swfpatcher.utils.math_helpers import opacity_to_alpha, to_twips

logger = logging.getLogger(__name__)


def cubic_to_quadratics(seg: CubicBezier) -> list[QuadraticBezier]:
    """Approximate a cubic with exactly two quadratics, split at t = 0.5."""
    quads = []
    for half in seg.split(0.5):
        control = (3 * (half.control1 + half.control2) - half.start - half.end) / 4
        quads.append(QuadraticBezier(half.start, control, half.end))
    return quads


def arc_to_quadratics(seg: Arc, max_sweep: float = 90.0) -> list[QuadraticBezier]:
    """Approximate an elliptical arc by one quadratic per sub-arc of at most ``max_sweep`` degrees.

    Each control point is where the tangents at the sub-arc's ends meet.
    """
    count = max(1, math.ceil(abs(seg.delta) / max_sweep - 1e-6))
    step = seg.delta / count
    half = math.radians(step / 2)
    rx, ry = seg.radius.real, seg.radius.imag

    def on_ellipse(deg: float, scale: float = 1.0) -> complex:
        rad = math.radians(deg)
        local = complex(rx * math.cos(rad) * scale, ry * math.sin(rad) * scale)
        return seg.center + seg.rot_matrix * local

    quads = []
    start = seg.start
    for i in range(count):
        a0 = seg.theta + i * step
        end = seg.end if i == count - 1 else on_ellipse(a0 + step)
        control = on_ellipse(a0 + step / 2, 1.0 / math.cos(half))
        quads.append(QuadraticBezier(start, control, end))
        start = end
    return quads


def _solid(rgb: RGB, opacity: float) -> SolidFill:
    r, g, b = rgb
    return SolidFill(color=StraightSRgba8(r=r, g=g, b=b, a=opacity_to_alpha(opacity)))


class _ShapeBuilder:
    """Accumulates records for one Shape, tracking the committed pen."""

    def __init__(self, svg_path: SvgPath, config: PipelineConfig) -> None:
        self.matrix = svg_path.matrix
        self.config = config
        self.records: list[StyleChange | Edge] = []
        self.pen: tuple[int, int] = (0, 0)
        self.first_move: tuple[int, int] | None = None

        self.styles = ShapeStyles()
        if svg_path.fill is not None:
            self.styles.fill.append(_solid(svg_path.fill, svg_path.fill_opacity))
        if svg_path.stroke is not None:
            self.styles.line.append(
                LineStyle(
                    width=to_twips(svg_path.stroke_width, config.twips_per_pixel),
                    start_cap="Round",
                    end_cap="Round",
                    join="Round",
                    fill=_solid(svg_path.stroke, svg_path.stroke_opacity),
                )
            )

    def _commit(self, point: complex) -> tuple[int, int]:
        device = apply_affine(self.matrix, point)
        factor = self.config.twips_per_pixel
        return (to_twips(device.real, factor), to_twips(device.imag, factor))

    def move_to(self, point: complex) -> None:
        target = self._commit(point)
        move = Vector2D(x=target[0], y=target[1])
        if self.first_move is None:
            self.first_move = target
            self.records.append(
                StyleChange(
                    move_to=move,
                    left_fill=1 if self.styles.fill else None,
                    line_style=1 if self.styles.line else None,
                )
            )
        else:
            self.records.append(StyleChange(move_to=move))
        self.pen = target

    def _edge_to(self, target: tuple[int, int], control: tuple[int, int] | None = None) -> None:
        px, py = self.pen
        delta = Vector2D(x=target[0] - px, y=target[1] - py)
        control_delta = None
        if control is not None:
            control_delta = Vector2D(x=control[0] - px, y=control[1] - py)
        self.records.append(Edge(delta=delta, control_delta=control_delta))
        self.pen = target

    def line_to(self, point: complex) -> None:
        self._edge_to(self._commit(point))

    def curve_to(self, control: complex, point: complex) -> None:
        self._edge_to(self._commit(point), self._commit(control))

    def close(self) -> None:
        if self.first_move is None:
            return
        limit = self.config.close_tolerance * self.config.twips_per_pixel
        dx = abs(self.pen[0] - self.first_move[0])
        dy = abs(self.pen[1] - self.first_move[1])
        if dx > limit or dy > limit:
            self._edge_to(self.first_move)

    def add(self, command: PathCommand) -> None:
        if isinstance(command, MoveTo):
            self.move_to(command.point)
        elif isinstance(command, ClosePath):
            self.close()
        elif isinstance(command, Line):
            self.line_to(command.end)
        elif isinstance(command, QuadraticBezier):
            self.curve_to(command.control, command.end)
        elif isinstance(command, CubicBezier):
            for quad in cubic_to_quadratics(command):
                self.curve_to(quad.control, quad.end)
        elif isinstance(command, Arc):
            for quad in arc_to_quadratics(command, self.config.max_arc_sweep):
                self.curve_to(quad.control, quad.end)

    def build(self) -> Shape:
        return Shape(initial_styles=self.styles, records=self.records)


def compile_path(svg_path: SvgPath, config: PipelineConfig | None = None) -> Shape:
    """Compile one parsed SVG element into a Shape."""
    builder = _ShapeBuilder(svg_path, config or PipelineConfig())
    for command in parse_path_data(svg_path.d):
        builder.add(command)
    return builder.build()


def compile_svg(svg_text: str, config: PipelineConfig | None = None) -> list[Shape]:
    """Compile every drawable element of an SVG document, in document order.

    Raises SVGParseError on malformed XML or path data; nothing is returned
    for a partially valid document.
    """
    config = config or PipelineConfig()
    shapes = [compile_path(p, config) for p in parse_svg(svg_text)]
    logger.debug("Compiled %d shapes", len(shapes))
    return shapes
