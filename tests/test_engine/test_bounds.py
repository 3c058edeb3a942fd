"""Tests for the bounds calculator."""

from tests.conftest import square_shape

from swfpatcher.engine.bounds import DEFAULT_PADDING, calculate_shape_bounds
from swfpatcher.models.document import Edge, Rect, Shape, StyleChange, Vector2D


def test_empty_shape_is_zero_rect():
    assert calculate_shape_bounds(Shape()) == Rect(x_min=0, x_max=0, y_min=0, y_max=0)


def test_single_move_is_padded_box_around_point():
    shape = Shape(records=[StyleChange(move_to=Vector2D(x=100, y=-40))])
    assert calculate_shape_bounds(shape) == Rect(
        x_min=100 - DEFAULT_PADDING,
        x_max=100 + DEFAULT_PADDING,
        y_min=-40 - DEFAULT_PADDING,
        y_max=-40 + DEFAULT_PADDING,
    )


def test_style_change_without_move_visits_nothing():
    shape = Shape(records=[StyleChange(left_fill=1)])
    assert calculate_shape_bounds(shape) == Rect()


def test_square_bounds():
    bounds = calculate_shape_bounds(square_shape(x=20, y=30, size=200))
    assert bounds == Rect(x_min=10, x_max=230, y_min=20, y_max=240)


def test_control_points_included():
    shape = Shape(
        records=[
            StyleChange(move_to=Vector2D(x=0, y=0)),
            Edge(delta=Vector2D(x=100, y=0), control_delta=Vector2D(x=50, y=-300)),
        ]
    )
    bounds = calculate_shape_bounds(shape, padding=0)
    assert bounds.y_min == -300
    assert bounds.x_max == 100


def test_custom_padding():
    shape = Shape(records=[StyleChange(move_to=Vector2D(x=0, y=0))])
    assert calculate_shape_bounds(shape, padding=0) == Rect()


def test_pure():
    shape = square_shape()
    before = shape.model_dump()
    calculate_shape_bounds(shape)
    assert shape.model_dump() == before
