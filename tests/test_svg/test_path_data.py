"""Tests for the path data parser."""

import pytest
from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier

from swfpatcher.exceptions import SVGParseError
from swfpatcher.svg.path_data import ClosePath, MoveTo, parse_path_data


def test_absolute_lines_and_close():
    cmds = parse_path_data("M0 0 L10 0 L10 10 Z")
    assert cmds[0] == MoveTo(0j)
    assert isinstance(cmds[1], Line) and cmds[1].end == 10
    assert isinstance(cmds[2], Line) and cmds[2].end == 10 + 10j
    assert isinstance(cmds[3], ClosePath)


def test_relative_commands_accumulate():
    cmds = parse_path_data("m5 5 l10 0 h5 v-5")
    assert cmds[0] == MoveTo(5 + 5j)
    assert cmds[1].end == 15 + 5j
    assert cmds[2].end == 20 + 5j
    assert cmds[3].end == 20 + 0j


def test_implicit_lineto_after_moveto():
    cmds = parse_path_data("M0 0 10 0 10 10")
    assert isinstance(cmds[1], Line) and isinstance(cmds[2], Line)
    assert cmds[2].end == 10 + 10j


def test_relative_implicit_lineto():
    cmds = parse_path_data("m1 1 2 0 0 2")
    assert cmds[1].end == 3 + 1j
    assert cmds[2].end == 3 + 3j


def test_compact_numbers():
    cmds = parse_path_data("M.5.5L10-5")
    assert cmds[0] == MoveTo(0.5 + 0.5j)
    assert cmds[1].end == 10 - 5j


def test_smooth_cubic_reflects_control():
    cmds = parse_path_data("M0 0 C0 10 10 10 10 0 S20 -10 20 0")
    second = cmds[2]
    assert isinstance(second, CubicBezier)
    assert second.control1 == 10 - 10j


def test_smooth_cubic_without_previous_uses_current_point():
    cmds = parse_path_data("M5 5 S10 10 20 5")
    assert cmds[1].control1 == 5 + 5j


def test_smooth_quadratic_reflects_control():
    cmds = parse_path_data("M0 0 Q5 10 10 0 T20 0")
    assert isinstance(cmds[2], QuadraticBezier)
    assert cmds[2].control == 15 - 10j


def test_arc_with_compact_flags():
    cmds = parse_path_data("M0 0 a10 10 0 0120 0")
    assert isinstance(cmds[1], Arc)
    assert cmds[1].end == 20 + 0j
    assert cmds[1].sweep


def test_zero_radius_arc_is_line():
    cmds = parse_path_data("M0 0 A0 5 0 0 1 10 10")
    assert isinstance(cmds[1], Line)


def test_arc_to_same_point_draws_nothing():
    cmds = parse_path_data("M3 3 A5 5 0 0 1 3 3")
    assert cmds == [MoveTo(3 + 3j)]


def test_close_resets_current_point_to_subpath_start():
    cmds = parse_path_data("M10 10 L20 10 Z l5 0")
    assert cmds[-1].start == 10 + 10j
    assert cmds[-1].end == 15 + 10j


def test_empty_path():
    assert parse_path_data("   ") == []


@pytest.mark.parametrize(
    "d",
    [
        "L10 10",
        "M0 0 L10",
        "M0 0 X5 5",
        "M0 0 L5 x",
        "M0 0 A5 5 0 2 1 10 10",
        "M0 0 Z 5",
        "10 10",
    ],
)
def test_malformed_path_raises(d):
    with pytest.raises(SVGParseError):
        parse_path_data(d)


def test_error_names_offset():
    with pytest.raises(SVGParseError, match="offset 8"):
        parse_path_data("M0 0 L5 x")
