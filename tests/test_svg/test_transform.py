"""Tests for transform attribute parsing."""

import numpy as np
import pytest

from swfpatcher.svg.transform import parse_transform
from swfpatcher.utils.geometry import apply_affine


def test_absent_transform_is_identity():
    assert np.allclose(parse_transform(None), np.identity(3))
    assert np.allclose(parse_transform("  "), np.identity(3))


def test_translate():
    m = parse_transform("translate(10, 20)")
    assert apply_affine(m, 1 + 1j) == pytest.approx(11 + 21j)


def test_translate_single_argument():
    m = parse_transform("translate(5)")
    assert apply_affine(m, 0j) == pytest.approx(5 + 0j)


def test_scale_uniform_and_non_uniform():
    assert apply_affine(parse_transform("scale(2)"), 3 + 4j) == pytest.approx(6 + 8j)
    assert apply_affine(parse_transform("scale(2 3)"), 1 + 1j) == pytest.approx(2 + 3j)


def test_rotate_about_center():
    m = parse_transform("rotate(90 10 10)")
    assert apply_affine(m, 20 + 10j) == pytest.approx(10 + 20j)


def test_matrix():
    m = parse_transform("matrix(1 0 0 1 7 -3)")
    assert apply_affine(m, 0j) == pytest.approx(7 - 3j)


def test_skew():
    m = parse_transform("skewX(45)")
    assert apply_affine(m, 0 + 10j) == pytest.approx(10 + 10j)


def test_list_applies_rightmost_first():
    # scale first, then translate
    m = parse_transform("translate(10,0) scale(2)")
    assert apply_affine(m, 1 + 0j) == pytest.approx(12 + 0j)


@pytest.mark.parametrize(
    "text",
    ["translate(10", "wobble(3)", "scale()", "rotate(1 2)", "matrix(1 2 3)", "translate(a b)"],
)
def test_malformed_degrades_to_identity(text, caplog):
    m = parse_transform(text)
    assert np.allclose(m, np.identity(3))
    assert "malformed transform" in caplog.text
