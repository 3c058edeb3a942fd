"""Tests for numeric helpers and settings."""

import numpy as np
import pytest

from swfpatcher.config import Settings
from swfpatcher.utils.geometry import bbox, rotation, translation
from swfpatcher.utils.math_helpers import opacity_to_alpha, to_twips


@pytest.mark.parametrize("opacity,alpha", [(0.0, 0), (1.0, 255), (1.5, 255), (-0.3, 0), (0.5, 128)])
def test_opacity_to_alpha(opacity, alpha):
    assert opacity_to_alpha(opacity) == alpha


def test_to_twips_rounds_to_nearest():
    assert to_twips(1.0) == 20
    assert to_twips(0.26) == 5
    assert to_twips(-0.24) == -5
    assert to_twips(3, factor=1) == 3


def test_bbox():
    points = np.array([[5, -2], [-1, 7], [3, 3]])
    assert bbox(points) == (-1, -2, 5, 7)
    assert bbox(np.empty((0, 2), dtype=np.int64)) == (0, 0, 0, 0)


def test_rotation_about_center():
    m = rotation(90, 10, 10)
    p = m @ np.array([20.0, 10.0, 1.0])
    assert p[:2] == pytest.approx([10.0, 20.0])
    assert (translation(3, 4) @ np.array([0.0, 0.0, 1.0]))[:2] == pytest.approx([3.0, 4.0])


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("COMPILER_TIMEOUT", "12.5")
    monkeypatch.setenv("BATCH_JOBS", "4")
    monkeypatch.setenv("OUTPUT_COMPRESSION", "Lzma")
    settings = Settings(_env_file=None)
    assert settings.compiler_timeout == 12.5
    assert settings.batch_jobs == 4
    assert settings.output_compression == "Lzma"
    assert "{source}" in settings.compiler_command
