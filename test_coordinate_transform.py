#!/usr/bin/env python3
"""Tests for the detector-space -> render-space transform"""
import math

import numpy as np
import pytest

from poseTwin.protocol import Position
from poseTwin.vecMathHelper import is_finite_point, to_render_space, to_render_space_array


def test_flips_every_axis():
    np.testing.assert_array_equal(to_render_space([1.0, 2.0, -3.0]), [-1.0, -2.0, 3.0])


def test_origin_stays_at_origin():
    np.testing.assert_array_equal(to_render_space([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0])


@pytest.mark.parametrize("point", [
    (0.25, 0.75, -0.1),
    (1e-9, -3.5, 12.0),
    (-1.0, 1.0, 0.0),
])
def test_transform_is_involutive(point):
    np.testing.assert_array_equal(to_render_space(to_render_space(point)), point)


def test_accepts_position():
    np.testing.assert_array_equal(to_render_space(Position(0.5, 0.25, 0.0)), [-0.5, -0.25, 0.0])


def test_propagates_non_finite_values():
    out = to_render_space([math.nan, math.inf, 1.0])
    assert math.isnan(out[0])
    assert out[1] == -math.inf
    assert not is_finite_point(out)


def test_array_version_matches_single_points():
    pts = np.array([[0.1, 0.2, 0.3], [1.0, -1.0, 0.5]])
    out = to_render_space_array(pts)
    for p, q in zip(pts, out):
        np.testing.assert_array_equal(to_render_space(p), q)


def test_array_version_rejects_bad_shape():
    with pytest.raises(ValueError):
        to_render_space_array([[1.0, 2.0]])
