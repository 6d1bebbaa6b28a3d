"""
Tests for the wave field diagnostics.
"""

import os
import sys

import numpy as np

# Add the parent directory to the path so we can import ripplelab
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ripplelab.modeling import (
    WaveField,
    circle,
    has_quiet_border,
    is_contained,
    is_finite_field,
    is_stable,
    is_valid_field,
)


def test_is_stable():
    assert is_stable(0.5, 0.995)
    assert is_stable(1.0, 1.0)
    assert is_stable(-1.0, 0.5)
    assert not is_stable(1.01, 0.9)
    assert not is_stable(0.5, 0.0)
    assert not is_stable(0.5, 1.2)
    assert not is_stable(float("nan"), 0.9)


def test_is_finite_field():
    values = np.zeros((4, 4))
    assert is_finite_field(values)
    values[1, 2] = np.inf
    assert not is_finite_field(values)
    values[1, 2] = np.nan
    assert not is_finite_field(values)


def test_is_contained():
    mask = np.zeros((5, 5), dtype=bool)
    mask[1:4, 1:4] = True
    heights = np.zeros((5, 5))
    heights[2, 2] = 3.0
    assert is_contained(heights, mask)
    heights[0, 2] = 0.1
    assert not is_contained(heights, mask)


def test_has_quiet_border():
    heights = np.zeros((6, 7))
    heights[3, 3] = 1.0
    assert has_quiet_border(heights)
    heights[5, 2] = -0.5
    assert not has_quiet_border(heights)


def test_is_valid_field():
    """A simulated pond stays valid; a tight bound makes it fail."""
    field = WaveField(50, 50, circle(25, 25, 20))
    assert is_valid_field(field)

    field.excite(25, 25, 20.0, 8.0)
    for _ in range(60):
        field.step()
    # end for
    assert is_valid_field(field, max_abs=200.0, verbose=True)
    assert not is_valid_field(field, max_abs=1e-3, verbose=True)


def test_is_valid_field_detects_leak():
    field = WaveField(20, 20, circle(10, 10, 5))
    field._height_buf[0] = 2.0
    assert not is_valid_field(field, verbose=True)
