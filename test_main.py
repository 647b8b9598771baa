#!/usr/bin/env python3
"""
Tests for the example objective used by main.py.
"""

import numpy as np
import pytest

from main import sum_squares


def test_sum_squares_weights_coordinates_by_index():
    # 0*5^2 + 1*1^2 + 2*2^2
    assert sum_squares(np.array([5.0, 1.0, 2.0]), 3, (3,)) == pytest.approx(9.0)


def test_sum_squares_ignores_the_first_coordinate():
    assert sum_squares(np.array([7.0, 0.0, 0.0]), 3, (3,)) == 0.0
    assert sum_squares(np.zeros(4), 4, (4,)) == 0.0
