"""
Tests for missing-value sentinel masks.
"""

import numpy as np

from pyregcomb.core.missing import (
    combination_present,
    is_missing,
    pairwise_present,
)


class TestIsMissing:
    """Sentinel and NaN both mark a value missing."""

    def test_numeric_sentinel(self):
        values = np.array([1.0, -999.0, 3.0])
        np.testing.assert_array_equal(is_missing(values, -999.0), [False, True, False])

    def test_nan_always_missing(self):
        values = np.array([1.0, np.nan, -999.0])
        np.testing.assert_array_equal(is_missing(values, -999.0), [False, True, True])

    def test_nan_sentinel(self):
        values = np.array([np.nan, 0.0])
        np.testing.assert_array_equal(is_missing(values, np.nan), [True, False])

    def test_2d_shape_preserved(self):
        values = np.array([[1.0, -1.0], [-1.0, 2.0]])
        assert is_missing(values, -1.0).shape == (2, 2)


class TestPresence:
    """Row masks for pairwise and combination deletion."""

    def test_pairwise(self):
        y_m = np.array([False, True, False, False])
        x_m = np.array([False, False, True, False])
        np.testing.assert_array_equal(pairwise_present(y_m, x_m), [True, False, False, True])

    def test_combination_only_checks_included_columns(self):
        y_m = np.array([False, False, False])
        x_m = np.array([
            [False, True, False],
            [True, False, False],
            [False, False, False],
        ])
        np.testing.assert_array_equal(combination_present(y_m, x_m, (0, 2)), [True, False, True])
        np.testing.assert_array_equal(combination_present(y_m, x_m, (1,)), [False, True, True])

    def test_combination_does_not_modify_input(self):
        y_m = np.array([False, True])
        x_m = np.array([[True], [False]])
        combination_present(y_m, x_m, (0,))
        np.testing.assert_array_equal(y_m, [False, True])
