"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def spd_matrix(rng):
    """Well-conditioned symmetric positive definite 5 x 5 matrix."""
    a = rng.standard_normal((5, 5))
    return a @ a.T + 5.0 * np.eye(5)


@pytest.fixture
def noiseless_line():
    """y = 2 + 3 x exactly."""
    x = np.arange(1.0, 11.0)
    return x, 2.0 + 3.0 * x


@pytest.fixture
def three_correlated(rng):
    """
    Three predictors sharing a common factor, all positively related to y.

    Every combination passes screening at the default t threshold, so a
    search visits all seven subsets.
    """
    n = 40
    z = rng.standard_normal(n)
    X = np.column_stack([z + 0.6 * rng.standard_normal(n) for _ in range(3)])
    y = X.sum(axis=1) + 0.5 * rng.standard_normal(n)
    return X, y


@pytest.fixture
def sentinel_data(rng):
    """Four predictors with -999 sentinels scattered in X and y."""
    n = 60
    X = rng.standard_normal((n, 4))
    y = 1.0 + 2.0 * X[:, 0] + 1.0 * X[:, 2] + 0.3 * rng.standard_normal(n)
    X[rng.choice(n, 6, replace=False), 1] = -999.0
    X[rng.choice(n, 4, replace=False), 2] = -999.0
    y[rng.choice(n, 5, replace=False)] = -999.0
    return X, y
