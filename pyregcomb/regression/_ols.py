"""
Ordinary least squares coefficients through the normal equations.

    b = (X'X)^-1 X'y

X'X is inverted with the Gauss-Jordan kernel so a singular design is
detected by the pivot tolerance rather than by LAPACK. The diagonal of
the inverse gives the coefficient variances used for the t-statistics.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pyregcomb.core.exceptions import SingularMatrixError
from pyregcomb.core.validation import check_2d, check_1d, check_consistent_length, check_not_empty
from pyregcomb.core.compute.linalg import inverse, multiply, transpose
from pyregcomb.regression._common import OLSParams


def _raw_score_correlation(
    a: NDArray[np.floating[Any]],
    b: NDArray[np.floating[Any]],
) -> float:
    """Pearson r from raw sums: (nΣab - ΣaΣb) / sqrt((nΣa² - (Σa)²)(nΣb² - (Σb)²))."""
    n = len(a)
    sa, sb = a.sum(), b.sum()
    num = n * np.dot(a, b) - sa * sb
    den_a = n * np.dot(a, a) - sa * sa
    den_b = n * np.dot(b, b) - sb * sb
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(num / np.sqrt(den_a * den_b))


def fit_ols(X: ArrayLike, y: ArrayLike) -> OLSParams:
    """
    Fit y on X by ordinary least squares.

    Args:
        X: Design matrix (n x (k+1)); the first column must be the
            intercept column of ones
        y: Response vector (n,)

    Returns:
        OLSParams with coefficients, fitted values, residuals (fitted minus
        observed), R, standard error and t-statistics

    Raises:
        DimensionError: On empty or inconsistent inputs
        SingularMatrixError: If X'X has no pivot above the tolerance
    """
    X_arr = np.asarray(X, dtype=np.float64)
    y_arr = np.asarray(y, dtype=np.float64)
    check_2d(X_arr, 'X')
    check_1d(y_arr, 'y')
    check_not_empty(X_arr, 'X')
    check_consistent_length(X_arr, y_arr, names=('X', 'y'))

    n, p = X_arr.shape

    xt = transpose(X_arr)
    xtx = multiply(xt, X_arr)
    gj = inverse(xtx)
    if gj.singular:
        raise SingularMatrixError(
            "Matrix inversion failed: X'X is singular",
            matrix_name="X'X",
            determinant=gj.determinant,
            pivots_found=len(gj.pivots),
        )
    xtx_inv = gj.inverse
    variances = np.diag(xtx_inv).copy()

    coefficients = multiply(multiply(xtx_inv, xt), y_arr)
    fitted = multiply(X_arr, coefficients)
    residuals = fitted - y_arr

    sse = float(residuals @ residuals)
    df_residual = n - p
    r = _raw_score_correlation(y_arr, fitted)

    with np.errstate(divide='ignore', invalid='ignore'):
        mse = sse / df_residual if df_residual > 0 else float('nan')
        standard_error = float(np.sqrt(mse))
        t_statistics = coefficients / np.sqrt(variances * mse)

    if df_residual > 0:
        p_values = 2.0 * stats.t.sf(np.abs(t_statistics), df_residual)
    else:
        p_values = np.full(p, np.nan)

    return OLSParams(
        coefficients=coefficients,
        fitted_values=fitted,
        residuals=residuals,
        sse=sse,
        mse=float(mse),
        r=r,
        standard_error=standard_error,
        t_statistics=t_statistics,
        p_values=p_values,
        xtx_inverse_diagonal=variances,
        df_residual=df_residual,
    )
