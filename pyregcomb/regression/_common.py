"""
Common data types for combination regression.

Contains the frozen payloads: the OLS fit of one design matrix, one
retained Model, and the SearchParams that go inside a Result[P] envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.missing import is_missing


@dataclass(frozen=True)
class OLSParams:
    """
    Ordinary least squares fit of y on a design matrix with intercept column.

    Attributes:
        coefficients: b (k+1,), element 0 is the intercept
        fitted_values: Xb (n,)
        residuals: fitted minus observed (n,)
        sse: Sum of squared residuals
        mse: sse / (n - k - 1)
        r: Correlation between observed and fitted values
        standard_error: sqrt(mse)
        t_statistics: b_i / sqrt(mse * [(X'X)^-1]_ii) (k+1,)
        p_values: Two-sided Student t p-values (k+1,)
        xtx_inverse_diagonal: Diagonal of (X'X)^-1 (k+1,)
        df_residual: n - k - 1
    """
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    sse: float
    mse: float
    r: float
    standard_error: float
    t_statistics: NDArray[np.floating[Any]]
    p_values: NDArray[np.floating[Any]]
    xtx_inverse_diagonal: NDArray[np.floating[Any]]
    df_residual: int


@dataclass(frozen=True)
class Model:
    """
    One retained regression equation.

    Coefficients are always in terms of the original (raw) variables, even
    when the fit used principal components. Unused variables hold the
    independent-variable missing sentinel.

    Attributes:
        intercept: Equation intercept
        coefficients: (n_variables,) raw-variable coefficients
        variables: Included variable indices (0-based, ascending)
        r: Correlation coefficient between observed and fitted values
        standard_error: Standard error of estimate (ranking key)
        n_observations: Observations used (always >= 6)
        n_components: Principal components retained (0 for one variable)
        t_statistics: t-statistics of the fit that produced the model
            (component space when n_components > 0)
        fitted_values: (n_obs,) fitted values, NaN where not used
        residuals: (n_obs,) fitted minus observed, NaN where not used
        observation_mask: (n_obs,) True where the observation was used
        missing_value: The sentinel held by unused coefficients
    """
    intercept: float
    coefficients: NDArray[np.floating[Any]]
    variables: tuple[int, ...]
    r: float
    standard_error: float
    n_observations: int
    n_components: int
    t_statistics: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    observation_mask: NDArray[np.bool_]
    missing_value: float

    @property
    def n_variables(self) -> int:
        return len(self.variables)

    @property
    def equation(self) -> NDArray[np.floating[Any]]:
        """[intercept, b_1, ..., b_p] with sentinels for unused variables."""
        return np.concatenate(([self.intercept], self.coefficients))

    def predict(self, X: ArrayLike, x_missing: float | None = None) -> NDArray[np.floating[Any]]:
        """
        Evaluate the equation on raw independent-variable data.

        Args:
            X: (n, n_variables) raw data
            x_missing: Sentinel marking missing X values; defaults to the
                model's own sentinel

        Returns:
            (n,) predictions, NaN where a variable used by the model is missing
        """
        X_arr = np.atleast_2d(np.asarray(X, dtype=np.float64))
        sentinel = self.missing_value if x_missing is None else x_missing
        cols = list(self.variables)
        used = X_arr[:, cols]
        b = self.coefficients[cols]
        prediction = self.intercept + used @ b
        absent = np.any(is_missing(used, sentinel), axis=1)
        prediction[absent] = np.nan
        return prediction


@dataclass(frozen=True)
class SearchParams:
    """
    Parameter payload for a combination search.

    Attributes:
        models: Retained models ranked by ascending standard error
        sign_vector: (n_variables,) +1/-1 signs of zero-order correlations
        n_candidates: Combinations evaluated (duplicates excluded)
        n_accepted: Combinations that passed screening
        largest_size: Largest combination size that produced a retained model
        max_combinations: Capacity of the model table
        t_critical: Significance threshold used for |t|
        max_components: Component cap used for multi-variable fits
    """
    models: tuple[Model, ...]
    sign_vector: NDArray[np.int_]
    n_candidates: int
    n_accepted: int
    largest_size: int
    max_combinations: int
    t_critical: float
    max_components: int
