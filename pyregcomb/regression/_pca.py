"""
Principal components of a combination's independent variables.

The variables are standardized, their Pearson correlation matrix is
eigen-decomposed with Jacobi, and the standardized rows are projected on
the leading eigenvectors. The component scores replace the raw variables
as predictors; coefficients fitted on the scores are converted back to
raw-variable coefficients with ComponentBasis.to_raw().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import ZeroVarianceError
from pyregcomb.core.validation import check_2d, check_not_empty
from pyregcomb.core.compute.linalg import jacobi_eigen


@dataclass(frozen=True)
class ComponentBasis:
    """
    Principal component basis for one combination.

    Attributes:
        means: (k,) variable means
        std_devs: (k,) sample standard deviations (n - 1)
        correlation: (k, k) Pearson correlation matrix
        eigenvalues: (k,) descending
        eigenvectors: (k, k) column j is component j
        scores: (n, c) component scores for the first c components
    """
    means: NDArray[np.floating[Any]]
    std_devs: NDArray[np.floating[Any]]
    correlation: NDArray[np.floating[Any]]
    eigenvalues: NDArray[np.floating[Any]]
    eigenvectors: NDArray[np.floating[Any]]
    scores: NDArray[np.floating[Any]]

    @property
    def n_components(self) -> int:
        return self.scores.shape[1]

    def design(self, n_components: int) -> NDArray[np.floating[Any]]:
        """Intercept column plus the first n_components score columns."""
        n = self.scores.shape[0]
        return np.column_stack([np.ones(n), self.scores[:, :n_components]])

    def to_raw(
        self,
        b: NDArray[np.floating[Any]],
        n_components: int,
    ) -> tuple[float, NDArray[np.floating[Any]]]:
        """
        Convert component-space coefficients to raw-variable coefficients.

        Args:
            b: [b0, b1, ..., bc] fitted on the first c component scores
            n_components: c

        Returns:
            (intercept, coefficients) in terms of the raw variables
        """
        vectors = self.eigenvectors[:, :n_components]
        standardized = vectors @ b[1:n_components + 1]
        raw = standardized / self.std_devs
        intercept = float(b[0] - np.sum(raw * self.means))
        return intercept, raw


def correlation_matrix(x: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """
    Pearson correlation matrix by the raw-score formula, pair by pair.

    Raises:
        ZeroVarianceError: If any pair has a zero denominator
    """
    n, k = x.shape
    sums = x.sum(axis=0)
    squares = np.einsum('ij,ij->j', x, x)
    corr = np.eye(k)
    for i in range(k):
        for j in range(i + 1, k):
            cross = float(x[:, i] @ x[:, j])
            num = n * cross - sums[i] * sums[j]
            with np.errstate(invalid='ignore'):
                den = np.sqrt((n * squares[i] - sums[i] ** 2) * (n * squares[j] - sums[j] ** 2))
            if den == 0.0 or not np.isfinite(den):
                raise ZeroVarianceError(
                    f"Zero in correlation denominator for variables {i} and {j}",
                    variables=(i, j),
                )
            corr[i, j] = corr[j, i] = num / den
    return corr


def principal_components(
    x: ArrayLike,
    max_components: int | None = None,
) -> ComponentBasis:
    """
    Standardize, correlate, eigen-decompose and project.

    Args:
        x: (n, k) compacted observations of the combination's variables,
            without an intercept column
        max_components: Most components to project (default k)

    Returns:
        ComponentBasis with scores for min(k, max_components) components

    Raises:
        ZeroVarianceError: Zero denominator in the correlation matrix
        ConvergenceError: Jacobi did not converge
    """
    x_arr = np.asarray(x, dtype=np.float64)
    check_2d(x_arr, 'x')
    check_not_empty(x_arr, 'x')
    n, k = x_arr.shape
    c = k if max_components is None else min(k, max_components)

    corr = correlation_matrix(x_arr)

    sums = x_arr.sum(axis=0)
    squares = np.einsum('ij,ij->j', x_arr, x_arr)
    means = sums / n
    std_devs = np.sqrt((squares - sums * sums / n) / (n - 1))

    pairs = jacobi_eigen(corr)

    standardized = (x_arr - means) / std_devs
    scores = standardized @ pairs.eigenvectors[:, :c]

    return ComponentBasis(
        means=means,
        std_devs=std_devs,
        correlation=corr,
        eigenvalues=pairs.eigenvalues,
        eigenvectors=pairs.eigenvectors,
        scores=scores,
    )
