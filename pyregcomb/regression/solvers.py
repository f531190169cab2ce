"""
Solver dispatch for combination regression.

This module provides search() and fill() (public API) and backend selection.
"""

from __future__ import annotations

import math
from typing import Any, Literal

from numpy.typing import ArrayLike

from pyregcomb.core.compute.tolerances import DEFAULT_MAX_COMBINATIONS, DEFAULT_T_CRITICAL
from pyregcomb.regression._ols import fit_ols
from pyregcomb.regression.design import SearchDesign
from pyregcomb.regression.solution import SearchSolution
from pyregcomb.regression.backends.cpu import CPUCombinationBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'cpu_gauss_jordan']

__all__ = ["search", "fill", "fit_ols"]


def search(
    X: ArrayLike | SearchDesign,
    y: ArrayLike | None = None,
    *,
    x_missing: float = math.nan,
    y_missing: float = math.nan,
    max_combinations: int = DEFAULT_MAX_COMBINATIONS,
    t_critical: float = DEFAULT_T_CRITICAL,
    max_components: int | None = None,
    backend: BackendChoice = 'auto',
) -> SearchSolution:
    """
    Search variable combinations for the best regression equations.

    Every single variable is fitted by OLS; larger combinations are built by
    adding one variable at a time to the models still retained, and fitted
    by principal components regression. A fit is kept only if it uses at
    least 6 observations, its coefficients are significant at t_critical
    and every coefficient has the sign of that variable's correlation with
    y. The best max_combinations equations by standard error are returned.

    Args:
        X: Independent variables (n_obs x n_variables), or a prebuilt
            SearchDesign (then y and the options must be left at defaults)
        y: Dependent variable (n_obs,)
        x_missing: Sentinel marking missing X values; NaN always counts
            as missing
        y_missing: Sentinel marking missing y values
        max_combinations: Number of equations to retain (0 means 20)
        t_critical: |t| threshold for significance
        max_components: Most principal components per equation
            (default: number of variables)
        backend: 'auto', 'cpu' or 'cpu_gauss_jordan' (all the same CPU backend)

    Returns:
        SearchSolution with ranked models, counters and summary methods

    Raises:
        ValidationError: If inputs or options are invalid
        DimensionError: If X and y have inconsistent dimensions
        NoValidModelError: If no combination passes screening
        SingularMatrixError, ZeroVarianceError, ConvergenceError: If a
            combination's fit breaks down numerically (the exception's
            ``combination`` names it)

    Example:
        >>> import numpy as np
        >>> from pyregcomb.regression import search
        >>>
        >>> rng = np.random.default_rng(0)
        >>> X = rng.normal(size=(60, 4))
        >>> y = 1.0 + X @ [2.0, 0.0, 1.0, 0.5] + rng.normal(scale=0.2, size=60)
        >>> solution = search(X, y, max_combinations=5)
        >>> print(solution.best.variables)
        >>> print(solution.summary())
    """
    if isinstance(X, SearchDesign):
        if y is not None:
            raise ValueError("y must not be given together with a SearchDesign")
        design = X
    else:
        if y is None:
            raise ValueError("y is required when X is an array")
        design = SearchDesign.build(
            X, y,
            x_missing=x_missing,
            y_missing=y_missing,
            max_combinations=max_combinations,
            t_critical=t_critical,
            max_components=max_components,
        )

    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)
    return SearchSolution(_result=result, _design=design)


def fill(solution: SearchSolution, rank: int = 1) -> Any:
    """
    Fill missing dependent values using the equation at `rank` (1-based).

    See SearchSolution.fill().
    """
    return solution.fill(rank)


def _get_backend(choice: BackendChoice) -> CPUCombinationBackend:
    """
    Select and instantiate the backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_gauss_jordan'):
        return CPUCombinationBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
