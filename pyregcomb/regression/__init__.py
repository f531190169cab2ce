"""
Combinatorial regression.

Searches combinations of independent variables for the regression
equations with the smallest standard error. Single variables are fitted
by OLS, larger combinations by principal components regression.

Public API:
    search(X, y, ...) -> SearchSolution
    fit_ols(X, y) -> OLSParams
    fill(solution, rank=1) -> y with missing values filled

Example:
    >>> from pyregcomb.regression import search
    >>> solution = search(X, y, x_missing=-999.0, y_missing=-999.0)
    >>> print(solution.best.equation)
    >>> print(solution.summary())
"""

from pyregcomb.regression._common import Model, OLSParams, SearchParams
from pyregcomb.regression.design import SearchDesign
from pyregcomb.regression.solution import SearchSolution
from pyregcomb.regression.solvers import fill, fit_ols, search

__all__ = [
    "search",
    "fit_ols",
    "fill",
    "SearchDesign",
    "SearchSolution",
    "SearchParams",
    "Model",
    "OLSParams",
]
