"""
Combination search.

Variables are added one at a time. Size-1 combinations are all tried;
size-n combinations are generated only by extending the (n-1)-variable
models currently held in the model table, so the walk is breadth-first
over the previous round's survivors rather than a full enumeration. The
search stops after the first round in which no model of that size made
it into the table.

Each combination is screened before it is offered to the table:
    - at least MIN_OBSERVATIONS rows with y and every included x present
    - one variable: OLS slope with |t| >= t_critical
    - several variables: principal components regression, adding components
      while the newest one has |t| >= t_critical and MIN_RESIDUAL_DF
      residual degrees of freedom remain; the largest component count whose
      raw-variable coefficients all agree in sign with the zero-order
      correlations is kept
    - every coefficient sign agrees with the sign vector

Known limitations, kept on purpose: component growth stops at the first
non-significant t even if a later component would be significant, and
extending only retained parents can miss a better larger combination whose
subsets were not competitive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyregcomb.core.exceptions import ConvergenceError, NoValidModelError, NumericalError
from pyregcomb.core.missing import combination_present, is_missing, pairwise_present
from pyregcomb.core.compute.tolerances import MIN_OBSERVATIONS, MIN_RESIDUAL_DF
from pyregcomb.regression._common import Model, OLSParams
from pyregcomb.regression._ols import fit_ols, _raw_score_correlation
from pyregcomb.regression._pca import principal_components
from pyregcomb.regression._table import ModelTable

if TYPE_CHECKING:
    from pyregcomb.regression.design import SearchDesign

logger = logging.getLogger(__name__)


def _sign(values: NDArray[np.floating[Any]]) -> NDArray[np.int_]:
    # NaN compares False, so an undefined correlation counts as negative
    return np.where(np.asarray(values) >= 0.0, 1, -1)


def zero_order_signs(
    x: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    x_absent: NDArray[np.bool_],
    y_absent: NDArray[np.bool_],
) -> NDArray[np.int_]:
    """
    Signs of the correlation of each independent variable with y.

    Each correlation uses the rows where y and that variable are both
    present (pairwise deletion).
    """
    p = x.shape[1]
    correlations = np.empty(p)
    for j in range(p):
        rows = pairwise_present(y_absent, x_absent[:, j])
        correlations[j] = _raw_score_correlation(x[rows, j], y[rows])
    return _sign(correlations)


@dataclass
class SearchContext:
    """
    Everything one search invocation reads and mutates.

    Created per call, never shared. The observation mask is scratch that is
    overwritten for every combination.
    """
    x: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    x_absent: NDArray[np.bool_]
    y_absent: NDArray[np.bool_]
    x_missing: float
    t_critical: float
    max_components: int
    sign_vector: NDArray[np.int_]
    table: ModelTable
    observation_mask: NDArray[np.bool_] = field(init=False)
    n_candidates: int = 0
    n_accepted: int = 0

    def __post_init__(self) -> None:
        self.observation_mask = np.ones(self.y.shape[0], dtype=bool)

    @property
    def n_variables(self) -> int:
        return self.x.shape[1]

    @classmethod
    def from_design(cls, design: SearchDesign) -> SearchContext:
        """Precompute missing masks and the sign vector for a design."""
        x_absent = is_missing(design.X, design.x_missing)
        y_absent = is_missing(design.y, design.y_missing)
        signs = zero_order_signs(design.X, design.y, x_absent, y_absent)
        return cls(
            x=design.X,
            y=design.y,
            x_absent=x_absent,
            y_absent=y_absent,
            x_missing=design.x_missing,
            t_critical=design.t_critical,
            max_components=design.max_components,
            sign_vector=signs,
            table=ModelTable(design.max_combinations),
        )


def _signs_agree(
    context: SearchContext,
    combination: tuple[int, ...],
    coefficients: NDArray[np.floating[Any]],
) -> bool:
    expected = context.sign_vector[list(combination)]
    return bool(np.all(_sign(coefficients) == expected))


def _fit_single(
    context: SearchContext,
    combination: tuple[int, ...],
    x: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
) -> tuple[float, NDArray[np.floating[Any]], OLSParams, int] | None:
    ols = fit_ols(np.column_stack([np.ones(len(y)), x]), y)
    if abs(ols.t_statistics[1]) < context.t_critical:
        logger.debug("reject %s: |t| = %.4g below %.4g",
                     combination, abs(ols.t_statistics[1]), context.t_critical)
        return None
    slope = ols.coefficients[1:]
    if not _signs_agree(context, combination, slope):
        logger.debug("reject %s: coefficient sign contradicts correlation", combination)
        return None
    return float(ols.coefficients[0]), slope, ols, 0


def _fit_components(
    context: SearchContext,
    combination: tuple[int, ...],
    x: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
) -> tuple[float, NDArray[np.floating[Any]], OLSParams, int] | None:
    n_obs = len(y)
    basis = principal_components(x, context.max_components)

    best = None
    for c in range(1, basis.n_components + 1):
        if n_obs - c - 1 < MIN_RESIDUAL_DF:
            logger.debug("%s: fewer than %d residual df with %d components",
                         combination, MIN_RESIDUAL_DF, c)
            break
        ols = fit_ols(basis.design(c), y)
        if not abs(ols.t_statistics[c]) >= context.t_critical:
            break
        intercept, raw = basis.to_raw(ols.coefficients, c)
        if not _signs_agree(context, combination, raw):
            logger.debug("%s: component %d gives a coefficient of inappropriate sign",
                         combination, c)
            continue
        best = (intercept, raw, ols, c)

    if best is None:
        logger.debug("reject %s: no significant component set", combination)
    return best


def evaluate_combination(context: SearchContext, combination: tuple[int, ...]) -> Model | None:
    """
    Fit and screen one combination.

    Args:
        context: Search context (its observation mask is overwritten)
        combination: Ascending 0-based variable indices

    Returns:
        The candidate Model, or None if the combination is rejected

    Raises:
        SingularMatrixError, ZeroVarianceError, ConvergenceError: fatal,
            with ``combination`` set on the exception
    """
    mask = combination_present(context.y_absent, context.x_absent, combination)
    context.observation_mask[:] = mask
    n_obs = int(mask.sum())
    if n_obs < MIN_OBSERVATIONS:
        logger.debug("reject %s: %d observations, need %d", combination, n_obs, MIN_OBSERVATIONS)
        return None

    y = context.y[mask]
    x = context.x[np.ix_(mask, list(combination))]

    try:
        if len(combination) == 1:
            fit = _fit_single(context, combination, x, y)
        else:
            fit = _fit_components(context, combination, x, y)
    except (NumericalError, ConvergenceError) as e:
        e.combination = combination
        raise

    if fit is None:
        return None
    intercept, raw, ols, n_components = fit

    coefficients = np.full(context.n_variables, context.x_missing)
    coefficients[list(combination)] = raw
    fitted = np.full(len(context.y), np.nan)
    fitted[mask] = ols.fitted_values
    residuals = np.full(len(context.y), np.nan)
    residuals[mask] = ols.residuals

    return Model(
        intercept=intercept,
        coefficients=coefficients,
        variables=combination,
        r=ols.r,
        standard_error=ols.standard_error,
        n_observations=n_obs,
        n_components=n_components,
        t_statistics=ols.t_statistics,
        fitted_values=fitted,
        residuals=residuals,
        observation_mask=mask.copy(),
        missing_value=context.x_missing,
    )


class CombinationSearch:
    """
    Breadth-first walk over variable combinations.

    Usage:
        context = SearchContext.from_design(design)
        models = CombinationSearch(context).run()
    """

    def __init__(self, context: SearchContext):
        self._context = context

    @property
    def context(self) -> SearchContext:
        return self._context

    def _try(self, combination: tuple[int, ...]) -> None:
        ctx = self._context
        ctx.n_candidates += 1
        model = evaluate_combination(ctx, combination)
        if model is None:
            return
        ctx.n_accepted += 1
        ctx.table.offer(model)

    def candidates(self, size: int) -> list[tuple[int, ...]]:
        """
        Combinations of `size` variables to try this round.

        Parents are the (size-1)-variable models in the table, in slot
        order. A candidate is skipped when an earlier parent is a subset of
        it, since it was already generated from that parent.
        """
        p = self._context.n_variables
        parents = [s for s in self._context.table.snapshot() if len(s) == size - 1]
        out = []
        for i, parent in enumerate(parents):
            for j in range(p):
                if j in parent:
                    continue
                candidate = parent | {j}
                if any(earlier <= candidate for earlier in parents[:i]):
                    logger.debug("skip duplicate %s", tuple(sorted(candidate)))
                    continue
                out.append(tuple(sorted(candidate)))
        return out

    def run(self) -> tuple[Model, ...]:
        """
        Run the search to completion.

        Returns:
            Stored models ranked by ascending standard error

        Raises:
            NoValidModelError: If no combination survived screening
        """
        ctx = self._context
        p = ctx.n_variables

        for size in range(1, p + 1):
            if size == 1:
                round_candidates = [(j,) for j in range(p)]
            else:
                round_candidates = self.candidates(size)

            before = ctx.n_accepted
            for combination in round_candidates:
                self._try(combination)

            logger.info(
                "size %d: %d candidates, %d passed screening, table holds %d",
                size, len(round_candidates), ctx.n_accepted - before, len(ctx.table),
            )
            if not ctx.table.has_size(size):
                break

        if len(ctx.table) == 0:
            raise NoValidModelError(
                "No valid equations found: every combination was rejected",
                n_candidates=ctx.n_candidates,
            )

        ranked = ctx.table.ranked()
        logger.info(
            "search finished: %d models retained from %d candidates",
            len(ranked), ctx.n_candidates,
        )
        return ranked
