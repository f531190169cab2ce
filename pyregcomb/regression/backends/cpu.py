"""
CPU backend for the combination search.

All inversions go through the Gauss-Jordan kernel with maximal pivoting
and all eigen-decompositions through cyclic Jacobi, so results do not
depend on the installed LAPACK.
"""

from typing import Any

from pyregcomb.core.result import Result
from pyregcomb.core.compute.timing import Timer
from pyregcomb.regression._common import SearchParams
from pyregcomb.regression._search import CombinationSearch, SearchContext
from pyregcomb.regression.design import SearchDesign


class CPUCombinationBackend:
    """
    CPU backend using Gauss-Jordan inversion and Jacobi eigenvectors.

    Implements the Backend protocol for SearchDesign -> SearchParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_gauss_jordan'

    def solve(self, design: SearchDesign) -> Result[SearchParams]:
        """
        Run the breadth-first combination search.

        Algorithm:
            1. Signs of the zero-order correlations of each X with y
            2. Size-1 combinations, then extensions of the retained models
               one variable at a time, screening each by OLS or principal
               components regression
            3. Rank the retained models by standard error

        Args:
            design: Validated search design

        Returns:
            Result containing SearchParams

        Raises:
            NoValidModelError: If no combination survives screening
            SingularMatrixError: If X'X is singular for some combination
            ZeroVarianceError: If a correlation matrix has a zero denominator
            ConvergenceError: If Jacobi does not converge
        """
        timer = Timer()
        timer.start()

        with timer.section('sign_vector'):
            context = SearchContext.from_design(design)

        with timer.section('search'):
            models = CombinationSearch(context).run()

        timer.stop()

        params = SearchParams(
            models=models,
            sign_vector=context.sign_vector,
            n_candidates=context.n_candidates,
            n_accepted=context.n_accepted,
            largest_size=max(model.n_variables for model in models),
            max_combinations=design.max_combinations,
            t_critical=design.t_critical,
            max_components=design.max_components,
        )

        info: dict[str, Any] = {
            'method': 'gauss_jordan_pcr',
            'n_variables': design.p,
            'n_observations': design.n,
            'n_models': len(models),
        }

        warnings: list[str] = []
        if len(models) < design.max_combinations:
            warnings.append(
                f"Only {len(models)} of {design.max_combinations} requested models "
                f"passed screening"
            )

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings),
        )
