"""
Combination search solution.

User-facing wrapper around the backend Result: ranked models, counters,
equation lookup, missing-value filling and a text summary.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyregcomb.core.exceptions import ValidationError
from pyregcomb.core.missing import is_missing
from pyregcomb.core.result import Result
from pyregcomb.regression._common import Model, SearchParams

if TYPE_CHECKING:
    from pyregcomb.regression.design import SearchDesign


@dataclass
class SearchSolution:
    """
    User-facing combination search results.

    Models are ranked best first (ascending standard error).
    """
    _result: Result[SearchParams]
    _design: SearchDesign

    @property
    def models(self) -> tuple[Model, ...]:
        return self._result.params.models

    @property
    def best(self) -> Model:
        return self.models[0]

    @property
    def n_models(self) -> int:
        return len(self.models)

    @property
    def sign_vector(self) -> NDArray[np.int_]:
        return self._result.params.sign_vector

    @property
    def n_candidates(self) -> int:
        """Combinations fitted (duplicates within a round are not counted)."""
        return self._result.params.n_candidates

    @property
    def n_accepted(self) -> int:
        """Combinations that passed screening, retained or not."""
        return self._result.params.n_accepted

    @property
    def largest_size(self) -> int:
        return self._result.params.largest_size

    @property
    def design(self) -> SearchDesign:
        return self._design

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def model(self, rank: int) -> Model:
        """Model at a 1-based rank."""
        if isinstance(rank, bool) or not isinstance(rank, (int, np.integer)):
            raise ValidationError(f"rank: expected an integer, got {rank!r}")
        if not 1 <= rank <= self.n_models:
            raise ValidationError(f"rank: must be in 1..{self.n_models}, got {rank}")
        return self.models[rank - 1]

    def coefficients_for_rank(self, rank: int) -> NDArray[np.floating[Any]]:
        """
        Equation of the model at a 1-based rank.

        Returns:
            [intercept, b_1, ..., b_p]; unused variables hold the X sentinel
        """
        return self.model(rank).equation

    def fill(self, rank: int = 1) -> Any:
        """
        Fill missing dependent values with the equation at `rank`.

        A missing y is replaced only where every variable used by the
        equation is present; everything else is returned unchanged.

        Returns:
            Copy of y as an ndarray, or a pandas Series on the design's
            index when the design was built from pandas
        """
        model = self.model(rank)
        design = self._design
        y = design.y.copy()

        y_absent = is_missing(y, design.y_missing)
        cols = list(model.variables)
        x_absent = np.any(is_missing(design.X[:, cols], design.x_missing), axis=1)
        usable = y_absent & ~x_absent

        if y_absent.any() and not usable.any():
            warnings.warn(
                f"None of the {int(y_absent.sum())} missing values could be filled: "
                f"the rank {rank} equation needs a variable missing at each of them",
                RuntimeWarning,
                stacklevel=2,
            )

        prediction = model.intercept + design.X[:, cols] @ model.coefficients[cols]
        y[usable] = prediction[usable]

        if design.index is not None:
            import pandas as pd
            return pd.Series(y, index=design.index, name=design.metadata.get('dependent'))
        return y

    def summary(self) -> str:
        """Equation summary table and ranked equations."""
        names = self._design.variable_names
        meta = self._design.metadata
        signs = " ".join(
            f"{name}:{'+' if s > 0 else '-'}" for name, s in zip(names, self.sign_vector)
        )

        lines = [
            "Combination Regression Results",
            "=" * 72,
            f"Observations: {self._design.n} ({meta['n_y_missing']} missing y)",
            f"Independent variables: {self._design.p}",
            f"Combinations fitted: {self.n_candidates}",
            f"Passed screening: {self.n_accepted}",
            f"Models retained: {self.n_models} (largest size {self.largest_size})",
            f"Correlation signs: {signs}",
            "",
            "Equation Summary:",
            "-" * 72,
            f"{'Rank':<6} {'Std.Error':>12} {'R':>9} {'Obs':>6} {'Comp':>5}  Variables",
            "-" * 72,
        ]
        for rank, model in enumerate(self.models, start=1):
            used = ", ".join(names[j] for j in model.variables)
            lines.append(
                f"{rank:<6} {model.standard_error:12.6g} {model.r:9.5f} "
                f"{model.n_observations:>6} {model.n_components:>5}  {used}"
            )

        lines.append("")
        lines.append("Ranked Equations:")
        lines.append("-" * 72)
        for rank, model in enumerate(self.models, start=1):
            terms = "".join(
                f" {'-' if model.coefficients[j] < 0 else '+'} "
                f"{abs(model.coefficients[j]):.6g}*{names[j]}"
                for j in model.variables
            )
            lines.append(f"{rank:>3}: y = {model.intercept:.6g}{terms}")

        lines.append("-" * 72)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for warning in self.warnings:
            lines.append(f"Warning: {warning}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SearchSolution(n={self._design.n}, p={self._design.p}, "
            f"models={self.n_models}, best_se={self.best.standard_error:.4g})"
        )
