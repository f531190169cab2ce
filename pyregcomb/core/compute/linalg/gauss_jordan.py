"""
Gauss-Jordan inversion and linear solves with the maximum pivot strategy.

Complete elimination: each round takes the element of largest magnitude
among the rows and columns not yet used as pivots. Row and column
subscripts of successive pivots are recorded, then used to compute the
sign of the determinant and to unscramble the inverse.

Reference:
    Carnahan, B., Luther, H. A., & Wilkes, J. O. (1969).
    Applied Numerical Methods. John Wiley, pp. 290-291.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import DimensionError
from pyregcomb.core.compute.tolerances import PIVOT_EPSILON


class InverseMode(Enum):
    """What gauss_jordan() computes."""
    INVERSE_ONLY = 'inverse_only'
    INVERSE_AND_SOLUTION = 'inverse_and_solution'
    SOLUTION_ONLY = 'solution_only'


@dataclass(frozen=True)
class GaussJordanResult:
    """
    Result of a Gauss-Jordan elimination.

    Attributes:
        determinant: Determinant of the n x n coefficient matrix, or exactly
            0.0 when a pivot was not larger than the pivot tolerance
        inverse: Inverse of the coefficient matrix (None for SOLUTION_ONLY
            or when singular)
        solution: Solution of the augmented system (None for INVERSE_ONLY
            or when singular)
        pivots: (row, column) of each pivot, in elimination order
    """
    determinant: float
    inverse: NDArray[np.floating[Any]] | None
    solution: NDArray[np.floating[Any]] | None
    pivots: tuple[tuple[int, int], ...]

    @property
    def singular(self) -> bool:
        return self.determinant == 0.0


def _permutation_parity(order: NDArray[np.intp]) -> int:
    """Number of pairwise inversions in order, modulo 2."""
    inversions = 0
    n = len(order)
    for i in range(n - 1):
        inversions += int(np.sum(order[i + 1:] < order[i]))
    return inversions % 2


def gauss_jordan(
    a: ArrayLike,
    mode: InverseMode = InverseMode.INVERSE_ONLY,
    eps: float = PIVOT_EPSILON,
) -> GaussJordanResult:
    """
    Invert a matrix and/or solve a linear system by Gauss-Jordan elimination.

    For INVERSE_ONLY, ``a`` is n x n. For the other modes ``a`` is the
    n x (n+1) augmented matrix whose last column is the right-hand side.
    The input is copied; the caller's array is never modified.

    Args:
        a: Coefficient or augmented matrix
        mode: Which results to produce
        eps: Pivot tolerance; a best pivot with magnitude <= eps means
            the matrix is singular

    Returns:
        GaussJordanResult. When singular, determinant is 0.0 and neither
        an inverse nor a solution is returned.

    Raises:
        DimensionError: On zero-sized input or a shape that does not match mode
    """
    work = np.array(a, dtype=np.float64, copy=True)
    if work.ndim != 2 or work.size == 0:
        raise DimensionError(f"a: expected non-empty 2D matrix, got shape {work.shape}")

    n = work.shape[0]
    expected_cols = n if mode is InverseMode.INVERSE_ONLY else n + 1
    if work.shape[1] != expected_cols:
        raise DimensionError(
            f"a: mode {mode.value} needs an {n} x {expected_cols} matrix, got shape {work.shape}"
        )

    irow = np.zeros(n, dtype=np.intp)
    jcol = np.zeros(n, dtype=np.intp)
    row_used = np.zeros(n, dtype=bool)
    col_used = np.zeros(n, dtype=bool)
    determinant = 1.0

    for k in range(n):
        # Search for the pivot among unused rows and columns
        candidates = np.abs(work[:, :n])
        candidates[row_used, :] = -1.0
        candidates[:, col_used] = -1.0
        flat = int(np.argmax(candidates))
        r, c = divmod(flat, n)
        pivot = work[r, c]

        if abs(pivot) <= eps:
            return GaussJordanResult(
                determinant=0.0,
                inverse=None,
                solution=None,
                pivots=tuple(zip(irow[:k].tolist(), jcol[:k].tolist())),
            )

        irow[k], jcol[k] = r, c
        row_used[r] = True
        col_used[c] = True
        determinant *= pivot

        # Normalize pivot row
        work[r, :] /= pivot
        work[r, c] = 1.0 / pivot

        # Eliminate the pivot column from every other row, developing the
        # inverse in place of the eliminated column
        others = np.arange(n) != r
        factors = work[others, c].copy()
        work[others, :] -= np.outer(factors, work[r, :])
        work[others, c] = -factors / pivot

    # jord[irow[i]] = jcol[i]; odd parity flips the sign of the determinant
    jord = np.empty(n, dtype=np.intp)
    jord[irow] = jcol
    if _permutation_parity(jord):
        determinant = -determinant

    pivots = tuple(zip(irow.tolist(), jcol.tolist()))

    solution = None
    if mode is not InverseMode.INVERSE_ONLY:
        solution = np.empty(n, dtype=np.float64)
        solution[jcol] = work[irow, n]

    if mode is InverseMode.SOLUTION_ONLY:
        return GaussJordanResult(
            determinant=float(determinant),
            inverse=None,
            solution=solution,
            pivots=pivots,
        )

    # Unscramble the inverse, first by rows then by columns
    by_rows = np.empty((n, n), dtype=np.float64)
    by_rows[jcol, :] = work[irow, :n]
    inverse_matrix = np.empty((n, n), dtype=np.float64)
    inverse_matrix[:, irow] = by_rows[:, jcol]

    return GaussJordanResult(
        determinant=float(determinant),
        inverse=inverse_matrix,
        solution=solution,
        pivots=pivots,
    )


def inverse(a: ArrayLike, eps: float = PIVOT_EPSILON) -> GaussJordanResult:
    """
    Invert an n x n matrix.

    Check ``result.singular`` (determinant exactly 0.0) before using
    ``result.inverse``.
    """
    return gauss_jordan(a, InverseMode.INVERSE_ONLY, eps=eps)


def solve(
    augmented: ArrayLike,
    *,
    with_inverse: bool = False,
    eps: float = PIVOT_EPSILON,
) -> GaussJordanResult:
    """
    Solve the linear system held in an n x (n+1) augmented matrix.

    Args:
        augmented: Coefficients with the right-hand side as the last column
        with_inverse: Also unscramble and return the coefficient inverse
        eps: Pivot tolerance
    """
    mode = InverseMode.INVERSE_AND_SOLUTION if with_inverse else InverseMode.SOLUTION_ONLY
    return gauss_jordan(augmented, mode, eps=eps)
