"""
Eigenvalues and eigenvectors of real symmetric matrices by cyclic Jacobi.

Only the upper triangle of the input is read. Eigenvalues are returned in
descending order with the eigenvectors as the matching columns.

Reference:
    Press, W. H., Flannery, B. P., Teukolsky, S. A., & Vetterling, W. T.
    (1988). Numerical Recipes in C. Cambridge University Press, pp. 364-366.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import ConvergenceError, DimensionError
from pyregcomb.core.compute.tolerances import (
    JACOBI_MAX_SWEEPS,
    JACOBI_THRESHOLD_SWEEPS,
    JACOBI_ZEROING_SWEEP,
)


class EigenStatus(Enum):
    """Lifecycle of a JacobiEigenSolver. CONVERGED and FAILED are terminal."""
    NOT_CALCULATED = 'not_calculated'
    CONVERGED = 'converged'
    FAILED = 'failed'


@dataclass(frozen=True)
class EigenPairs:
    """
    Converged eigen-decomposition.

    Attributes:
        eigenvalues: (n,) in descending order
        eigenvectors: (n, n), column j belongs to eigenvalues[j]
        sweeps: Number of Jacobi sweeps used
    """
    eigenvalues: NDArray[np.floating[Any]]
    eigenvectors: NDArray[np.floating[Any]]
    sweeps: int


def _rotate(g: NDArray, h: NDArray, s: float, tau: float) -> None:
    # g and h are views into the matrix being rotated
    g_old = g.copy()
    g -= s * (h + g_old * tau)
    h += s * (g_old - h * tau)


def _sort_descending(d: NDArray, v: NDArray) -> None:
    """Straight selection sort of eigenvalues, swapping eigenvector columns."""
    n = len(d)
    for i in range(n - 1):
        k = i
        p = d[i]
        for j in range(i + 1, n):
            if d[j] >= p:
                k = j
                p = d[j]
        if k != i:
            d[k] = d[i]
            d[i] = p
            v[:, [i, k]] = v[:, [k, i]]


class JacobiEigenSolver:
    """
    Cyclic Jacobi eigen-solver.

    The matrix is copied at construction; solve() may be called once and
    moves the status from NOT_CALCULATED to CONVERGED or FAILED.

    Example:
        >>> solver = JacobiEigenSolver(corr)
        >>> if solver.solve() is not EigenStatus.CONVERGED:
        ...     raise ...
        >>> solver.eigenvalues, solver.eigenvectors
    """

    def __init__(self, matrix: ArrayLike, max_sweeps: int = JACOBI_MAX_SWEEPS):
        a = np.array(matrix, dtype=np.float64, copy=True)
        if a.ndim != 2 or a.size == 0:
            raise DimensionError(
                f"Can't perform eigenvalue calculations on matrix with shape {a.shape}"
            )
        if a.shape[0] != a.shape[1]:
            raise DimensionError(
                f"Can't perform eigenvalue calculations on non-square matrix {a.shape}"
            )
        self._a = a
        self._size = a.shape[0]
        self._max_sweeps = max_sweeps
        self._eigenvalues = np.zeros(self._size)
        self._eigenvectors = np.zeros((self._size, self._size))
        self._status = EigenStatus.NOT_CALCULATED
        self._sweeps = 0
        self._off_diagonal = float('nan')

    @property
    def size(self) -> int:
        return self._size

    @property
    def status(self) -> EigenStatus:
        return self._status

    @property
    def sweeps(self) -> int:
        return self._sweeps

    @property
    def eigenvalues(self) -> NDArray[np.floating[Any]]:
        self._check_usable()
        return self._eigenvalues

    @property
    def eigenvectors(self) -> NDArray[np.floating[Any]]:
        self._check_usable()
        return self._eigenvectors

    def _check_usable(self) -> None:
        if self._status is EigenStatus.NOT_CALCULATED:
            raise RuntimeError("solve() has not been called")
        if self._status is EigenStatus.FAILED:
            raise ConvergenceError(
                f"Jacobi iteration did not converge in {self._max_sweeps} sweeps",
                iterations=self._sweeps,
                final_change=self._off_diagonal,
                reason='max_iterations',
                threshold=0.0,
            )

    def solve(self) -> EigenStatus:
        """Run the Jacobi sweeps. Returns the terminal status."""
        if self._status is not EigenStatus.NOT_CALCULATED:
            raise RuntimeError(f"solve() already ran (status {self._status.value})")

        a = self._a
        n = self._size
        v = np.eye(n)
        d = np.diag(a).copy()
        b = d.copy()
        z = np.zeros(n)

        for sweep in range(1, self._max_sweeps + 1):
            self._sweeps = sweep
            sm = float(np.sum(np.abs(np.triu(a, k=1))))
            self._off_diagonal = sm

            if sm == 0.0:
                _sort_descending(d, v)
                self._eigenvalues = d
                self._eigenvectors = v
                self._status = EigenStatus.CONVERGED
                return self._status

            if sweep <= JACOBI_THRESHOLD_SWEEPS:
                tresh = 0.2 * sm / (n * n)
            else:
                tresh = 0.0

            for p in range(n - 1):
                for q in range(p + 1, n):
                    apq = a[p, q]
                    g = 100.0 * abs(apq)

                    if (sweep > JACOBI_ZEROING_SWEEP
                            and abs(d[p]) + g == abs(d[p])
                            and abs(d[q]) + g == abs(d[q])):
                        a[p, q] = 0.0
                        continue
                    if abs(apq) <= tresh:
                        continue

                    h = d[q] - d[p]
                    if abs(h) + g == abs(h):
                        t = apq / h
                    else:
                        theta = 0.5 * h / apq
                        t = 1.0 / (abs(theta) + np.sqrt(1.0 + theta * theta))
                        if theta < 0.0:
                            t = -t
                    c = 1.0 / np.sqrt(1.0 + t * t)
                    s = t * c
                    tau = s / (1.0 + c)
                    h = t * apq
                    z[p] -= h
                    z[q] += h
                    d[p] -= h
                    d[q] += h
                    a[p, q] = 0.0

                    _rotate(a[:p, p], a[:p, q], s, tau)
                    _rotate(a[p, p + 1:q], a[p + 1:q, q], s, tau)
                    _rotate(a[p, q + 1:], a[q, q + 1:], s, tau)
                    _rotate(v[:, p], v[:, q], s, tau)

            b += z
            d[:] = b
            z[:] = 0.0

        self._status = EigenStatus.FAILED
        return self._status


def jacobi_eigen(matrix: ArrayLike, max_sweeps: int = JACOBI_MAX_SWEEPS) -> EigenPairs:
    """
    Eigen-decompose a real symmetric matrix.

    Args:
        matrix: n x n symmetric matrix (upper triangle is used)
        max_sweeps: Sweep budget

    Returns:
        EigenPairs with eigenvalues in descending order

    Raises:
        DimensionError: If matrix is empty or not square
        ConvergenceError: If the sweep budget is exhausted
    """
    solver = JacobiEigenSolver(matrix, max_sweeps=max_sweeps)
    solver.solve()
    return EigenPairs(
        eigenvalues=solver.eigenvalues,
        eigenvectors=solver.eigenvectors,
        sweeps=solver.sweeps,
    )
