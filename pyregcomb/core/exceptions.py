"""
Exception hierarchy for pyregcomb.

All exceptions inherit from PyRegCombError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Fatal numerical errors raised inside a combination search carry
      the offending combination (0-based variable indices)
"""

from __future__ import annotations


class PyRegCombError(Exception):
    """Base exception for all pyregcomb errors."""
    pass


class ValidationError(PyRegCombError):
    """
    Input validation failed.

    Raised when user-provided inputs or options fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised for zero-sized inputs, wrong number of dimensions, and
    mismatched shapes between operands.
    """
    pass


class NumericalError(PyRegCombError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.

    Attributes:
        combination: Variable indices being evaluated when the error
            occurred, or None outside a search
    """

    def __init__(self, message: str, combination: tuple[int, ...] | None = None):
        super().__init__(message)
        self.combination = combination


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a Gauss-Jordan inversion needed to produce a result finds
    no pivot larger than the pivot tolerance.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        determinant: Determinant reported by the inversion (0.0 when singular)
        pivots_found: Number of elimination rounds completed before failing
        combination: Variable indices being evaluated, if inside a search
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        determinant: float | None = None,
        pivots_found: int | None = None,
        combination: tuple[int, ...] | None = None,
    ):
        super().__init__(message, combination=combination)
        self.matrix_name = matrix_name
        self.determinant = determinant
        self.pivots_found = pivots_found


class ZeroVarianceError(NumericalError):
    """
    Correlation matrix has a zero denominator.

    Raised while building the correlation matrix of a combination when a
    pair of variables has no variability over the shared observations.
    A zero denominator is never turned into a zero correlation.

    Attributes:
        variables: The (i, j) variable pair, as positions inside the
            combination's submatrix
        combination: Variable indices being evaluated, if inside a search
    """

    def __init__(
        self,
        message: str,
        variables: tuple[int, int] | None = None,
        combination: tuple[int, ...] | None = None,
    ):
        super().__init__(message, combination=combination)
        self.variables = variables


class ConvergenceError(PyRegCombError):
    """
    Iterative algorithm failed to converge.

    Raised when the Jacobi eigenvalue iteration exhausts its sweep budget.

    Attributes:
        iterations: Number of sweeps completed
        final_change: Remaining sum of off-diagonal magnitudes, if known
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
        combination: Variable indices being evaluated, if inside a search
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None,
        combination: tuple[int, ...] | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
        self.combination = combination


class NoValidModelError(PyRegCombError):
    """
    No combination survived screening.

    Raised at the end of a search when the model table is empty, so no
    ranking can be produced.

    Attributes:
        n_candidates: Number of combinations that were evaluated
    """

    def __init__(self, message: str, n_candidates: int = 0):
        super().__init__(message)
        self.n_candidates = n_candidates
