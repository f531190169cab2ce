"""
Core infrastructure for pyregcomb.

Shared abstractions and utilities used by the regression search.

Key components:
    protocols: DataSource, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    missing: Missing-value sentinel masks
    compute: Timing, numerical constants, linear algebra kernels
"""

from pyregcomb.core.protocols import DataSource, Backend
from pyregcomb.core.result import Result
from pyregcomb.core.exceptions import (
    PyRegCombError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    ZeroVarianceError,
    ConvergenceError,
    NoValidModelError,
)

__all__ = [
    # Protocols
    "DataSource",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyRegCombError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "ZeroVarianceError",
    "ConvergenceError",
    "NoValidModelError",
]
