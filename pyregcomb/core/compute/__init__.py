"""
Shared compute infrastructure for pyregcomb.

This module provides timing utilities, numerical constants and the linear
algebra kernels used by the regression search.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical constants and tolerance tiers
    linalg: Linear algebra kernels (Gauss-Jordan, Jacobi, products)
"""

from pyregcomb.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
