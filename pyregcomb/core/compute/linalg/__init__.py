"""
Linear algebra kernels for pyregcomb.

All functions follow these conventions:
    - Inputs are never modified; kernels work on copies
    - Each decomposition returns a structured result dataclass
    - Dimension problems raise DimensionError immediately
    - Singularity is reported through the result (determinant 0.0), so the
      caller decides whether it is fatal

Submodules:
    products: matrix/vector products, transpose, indirect sort
    gauss_jordan: maximal-pivot Gauss-Jordan inverse and solve
    jacobi: cyclic Jacobi eigen-solver for symmetric matrices
"""

from pyregcomb.core.compute.linalg.products import (
    multiply,
    transpose,
    sort_indices,
)
from pyregcomb.core.compute.linalg.gauss_jordan import (
    InverseMode,
    GaussJordanResult,
    gauss_jordan,
    inverse,
    solve,
)
from pyregcomb.core.compute.linalg.jacobi import (
    EigenStatus,
    EigenPairs,
    JacobiEigenSolver,
    jacobi_eigen,
)

__all__ = [
    # Products
    "multiply",
    "transpose",
    "sort_indices",
    # Gauss-Jordan
    "InverseMode",
    "GaussJordanResult",
    "gauss_jordan",
    "inverse",
    "solve",
    # Jacobi
    "EigenStatus",
    "EigenPairs",
    "JacobiEigenSolver",
    "jacobi_eigen",
]
