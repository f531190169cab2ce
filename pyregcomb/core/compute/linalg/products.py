"""
Matrix products, transpose and indirect sorting.

Thin, dimension-checked wrappers around NumPy. Every function is pure:
inputs are never modified and a new array is returned.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import DimensionError


def _as_matrix(a: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    arr = np.asarray(a, dtype=np.float64)
    if arr.ndim != 2:
        raise DimensionError(f"{name}: expected 2D array, got {arr.ndim}D with shape {arr.shape}")
    if arr.size == 0:
        raise DimensionError(f"{name}: zero-sized input matrix with shape {arr.shape}")
    return arr


def multiply(a: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Multiply a matrix by a vector or by another matrix.

    Args:
        a: Matrix (m x k)
        b: Vector (k,) or matrix (k x n)

    Returns:
        Product vector (m,) or matrix (m x n)

    Raises:
        DimensionError: On zero-sized input or mismatched inner dimension
    """
    left = _as_matrix(a, 'a')
    right = np.asarray(b, dtype=np.float64)

    if right.ndim not in (1, 2):
        raise DimensionError(f"b: expected 1D or 2D array, got {right.ndim}D")
    if right.size == 0:
        raise DimensionError(f"b: zero-sized input with shape {right.shape}")
    if right.shape[0] != left.shape[1]:
        raise DimensionError(
            f"Inner dimensions do not match: a has {left.shape[1]} columns, "
            f"b has {right.shape[0]} rows"
        )

    return left @ right


def transpose(a: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Transpose a matrix.

    Returns a new (contiguous) array; the input is not a view of the result.

    Raises:
        DimensionError: On zero-sized or non-2D input
    """
    return np.ascontiguousarray(_as_matrix(a, 'a').T)


def sort_indices(values: ArrayLike) -> NDArray[np.intp]:
    """
    Indirect heap-sort.

    Returns the permutation ``index`` such that ``values[index[j]]`` is
    ascending for j = 0, 1, ..., n-1. The input is not changed. Used to
    rank stored models by standard error.

    Raises:
        DimensionError: If values is not 1D
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise DimensionError(f"values: expected 1D array, got {arr.ndim}D with shape {arr.shape}")
    return np.argsort(arr, kind='heapsort')
