"""
Input validation utilities for pyregcomb.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from __future__ import annotations

import math
from numbers import Integral, Real
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import DimensionError, ValidationError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float64 dtype

    Raises:
        ValidationError: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number) and result.dtype != np.bool_:
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result.astype(np.float64, copy=False)


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[Any], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_not_empty(array: NDArray[Any], name: str) -> None:
    """
    Verify array has no zero-length axis.

    Raises:
        DimensionError: If any axis has length zero
    """
    if array.size == 0:
        raise DimensionError(f"{name}: zero-sized input with shape {array.shape}")


def check_square(array: NDArray[Any], name: str) -> None:
    """
    Verify a 2D array is square.

    Raises:
        DimensionError: If the array is not n x n
    """
    check_2d(array, name)
    rows, cols = array.shape
    if rows != cols:
        raise DimensionError(f"{name}: expected square matrix, got shape {array.shape}")


def check_consistent_length(
    *arrays: NDArray[Any],
    names: tuple[str, ...],
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_no_infinite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no +/-Inf values. NaN is allowed (it marks missing).

    Raises:
        ValidationError: If array contains infinite values
    """
    n_inf = int(np.sum(np.isinf(array)))
    if n_inf:
        raise ValidationError(f"{name}: contains {n_inf} infinite values")


def check_sentinel(value: Any, name: str) -> float:
    """
    Validate a missing-value sentinel.

    Any real number or NaN is accepted; infinities are not.

    Returns:
        The sentinel as a float
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name}: expected a real number or NaN, got {value!r}")
    value = float(value)
    if math.isinf(value):
        raise ValidationError(f"{name}: sentinel cannot be infinite, got {value}")
    return value


def check_positive_int(value: Any, name: str, *, allow_zero: bool = False) -> int:
    """
    Validate a positive (or non-negative) integer option.

    Raises:
        ValidationError: If value is not an integer in range
    """
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ValidationError(f"{name}: expected an integer, got {value!r}")
    lower = 0 if allow_zero else 1
    if value < lower:
        raise ValidationError(f"{name}: must be >= {lower}, got {value}")
    return int(value)


def check_positive_finite(value: Any, name: str) -> float:
    """
    Validate a strictly positive, finite real option.

    Raises:
        ValidationError: If value is not a positive finite number
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name}: expected a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise ValidationError(f"{name}: must be positive and finite, got {value}")
    return value
