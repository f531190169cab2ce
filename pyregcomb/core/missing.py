"""
Missing-value sentinels.

Observations arrive with a sentinel standing for "missing" (for example
-999.0), one sentinel for the independent variables and one for the
dependent variable. NaN is always treated as missing as well, so a NaN
sentinel and NaN-coded data work the same way.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import NDArray


def is_missing(values: NDArray[np.floating[Any]], sentinel: float) -> NDArray[np.bool_]:
    """
    Boolean mask, True where a value equals the sentinel or is NaN.

    Parameters
    ----------
    values : NDArray
        Array of any shape.
    sentinel : float
        Missing-value sentinel (may be NaN).

    Returns
    -------
    mask : NDArray[bool]
        Same shape as values.
    """
    mask = np.isnan(values)
    if not math.isnan(sentinel):
        mask |= values == sentinel
    return mask


def pairwise_present(y_missing: NDArray[np.bool_], x_missing: NDArray[np.bool_]) -> NDArray[np.bool_]:
    """
    Rows where the dependent value and one independent column are both present.

    Parameters
    ----------
    y_missing : NDArray[bool]
        (n,) missing mask of the dependent variable.
    x_missing : NDArray[bool]
        (n,) missing mask of one independent column.
    """
    return ~(y_missing | x_missing)


def combination_present(
    y_missing: NDArray[np.bool_],
    x_missing: NDArray[np.bool_],
    combination: tuple[int, ...],
) -> NDArray[np.bool_]:
    """
    Rows usable for a combination: y present and every included x present.

    Parameters
    ----------
    y_missing : NDArray[bool]
        (n,) missing mask of the dependent variable.
    x_missing : NDArray[bool]
        (n, p) missing mask of the independent variables.
    combination : tuple of int
        Included column indices.
    """
    mask = ~y_missing
    if combination:
        mask &= ~np.any(x_missing[:, list(combination)], axis=1)
    return mask
