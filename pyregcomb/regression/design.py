"""
Search Design.

SearchDesign holds the independent variables X, the dependent variable y,
their missing-value sentinels and the search options. It is the validation
boundary: everything past it trusts its contents.

Construction:
    SearchDesign.build(X, y, x_missing=-999.0, max_combinations=10)
    SearchDesign.from_dataframe(df, y='flow', x=['precip', 'snow'])
    SearchDesign.from_series(flow, [precip, snow], start='1990-01-01', months='4 5 6')
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyregcomb.core.exceptions import DimensionError, ValidationError
from pyregcomb.core.missing import is_missing
from pyregcomb.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_no_infinite,
    check_not_empty,
    check_positive_finite,
    check_positive_int,
    check_sentinel,
)
from pyregcomb.core.compute.tolerances import DEFAULT_MAX_COMBINATIONS, DEFAULT_T_CRITICAL

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class SearchDesign:
    """
    Validated inputs for a combination search.

    Immutable after construction. Build with one of the classmethods, not
    directly.
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _x_missing: float
    _y_missing: float
    _max_combinations: int
    _t_critical: float
    _max_components: int
    _variable_names: tuple[str, ...]
    _index: Any = None
    _metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        x_missing: float = math.nan,
        y_missing: float = math.nan,
        max_combinations: int = DEFAULT_MAX_COMBINATIONS,
        t_critical: float = DEFAULT_T_CRITICAL,
        max_components: int | None = None,
        variable_names: Sequence[str] | None = None,
        index: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> SearchDesign:
        """
        Validate arrays and options and build a design.

        Args:
            X: Independent variables (n_obs x n_variables); a 1D array is
                one variable. No intercept column.
            y: Dependent variable (n_obs,)
            x_missing: Sentinel for missing X values (NaN always counts as missing)
            y_missing: Sentinel for missing y values
            max_combinations: Models to retain; 0 means the default (20)
            t_critical: |t| threshold for a significant coefficient
            max_components: Most principal components per model
                (default: number of variables)
            variable_names: Names used in summaries (default x1, x2, ...)
            index: Optional row labels (e.g. a DatetimeIndex) for fill()
            metadata: Extra descriptive entries

        Raises:
            ValidationError: On bad options or non-numeric data
            DimensionError: On empty or inconsistent arrays
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')

        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_not_empty(X_arr, 'X')
        check_not_empty(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))
        check_no_infinite(X_arr, 'X')
        check_no_infinite(y_arr, 'y')

        x_missing = check_sentinel(x_missing, 'x_missing')
        y_missing = check_sentinel(y_missing, 'y_missing')

        max_combinations = check_positive_int(max_combinations, 'max_combinations', allow_zero=True)
        if max_combinations == 0:
            max_combinations = DEFAULT_MAX_COMBINATIONS
        t_critical = check_positive_finite(t_critical, 't_critical')

        n, p = X_arr.shape
        if max_components is None:
            max_components = p
        else:
            max_components = check_positive_int(max_components, 'max_components')

        if variable_names is None:
            names = tuple(f"x{j + 1}" for j in range(p))
        else:
            names = tuple(str(name) for name in variable_names)
            if len(names) != p:
                raise DimensionError(
                    f"variable_names: expected {p} names, got {len(names)}"
                )

        if index is not None and len(index) != n:
            raise DimensionError(f"index: expected length {n}, got {len(index)}")

        return cls(
            _X=X_arr,
            _y=y_arr,
            _x_missing=x_missing,
            _y_missing=y_missing,
            _max_combinations=max_combinations,
            _t_critical=t_critical,
            _max_components=max_components,
            _variable_names=names,
            _index=index,
            _metadata=dict(metadata or {}),
        )

    @classmethod
    def from_arrays(cls, X: ArrayLike, y: ArrayLike, **options: Any) -> SearchDesign:
        """Build directly from arrays; options as in build()."""
        return cls.build(X, y, **options)

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        *,
        y: str,
        x: str | Sequence[str] | None = None,
        **options: Any,
    ) -> SearchDesign:
        """
        Build from DataFrame columns.

        Args:
            df: Source DataFrame
            y: Dependent-variable column
            x: Independent-variable column(s); default all other columns
            **options: As in build()
        """
        if y not in df.columns:
            raise ValidationError(f"y: column {y!r} not in DataFrame")
        if x is None:
            x_cols = [c for c in df.columns if c != y]
        elif isinstance(x, str):
            x_cols = [x]
        else:
            x_cols = list(x)
        if not x_cols:
            raise ValidationError("x: no independent-variable columns available")
        unknown = [c for c in x_cols if c not in df.columns]
        if unknown:
            raise ValidationError(f"x: columns not in DataFrame: {unknown}")

        options.setdefault('variable_names', [str(c) for c in x_cols])
        options.setdefault('index', df.index)
        return cls.build(
            df[x_cols].to_numpy(),
            df[y].to_numpy(),
            **options,
        )

    @classmethod
    def from_series(
        cls,
        dependent: pd.Series,
        independents: pd.DataFrame | Sequence[pd.Series],
        *,
        start: Any = None,
        end: Any = None,
        months: str | Iterable[int] | None = None,
        missing: float = math.nan,
        **options: Any,
    ) -> SearchDesign:
        """
        Arrange time series into a design.

        The independent series are aligned on the dependent series' time
        stamps, the rows are restricted to the analysis period and, when
        given, to a set of calendar months. Time stamps with no value in an
        independent series become missing.

        Args:
            dependent: Dependent series with a DatetimeIndex
            independents: DataFrame or sequence of Series (DatetimeIndex)
            start: First date of the analysis period (default: first date
                of the dependent series)
            end: Last date of the analysis period (default: last date)
            months: Months to keep, 1-12, as an iterable or a string such as
                "4, 5 6"; None, "" or "*" keeps every month
            missing: Sentinel for missing values in every series (both the
                x and y sentinel)
            **options: Other build() options; x_missing, y_missing and
                index are set here and may not be passed

        Raises:
            ValidationError: On a non-datetime index, mismatched series
                frequencies, a bad month, an empty period or an option
                that from_series sets itself
        """
        import pandas as pd

        fixed = sorted(k for k in ('x_missing', 'y_missing', 'index') if k in options)
        if fixed:
            raise ValidationError(
                f"{', '.join(fixed)}: set by from_series; use `missing` for both sentinels"
            )

        if not isinstance(dependent.index, pd.DatetimeIndex):
            raise ValidationError("dependent: index must be a DatetimeIndex")

        if isinstance(independents, pd.DataFrame):
            frame = independents
        else:
            series = list(independents)
            if not series:
                raise ValidationError("independents: at least one series is required")
            names = [
                s.name if s.name is not None else f"x{j + 1}" for j, s in enumerate(series)
            ]
            frame = pd.concat(series, axis=1, keys=names)

        if not isinstance(frame.index, pd.DatetimeIndex):
            raise ValidationError("independents: index must be a DatetimeIndex")
        _check_same_frequency(dependent, frame)

        period_start = dependent.index[0] if start is None else pd.Timestamp(start)
        period_end = dependent.index[-1] if end is None else pd.Timestamp(end)
        if period_end < period_start:
            raise ValidationError(
                f"analysis period: end {period_end} precedes start {period_start}"
            )

        index = dependent.index[
            (dependent.index >= period_start) & (dependent.index <= period_end)
        ]
        month_set = parse_months(months)
        if month_set:
            index = index[index.month.isin(sorted(month_set))]
        if len(index) == 0:
            raise ValidationError("analysis period contains no observations")

        y = dependent.reindex(index).to_numpy(dtype=np.float64)
        X = frame.reindex(index).to_numpy(dtype=np.float64)
        if not math.isnan(missing):
            y = np.where(np.isnan(y), missing, y)
            X = np.where(np.isnan(X), missing, X)

        options.setdefault('variable_names', [str(c) for c in frame.columns])
        options.setdefault('metadata', {
            'dependent': dependent.name,
            'period': (period_start, period_end),
            'months': tuple(sorted(month_set)),
        })
        return cls.build(
            X, y,
            x_missing=missing,
            y_missing=missing,
            index=index,
            **options,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Independent variables (n_obs x n_variables)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Dependent variable (n_obs,)."""
        return self._y

    @property
    def n(self) -> int:
        return self._X.shape[0]

    @property
    def p(self) -> int:
        return self._X.shape[1]

    @property
    def n_observations(self) -> int:
        return self.n

    @property
    def x_missing(self) -> float:
        return self._x_missing

    @property
    def y_missing(self) -> float:
        return self._y_missing

    @property
    def max_combinations(self) -> int:
        return self._max_combinations

    @property
    def t_critical(self) -> float:
        return self._t_critical

    @property
    def max_components(self) -> int:
        return self._max_components

    @property
    def variable_names(self) -> tuple[str, ...]:
        return self._variable_names

    @property
    def index(self) -> Any:
        """Row labels, if the design came from pandas."""
        return self._index

    @property
    def metadata(self) -> dict[str, Any]:
        meta = {
            'n_observations': self.n,
            'n_variables': self.p,
            'x_missing': self._x_missing,
            'y_missing': self._y_missing,
            'n_y_missing': int(is_missing(self._y, self._y_missing).sum()),
        }
        meta.update(self._metadata)
        return meta


def parse_months(months: str | Iterable[int] | None) -> frozenset[int]:
    """
    Parse a month selection.

    Accepts integers 1-12 as an iterable or as a string separated by
    commas and/or spaces. None, "" and "*" select every month and return
    an empty set.

    Raises:
        ValidationError: On a non-integer token or a month outside 1-12
    """
    if months is None:
        return frozenset()
    if isinstance(months, str):
        text = months.strip()
        if text in ('', '*'):
            return frozenset()
        tokens = text.replace(',', ' ').split()
        try:
            values = [int(token) for token in tokens]
        except ValueError as e:
            raise ValidationError(f"months: cannot parse {months!r}") from e
    else:
        values = list(months)

    bad = [m for m in values if isinstance(m, bool) or not isinstance(m, Integral) or not 1 <= m <= 12]
    if bad:
        raise ValidationError(f"months: expected integers 1-12, got {bad}")
    return frozenset(int(m) for m in values)


def _check_same_frequency(dependent: pd.Series, frame: pd.DataFrame) -> None:
    """Series on different time steps cannot be aligned meaningfully."""
    dep_freq = getattr(dependent.index, 'freqstr', None)
    ind_freq = getattr(frame.index, 'freqstr', None)
    if dep_freq is not None and ind_freq is not None and dep_freq != ind_freq:
        raise ValidationError(
            f"independents: time step {ind_freq!r} differs from dependent {dep_freq!r}"
        )
