"""
Tests for the combination search: screening, candidate generation,
retention and failure handling.
"""

import dataclasses
import functools
import itertools
import logging

import numpy as np
import pytest

from pyregcomb.core.compute.linalg import jacobi_eigen
from pyregcomb.core.exceptions import (
    ConvergenceError,
    NoValidModelError,
    SingularMatrixError,
    ZeroVarianceError,
)
from pyregcomb.regression import _pca, _search
from pyregcomb.regression import SearchDesign, fit_ols
from pyregcomb.regression._search import (
    CombinationSearch,
    SearchContext,
    evaluate_combination,
    zero_order_signs,
)


def _context(X, y, **options):
    return SearchContext.from_design(SearchDesign.build(X, y, **options))


class TestSignVector:
    """Zero-order correlation signs over pairwise-present rows."""

    def test_signs(self, rng):
        x = rng.standard_normal((30, 2))
        y = x[:, 0] - x[:, 1] + 0.1 * rng.standard_normal(30)
        absent = np.zeros((30, 2), dtype=bool)
        signs = zero_order_signs(x, y, absent, np.zeros(30, dtype=bool))
        np.testing.assert_array_equal(signs, [1, -1])

    def test_undefined_correlation_is_negative(self, rng):
        x = np.column_stack([np.zeros(10), rng.standard_normal(10)])
        y = rng.standard_normal(10)
        signs = zero_order_signs(x, y, np.zeros((10, 2), dtype=bool), np.zeros(10, dtype=bool))
        assert signs[0] == -1


class TestObservationThreshold:
    """A combination needs at least 6 complete observations."""

    def _data(self, rng, n_present):
        x = np.full(20, np.nan)
        x[:n_present] = np.arange(1.0, n_present + 1)
        y = 1.0 + 2.0 * np.nan_to_num(x) + 0.01 * rng.standard_normal(20)
        return x.reshape(-1, 1), y

    def test_five_rejected(self, rng):
        context = _context(*self._data(rng, 5))
        assert evaluate_combination(context, (0,)) is None
        assert context.observation_mask.sum() == 5

    def test_six_evaluated(self, rng):
        context = _context(*self._data(rng, 6))
        model = evaluate_combination(context, (0,))
        assert model is not None
        assert model.n_observations == 6
        assert model.n_components == 0
        assert model.coefficients[0] == pytest.approx(2.0, abs=0.05)

    def test_model_arrays_are_full_length(self, rng):
        context = _context(*self._data(rng, 8))
        model = evaluate_combination(context, (0,))
        assert model.fitted_values.shape == (20,)
        assert np.all(np.isnan(model.fitted_values[8:]))
        assert np.all(np.isfinite(model.residuals[:8]))
        np.testing.assert_array_equal(model.observation_mask, np.arange(20) < 8)


class TestSignRejection:
    """A coefficient whose sign contradicts its correlation with y is fatal to the combination."""

    def test_contradicting_sign_rejected(self, rng):
        n_common, n_extra = 20, 40
        x1 = rng.standard_normal(n_common)
        x2 = -0.5 * x1 + 0.5 * rng.standard_normal(n_common)
        y = 2.0 * x1 - x2 + 0.05 * rng.standard_normal(n_common)

        # Rows where only x2 is observed make its overall correlation with y positive
        x2_extra = 3.0 * rng.standard_normal(n_extra)
        X = np.column_stack([
            np.concatenate([x1, np.full(n_extra, np.nan)]),
            np.concatenate([x2, x2_extra]),
        ])
        Y = np.concatenate([y, 5.0 * x2_extra])

        context = _context(X, Y)
        np.testing.assert_array_equal(context.sign_vector, [1, 1])

        ols = fit_ols(np.column_stack([np.ones(n_common), x1, x2]), y)
        assert ols.coefficients[2] < 0

        assert evaluate_combination(context, (0, 1)) is None

    def test_single_variable_sign_checked(self, rng):
        x = rng.standard_normal(30)
        context = _context(x.reshape(-1, 1), 2.0 * x + 0.1 * rng.standard_normal(30))
        context.sign_vector[0] = -context.sign_vector[0]
        assert evaluate_combination(context, (0,)) is None


class _ScriptedComponents:
    """Sets |t| of the newest component and the sign verdict per component count."""

    def __init__(self, t_values, signs_ok):
        self.t_values = t_values
        self.signs_ok = signs_ok
        self.tried = []

    def fit_ols(self, X, y):
        ols = fit_ols(X, y)
        c = X.shape[1] - 1
        self.tried.append(c)
        t = ols.t_statistics.copy()
        t[c] = self.t_values[c]
        return dataclasses.replace(ols, t_statistics=t)

    def signs_agree(self, context, combination, coefficients):
        return self.signs_ok[self.tried[-1]]

    def install(self, monkeypatch):
        monkeypatch.setattr(_search, "fit_ols", self.fit_ols)
        monkeypatch.setattr(_search, "_signs_agree", self.signs_agree)


class TestComponentCount:
    """How many principal components a multi-variable model keeps."""

    X1 = np.arange(1.0, 8.0)
    X2 = np.array([2.0, 1.0, 4.0, 3.0, 6.0, 5.0, 8.0])

    def test_residual_df_limits_components(self):
        X = np.column_stack([self.X1, self.X2])
        y = 1.0 + self.X1 + self.X2

        six = evaluate_combination(_context(X[:6], y[:6]), (0, 1))
        seven = evaluate_combination(_context(X, y), (0, 1))

        # 6 rows leave only 3 residual df for two components
        assert six.n_components == 1
        assert seven.n_components == 2
        np.testing.assert_allclose(seven.coefficients, [1.0, 1.0], rtol=1e-6)

    def test_stops_at_first_insignificant_component(self, three_correlated, monkeypatch):
        scripted = _ScriptedComponents({1: 5.0, 2: 0.5, 3: 5.0}, {1: True, 2: True, 3: True})
        scripted.install(monkeypatch)
        model = evaluate_combination(_context(*three_correlated), (0, 1, 2))
        assert model.n_components == 1
        assert scripted.tried == [1, 2]

    def test_wrong_sign_skips_to_next_count(self, three_correlated, monkeypatch):
        scripted = _ScriptedComponents({1: 5.0, 2: 5.0, 3: 5.0}, {1: True, 2: False, 3: True})
        scripted.install(monkeypatch)
        model = evaluate_combination(_context(*three_correlated), (0, 1, 2))
        assert model.n_components == 3
        assert scripted.tried == [1, 2, 3]

    def test_largest_surviving_count_kept(self, three_correlated, monkeypatch):
        scripted = _ScriptedComponents({1: 5.0, 2: 5.0, 3: 5.0}, {1: True, 2: True, 3: False})
        scripted.install(monkeypatch)
        model = evaluate_combination(_context(*three_correlated), (0, 1, 2))
        assert model.n_components == 2

    def test_no_surviving_count(self, three_correlated, monkeypatch):
        scripted = _ScriptedComponents({1: 5.0, 2: 5.0, 3: 5.0}, {1: False, 2: False, 3: False})
        scripted.install(monkeypatch)
        assert evaluate_combination(_context(*three_correlated), (0, 1, 2)) is None

    def test_undefined_t_stops_growth(self, three_correlated, monkeypatch):
        scripted = _ScriptedComponents({1: np.nan, 2: 5.0, 3: 5.0}, {1: True, 2: True, 3: True})
        scripted.install(monkeypatch)
        assert evaluate_combination(_context(*three_correlated), (0, 1, 2)) is None
        assert scripted.tried == [1]


class TestCandidates:
    """Breadth-first extension of retained parents."""

    def _search_with_table(self, data, variables):
        context = _context(*data)
        for combo in variables:
            model = evaluate_combination(context, combo)
            assert model is not None
            context.table.offer(model)
        return CombinationSearch(context)

    def test_duplicates_skipped(self, three_correlated):
        search = self._search_with_table(three_correlated, [(0,), (1,), (2,)])
        assert search.candidates(2) == [(0, 1), (0, 2), (1, 2)]

    def test_only_parents_of_previous_size(self, three_correlated):
        search = self._search_with_table(three_correlated, [(0, 1), (2,), (1, 2)])
        assert search.candidates(3) == [(0, 1, 2)]

    def test_no_parents(self, three_correlated):
        search = self._search_with_table(three_correlated, [(0,)])
        assert search.candidates(3) == []


class TestRetention:
    """The pruned walk keeps the best models it visits."""

    def test_matches_brute_force(self, three_correlated):
        X, y = three_correlated
        context = _context(X, y, max_combinations=3)
        ranked = CombinationSearch(context).run()

        assert context.n_candidates == 7
        assert len(ranked) == 3

        reference = _context(X, y, max_combinations=3)
        errors = []
        for size in (1, 2, 3):
            for combo in itertools.combinations(range(3), size):
                model = evaluate_combination(reference, combo)
                if model is not None:
                    errors.append(model.standard_error)
        assert context.n_accepted == len(errors)

        np.testing.assert_allclose(
            [m.standard_error for m in ranked], sorted(errors)[:3], rtol=1e-12
        )

    def test_pruned_walk_keeps_best_visited(self, rng, monkeypatch):
        n = 50
        z = rng.standard_normal(n)
        X = np.column_stack([z + 0.8 * rng.standard_normal(n) for _ in range(5)])
        y = X @ [1.0, 0.8, 0.6, 0.4, 0.2] + 0.5 * rng.standard_normal(n)

        visited = []

        def recording(context, combination):
            model = evaluate_combination(context, combination)
            visited.append((combination, model))
            return model

        monkeypatch.setattr(_search, "evaluate_combination", recording)
        context = _context(X, y, max_combinations=3)
        ranked = CombinationSearch(context).run()

        # three retained parents give at most 9 of the 10 pairs
        assert context.n_candidates == len(visited) < 31
        accepted = [m for _, m in visited if m is not None]
        assert context.n_accepted == len(accepted)
        np.testing.assert_allclose(
            [m.standard_error for m in ranked],
            sorted(m.standard_error for m in accepted)[:3],
            rtol=1e-12,
        )

        reference = _context(X, y, max_combinations=3)
        for model in ranked:
            again = evaluate_combination(reference, model.variables)
            assert again.standard_error == pytest.approx(model.standard_error, rel=1e-12)

    def test_ranked_ascending(self, three_correlated):
        X, y = three_correlated
        ranked = CombinationSearch(_context(X, y, max_combinations=5)).run()
        errors = [m.standard_error for m in ranked]
        assert errors == sorted(errors)

    def test_stored_models_respect_screening(self, sentinel_data):
        X, y = sentinel_data
        context = _context(X, y, x_missing=-999.0, y_missing=-999.0, max_combinations=6)
        for model in CombinationSearch(context).run():
            assert model.n_observations >= 6
            used = list(model.variables)
            np.testing.assert_array_equal(
                np.where(model.coefficients[used] >= 0, 1, -1), context.sign_vector[used]
            )
            unused = np.setdiff1d(np.arange(4), used)
            assert np.all(model.coefficients[unused] == -999.0)


class TestStopping:
    """Rounds stop when nothing of the new size is retained."""

    def test_stops_after_empty_round(self, rng):
        n = 40
        X = rng.standard_normal((n, 3))
        y = X[:, 0] + 0.01 * rng.standard_normal(n)
        context = _context(X, y, t_critical=50.0, max_combinations=1)
        ranked = CombinationSearch(context).run()

        assert [m.variables for m in ranked] == [(0,)]
        # three singles, then the two extensions of (0,); no third round
        assert context.n_candidates == 5

    def test_no_valid_model(self, rng):
        X = rng.standard_normal((30, 3))
        y = rng.standard_normal(30)
        context = _context(X, y, t_critical=1e6)
        with pytest.raises(NoValidModelError) as exc_info:
            CombinationSearch(context).run()
        assert exc_info.value.n_candidates == 3


class TestFatalErrors:
    """Numerical breakdowns abort the search and name the combination."""

    def test_identical_columns(self, rng):
        z = rng.standard_normal(30)
        X = np.column_stack([z, z.copy()])
        y = z + 0.1 * rng.standard_normal(30)
        context = _context(X, y)
        with pytest.raises(SingularMatrixError) as exc_info:
            CombinationSearch(context).run()
        assert exc_info.value.combination == (0, 1)

    def test_constant_column(self, rng):
        X = np.column_stack([rng.standard_normal(20), np.full(20, 4.0)])
        y = rng.standard_normal(20)
        with pytest.raises(SingularMatrixError) as exc_info:
            CombinationSearch(_context(X, y)).run()
        assert exc_info.value.combination == (1,)

    def test_constant_on_shared_rows(self, rng):
        n = 30
        x0 = rng.standard_normal(n)
        x1 = rng.standard_normal(n)
        y = 2.0 * x0 + 0.1 * rng.standard_normal(n)
        # x1 is constant wherever x0 is observed
        x0[20:] = np.nan
        x1[:20] = 4.0
        y[20:] = rng.standard_normal(10)

        with pytest.raises(ZeroVarianceError) as exc_info:
            CombinationSearch(_context(np.column_stack([x0, x1]), y)).run()
        assert exc_info.value.combination == (0, 1)

    def test_eigen_failure(self, three_correlated, monkeypatch):
        monkeypatch.setattr(_pca, "jacobi_eigen", functools.partial(jacobi_eigen, max_sweeps=1))
        with pytest.raises(ConvergenceError) as exc_info:
            CombinationSearch(_context(*three_correlated)).run()
        assert exc_info.value.combination == (0, 1)
        assert exc_info.value.iterations == 1


class TestLogging:
    """Rounds are logged at INFO, rejections at DEBUG."""

    def test_round_messages(self, three_correlated, caplog):
        X, y = three_correlated
        with caplog.at_level(logging.INFO, logger="pyregcomb"):
            CombinationSearch(_context(X, y)).run()
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("size 1:") for m in messages)
        assert any("search finished" in m for m in messages)

    def test_rejection_logged(self, rng, caplog):
        context = _context(rng.standard_normal((5, 1)), rng.standard_normal(5))
        with caplog.at_level(logging.DEBUG, logger="pyregcomb"):
            evaluate_combination(context, (0,))
        assert any("need 6" in r.getMessage() for r in caplog.records)
