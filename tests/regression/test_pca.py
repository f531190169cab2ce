"""
Tests for the principal component transform.
"""

import numpy as np
import pytest

from pyregcomb.core.exceptions import ZeroVarianceError
from pyregcomb.regression import fit_ols
from pyregcomb.regression._pca import correlation_matrix, principal_components


class TestCorrelationMatrix:
    """Raw-score Pearson correlations."""

    def test_matches_corrcoef(self, rng):
        x = rng.standard_normal((30, 4))
        np.testing.assert_allclose(
            correlation_matrix(x), np.corrcoef(x, rowvar=False), rtol=1e-10, atol=1e-12
        )

    def test_zero_variance_pair(self, rng):
        x = np.column_stack([rng.standard_normal(10), np.full(10, 2.0), rng.standard_normal(10)])
        with pytest.raises(ZeroVarianceError) as exc_info:
            correlation_matrix(x)
        assert exc_info.value.variables == (0, 1)


class TestPrincipalComponents:
    """Standardization, eigenvectors and scores."""

    def test_score_variances_are_eigenvalues(self, rng):
        x = rng.standard_normal((80, 3)) @ np.array([[1.0, 0.5, 0.2], [0.0, 1.0, 0.3], [0.0, 0.0, 1.0]])
        basis = principal_components(x)
        np.testing.assert_allclose(basis.scores.var(axis=0, ddof=1), basis.eigenvalues, rtol=1e-9)
        assert np.all(np.diff(basis.eigenvalues) <= 0)

    def test_scores_uncorrelated(self, rng):
        x = rng.standard_normal((60, 3))
        x[:, 2] += x[:, 0]
        scores = principal_components(x).scores
        corr = np.corrcoef(scores, rowvar=False)
        np.testing.assert_allclose(corr - np.diag(np.diag(corr)), 0.0, atol=1e-9)

    def test_max_components_truncates(self, rng):
        basis = principal_components(rng.standard_normal((20, 4)), max_components=2)
        assert basis.n_components == 2
        assert basis.eigenvectors.shape == (4, 4)
        assert basis.design(2).shape == (20, 3)

    def test_sample_standard_deviation(self, rng):
        x = rng.standard_normal((25, 2))
        basis = principal_components(x)
        np.testing.assert_allclose(basis.std_devs, x.std(axis=0, ddof=1), rtol=1e-10)
        np.testing.assert_allclose(basis.means, x.mean(axis=0), rtol=1e-12)


class TestBackConversion:
    """Component coefficients back to raw variables."""

    def test_all_components_equal_ols(self, rng):
        """With every component retained, PCR is OLS on the raw variables."""
        x = rng.standard_normal((40, 3))
        y = 1.5 + x @ [1.0, -0.5, 2.0] + 0.2 * rng.standard_normal(40)
        basis = principal_components(x)
        pcr = fit_ols(basis.design(3), y)
        intercept, raw = basis.to_raw(pcr.coefficients, 3)

        ols = fit_ols(np.column_stack([np.ones(40), x]), y)
        assert intercept == pytest.approx(ols.coefficients[0], rel=1e-8)
        np.testing.assert_allclose(raw, ols.coefficients[1:], rtol=1e-8)
        assert pcr.standard_error == pytest.approx(ols.standard_error, rel=1e-8)

    def test_fewer_components_reproduce_fitted_values(self, rng):
        x = rng.standard_normal((30, 3))
        y = x.sum(axis=1) + rng.standard_normal(30)
        basis = principal_components(x)
        pcr = fit_ols(basis.design(1), y)
        intercept, raw = basis.to_raw(pcr.coefficients, 1)
        np.testing.assert_allclose(intercept + x @ raw, pcr.fitted_values, rtol=1e-9, atol=1e-12)
