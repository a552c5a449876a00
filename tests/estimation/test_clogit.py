"""
Tests for the stratified conditional logit estimator.
"""

import warnings

import numpy as np
import pytest

from remnet.common.exceptions import ConfigurationError, ValidationError
from remnet.estimation import fit_stratified_clogit


def _simulate(beta, n_strata=300, stratum_size=10, seed=0):
    """Draw strata whose case is chosen with softmax(X @ beta) probabilities."""
    rng = np.random.default_rng(seed)
    beta = np.asarray(beta, dtype=float)
    X_parts, is_event, strata = [], [], []
    for stratum in range(n_strata):
        X_s = rng.normal(size=(stratum_size, beta.size))
        eta = X_s @ beta
        probs = np.exp(eta - eta.max())
        probs /= probs.sum()
        case = rng.choice(stratum_size, p=probs)
        X_parts.append(X_s)
        flags = np.zeros(stratum_size, dtype=bool)
        flags[case] = True
        is_event.append(flags)
        strata.append(np.full(stratum_size, stratum))
    return np.vstack(X_parts), np.concatenate(is_event), np.concatenate(strata)


class TestFit:
    """Test estimates on simulated data."""

    def test_informative_feature(self):
        """Test a positive coefficient when cases have higher feature values."""
        X, is_event, strata = _simulate([1.0])
        estimate = fit_stratified_clogit(X, is_event, strata)
        assert estimate.converged
        assert estimate.coefficients[0] > 0
        assert estimate.coefficients[0] == pytest.approx(1.0, abs=0.3)
        assert estimate.n_strata == 300
        assert estimate.n_skipped_strata == 0

    def test_recovers_two_coefficients(self):
        """Test signs and standard errors with two features."""
        X, is_event, strata = _simulate([1.5, -1.0], seed=1)
        estimate = fit_stratified_clogit(X, is_event, strata)
        assert estimate.converged
        assert estimate.coefficients[0] > 0
        assert estimate.coefficients[1] < 0
        assert np.all(estimate.std_errors > 0)
        np.testing.assert_allclose(estimate.z_values, estimate.coefficients / estimate.std_errors)
        assert np.all(estimate.p_values < 0.001)

    def test_log_likelihood_improves(self):
        """Test that the fitted log-likelihood beats the null model."""
        X, is_event, strata = _simulate([1.0], n_strata=100, seed=2)
        estimate = fit_stratified_clogit(X, is_event, strata)
        null_ll = -100 * np.log(10)
        assert estimate.log_likelihood > null_ll
        assert estimate.log_likelihood < 0

    def test_uninformative_feature(self):
        """Test that a noise feature gets a non-significant coefficient."""
        X, is_event, strata = _simulate([0.0], n_strata=200, seed=3)
        estimate = fit_stratified_clogit(X, is_event, strata)
        assert estimate.converged
        assert abs(estimate.z_values[0]) < 4

    def test_unequal_stratum_sizes(self):
        """Test strata with different numbers of controls."""
        X, is_event, strata = _simulate([1.0], n_strata=100, seed=4)
        # Drop two controls from every other stratum
        keep = np.ones(len(X), dtype=bool)
        for stratum in range(0, 100, 2):
            controls = np.flatnonzero((strata == stratum) & ~is_event)
            keep[controls[:2]] = False
        estimate = fit_stratified_clogit(X[keep], is_event[keep], strata[keep])
        assert estimate.converged
        assert estimate.coefficients[0] > 0

    def test_one_dimensional_design(self):
        """Test that a 1-D design is treated as a single column."""
        X, is_event, strata = _simulate([1.0], n_strata=50, seed=5)
        estimate = fit_stratified_clogit(X.ravel(), is_event, strata)
        assert estimate.coefficients.shape == (1,)

    def test_unordered_rows(self):
        """Test that strata need not be contiguous."""
        X, is_event, strata = _simulate([1.0], n_strata=80, seed=6)
        order = np.random.default_rng(0).permutation(len(X))
        ordered = fit_stratified_clogit(X, is_event, strata)
        shuffled = fit_stratified_clogit(X[order], is_event[order], strata[order])
        np.testing.assert_allclose(shuffled.coefficients, ordered.coefficients, rtol=1e-6)


class TestDegenerateInputs:
    """Test graceful handling of numerical problems."""

    def test_singular_information(self):
        """Test that a constant column stops the fit with NaN standard errors."""
        X, is_event, strata = _simulate([1.0], n_strata=50, seed=7)
        X = np.column_stack([X, np.zeros(len(X))])
        with pytest.warns(UserWarning, match="did not converge"):
            estimate = fit_stratified_clogit(X, is_event, strata)
        assert not estimate.converged
        assert estimate.n_iterations == 1
        np.testing.assert_array_equal(estimate.coefficients, np.zeros(2))
        assert np.all(np.isnan(estimate.std_errors))
        assert np.all(np.isnan(estimate.p_values))

    def test_iteration_budget(self):
        """Test that a single iteration cannot converge."""
        X, is_event, strata = _simulate([1.0], n_strata=50, seed=8)
        with pytest.warns(UserWarning):
            estimate = fit_stratified_clogit(X, is_event, strata, max_iter=1)
        assert not estimate.converged
        assert estimate.n_iterations == 1

    def test_heavy_tailed_counts_never_lower_likelihood(self):
        """Test that steps on skewed count features never end below the null model."""
        rng = np.random.default_rng(13)
        n_strata, stratum_size = 150, 21
        X = np.floor(rng.pareto(0.9, size=(n_strata * stratum_size, 2)) * 3.0)
        strata = np.repeat(np.arange(n_strata), stratum_size)
        is_event = np.zeros(len(X), dtype=bool)
        for stratum in range(n_strata):
            rows = np.flatnonzero(strata == stratum)
            is_event[rows[np.argmax(X[rows, 0] + rng.random(stratum_size))]] = True

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            estimate = fit_stratified_clogit(X, is_event, strata)
        null_ll = -n_strata * np.log(stratum_size)
        assert np.all(np.isfinite(estimate.coefficients))
        assert np.isfinite(estimate.log_likelihood)
        assert estimate.log_likelihood >= null_ll
        assert estimate.coefficients[0] > 0

    def test_stratum_without_case_is_skipped(self):
        """Test that strata lacking a case row are counted and left out."""
        X, is_event, strata = _simulate([1.0], n_strata=60, seed=9)
        X = np.vstack([X, np.ones((3, 1))])
        is_event = np.concatenate([is_event, np.zeros(3, dtype=bool)])
        strata = np.concatenate([strata, np.full(3, 999)])

        estimate = fit_stratified_clogit(X, is_event, strata)
        reference = fit_stratified_clogit(X[:-3], is_event[:-3], strata[:-3])
        assert estimate.n_skipped_strata == 1
        assert estimate.n_strata == 60
        np.testing.assert_allclose(estimate.coefficients, reference.coefficients)


class TestValidation:
    """Test input validation."""

    def test_row_mismatch(self):
        """Test that inputs must have the same number of rows."""
        with pytest.raises(ValidationError, match="same number of rows"):
            fit_stratified_clogit(np.ones((4, 1)), np.array([True, False, False]), np.zeros(4))

    def test_no_columns(self):
        """Test that an empty design is rejected."""
        with pytest.raises(ValidationError):
            fit_stratified_clogit(np.ones((4, 0)), np.array([True, False, True, False]), np.zeros(4))

    def test_non_finite_values(self):
        """Test that NaN values are rejected."""
        X = np.array([[1.0], [np.nan]])
        with pytest.raises(ValidationError, match="NaN or infinite"):
            fit_stratified_clogit(X, np.array([True, False]), np.zeros(2))

    def test_no_cases(self):
        """Test that a table without case rows is rejected."""
        with pytest.raises(ValidationError, match="No stratum"):
            fit_stratified_clogit(np.ones((3, 1)), np.zeros(3, dtype=bool), np.zeros(3))

    @pytest.mark.parametrize("kwargs", [{"max_iter": 0}, {"tol": 0.0}, {"tol": -1e-6}])
    def test_invalid_settings(self, kwargs):
        """Test that iteration settings must be positive."""
        with pytest.raises(ConfigurationError):
            fit_stratified_clogit(np.ones((2, 1)), np.array([True, False]), np.zeros(2), **kwargs)
