"""
Tests for marginalization and table-based summaries.

A marginal sums the joint table over every other axis; summaries of a
one-parameter distribution are exact for the discrete grid distribution.
"""

import pytest
import numpy as np
from scipy import stats

from gridpost.errors import DegenerateEvidenceError, ShapeMismatchError
from gridpost.grid import build_grid
from gridpost.marginals import (
    credible_interval,
    hpd_interval,
    marginal,
    posterior_mean,
    posterior_mode,
    posterior_quantile,
    posterior_sd,
    summarize_marginal,
)

from conftest import TestConfig, discrete_weights, fit_binomial


@pytest.mark.tier3
class TestMarginal:
    """Summing a joint table down to one parameter."""

    def test_separable_table(self):
        """An outer-product table returns its factors."""
        table = np.outer([0.2, 0.8], [0.5, 0.25, 0.25])
        np.testing.assert_allclose(marginal(table, 0), [0.2, 0.8])
        np.testing.assert_allclose(marginal(table, 1), [0.5, 0.25, 0.25])

    def test_unnormalized_table(self, rng, config):
        table = rng.uniform(0, 3, (4, 5, 6))
        for d in range(3):
            m = marginal(table, d)
            assert m.shape == (table.shape[d],)
            assert abs(m.sum() - 1.0) < config.sum_atol

    def test_negative_dimension(self, rng):
        table = rng.uniform(0, 1, (3, 4))
        np.testing.assert_array_equal(marginal(table, -1), marginal(table, 1))

    def test_one_dimensional(self):
        np.testing.assert_allclose(marginal(np.array([1.0, 3.0]), 0), [0.25, 0.75])

    @pytest.mark.parametrize("dimension", [2, -3, 0.5])
    def test_invalid_dimension(self, dimension):
        with pytest.raises(ValueError):
            marginal(np.ones((2, 2)), dimension)

    def test_input_not_modified(self, rng):
        table = rng.uniform(0, 1, (3, 3))
        original = table.copy()
        marginal(table, 0)
        np.testing.assert_array_equal(table, original)

    def test_degenerate_table(self):
        with pytest.raises(DegenerateEvidenceError):
            marginal(np.zeros((2, 3)), 0)


@pytest.mark.tier3
class TestPointSummaries:
    """Mean, sd, mode and quantiles of a discrete distribution."""

    values = np.array([0.0, 1.0, 2.0])
    weights = np.array([0.25, 0.5, 0.25])

    def test_mean_sd_mode(self):
        assert posterior_mean(self.values, self.weights) == pytest.approx(1.0)
        assert posterior_sd(self.values, self.weights) == pytest.approx(np.sqrt(0.5))
        assert posterior_mode(self.values, self.weights) == 1.0

    def test_unnormalized_weights(self):
        assert posterior_mean(self.values, 4 * self.weights) == pytest.approx(1.0)
        assert posterior_sd(self.values, 4 * self.weights) == pytest.approx(np.sqrt(0.5))

    def test_quantiles(self):
        """Smallest grid value whose cumulative probability reaches q."""
        assert posterior_quantile(self.values, self.weights, 0.0) == 0.0
        assert posterior_quantile(self.values, self.weights, 0.25) == 0.0
        assert posterior_quantile(self.values, self.weights, 0.5) == 1.0
        assert posterior_quantile(self.values, self.weights, 0.9) == 2.0
        np.testing.assert_array_equal(
            posterior_quantile(self.values, self.weights, [0.1, 0.6, 1.0]), [0.0, 1.0, 2.0]
        )

    def test_quantile_out_of_range(self):
        with pytest.raises(ValueError):
            posterior_quantile(self.values, self.weights, 1.5)

    def test_accepts_grid(self):
        grid = build_grid(0, 2, 1)
        assert posterior_mean(grid, self.weights) == pytest.approx(1.0)

    def test_weight_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            posterior_mean(self.values, [0.5, 0.5])

    def test_zero_weights(self):
        with pytest.raises(DegenerateEvidenceError):
            posterior_mean(self.values, np.zeros(3))

    def test_beta_binomial_moments(self, coin_example, coin_posterior, config):
        """Grid moments agree with the conjugate Beta posterior."""
        a_n, b_n = coin_example.a_n, coin_example.b_n
        assert coin_posterior.mean() == pytest.approx(stats.beta.mean(a_n, b_n),
                                                      abs=config.moment_atol)
        assert coin_posterior.sd() == pytest.approx(stats.beta.std(a_n, b_n),
                                                    abs=config.moment_atol)


@pytest.mark.tier3
class TestIntervals:
    """Equal-tailed and highest-density intervals."""

    def test_credible_interval_matches_beta_quantiles(self, skewed_example):
        post = fit_binomial(skewed_example, step=0.001)
        lower, upper = post.credible_interval(alpha=0.05)
        a_n, b_n = skewed_example.a_n, skewed_example.b_n
        assert lower == pytest.approx(stats.beta.ppf(0.025, a_n, b_n), abs=0.002)
        assert upper == pytest.approx(stats.beta.ppf(0.975, a_n, b_n), abs=0.002)

    def test_interval_holds_requested_mass(self, rng, alpha_values):
        values = np.arange(50, dtype=float)
        weights = discrete_weights(50, rng)
        for interval in (credible_interval, hpd_interval):
            lower, upper = interval(values, weights, alpha_values)
            inside = (values >= lower) & (values <= upper)
            assert weights[inside].sum() >= 1 - alpha_values - 1e-9

    def test_hpd_not_wider_than_equal_tailed(self, skewed_example, alpha_values):
        post = fit_binomial(skewed_example, step=0.005)
        ci_low, ci_high = post.credible_interval(alpha=alpha_values)
        hpd_low, hpd_high = post.hpd_interval(alpha=alpha_values)
        assert hpd_high - hpd_low <= ci_high - ci_low + 1e-12

    def test_hpd_random_weights(self, rng):
        values = np.linspace(-1, 1, 41)
        for _ in range(20):
            weights = discrete_weights(41, rng)
            ci = credible_interval(values, weights, 0.1)
            hpd = hpd_interval(values, weights, 0.1)
            assert hpd[1] - hpd[0] <= ci[1] - ci[0] + 1e-12

    def test_hpd_of_decreasing_weights_starts_at_edge(self):
        values = np.arange(10, dtype=float)
        weights = 0.5 ** values
        lower, upper = hpd_interval(values, weights, 0.05)
        assert lower == 0.0
        # Points 0..3 hold 0.938 of the mass, points 0..4 hold 0.970
        assert upper == 4.0

    def test_symmetric_posterior_intervals(self, coin_posterior, config):
        lower, upper = coin_posterior.credible_interval()
        assert lower < 0.5 < upper
        assert lower == pytest.approx(1 - upper, abs=config.grid_step + 1e-12)
        hpd_low, hpd_high = coin_posterior.hpd_interval()
        assert hpd_low <= 0.5 <= hpd_high

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.1, 1.5])
    def test_invalid_alpha(self, alpha):
        with pytest.raises(ValueError):
            credible_interval([0.0, 1.0], [0.5, 0.5], alpha)
        with pytest.raises(ValueError):
            hpd_interval([0.0, 1.0], [0.5, 0.5], alpha)

    def test_summarize_marginal(self, coin_posterior):
        grid = coin_posterior.grids[0]
        summary = summarize_marginal(grid, coin_posterior.marginals[0])
        assert set(summary) == {"mean", "sd", "mode", "ci_low", "ci_high", "hpd_low", "hpd_high"}
        assert summary["ci_low"] <= summary["mean"] <= summary["ci_high"]
        assert coin_posterior.summary()["theta_0"] == summary
