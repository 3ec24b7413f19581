"""
Smoke tests for the plotting helpers.

Figures are drawn on the Agg backend and checked for their artists only.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np
import matplotlib.pyplot as plt

from gridpost import NormalModel, NormalPrior, estimate_posterior
from gridpost.analytic import beta_binomial_density
from gridpost.figure_style import get_resolution_colors, save_figure, setup_style
from gridpost.plotting import (
    plot_draws,
    plot_grid_posterior,
    plot_joint,
    plot_marginal,
    plot_resolution,
)

from conftest import fit_binomial


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def joint_posterior():
    return estimate_posterior(
        [-2.69833],
        [{"lower": -5.0, "upper": 5.0, "step": 0.1, "name": "mu"},
         {"lower": 0.1, "upper": 10.0, "step": 0.1, "name": "sigma"}],
        NormalModel(),
        [NormalPrior(0, 1), NormalPrior(0, 1)],
        warn_truncation=False,
    )


@pytest.mark.tier5
class TestPlotting:

    def test_grid_posterior_panels(self, coin_posterior):
        axes = plot_grid_posterior(coin_posterior)
        assert len(axes) == 3
        assert [ax.get_title() for ax in axes] == ["Likelihood", "Prior", "Posterior"]

    def test_grid_posterior_needs_one_parameter(self, joint_posterior):
        with pytest.raises(ValueError):
            plot_grid_posterior(joint_posterior)

    def test_marginal_with_exact(self, coin_posterior, coin_example):
        grid = coin_posterior.grids[0]
        exact = beta_binomial_density(grid.values, coin_example.successes,
                                      coin_example.trials, coin_example.a, coin_example.b)
        ax = plot_marginal(coin_posterior, exact=exact, mle=0.5)
        labels = [line.get_label() for line in ax.get_lines()]
        assert "Grid posterior" in labels
        assert "Exact" in labels

    def test_marginal_by_name(self, joint_posterior):
        ax = plot_marginal(joint_posterior, "sigma")
        assert ax.get_xlabel() == "sigma"

    def test_joint(self, joint_posterior):
        ax = plot_joint(joint_posterior)
        assert ax.get_xlabel() == "mu"
        assert ax.get_ylabel() == "sigma"

    def test_joint_needs_distinct_dims(self, joint_posterior):
        with pytest.raises(ValueError):
            plot_joint(joint_posterior, dims=("mu", 0))

    def test_resolution(self, coin_example):
        posteriors = [fit_binomial(coin_example, step=s) for s in (0.1, 0.05, 0.01)]
        ax = plot_resolution(posteriors)
        assert len(ax.get_lines()) == 3
        assert len(get_resolution_colors(3)) == 3

    def test_draws(self, coin_posterior, seed):
        draws = coin_posterior.sample(500, seed, dimension=0)
        ax = plot_draws(draws, coin_posterior, bins=20)
        assert len(ax.patches) == 20

    def test_save_figure(self, coin_posterior, tmp_path):
        setup_style()
        fig, ax = plt.subplots()
        plot_marginal(coin_posterior, ax=ax)
        paths = save_figure(fig, "marginal", "grid", formats=("png",), dpi=50, base=tmp_path)
        assert paths == [tmp_path / "grid" / "marginal.png"]
        assert paths[0].exists()
        assert np.all([p.stat().st_size > 0 for p in paths])
