#!/usr/bin/env python3
"""
Grid Approximation Figures

Generates figures 1-5:
- Figure 1: Likelihood, prior and posterior of the beta-binomial example
- Figure 2: Beta-binomial marginal against the exact posterior
- Figure 3: Effect of grid step on the posterior
- Figure 4: Posterior draws and Monte Carlo error vs draw count
- Figure 5: Joint (mu, sigma) posterior of the two-parameter normal example

Usage:
    python scripts/plot_grid_examples.py [--no-save] [--show] [--fast]
    python scripts/plot_grid_examples.py --figure 3
"""

import sys
import argparse
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np
import matplotlib.pyplot as plt

from gridpost import BetaPrior, BinomialModel, NormalModel, estimate_posterior
from gridpost.analytic import beta_binomial_density
from gridpost.experiments.convergence import draw_count_study
from gridpost.figure_style import COLORS, FIGSIZE, MC_CONFIG, setup_style, save_figure
from gridpost.plotting import (
    plot_draws,
    plot_grid_posterior,
    plot_joint,
    plot_marginal,
    plot_resolution,
)


# Beta-binomial example: 5 successes in 10 trials, Beta(2, 2) prior
SUCCESSES = 5
TRIALS = 10
PRIOR_A, PRIOR_B = 2.0, 2.0


def binomial_posterior(step: float = 0.01):
    """Grid posterior of the beta-binomial example."""
    return estimate_posterior(
        [SUCCESSES], [{"lower": 0.0, "upper": 1.0, "step": step, "name": "p"}],
        BinomialModel(TRIALS), [BetaPrior(PRIOR_A, PRIOR_B)],
        warn_truncation=False,
    )


def _finish(fig: plt.Figure, name: str, save: bool, show: bool) -> plt.Figure:
    plt.tight_layout()
    if save:
        save_figure(fig, name, "grid")
    if show:
        plt.show()
    return fig


# =============================================================================
# Figure 1: Likelihood x Prior -> Posterior
# =============================================================================

def figure_1_tables(save: bool = True, show: bool = False) -> plt.Figure:
    """Generate Figure 1: the three tables of the beta-binomial example."""
    print("\n" + "="*60)
    print("Figure 1: Likelihood, Prior and Posterior Tables")
    print("="*60)

    post = binomial_posterior(step=0.05)
    fig, axes = plt.subplots(1, 3, figsize=FIGSIZE["panel_1x3"], sharex=True)
    plot_grid_posterior(post, axes=axes)
    fig.suptitle(f"{SUCCESSES} successes in {TRIALS} trials, "
                 f"Beta({PRIOR_A:g}, {PRIOR_B:g}) prior, grid step 0.05",
                 fontsize=12, fontweight="bold")

    return _finish(fig, "fig_1_tables", save, show)


# =============================================================================
# Figure 2: Grid vs Exact
# =============================================================================

def figure_2_marginal(save: bool = True, show: bool = False) -> plt.Figure:
    """Generate Figure 2: grid marginal with intervals and the exact posterior."""
    print("\n" + "="*60)
    print("Figure 2: Grid Marginal vs Exact Posterior")
    print("="*60)

    post = binomial_posterior(step=0.01)
    grid = post.grids[0]
    exact = beta_binomial_density(grid.values, SUCCESSES, TRIALS, PRIOR_A, PRIOR_B)

    fig, ax = plt.subplots(figsize=FIGSIZE["single"])
    plot_marginal(post, ax=ax, alpha=MC_CONFIG["alpha"], exact=exact,
                  mle=SUCCESSES / TRIALS)
    ax.set_title("Beta-binomial posterior on a grid of step 0.01")

    print(f"  grid mean = {post.mean():.4f}, mode = {post.mode():.2f}")
    return _finish(fig, "fig_2_marginal", save, show)


# =============================================================================
# Figure 3: Grid Resolution
# =============================================================================

def figure_3_resolution(save: bool = True, show: bool = False) -> plt.Figure:
    """Generate Figure 3: the same posterior on coarse and fine grids."""
    print("\n" + "="*60)
    print("Figure 3: Grid Resolution")
    print("="*60)

    steps = [0.2, 0.1, 0.05, 0.01]
    posteriors = [binomial_posterior(step) for step in steps]

    fig, ax = plt.subplots(figsize=FIGSIZE["single"])
    plot_resolution(posteriors, ax=ax)
    fine = posteriors[-1].grids[0].values
    ax.plot(fine, beta_binomial_density(fine, SUCCESSES, TRIALS, PRIOR_A, PRIOR_B),
            color=COLORS["exact"], linestyle="--", label="Exact")
    ax.legend()
    ax.set_title("Coarse grids misplace the posterior mass")

    for step, post in zip(steps, posteriors):
        print(f"  step = {step:<5g} mean = {post.mean():.4f}")
    return _finish(fig, "fig_3_resolution", save, show)


# =============================================================================
# Figure 4: Posterior Draws
# =============================================================================

def figure_4_draws(save: bool = True, show: bool = False, fast: bool = False) -> plt.Figure:
    """Generate Figure 4: draws histogram and RMSE of draw-based means."""
    print("\n" + "="*60)
    print("Figure 4: Posterior Draws")
    print("="*60)

    post = binomial_posterior(step=0.01)
    n_draws = 1_000 if fast else MC_CONFIG["n_draws"]
    draws = post.sample(n_draws, np.random.default_rng(MC_CONFIG["seed"]), dimension=0)

    fig, axes = plt.subplots(1, 2, figsize=FIGSIZE["double"])
    plot_draws(draws, post, ax=axes[0])
    axes[0].set_title(f"{n_draws} draws from the grid posterior")

    counts = [10, 100, 1_000] if fast else [10, 100, 1_000, 10_000]
    data, _ = draw_count_study(post, counts, n_reps=20 if fast else 200,
                               seed=MC_CONFIG["seed"], n_jobs=1, verbose=True)
    ax = axes[1]
    ax.loglog(data["counts"], data["rmse"], "o-", color=COLORS["posterior"],
              label="RMSE of draw mean")
    ref = data["rmse"][0] * np.sqrt(data["counts"][0] / data["counts"])
    ax.loglog(data["counts"], ref, ":", color=COLORS["annotation"], label=r"$\propto 1/\sqrt{n}$")
    ax.set_xlabel("Number of draws")
    ax.set_ylabel("RMSE vs table mean")
    ax.set_title("Monte Carlo error of draw-based means")
    ax.legend()

    return _finish(fig, "fig_4_draws", save, show)


# =============================================================================
# Figure 5: Two-Parameter Normal Example
# =============================================================================

def figure_5_joint(save: bool = True, show: bool = False, fast: bool = False) -> plt.Figure:
    """Generate Figure 5: joint and marginal posteriors of (mu, sigma)."""
    print("\n" + "="*60)
    print("Figure 5: Two-Parameter Normal Example")
    print("="*60)

    step = 0.05 if fast else 0.01
    y = -2.69833
    post = estimate_posterior(
        [y],
        [{"lower": -5.0, "upper": 5.0, "step": step, "name": "mu"},
         {"lower": step, "upper": 10.0, "step": step, "name": "sigma"}],
        NormalModel(),
        [{"type": "normal", "mu": 0, "sigma": 1}] * 2,
    )

    fig, axes = plt.subplots(1, 3, figsize=FIGSIZE["panel_1x3"])
    plot_joint(post, ax=axes[0])
    axes[0].set_ylim(0, 4)
    axes[0].set_title("Joint posterior")
    plot_marginal(post, "mu", ax=axes[1], mle=y)
    axes[1].set_title(r"Marginal of $\mu$")
    plot_marginal(post, "sigma", ax=axes[2])
    axes[2].set_xlim(0, 4)
    axes[2].set_title(r"Marginal of $\sigma$")

    print(f"  grid shape {post.shape}")
    print(f"  mean of mu = {post.mean('mu'):.4f} (y = {y})")
    print(f"  mean of sigma = {post.mean('sigma'):.4f}")
    return _finish(fig, "fig_5_joint", save, show)


def main():
    parser = argparse.ArgumentParser(description="Generate grid approximation figures")
    parser.add_argument("--no-save", action="store_true", help="Don't save figures")
    parser.add_argument("--show", action="store_true", help="Display figures")
    parser.add_argument("--fast", action="store_true", help="Coarser grids and fewer draws")
    parser.add_argument("--figure", type=str, help="Generate only specific figure (1-5)")
    args = parser.parse_args()

    setup_style()

    save = not args.no_save
    show = args.show

    print("="*60)
    print("GRID APPROXIMATION FIGURES")
    print("="*60)

    figures_to_generate = ['1', '2', '3', '4', '5']
    if args.figure:
        figures_to_generate = [args.figure]

    try:
        if '1' in figures_to_generate:
            figure_1_tables(save=save, show=show)

        if '2' in figures_to_generate:
            figure_2_marginal(save=save, show=show)

        if '3' in figures_to_generate:
            figure_3_resolution(save=save, show=show)

        if '4' in figures_to_generate:
            figure_4_draws(save=save, show=show, fast=args.fast)

        if '5' in figures_to_generate:
            figure_5_joint(save=save, show=show, fast=args.fast)
    except ValueError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print("\n" + "="*60)
    print("DONE - Grid approximation figures generated")
    print("="*60)


if __name__ == "__main__":
    main()
