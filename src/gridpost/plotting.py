"""
Visualization utilities for grid posteriors.

Provides functions for plotting:
- Likelihood, prior and posterior tables side by side
- One-parameter marginals with point estimates and intervals
- Two-parameter joint posteriors as heatmaps
- The effect of grid resolution on the posterior
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Sequence

from .figure_style import COLORS, FIGSIZE, add_vertical_marker, get_resolution_colors
from .posterior import GridPosterior


def _rescale(table: np.ndarray) -> np.ndarray:
    """Scale a 1-D table to sum to one so different tables share an axis."""
    total = np.sum(table)
    return table / total if total > 0 else table


def plot_grid_posterior(
    posterior: GridPosterior,
    axes: Optional[Sequence[plt.Axes]] = None,
    show_points: bool = True,
) -> Sequence[plt.Axes]:
    """
    Plot likelihood, prior and posterior of a one-parameter fit.

    Parameters
    ----------
    posterior : GridPosterior
        One-parameter grid fit
    axes : sequence of 3 Axes, optional
        Axes to draw on
    show_points : bool
        Mark the individual grid points

    Returns
    -------
    axes : sequence of Axes
    """
    if posterior.ndim != 1:
        raise ValueError("plot_grid_posterior needs a one-parameter posterior")
    if axes is None:
        _, axes = plt.subplots(1, 3, figsize=FIGSIZE["panel_1x3"], sharex=True)

    grid = posterior.grids[0]
    marker = "o" if show_points else None
    panels = [
        ("Likelihood", _rescale(posterior.likelihood_table), COLORS["likelihood"]),
        ("Prior", _rescale(posterior.prior_table), COLORS["prior"]),
        ("Posterior", posterior.posterior_table, COLORS["posterior"]),
    ]
    for ax, (title, table, color) in zip(axes, panels):
        ax.plot(grid.values, table, color=color, marker=marker,
                markerfacecolor="none", markersize=3)
        ax.set_title(title)
        ax.set_xlabel(grid.label)
    axes[0].set_ylabel("Probability (normalized over grid)")
    return axes


def plot_marginal(
    posterior: GridPosterior,
    dimension=0,
    ax: Optional[plt.Axes] = None,
    alpha: float = 0.05,
    exact: Optional[np.ndarray] = None,
    mle: Optional[float] = None,
) -> plt.Axes:
    """
    Plot one marginal with its mean, mode and credible interval.

    Parameters
    ----------
    posterior : GridPosterior
        Grid fit
    dimension : int or str
        Parameter axis or grid name
    ax : Axes, optional
        Axes to draw on
    alpha : float
        Tail probability of the shaded interval
    exact : ndarray, optional
        Closed-form posterior on the same grid, drawn for comparison
    mle : float, optional
        Maximum likelihood estimate to mark

    Returns
    -------
    ax : Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["single"])

    d = posterior._axis(dimension)
    grid = posterior.grids[d]
    m = posterior.marginals[d]

    ax.plot(grid.values, m, color=COLORS["posterior"], label="Grid posterior")
    if exact is not None:
        ax.plot(grid.values, _rescale(np.asarray(exact)), color=COLORS["exact"],
                linestyle="--", label="Exact")

    lower, upper = posterior.credible_interval(d, alpha)
    inside = (grid.values >= lower) & (grid.values <= upper)
    ax.fill_between(grid.values, 0, m, where=inside, color=COLORS["ci_fill"],
                    alpha=0.2, label=f"{100 * (1 - alpha):.0f}% interval")

    add_vertical_marker(ax, posterior.mean(d), f"Mean = {posterior.mean(d):.3f}", COLORS["mean"])
    add_vertical_marker(ax, posterior.mode(d), f"Mode = {posterior.mode(d):.3f}", COLORS["mode"])
    if mle is not None:
        add_vertical_marker(ax, mle, f"MLE = {mle:.3f}", COLORS["mle"])

    ax.set_xlabel(grid.label)
    ax.set_ylabel("Posterior probability")
    ax.legend()
    return ax


def plot_joint(
    posterior: GridPosterior,
    dims: Sequence = (0, 1),
    ax: Optional[plt.Axes] = None,
    cmap: str = "Blues",
) -> plt.Axes:
    """
    Heatmap of the joint posterior over two parameters.

    Other parameters, if any, are summed out.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["square"])

    dx, dy = (posterior._axis(d) for d in dims)
    if dx == dy:
        raise ValueError("plot_joint needs two distinct dimensions")
    others = tuple(ax_ for ax_ in range(posterior.ndim) if ax_ not in (dx, dy))
    joint = posterior.posterior_table.sum(axis=others) if others else posterior.posterior_table
    if dx > dy:
        joint = joint.T

    gx, gy = posterior.grids[dx], posterior.grids[dy]
    mesh = ax.pcolormesh(gx.values, gy.values, joint.T, cmap=cmap, shading="auto")
    plt.colorbar(mesh, ax=ax, label="Posterior probability")
    ax.set_xlabel(gx.label)
    ax.set_ylabel(gy.label)
    ax.grid(False)
    return ax


def plot_resolution(
    posteriors: Sequence[GridPosterior],
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """
    Overlay one-parameter posteriors computed on grids of different step.

    Each curve is divided by its grid step so that coarse and fine grids are
    drawn on the same density scale.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["single"])

    colors = get_resolution_colors(len(posteriors))
    for post, color in zip(posteriors, colors):
        grid = post.grids[0]
        ax.plot(grid.values, post.marginals[0] / grid.step, color=color,
                marker="o", markerfacecolor="none", markersize=3,
                label=f"step = {grid.step:g} ({len(grid)} points)")

    ax.set_xlabel(posteriors[0].grids[0].label)
    ax.set_ylabel("Posterior density")
    ax.legend()
    return ax


def plot_draws(
    draws: np.ndarray,
    posterior: GridPosterior,
    dimension=0,
    ax: Optional[plt.Axes] = None,
    bins: int = 50,
) -> plt.Axes:
    """Histogram of posterior draws against the marginal they came from."""
    if ax is None:
        _, ax = plt.subplots(figsize=FIGSIZE["single"])

    d = posterior._axis(dimension)
    grid = posterior.grids[d]
    ax.hist(draws, bins=bins, density=True, color=COLORS["grid"],
            edgecolor="white", label=f"{len(draws)} draws")
    ax.plot(grid.values, posterior.marginals[d] / grid.step,
            color=COLORS["posterior"], label="Grid posterior")
    ax.set_xlabel(grid.label)
    ax.set_ylabel("Density")
    ax.legend()
    return ax
