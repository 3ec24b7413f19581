"""
Normalizing likelihood x prior into a grid posterior.

The posterior at each cell is

    posterior(theta) = L(theta) p(theta) / sum_cells L p

The denominator is the grid analogue of the evidence. When it is zero or not
finite (likelihood and prior supports do not overlap on the grid, or the grid
is too coarse to land on the posterior mass) the estimate is meaningless and
DegenerateEvidenceError is raised instead of returning NaNs.
"""

import warnings
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .errors import GridTruncationWarning, ShapeMismatchError
from .grid import Grid, GridSpec, build_grids, grid_shape
from .likelihood import SamplingModel, likelihood_table
from .marginals import (
    SeedLike,
    credible_interval,
    hpd_interval,
    marginal,
    posterior_mean,
    posterior_mode,
    posterior_quantile,
    posterior_sd,
    sample,
    sample_joint,
    summarize_marginal,
    total_mass,
)
from .priors import prior_table

# Marginal mass on a single edge point above which the grid is reported as
# truncating the posterior.
EDGE_MASS_THRESHOLD = 0.01


def _read_only(table: np.ndarray) -> np.ndarray:
    table = np.array(table, dtype=np.float64)
    table.flags.writeable = False
    return table


def normalize_posterior(
    likelihood: np.ndarray,
    prior: np.ndarray,
) -> np.ndarray:
    """
    Elementwise likelihood x prior, rescaled to sum to one.

    Parameters
    ----------
    likelihood : ndarray
        Likelihood table
    prior : ndarray
        Prior table of the same shape

    Returns
    -------
    posterior : ndarray
        Read-only table summing to 1

    Raises
    ------
    ShapeMismatchError
        If the tables have different shapes.
    DegenerateEvidenceError
        If the product has zero, NaN or infinite total mass.
    """
    likelihood = np.asarray(likelihood, dtype=np.float64)
    prior = np.asarray(prior, dtype=np.float64)
    if likelihood.shape != prior.shape:
        raise ShapeMismatchError(
            f"Likelihood shape {likelihood.shape} does not match prior shape {prior.shape}"
        )
    unnormalized = likelihood * prior
    evidence = total_mass(unnormalized, "likelihood x prior")
    return _read_only(unnormalized / evidence)


def edge_mass(posterior_table: np.ndarray, dimension: int) -> Tuple[float, float]:
    """Marginal posterior mass on the first and last point of one grid."""
    m = marginal(posterior_table, dimension)
    return float(m[0]), float(m[-1])


@dataclass(frozen=True, eq=False)
class GridPosterior:
    """
    Result of a grid-approximation fit.

    Instances compare and hash by identity; compare the tables themselves
    (e.g. with ``np.array_equal``) to check two fits for equality.

    Attributes
    ----------
    grids : tuple of Grid
        One grid per parameter, in table-axis order
    likelihood_table : ndarray
        Likelihood at each cell
    prior_table : ndarray
        Joint prior density at each cell
    posterior_table : ndarray
        Normalized posterior (sums to 1)
    marginals : tuple of ndarray
        One marginal distribution per grid
    """
    grids: Tuple[Grid, ...]
    likelihood_table: np.ndarray
    prior_table: np.ndarray
    posterior_table: np.ndarray
    marginals: Tuple[np.ndarray, ...]

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.posterior_table.shape

    @property
    def ndim(self) -> int:
        return len(self.grids)

    def _axis(self, dimension) -> int:
        if isinstance(dimension, str):
            names = [g.name for g in self.grids]
            if dimension not in names:
                raise KeyError(f"No grid named '{dimension}'; grids are {names}")
            return names.index(dimension)
        if not -self.ndim <= dimension < self.ndim:
            raise ValueError(f"dimension must be an axis of a {self.ndim}-d posterior, got {dimension}")
        return dimension % self.ndim

    def marginal(self, dimension=0) -> np.ndarray:
        return self.marginals[self._axis(dimension)]

    def mean(self, dimension=0) -> float:
        d = self._axis(dimension)
        return posterior_mean(self.grids[d], self.marginals[d])

    def sd(self, dimension=0) -> float:
        d = self._axis(dimension)
        return posterior_sd(self.grids[d], self.marginals[d])

    def mode(self, dimension=0) -> float:
        d = self._axis(dimension)
        return posterior_mode(self.grids[d], self.marginals[d])

    def quantile(self, q, dimension=0):
        d = self._axis(dimension)
        return posterior_quantile(self.grids[d], self.marginals[d], q)

    def credible_interval(self, dimension=0, alpha: float = 0.05) -> Tuple[float, float]:
        d = self._axis(dimension)
        return credible_interval(self.grids[d], self.marginals[d], alpha)

    def hpd_interval(self, dimension=0, alpha: float = 0.05) -> Tuple[float, float]:
        d = self._axis(dimension)
        return hpd_interval(self.grids[d], self.marginals[d], alpha)

    def sample(self, count: int, rng: SeedLike = None, dimension=None) -> np.ndarray:
        """Draws from one marginal, or joint draws of shape (count, k) if dimension is None."""
        if dimension is None:
            return sample_joint(self.grids, self.posterior_table, count, rng)
        d = self._axis(dimension)
        return sample(self.grids[d], self.marginals[d], count, rng)

    def map_estimate(self) -> np.ndarray:
        """Joint maximum a posteriori cell (may differ from per-marginal modes)."""
        idx = np.unravel_index(np.argmax(self.posterior_table), self.shape)
        return np.array([g.values[i] for g, i in zip(self.grids, idx)])

    def summary(self, alpha: float = 0.05) -> dict:
        """Per-parameter summaries keyed by grid label."""
        return {
            g.name or f"theta_{i}": summarize_marginal(g, m, alpha)
            for i, (g, m) in enumerate(zip(self.grids, self.marginals))
        }


def grid_posterior(
    grids: Sequence[Grid],
    likelihood: np.ndarray,
    prior: np.ndarray,
    warn_truncation: bool = True,
) -> GridPosterior:
    """
    Assemble a GridPosterior from precomputed likelihood and prior tables.

    Raises
    ------
    ShapeMismatchError
        If either table does not match the grid shape.
    DegenerateEvidenceError
        If the product has no usable mass.
    """
    grids = tuple(grids)
    shape = grid_shape(grids)
    for label, table in (("Likelihood", likelihood), ("Prior", prior)):
        if np.shape(table) != shape:
            raise ShapeMismatchError(
                f"{label} table shape {np.shape(table)} does not match grid shape {shape}"
            )
    posterior = normalize_posterior(likelihood, prior)
    marginals = tuple(_read_only(marginal(posterior, d)) for d in range(len(grids)))

    if warn_truncation:
        for grid, m in zip(grids, marginals):
            if len(grid) > 1 and max(m[0], m[-1]) > EDGE_MASS_THRESHOLD:
                warnings.warn(
                    f"Posterior mass {max(m[0], m[-1]):.3g} on the edge of grid "
                    f"{grid.label}; the grid may truncate the posterior",
                    GridTruncationWarning,
                    stacklevel=3,
                )

    return GridPosterior(
        grids=grids,
        likelihood_table=_read_only(likelihood),
        prior_table=_read_only(prior),
        posterior_table=posterior,
        marginals=marginals,
    )


def estimate_posterior(
    observations,
    parameter_grids: Sequence[GridSpec],
    likelihood_family: SamplingModel,
    prior_specs: Sequence,
    log_space: bool = False,
    warn_truncation: bool = True,
) -> GridPosterior:
    """
    Grid-approximate the posterior of a model given observations.

    Parameters
    ----------
    observations : array-like
        Ordered observation values
    parameter_grids : sequence
        One Grid or (lower, upper, step) triple per parameter
    likelihood_family : SamplingModel
        Sampling distribution of one observation, with fixed hyperparameters
    prior_specs : sequence
        One prior (Density, config mapping or callable) per parameter
    log_space : bool
        Accumulate the likelihood in log space (see ``likelihood_table``)
    warn_truncation : bool
        Emit GridTruncationWarning when marginal mass sits on a grid edge

    Returns
    -------
    result : GridPosterior

    Raises
    ------
    InvalidRangeError
        If a grid triple is malformed.
    ShapeMismatchError
        If grids, priors and model parameters disagree in number.
    DegenerateEvidenceError
        If likelihood x prior has no usable mass on the grid.

    Examples
    --------
    >>> from gridpost import BinomialModel, BetaPrior
    >>> post = estimate_posterior([5], [(0, 1, 0.01)], BinomialModel(10), [BetaPrior(2, 2)])
    >>> round(post.mode(), 2)
    0.5
    """
    grids = build_grids(parameter_grids)
    if len(prior_specs) != len(grids):
        raise ShapeMismatchError(
            f"Expected one prior per grid: got {len(prior_specs)} priors for {len(grids)} grids"
        )
    likelihood = likelihood_table(observations, grids, likelihood_family, log_space=log_space)
    prior = prior_table(grids, prior_specs)
    return grid_posterior(grids, likelihood, prior, warn_truncation=warn_truncation)
