"""
Marginals, draws and point/interval summaries of grid posteriors.

Everything here reads a posterior table (or a 1-D weight vector over one grid)
and never modifies it. Summaries computed directly from the table are exact
for the discrete grid distribution; summaries computed from draws converge to
them as the number of draws grows, but neither can be more accurate than the
grid step allows.
"""

from typing import Sequence, Tuple, Union

import numpy as np

from .errors import DegenerateEvidenceError, ShapeMismatchError
from .grid import Grid, cell_coordinates, grid_shape

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def total_mass(table: np.ndarray, what: str = "posterior") -> float:
    """
    Sum of a non-negative table, checked for degeneracy.

    Raises
    ------
    DegenerateEvidenceError
        If any cell is negative or NaN, or the sum is zero or not finite.
    """
    table = np.asarray(table, dtype=np.float64)
    if table.size == 0:
        raise DegenerateEvidenceError(f"Empty {what} table has no mass")
    if np.any(np.isnan(table)):
        raise DegenerateEvidenceError(f"The {what} table contains NaN cells")
    if np.any(table < 0):
        raise DegenerateEvidenceError(f"The {what} table contains negative cells")
    mass = table.sum()
    if not np.isfinite(mass) or mass <= 0:
        raise DegenerateEvidenceError(
            f"Total {what} mass is {mass}; the grid does not cover the likelihood "
            "and prior support, or is too coarse to capture it"
        )
    return float(mass)


def _values(grid) -> np.ndarray:
    if isinstance(grid, Grid):
        return grid.values
    values = np.asarray(grid, dtype=np.float64)
    if values.ndim != 1:
        raise ShapeMismatchError(f"Grid values must be one-dimensional, got shape {values.shape}")
    return values


def _probabilities(grid, weights) -> Tuple[np.ndarray, np.ndarray]:
    values = _values(grid)
    weights = np.asarray(weights, dtype=np.float64)
    if weights.shape != values.shape:
        raise ShapeMismatchError(
            f"Weights of shape {weights.shape} do not match grid of length {values.size}"
        )
    return values, weights / total_mass(weights, "weight")


def _check_count(count) -> int:
    """Validate a number of draws as a non-negative integer."""
    if isinstance(count, (bool, np.bool_)) or int(count) != count:
        raise ValueError(f"count must be an integer, got {count}")
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return int(count)


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return ``seed`` if it is already a Generator, else a new seeded one."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


# =============================================================================
# Marginalization
# =============================================================================

def marginal(posterior_table: np.ndarray, dimension: int) -> np.ndarray:
    """
    Marginal distribution of one parameter.

    Parameters
    ----------
    posterior_table : ndarray
        Joint posterior table (any number of dimensions)
    dimension : int
        Axis of the parameter to keep

    Returns
    -------
    marginal : ndarray
        1-D distribution over the kept grid, summing to 1
    """
    posterior_table = np.asarray(posterior_table, dtype=np.float64)
    ndim = posterior_table.ndim
    if not isinstance(dimension, (int, np.integer)) or not (-ndim <= dimension < ndim):
        raise ValueError(f"dimension must be an axis of a {ndim}-d table, got {dimension}")
    mass = total_mass(posterior_table)
    other_axes = tuple(ax for ax in range(ndim) if ax != dimension % ndim)
    return posterior_table.sum(axis=other_axes) / mass


# =============================================================================
# Sampling
# =============================================================================

def sample(
    grid,
    weights,
    count: int,
    rng: SeedLike = None,
) -> np.ndarray:
    """
    Draw grid values with replacement, proportionally to ``weights``.

    Parameters
    ----------
    grid : Grid or array-like
        Candidate values
    weights : array-like
        Non-negative weights with a positive, finite sum
    count : int
        Number of draws
    rng : Generator or seed, optional
        Source of randomness; pass a seeded Generator for reproducible draws

    Returns
    -------
    draws : ndarray, shape (count,)
    """
    count = _check_count(count)
    values, probs = _probabilities(grid, weights)
    return make_rng(rng).choice(values, size=count, replace=True, p=probs)


def sample_joint(
    grids: Sequence[Grid],
    posterior_table: np.ndarray,
    count: int,
    rng: SeedLike = None,
) -> np.ndarray:
    """
    Draw parameter vectors from a joint posterior table.

    Cells are drawn by flat index and mapped back to coordinates, so the
    parameter space is never enumerated.

    Returns
    -------
    draws : ndarray, shape (count, k)
    """
    count = _check_count(count)
    posterior_table = np.asarray(posterior_table, dtype=np.float64)
    if posterior_table.shape != grid_shape(grids):
        raise ShapeMismatchError(
            f"Posterior shape {posterior_table.shape} does not match grids {grid_shape(grids)}"
        )
    flat = posterior_table.ravel()
    probs = flat / total_mass(flat)
    indices = make_rng(rng).choice(flat.size, size=count, replace=True, p=probs)
    return cell_coordinates(grids, indices).reshape(count, len(grids))


# =============================================================================
# Summaries of a 1-D distribution over a grid
# =============================================================================

def posterior_mean(grid, weights) -> float:
    """Expectation of the grid distribution."""
    values, probs = _probabilities(grid, weights)
    return float(np.sum(values * probs))


def posterior_sd(grid, weights) -> float:
    """Standard deviation of the grid distribution."""
    values, probs = _probabilities(grid, weights)
    mean = np.sum(values * probs)
    return float(np.sqrt(np.sum(probs * (values - mean) ** 2)))


def posterior_mode(grid, weights) -> float:
    """Grid value with the largest weight (maximum a posteriori)."""
    values, probs = _probabilities(grid, weights)
    return float(values[np.argmax(probs)])


def posterior_quantile(grid, weights, q):
    """
    Quantile(s) of the discrete grid distribution.

    Returns the smallest grid value whose cumulative probability reaches q.
    """
    values, probs = _probabilities(grid, weights)
    q = np.asarray(q, dtype=np.float64)
    if np.any((q < 0) | (q > 1)):
        raise ValueError(f"Quantile levels must be in [0, 1], got {q}")
    cdf = np.cumsum(probs)
    idx = np.clip(np.searchsorted(cdf, q, side="left"), 0, values.size - 1)
    result = values[idx]
    return float(result) if result.ndim == 0 else result


def credible_interval(grid, weights, alpha: float = 0.05) -> Tuple[float, float]:
    """Equal-tailed (percentile) interval holding 1 - alpha of the mass."""
    _check_alpha(alpha)
    lower, upper = posterior_quantile(grid, weights, [alpha / 2, 1 - alpha / 2])
    return float(lower), float(upper)


def hpd_interval(grid, weights, alpha: float = 0.05) -> Tuple[float, float]:
    """
    Narrowest contiguous interval of grid values holding at least 1 - alpha.

    For unimodal posteriors this is the highest posterior density interval.
    """
    _check_alpha(alpha)
    values, probs = _probabilities(grid, weights)
    cdf = np.cumsum(probs)
    before = np.concatenate([[0.0], cdf[:-1]])
    # Small tolerance keeps exact-mass intervals from slipping one point right
    ends = np.searchsorted(cdf, before + (1 - alpha) - 1e-12, side="left")
    starts = np.arange(values.size)
    valid = ends < values.size
    widths = values[ends[valid]] - values[starts[valid]]
    best = np.argmin(widths)
    return float(values[starts[valid][best]]), float(values[ends[valid][best]])


def _check_alpha(alpha: float) -> None:
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")


def summarize_marginal(grid, weights, alpha: float = 0.05) -> dict:
    """Mean, sd, mode and intervals of one marginal as a flat dict."""
    lower, upper = credible_interval(grid, weights, alpha)
    hpd_lower, hpd_upper = hpd_interval(grid, weights, alpha)
    return {
        "mean": posterior_mean(grid, weights),
        "sd": posterior_sd(grid, weights),
        "mode": posterior_mode(grid, weights),
        "ci_low": lower,
        "ci_high": upper,
        "hpd_low": hpd_lower,
        "hpd_high": hpd_upper,
    }
