"""
Closed-form conjugate posteriors.

These are the exact answers that grid approximations of the same models
should reproduce up to discretization error:

- Beta-binomial: prior p ~ Beta(a, b), x successes in n trials
  Posterior: p | x ~ Beta(a + x, b + n - x)
- Normal-normal with known scale: prior mu ~ N(mu0, sigma0^2),
  y_i | mu ~ N(mu, sigma^2), i = 1..n
  Posterior: mu | y ~ N(mu_n, sigma_n^2)
"""

import numpy as np
from scipy import stats
from typing import Tuple, Union

ArrayLike = Union[float, np.ndarray]


def weight(sigma: float, sigma0: float, n: int = 1) -> float:
    """
    Weight placed on the data mean relative to the prior mean.

    Parameters
    ----------
    sigma : float
        Observation standard deviation
    sigma0 : float
        Prior standard deviation
    n : int
        Number of observations

    Returns
    -------
    w : float
        w = sigma0^2 / (sigma^2 / n + sigma0^2)
    """
    return sigma0**2 / (sigma**2 / n + sigma0**2)


def normal_posterior_params(
    y: ArrayLike,
    mu0: float,
    sigma: float,
    sigma0: float,
) -> Tuple[float, float, float]:
    """
    Posterior parameters for the conjugate Normal model with known scale.

    Parameters
    ----------
    y : float or array
        Observations
    mu0 : float
        Prior mean
    sigma : float
        Known observation standard deviation
    sigma0 : float
        Prior standard deviation

    Returns
    -------
    mu_n : float
        Posterior mean
    sigma_n : float
        Posterior standard deviation
    w : float
        Weight on the data mean (0 < w < 1)
    """
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))
    n = y.size
    w = weight(sigma, sigma0, n)

    # Posterior mean: weighted average of data mean and prior mean
    mu_n = w * np.mean(y) + (1 - w) * mu0

    # Posterior variance shrinks from sigma^2 / n by the same weight
    sigma_n = np.sqrt(w * sigma**2 / n)

    return float(mu_n), float(sigma_n), float(w)


def beta_binomial_params(
    successes: int,
    trials: int,
    a: float,
    b: float,
) -> Tuple[float, float]:
    """
    Posterior Beta parameters after observing binomial data.

    Parameters
    ----------
    successes : int
        Total successes x
    trials : int
        Total trials n
    a, b : float
        Prior Beta parameters

    Returns
    -------
    a_n, b_n : float
        Posterior parameters (a + x, b + n - x)
    """
    if successes < 0 or successes > trials:
        raise ValueError(f"successes must lie in [0, {trials}], got {successes}")
    return a + successes, b + trials - successes


def beta_binomial_mean(successes: int, trials: int, a: float, b: float) -> float:
    """Posterior mean (a + x) / (a + b + n)."""
    a_n, b_n = beta_binomial_params(successes, trials, a, b)
    return a_n / (a_n + b_n)


def beta_binomial_mode(successes: int, trials: int, a: float, b: float) -> float:
    """Posterior mode (a + x - 1) / (a + b + n - 2), defined when both parameters exceed 1."""
    a_n, b_n = beta_binomial_params(successes, trials, a, b)
    if a_n <= 1 or b_n <= 1:
        raise ValueError(f"Mode is on the boundary for Beta({a_n}, {b_n})")
    return (a_n - 1) / (a_n + b_n - 2)


def beta_binomial_density(
    p: ArrayLike,
    successes: int,
    trials: int,
    a: float,
    b: float,
) -> ArrayLike:
    """Exact posterior density at p."""
    a_n, b_n = beta_binomial_params(successes, trials, a, b)
    return stats.beta.pdf(p, a_n, b_n)


def normal_posterior_density(
    mu: ArrayLike,
    y: ArrayLike,
    mu0: float,
    sigma: float,
    sigma0: float,
) -> ArrayLike:
    """Exact posterior density of mu for the known-scale Normal model."""
    mu_n, sigma_n, _ = normal_posterior_params(y, mu0, sigma, sigma0)
    return stats.norm.pdf(mu, loc=mu_n, scale=sigma_n)


def discretize(density: np.ndarray) -> np.ndarray:
    """Rescale density values on a grid to sum to one, for comparison with grid posteriors."""
    density = np.asarray(density, dtype=np.float64)
    return density / density.sum()
