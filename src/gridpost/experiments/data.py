"""
Synthetic Observation Generation

Draws observation sets for the tutorial models from an explicitly passed
random generator. Every function returns a plain float array so that the
result can be fed straight into ``estimate_posterior``.
"""

import numpy as np

from ..marginals import SeedLike, make_rng


def simulate_binomial(
    p_true: float,
    trials: int,
    n_obs: int = 1,
    rng: SeedLike = None,
) -> np.ndarray:
    """Simulate success counts out of ``trials`` with success probability p_true.

    Args:
        p_true: True success probability
        trials: Trials per observation
        n_obs: Number of observations
        rng: Generator or seed

    Returns:
        float64[n_obs] success counts
    """
    if not 0 <= p_true <= 1:
        raise ValueError(f"p_true must be in [0, 1], got {p_true}")
    return make_rng(rng).binomial(trials, p_true, size=n_obs).astype(np.float64)


def simulate_normal(
    mu_true: float,
    sigma_true: float,
    n_obs: int,
    rng: SeedLike = None,
) -> np.ndarray:
    """Simulate y ~ N(mu_true, sigma_true^2).

    Args:
        mu_true: True mean
        sigma_true: True standard deviation
        n_obs: Number of observations
        rng: Generator or seed

    Returns:
        float64[n_obs] observations
    """
    if sigma_true <= 0:
        raise ValueError(f"sigma_true must be positive, got {sigma_true}")
    return make_rng(rng).normal(mu_true, sigma_true, size=n_obs)


def simulate_poisson(
    rate: float,
    n_obs: int,
    rng: SeedLike = None,
) -> np.ndarray:
    """Simulate counts y ~ Poisson(rate).

    Args:
        rate: True rate
        n_obs: Number of observations
        rng: Generator or seed

    Returns:
        float64[n_obs] counts
    """
    if rate < 0:
        raise ValueError(f"rate must be non-negative, got {rate}")
    return make_rng(rng).poisson(rate, size=n_obs).astype(np.float64)


def spawn_generators(seed: int, n: int) -> list[np.random.Generator]:
    """Independent generators for n replicates, reproducible from one seed."""
    children = np.random.SeedSequence(seed).spawn(n)
    return [np.random.default_rng(child) for child in children]
