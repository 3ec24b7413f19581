"""
Likelihood tables over parameter grids.

For independent observations y_1, ..., y_n the likelihood of one grid cell
theta is the product of the per-observation densities:

    L(theta) = prod_i f(y_i | theta)

The product is accumulated one observation at a time over the whole grid, so
memory stays at a single table regardless of the number of observations.
Linear-scale products underflow once n grows past a few hundred moderately
informative observations; ``log_space=True`` sums log-densities instead and
rescales by the maximum before exponentiating.
"""

from typing import Callable, Protocol, Sequence

import numpy as np
from scipy import stats

from .errors import ShapeMismatchError
from .grid import Grid, grid_shape, mesh


class SamplingModel(Protocol):
    """Sampling distribution of a single observation given the parameters."""

    n_params: int
    param_names: tuple

    def density(self, y: float, *params: np.ndarray) -> np.ndarray:
        """Density of observation ``y`` broadcast over the parameter arrays."""

    def validate(self, observations: np.ndarray) -> None:
        """Raise ValueError if observations are outside the model's support."""


class _Model:
    n_params = 1
    param_names: tuple = ()

    def validate(self, observations: np.ndarray) -> None:
        pass

    def log_density(self, y: float, *params: np.ndarray) -> np.ndarray:
        with np.errstate(divide="ignore"):
            return np.log(self.density(y, *params))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BinomialModel(_Model):
    """
    y successes out of a known number of trials, unknown probability p.

    Parameters
    ----------
    trials : int
        Number of trials behind each observation
    """
    n_params = 1
    param_names = ("p",)

    def __init__(self, trials: int) -> None:
        if int(trials) != trials or trials < 0:
            raise ValueError(f"trials must be a non-negative integer, got {trials}")
        self.trials = int(trials)

    def validate(self, observations: np.ndarray) -> None:
        if np.any(observations != np.round(observations)):
            raise ValueError("Binomial observations must be integer success counts")
        if np.any((observations < 0) | (observations > self.trials)):
            raise ValueError(
                f"Binomial observations must lie in [0, {self.trials}], got {observations}"
            )

    def density(self, y: float, p: np.ndarray) -> np.ndarray:
        p = np.asarray(p, dtype=np.float64)
        inside = (p >= 0) & (p <= 1)
        return np.where(inside, stats.binom.pmf(y, self.trials, np.clip(p, 0, 1)), 0.0)

    def log_density(self, y: float, p: np.ndarray) -> np.ndarray:
        p = np.asarray(p, dtype=np.float64)
        inside = (p >= 0) & (p <= 1)
        with np.errstate(divide="ignore"):
            return np.where(inside, stats.binom.logpmf(y, self.trials, np.clip(p, 0, 1)), -np.inf)

    def __repr__(self) -> str:
        return f"BinomialModel(trials={self.trials})"


class NormalModel(_Model):
    """
    Normal observations with unknown mean.

    With ``sigma`` given the scale is known and the model has the single
    parameter mu; otherwise the parameters are (mu, sigma). Cells with a
    non-positive scale have zero likelihood.

    Parameters
    ----------
    sigma : float, optional
        Known observation standard deviation
    """

    def __init__(self, sigma: float = None) -> None:
        if sigma is not None and not (np.isfinite(sigma) and sigma > 0):
            raise ValueError(f"Known sigma must be positive and finite, got {sigma}")
        self.sigma = None if sigma is None else float(sigma)
        self.n_params = 1 if self.sigma is not None else 2
        self.param_names = ("mu",) if self.sigma is not None else ("mu", "sigma")

    def _split(self, params):
        if self.sigma is not None:
            (mu,) = params
            return mu, self.sigma
        return params

    def density(self, y: float, *params: np.ndarray) -> np.ndarray:
        mu, sigma = self._split(params)
        sigma = np.asarray(sigma, dtype=np.float64)
        valid = sigma > 0
        safe_sigma = np.where(valid, sigma, 1.0)
        return np.where(valid, stats.norm.pdf(y, loc=mu, scale=safe_sigma), 0.0)

    def log_density(self, y: float, *params: np.ndarray) -> np.ndarray:
        mu, sigma = self._split(params)
        sigma = np.asarray(sigma, dtype=np.float64)
        valid = sigma > 0
        safe_sigma = np.where(valid, sigma, 1.0)
        return np.where(valid, stats.norm.logpdf(y, loc=mu, scale=safe_sigma), -np.inf)

    def __repr__(self) -> str:
        if self.sigma is None:
            return "NormalModel()"
        return f"NormalModel(sigma={self.sigma})"


class PoissonModel(_Model):
    """Count observations with unknown rate."""
    n_params = 1
    param_names = ("rate",)

    def validate(self, observations: np.ndarray) -> None:
        if np.any(observations < 0) or np.any(observations != np.round(observations)):
            raise ValueError("Poisson observations must be non-negative integer counts")

    def density(self, y: float, rate: np.ndarray) -> np.ndarray:
        rate = np.asarray(rate, dtype=np.float64)
        return np.where(rate >= 0, stats.poisson.pmf(y, np.clip(rate, 0, None)), 0.0)

    def log_density(self, y: float, rate: np.ndarray) -> np.ndarray:
        rate = np.asarray(rate, dtype=np.float64)
        with np.errstate(divide="ignore"):
            return np.where(rate >= 0, stats.poisson.logpmf(y, np.clip(rate, 0, None)), -np.inf)


class CustomModel(_Model):
    """
    Sampling model from a caller-supplied density ``fn(y, *params)``.

    ``fn`` must broadcast over numpy parameter arrays.
    """

    def __init__(
        self,
        fn: Callable[..., np.ndarray],
        n_params: int,
        param_names: Sequence[str] = None,
    ) -> None:
        if not callable(fn):
            raise TypeError("Custom model density must be callable")
        if n_params < 1:
            raise ValueError(f"n_params must be at least 1, got {n_params}")
        self.fn = fn
        self.n_params = int(n_params)
        self.param_names = tuple(param_names) if param_names else tuple(
            f"theta_{i}" for i in range(self.n_params)
        )

    def density(self, y: float, *params: np.ndarray) -> np.ndarray:
        return np.asarray(self.fn(y, *params), dtype=np.float64)


def as_observations(observations) -> np.ndarray:
    """Validate and copy observations into a read-only 1-D float array."""
    obs = np.array(observations, dtype=np.float64, ndmin=1)
    if obs.ndim != 1:
        raise ValueError(f"Observations must be one-dimensional, got shape {obs.shape}")
    if not np.all(np.isfinite(obs)):
        raise ValueError("Observations must be finite")
    obs.flags.writeable = False
    return obs


def likelihood_table(
    observations,
    grids: Sequence[Grid],
    model: SamplingModel,
    log_space: bool = False,
) -> np.ndarray:
    """
    Joint likelihood of the observations at every grid cell.

    Parameters
    ----------
    observations : array-like
        Ordered observation values (1-D)
    grids : sequence of Grid
        One grid per model parameter, in ``model.param_names`` order
    model : SamplingModel
        Sampling distribution of one observation
    log_space : bool
        If True, accumulate log-densities and return exp(log L - max log L).
        The result is then proportional to, not equal to, the likelihood.

    Returns
    -------
    table : ndarray
        Non-negative likelihood table with the parameter-space shape

    Raises
    ------
    ShapeMismatchError
        If the number of grids differs from the model's parameter count.
    ValueError
        If the observations are not finite, 1-D, or outside the model support.
    """
    if len(grids) != model.n_params:
        raise ShapeMismatchError(
            f"{model!r} has {model.n_params} parameter(s) but {len(grids)} grid(s) were given"
        )
    obs = as_observations(observations)
    model.validate(obs)

    shape = grid_shape(grids)
    params = mesh(grids)

    if not log_space:
        table = np.ones(shape)
        for y in obs:
            table = table * model.density(y, *params)
        return np.broadcast_to(table, shape).copy()

    log_table = np.zeros(shape)
    for y in obs:
        log_table = log_table + model.log_density(y, *params)
    log_table = np.broadcast_to(log_table, shape)
    peak = np.max(log_table)
    if not np.isfinite(peak):
        return np.zeros(shape)
    return np.exp(log_table - peak)
