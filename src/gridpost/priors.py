"""
Prior densities evaluated on parameter grids.

Every prior family implements the same capability, a ``pdf`` method that maps
candidate parameter values to non-negative densities. The estimator only ever
calls that method; it holds references to prior objects and never switches on
family names.

For several parameters the joint prior is the outer product of the
per-parameter densities, i.e. parameters are assumed independent a priori:

    p(theta_1, ..., theta_k) = p_1(theta_1) x ... x p_k(theta_k)
"""

from enum import StrEnum, auto
from typing import Any, Callable, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np
from scipy import stats

from .errors import ShapeMismatchError
from .grid import Grid


@runtime_checkable
class Density(Protocol):
    """Capability shared by all prior families."""

    def pdf(self, values: np.ndarray) -> np.ndarray:
        """Density at each value (non-negative, same shape as ``values``)."""


class PriorType(StrEnum):
    """Prior families that can be built from configuration."""

    BETA = auto()
    UNIFORM = auto()
    NORMAL = auto()
    CAUCHY = auto()
    HALFNORMAL = auto()
    EXPONENTIAL = auto()


def _require_positive(**kwargs: float) -> None:
    for key, value in kwargs.items():
        if not (np.isfinite(value) and value > 0):
            raise ValueError(f"{key} must be positive and finite, got {value}")


def _require_finite(**kwargs: float) -> None:
    for key, value in kwargs.items():
        if not np.isfinite(value):
            raise ValueError(f"{key} must be finite, got {value}")


class _ScipyPrior:
    """Prior backed by a frozen scipy.stats distribution."""

    def __init__(self, dist) -> None:
        self._dist = dist

    def pdf(self, values: np.ndarray) -> np.ndarray:
        return self._dist.pdf(np.asarray(values, dtype=np.float64))

    def logpdf(self, values: np.ndarray) -> np.ndarray:
        return self._dist.logpdf(np.asarray(values, dtype=np.float64))

    def mean(self) -> float:
        return float(self._dist.mean())

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.hyperparameters.items())
        return f"{type(self).__name__}({params})"

    @property
    def hyperparameters(self) -> dict:
        raise NotImplementedError


class BetaPrior(_ScipyPrior):
    """Beta(a, b) prior on a probability parameter."""

    def __init__(self, a: float, b: float) -> None:
        _require_positive(a=a, b=b)
        self.a = float(a)
        self.b = float(b)
        super().__init__(stats.beta(self.a, self.b))

    @property
    def hyperparameters(self) -> dict:
        return {"a": self.a, "b": self.b}


class UniformPrior(_ScipyPrior):
    """Flat prior on [lower, upper]; zero density outside."""

    def __init__(self, lower: float = 0.0, upper: float = 1.0) -> None:
        _require_finite(lower=lower, upper=upper)
        if lower >= upper:
            raise ValueError(
                f"Uniform prior lower bound must be below upper bound, got "
                f"lower={lower}, upper={upper}"
            )
        self.lower = float(lower)
        self.upper = float(upper)
        super().__init__(stats.uniform(loc=self.lower, scale=self.upper - self.lower))

    @property
    def hyperparameters(self) -> dict:
        return {"lower": self.lower, "upper": self.upper}


class NormalPrior(_ScipyPrior):
    """Normal(mu, sigma) prior."""

    def __init__(self, mu: float = 0.0, sigma: float = 1.0) -> None:
        _require_finite(mu=mu)
        _require_positive(sigma=sigma)
        self.mu = float(mu)
        self.sigma = float(sigma)
        super().__init__(stats.norm(loc=self.mu, scale=self.sigma))

    @property
    def hyperparameters(self) -> dict:
        return {"mu": self.mu, "sigma": self.sigma}


class CauchyPrior(_ScipyPrior):
    """Cauchy(loc, scale) prior, a heavy-tailed alternative to the normal."""

    def __init__(self, loc: float = 0.0, scale: float = 1.0) -> None:
        _require_finite(loc=loc)
        _require_positive(scale=scale)
        self.loc = float(loc)
        self.scale = float(scale)
        super().__init__(stats.cauchy(loc=self.loc, scale=self.scale))

    def mean(self) -> float:
        # Undefined for the Cauchy distribution
        return float("nan")

    @property
    def hyperparameters(self) -> dict:
        return {"loc": self.loc, "scale": self.scale}


class HalfNormalPrior(_ScipyPrior):
    """Half-normal(sigma) prior for positive scale parameters."""

    def __init__(self, sigma: float = 1.0) -> None:
        _require_positive(sigma=sigma)
        self.sigma = float(sigma)
        super().__init__(stats.halfnorm(scale=self.sigma))

    @property
    def hyperparameters(self) -> dict:
        return {"sigma": self.sigma}


class ExponentialPrior(_ScipyPrior):
    """Exponential(rate) prior for positive parameters."""

    def __init__(self, rate: float = 1.0) -> None:
        _require_positive(rate=rate)
        self.rate = float(rate)
        super().__init__(stats.expon(scale=1.0 / self.rate))

    @property
    def hyperparameters(self) -> dict:
        return {"rate": self.rate}


class CustomPrior:
    """
    Prior from a caller-supplied density function.

    Parameters
    ----------
    fn : callable
        Maps an array of parameter values to densities. Must be vectorized.
    name : str, optional
        Label used in repr
    """

    def __init__(self, fn: Callable[[np.ndarray], np.ndarray], name: str = "custom") -> None:
        if not callable(fn):
            raise TypeError("Custom prior density must be callable")
        self.fn = fn
        self.name = name

    def pdf(self, values: np.ndarray) -> np.ndarray:
        values = np.asarray(values, dtype=np.float64)
        density = np.broadcast_to(np.asarray(self.fn(values), dtype=np.float64), values.shape)
        if np.any(density < 0) or np.any(np.isnan(density)):
            raise ValueError(f"Prior '{self.name}' returned negative or NaN densities")
        return density

    def __repr__(self) -> str:
        return f"CustomPrior({self.name})"


_PRIOR_FACTORIES: dict[PriorType, type] = {
    PriorType.BETA: BetaPrior,
    PriorType.UNIFORM: UniformPrior,
    PriorType.NORMAL: NormalPrior,
    PriorType.CAUCHY: CauchyPrior,
    PriorType.HALFNORMAL: HalfNormalPrior,
    PriorType.EXPONENTIAL: ExponentialPrior,
}


def prior_from_dict(config: Mapping[str, Any]) -> Density:
    """
    Build a prior from a configuration mapping.

    Parameters
    ----------
    config : mapping
        Must contain a ``type`` key naming the family; remaining keys are
        passed to the family constructor as hyperparameters.

    Returns
    -------
    prior : Density

    Examples
    --------
    >>> prior_from_dict({"type": "beta", "a": 2, "b": 2})
    BetaPrior(a=2.0, b=2.0)
    """
    _config = dict(config)
    prior_type = _config.pop("type", None)
    if prior_type is None:
        raise ValueError("Prior config must have a 'type' key.")
    try:
        prior_type = PriorType(str(prior_type).lower())
    except ValueError as e:
        raise ValueError(f"Unknown prior type: {prior_type}") from e
    return _PRIOR_FACTORIES[prior_type](**_config)


def as_prior(spec) -> Density:
    """Accept a Density, a configuration mapping or a bare callable."""
    if isinstance(spec, Mapping):
        return prior_from_dict(spec)
    if isinstance(spec, Density):
        return spec
    if callable(spec):
        return CustomPrior(spec)
    raise TypeError(f"Cannot build a prior from {type(spec).__name__}")


def prior_table(grids: Sequence[Grid], priors: Sequence) -> np.ndarray:
    """
    Joint prior density over the parameter space.

    Parameters
    ----------
    grids : sequence of Grid
        One grid per parameter
    priors : sequence
        One prior per grid (Density, config mapping or callable)

    Returns
    -------
    table : ndarray
        Outer product of the per-grid densities, shape (|grid_1|, ..., |grid_k|)

    Raises
    ------
    ShapeMismatchError
        If the number of priors differs from the number of grids.
    ValueError
        If a prior density is infinite or NaN at a grid value.
    """
    if len(priors) != len(grids):
        raise ShapeMismatchError(
            f"Expected one prior per grid: got {len(priors)} priors for {len(grids)} grids"
        )
    table = np.ones(())
    for grid, spec in zip(grids, priors):
        prior = as_prior(spec)
        density = np.asarray(prior.pdf(grid.values), dtype=np.float64)
        if density.shape != (len(grid),):
            raise ShapeMismatchError(
                f"Prior for grid {grid.label} returned shape {density.shape}, "
                f"expected ({len(grid)},)"
            )
        bad = ~np.isfinite(density)
        if np.any(bad):
            raise ValueError(
                f"Prior {prior!r} is not finite at {grid.label} = "
                f"{grid.values[bad][:5].tolist()}; move the grid off the singular points"
            )
        table = np.multiply.outer(table, density)
    return table
