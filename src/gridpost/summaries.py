"""
Monte Carlo summaries of posterior draws.

Draws from a grid posterior approximate its mean and intervals. These helpers
report the estimate together with its Monte Carlo standard error so that the
sampling error can be told apart from the grid discretization error.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy import stats

from .marginals import SeedLike, make_rng


@dataclass
class DrawSummary:
    """Container for a draw-based estimate with uncertainty.

    Attributes:
        value: Point estimate (mean of the draws)
        se: Monte Carlo standard error of the mean
        sd: Standard deviation of the draws
        ci_low: Lower percentile of the draws
        ci_high: Upper percentile of the draws
        n_draws: Number of draws used
        raw_draws: Optional array of the draws themselves
    """
    value: float
    se: float
    sd: float
    ci_low: float
    ci_high: float
    n_draws: int
    raw_draws: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        return (
            f"DrawSummary({self.value:.4f} +/- {self.se:.4f}, "
            f"interval: [{self.ci_low:.4f}, {self.ci_high:.4f}], n={self.n_draws})"
        )

    def format(self, decimals: int = 3) -> str:
        """Format as 'value +/- se'."""
        return format_with_uncertainty(self.value, self.se, decimals)


def mean_se(draws: np.ndarray) -> float:
    """Standard error of the mean, std(draws) / sqrt(n).

    Args:
        draws: Array of draws

    Returns:
        Standard error, or NaN for fewer than two draws
    """
    draws = np.asarray(draws)
    n = len(draws)
    if n <= 1:
        return np.nan
    return np.std(draws, ddof=1) / np.sqrt(n)


def percentile_interval(draws: np.ndarray, alpha: float = 0.05) -> tuple[float, float]:
    """Central interval of the draws holding 1 - alpha of them.

    Args:
        draws: Array of draws
        alpha: Tail probability (default 0.05 for a 95% interval)

    Returns:
        Tuple of (lower, upper) percentiles
    """
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    draws = np.asarray(draws)
    if draws.size == 0:
        raise ValueError("Cannot compute an interval from zero draws")
    lower = np.percentile(draws, 100 * alpha / 2)
    upper = np.percentile(draws, 100 * (1 - alpha / 2))
    return float(lower), float(upper)


def mean_ci(draws: np.ndarray, alpha: float = 0.05) -> tuple[float, float]:
    """Normal-theory confidence interval for the mean of the draws.

    Args:
        draws: Array of draws
        alpha: Significance level

    Returns:
        Tuple of (lower, upper) bounds
    """
    draws = np.asarray(draws)
    mean = np.mean(draws)
    se = mean_se(draws)
    z = stats.norm.ppf(1 - alpha / 2)
    return (mean - z * se, mean + z * se)


def bootstrap_ci(
    draws: np.ndarray,
    statistic: Callable[[np.ndarray], float] = np.mean,
    alpha: float = 0.05,
    n_boot: int = 1000,
    rng: SeedLike = None,
) -> tuple[float, float]:
    """Percentile bootstrap interval for any statistic of the draws.

    Args:
        draws: Array of draws
        statistic: Function to compute statistic of interest (default: mean)
        alpha: Significance level (default 0.05 for 95% CI)
        n_boot: Number of bootstrap replicates
        rng: Generator or seed for reproducibility

    Returns:
        Tuple of (lower, upper) bounds
    """
    draws = np.asarray(draws)
    n = len(draws)
    rng = make_rng(rng)

    boot_stats = np.zeros(n_boot)
    for i in range(n_boot):
        boot_sample = rng.choice(draws, size=n, replace=True)
        boot_stats[i] = statistic(boot_sample)

    return percentile_interval(boot_stats, alpha)


def summarize_draws(
    draws: np.ndarray,
    alpha: float = 0.05,
    keep_draws: bool = False,
) -> DrawSummary:
    """Summarize draws from one marginal.

    Args:
        draws: 1-D array of draws
        alpha: Tail probability for the percentile interval
        keep_draws: Whether to store the draws in the result

    Returns:
        DrawSummary with mean, MC standard error, sd and percentile interval
    """
    draws = np.asarray(draws, dtype=np.float64)
    if draws.ndim != 1:
        raise ValueError(f"Expected a 1-D array of draws, got shape {draws.shape}")
    ci_low, ci_high = percentile_interval(draws, alpha)
    return DrawSummary(
        value=float(np.mean(draws)),
        se=mean_se(draws),
        sd=float(np.std(draws, ddof=1)) if draws.size > 1 else np.nan,
        ci_low=ci_low,
        ci_high=ci_high,
        n_draws=draws.size,
        raw_draws=draws.copy() if keep_draws else None,
    )


def format_with_uncertainty(value: float, se: float, decimals: int = 3) -> str:
    """Format a value with its uncertainty, e.g. "0.500 +/- 0.002"."""
    return f"{value:.{decimals}f} +/- {se:.{decimals}f}"
