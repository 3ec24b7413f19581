"""
Grid Resolution and Draw-Count Studies

Two sources of error separate a grid estimate from the exact posterior:

- discretization: the grid step bounds how closely the table can follow the
  continuous posterior, whatever else is done;
- Monte Carlo: summaries computed from draws fluctuate around the table's own
  summaries, shrinking like 1/sqrt(count).

The studies below measure each in isolation. Results are plain dicts of numpy
arrays plus a metadata dict, ready for ``save_result``.
"""

from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed
from tqdm import tqdm

from ..analytic import discretize
from ..grid import build_grid
from ..likelihood import SamplingModel
from ..marginals import posterior_mean, sample
from ..posterior import GridPosterior, estimate_posterior
from .data import spawn_generators


def resolution_study(
    observations,
    model: SamplingModel,
    prior,
    bounds: tuple[float, float],
    steps: Sequence[float],
    exact_mean: Optional[float] = None,
    exact_density: Optional[Callable[[np.ndarray], np.ndarray]] = None,
    show_progress: bool = True,
) -> tuple[dict, dict]:
    """Refit a one-parameter posterior on successively finer grids.

    Args:
        observations: Observation set
        model: One-parameter sampling model
        prior: Prior for the parameter
        bounds: (lower, upper) grid bounds shared by every fit
        steps: Grid steps to try
        exact_mean: Closed-form posterior mean, if known
        exact_density: Closed-form posterior density, if known; used for the
            total-variation distance to the grid posterior
        show_progress: Show a tqdm progress bar

    Returns:
        Tuple of (data_dict, metadata_dict)

    Data structure:
        steps: float64[n_steps]
        n_points: int64[n_steps]
        grid_mean: float64[n_steps]
        mean_error: float64[n_steps] - |grid_mean - exact_mean| (NaN if unknown)
        tv_distance: float64[n_steps] - total variation to exact (NaN if unknown)
    """
    steps = np.asarray(steps, dtype=np.float64)
    n_steps = len(steps)
    lower, upper = bounds

    n_points = np.zeros(n_steps, dtype=np.int64)
    grid_mean = np.zeros(n_steps)
    mean_error = np.full(n_steps, np.nan)
    tv_distance = np.full(n_steps, np.nan)

    for i, step in enumerate(tqdm(steps, desc="Resolution study", unit="grid",
                                  disable=not show_progress)):
        grid = build_grid(lower, upper, step)
        post = estimate_posterior(observations, [grid], model, [prior],
                                  warn_truncation=False)
        n_points[i] = len(grid)
        grid_mean[i] = post.mean()

        if exact_mean is not None:
            mean_error[i] = abs(grid_mean[i] - exact_mean)
        if exact_density is not None:
            exact = discretize(exact_density(grid.values))
            tv_distance[i] = 0.5 * np.sum(np.abs(post.marginals[0] - exact))

    data = {
        "steps": steps,
        "n_points": n_points,
        "grid_mean": grid_mean,
        "mean_error": mean_error,
        "tv_distance": tv_distance,
    }
    metadata = {
        "experiment": "resolution",
        "model": repr(model),
        "prior": repr(prior),
        "bounds": [lower, upper],
        "n_obs": int(np.size(observations)),
        "exact_mean": exact_mean,
        "generated_at": datetime.now().isoformat(),
    }
    return data, metadata


def _replicate_means(grid, weights, count: int, rngs: list) -> np.ndarray:
    """Draw-based means for one draw count, one per generator."""
    return np.array([np.mean(sample(grid, weights, count, rng)) for rng in rngs])


def draw_count_study(
    posterior: GridPosterior,
    counts: Sequence[int],
    n_reps: int = 200,
    dimension: int = 0,
    seed: int = 42,
    n_jobs: int = 1,
    verbose: bool = True,
) -> tuple[dict, dict]:
    """Measure how draw-based mean estimates converge to the table mean.

    Each (count, replicate) pair gets its own generator spawned from ``seed``,
    so results do not depend on ``n_jobs``.

    Args:
        posterior: Fitted grid posterior
        counts: Draw counts to try
        n_reps: Replicates per draw count
        dimension: Parameter whose marginal is sampled
        seed: Base random seed
        n_jobs: Parallel jobs for joblib (-1 for all CPUs)
        verbose: Print progress

    Returns:
        Tuple of (data_dict, metadata_dict)

    Data structure:
        counts: int64[n_counts]
        draw_means: float64[n_counts, n_reps]
        rmse: float64[n_counts] - root mean squared error vs the table mean
        table_mean: float64 scalar
    """
    counts = np.asarray(counts, dtype=np.int64)
    d = posterior._axis(dimension)
    grid = posterior.grids[d]
    weights = posterior.marginals[d]
    table_mean = posterior_mean(grid, weights)

    rngs = spawn_generators(seed, len(counts) * n_reps)
    rng_blocks = [rngs[i * n_reps:(i + 1) * n_reps] for i in range(len(counts))]

    if verbose:
        print(f"Draw-count study: {len(counts)} counts x {n_reps} replicates "
              f"on grid {grid.label}")

    if n_jobs == 1:
        blocks = [
            _replicate_means(grid.values, weights, int(c), block)
            for c, block in tqdm(list(zip(counts, rng_blocks)), desc="Draw-count study",
                                 unit="count", disable=not verbose)
        ]
    else:
        blocks = Parallel(n_jobs=n_jobs)(
            delayed(_replicate_means)(grid.values, weights, int(c), block)
            for c, block in zip(counts, rng_blocks)
        )

    draw_means = np.vstack(blocks)
    rmse = np.sqrt(np.mean((draw_means - table_mean) ** 2, axis=1))

    data = {
        "counts": counts,
        "draw_means": draw_means,
        "rmse": rmse,
        "table_mean": np.float64(table_mean),
    }
    metadata = {
        "experiment": "draw_count",
        "dimension": d,
        "grid": grid.label,
        "n_reps": n_reps,
        "seed": seed,
        "generated_at": datetime.now().isoformat(),
    }
    return data, metadata
