"""
Experiment Runner

Orchestrates the tutorial experiments and stores their results:
- binomial_posterior: Beta-binomial fit on the default grid
- binomial_resolution: discretization error vs grid step (closed form known)
- binomial_draws: Monte Carlo error of draw-based means vs draw count
- normal_resolution: known-scale Normal model vs the conjugate answer
- normal_example: two-parameter (mu, sigma) fit from a single observation
"""

from pathlib import Path
from typing import Literal, Optional

import numpy as np

from ..analytic import (
    beta_binomial_density,
    beta_binomial_mean,
    normal_posterior_density,
    normal_posterior_params,
)
from ..likelihood import BinomialModel, NormalModel
from ..posterior import estimate_posterior
from ..priors import prior_from_dict
from .convergence import draw_count_study, resolution_study
from .data import simulate_normal
from .storage import (
    RESULTS_DIR,
    delete_result,
    get_results_size,
    list_results,
    load_posterior,
    load_result,
    result_exists,
    save_posterior,
    save_result,
)


ExperimentType = Literal["binomial", "normal", "all"]


DEFAULT_CONFIG = {
    "seed": 42,
    "binomial": {
        "successes": 5,
        "trials": 10,
        "prior": {"type": "beta", "a": 2.0, "b": 2.0},
        "grid": (0.0, 1.0, 0.01),
        "resolution_steps": [0.2, 0.1, 0.05, 0.02, 0.01, 0.005, 0.001],
        "draw_counts": [10, 100, 1_000, 10_000],
        "n_reps": 200,
    },
    "normal": {
        "y": [-2.69833],
        "mu_grid": (-5.0, 5.0, 0.01),
        "sigma_grid": (0.01, 10.0, 0.01),
        "mu_prior": {"type": "normal", "mu": 0.0, "sigma": 1.0},
        "sigma_prior": {"type": "normal", "mu": 0.0, "sigma": 1.0},
        "known_sigma": 1.0,
        "n_obs": 20,
        "mu_true": 1.5,
        "resolution_steps": [0.5, 0.2, 0.1, 0.05, 0.01],
    },
    "n_jobs": -1,
}

FAST_CONFIG = {
    "seed": 42,
    "binomial": {
        "successes": 5,
        "trials": 10,
        "prior": {"type": "beta", "a": 2.0, "b": 2.0},
        "grid": (0.0, 1.0, 0.01),
        "resolution_steps": [0.2, 0.05, 0.01],
        "draw_counts": [10, 100, 1_000],
        "n_reps": 20,
    },
    "normal": {
        "y": [-2.69833],
        "mu_grid": (-5.0, 5.0, 0.05),
        "sigma_grid": (0.05, 10.0, 0.05),
        "mu_prior": {"type": "normal", "mu": 0.0, "sigma": 1.0},
        "sigma_prior": {"type": "normal", "mu": 0.0, "sigma": 1.0},
        "known_sigma": 1.0,
        "n_obs": 20,
        "mu_true": 1.5,
        "resolution_steps": [0.5, 0.1],
    },
    "n_jobs": 1,
}


class ExperimentRunner:
    """Runs the tutorial experiments and stores results as HDF5 files.

    Every experiment is skipped when its result file already exists, unless
    ``force`` is set.
    """

    def __init__(
        self,
        fast: bool = False,
        config: Optional[dict] = None,
        output_dir: Optional[Path] = None,
    ):
        """Initialize runner.

        Args:
            fast: If True, use coarser grids and fewer replicates
            config: Custom configuration (overrides fast flag if provided)
            output_dir: Where results are written (default: output/experiments/)
        """
        if config is not None:
            self.config = config
        else:
            self.config = FAST_CONFIG if fast else DEFAULT_CONFIG
        self.output_dir = output_dir

    def _skip(self, name: str, force: bool, verbose: bool) -> bool:
        if not force and result_exists(name, self.output_dir):
            if verbose:
                print(f"  {name}: exists, skipping (use force=True to regenerate)")
            return True
        if verbose:
            print(f"  {name}: running...")
        return False

    def run_binomial(self, force: bool = False, verbose: bool = True) -> dict[str, Path]:
        """Beta-binomial fit, resolution study and draw-count study.

        Args:
            force: If True, regenerate even if files exist
            verbose: Print progress messages

        Returns:
            Dictionary mapping result names to file paths
        """
        cfg = self.config["binomial"]
        x, n = cfg["successes"], cfg["trials"]
        prior = prior_from_dict(cfg["prior"])
        a, b = prior.a, prior.b
        model = BinomialModel(n)
        paths = {}

        if verbose:
            print("\nBeta-binomial experiments")
            print(f"  data: {x} successes in {n} trials, prior {prior!r}")

        name = "binomial_posterior"
        if not self._skip(name, force, verbose):
            post = estimate_posterior([x], [cfg["grid"]], model, [prior])
            metadata = {
                "model": repr(model),
                "prior": cfg["prior"],
                "observations": [x],
                "exact_mean": beta_binomial_mean(x, n, a, b),
            }
            save_posterior(name, post, metadata, self.output_dir)
        paths[name] = self._path(name)

        name = "binomial_resolution"
        if not self._skip(name, force, verbose):
            data, metadata = resolution_study(
                [x], model, prior,
                bounds=cfg["grid"][:2],
                steps=cfg["resolution_steps"],
                exact_mean=beta_binomial_mean(x, n, a, b),
                exact_density=lambda p: beta_binomial_density(p, x, n, a, b),
                show_progress=verbose,
            )
            save_result(name, data, metadata, self.output_dir)
        paths[name] = self._path(name)

        name = "binomial_draws"
        if not self._skip(name, force, verbose):
            post, _ = load_posterior("binomial_posterior", self.output_dir)
            data, metadata = draw_count_study(
                post,
                cfg["draw_counts"],
                n_reps=cfg["n_reps"],
                seed=self.config["seed"],
                n_jobs=self.config["n_jobs"],
                verbose=verbose,
            )
            save_result(name, data, metadata, self.output_dir)
        paths[name] = self._path(name)

        return paths

    def run_normal(self, force: bool = False, verbose: bool = True) -> dict[str, Path]:
        """Known-scale resolution study and the two-parameter example.

        Args:
            force: If True, regenerate even if files exist
            verbose: Print progress messages

        Returns:
            Dictionary mapping result names to file paths
        """
        cfg = self.config["normal"]
        mu_prior = prior_from_dict(cfg["mu_prior"])
        sigma_prior = prior_from_dict(cfg["sigma_prior"])
        paths = {}

        if verbose:
            print("\nNormal-model experiments")

        name = "normal_resolution"
        if not self._skip(name, force, verbose):
            sigma = cfg["known_sigma"]
            y = simulate_normal(cfg["mu_true"], sigma, cfg["n_obs"], rng=self.config["seed"])
            mu_n, _, _ = normal_posterior_params(y, mu_prior.mu, sigma, mu_prior.sigma)
            data, metadata = resolution_study(
                y, NormalModel(sigma), mu_prior,
                bounds=cfg["mu_grid"][:2],
                steps=cfg["resolution_steps"],
                exact_mean=mu_n,
                exact_density=lambda mu: normal_posterior_density(
                    mu, y, mu_prior.mu, sigma, mu_prior.sigma
                ),
                show_progress=verbose,
            )
            data["observations"] = y
            metadata["seed"] = self.config["seed"]
            save_result(name, data, metadata, self.output_dir)
        paths[name] = self._path(name)

        name = "normal_example"
        if not self._skip(name, force, verbose):
            mu_grid = {"lower": cfg["mu_grid"][0], "upper": cfg["mu_grid"][1],
                       "step": cfg["mu_grid"][2], "name": "mu"}
            sigma_grid = {"lower": cfg["sigma_grid"][0], "upper": cfg["sigma_grid"][1],
                          "step": cfg["sigma_grid"][2], "name": "sigma"}
            post = estimate_posterior(
                cfg["y"], [mu_grid, sigma_grid], NormalModel(), [mu_prior, sigma_prior]
            )
            if verbose:
                print(f"    grid shape {post.shape}, mean of mu = {post.mean('mu'):.4f}, "
                      f"mean of sigma = {post.mean('sigma'):.4f}")
            metadata = {
                "model": "NormalModel()",
                "priors": [cfg["mu_prior"], cfg["sigma_prior"]],
                "observations": list(cfg["y"]),
            }
            save_posterior(name, post, metadata, self.output_dir)
        paths[name] = self._path(name)

        return paths

    def run_all(
        self,
        experiment: ExperimentType = "all",
        force: bool = False,
        verbose: bool = True,
    ) -> dict[str, Path]:
        """Run one experiment group or all of them.

        Args:
            experiment: "binomial", "normal" or "all"
            force: Force regeneration
            verbose: Print progress

        Returns:
            Dictionary mapping result names to file paths
        """
        if experiment not in ("binomial", "normal", "all"):
            raise ValueError(f"Unknown experiment: {experiment}")

        if verbose:
            print("=" * 60)
            print("RUNNING GRID-APPROXIMATION EXPERIMENTS")
            print("=" * 60)
            print(f"Configuration: {'FAST' if self.config is FAST_CONFIG else 'DEFAULT'}")

        paths = {}
        if experiment in ("binomial", "all"):
            paths.update(self.run_binomial(force=force, verbose=verbose))
        if experiment in ("normal", "all"):
            paths.update(self.run_normal(force=force, verbose=verbose))

        if verbose:
            print("\n" + "=" * 60)
            print("EXPERIMENT SUMMARY")
            print("=" * 60)
            print(f"Result files: {len(list_results(self.output_dir))}")
            print(f"Total size: {format_size(get_results_size(self.output_dir))}")

        return paths

    def load(self, name: str) -> tuple[dict[str, np.ndarray], dict]:
        """Load a stored result by name."""
        return load_result(name, self.output_dir)

    def _path(self, name: str) -> Path:
        base = Path(self.output_dir) if self.output_dir is not None else RESULTS_DIR
        return base / f"{name}.h5"


def format_size(size_bytes: int) -> str:
    """Format byte size as human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


def list_stored(output_dir: Optional[Path] = None) -> None:
    """Print information about stored experiment results."""
    base = Path(output_dir) if output_dir is not None else RESULTS_DIR

    print("\n" + "=" * 60)
    print("EXPERIMENT RESULTS")
    print("=" * 60)

    names = list_results(output_dir)
    if names:
        for name in names:
            size = (base / f"{name}.h5").stat().st_size
            print(f"  - {name}.h5 ({format_size(size)})")
    else:
        print("  (none)")

    print(f"\nTotal size: {format_size(get_results_size(output_dir))}")


def clear_results(confirm: bool = True, output_dir: Optional[Path] = None) -> int:
    """Delete stored experiment results.

    Args:
        confirm: If True, prompt for confirmation
        output_dir: Results directory (default: output/experiments/)

    Returns:
        Number of files deleted
    """
    names = list_results(output_dir)
    if not names:
        print("No result files to delete.")
        return 0

    if confirm:
        print(f"This will delete {len(names)} result files.")
        response = input("Continue? [y/N] ").strip().lower()
        if response != "y":
            print("Cancelled.")
            return 0

    count = sum(delete_result(name, output_dir) for name in names)
    print(f"Deleted {count} result files.")
    return count
