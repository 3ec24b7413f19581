#!/usr/bin/env python3
"""
Generate Tutorial Tables

Generates tables 1-4:
- Table 1: Grid vs exact beta-binomial summaries for several priors
- Table 2: Discretization error vs grid step
- Table 3: Draw-based summaries vs draw count
- Table 4: Two-parameter normal example summaries

Output formats: CSV and LaTeX

Usage:
    python scripts/generate_tables.py [--fast]
"""

import sys
import argparse
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np
import pandas as pd
from scipy import stats
from tqdm import tqdm

from gridpost import BetaPrior, BinomialModel, NormalModel, estimate_posterior
from gridpost.analytic import beta_binomial_density, beta_binomial_mean, beta_binomial_params
from gridpost.experiments.convergence import resolution_study
from gridpost.figure_style import MC_CONFIG
from gridpost.summaries import summarize_draws


# =============================================================================
# Helper Functions
# =============================================================================

def ensure_output_dir():
    """Ensure output directory exists."""
    output_dir = Path(__file__).parent.parent / "output" / "tables"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def save_table(df: pd.DataFrame, name: str, output_dir: Path, float_format: str = "%.4f"):
    """Save table in CSV and LaTeX formats."""
    # CSV
    csv_path = output_dir / f"{name}.csv"
    df.to_csv(csv_path)
    print(f"Saved: {csv_path}")

    # LaTeX
    tex_path = output_dir / f"{name}.tex"
    latex_str = df.to_latex(index=True, float_format=float_format)
    with open(tex_path, 'w') as f:
        f.write(latex_str)
    print(f"Saved: {tex_path}")


# =============================================================================
# Table 1: Grid vs Exact
# =============================================================================

def generate_table_1_grid_vs_exact(
    successes: int = 5,
    trials: int = 10,
    step: float = 0.01,
) -> pd.DataFrame:
    """
    Generate Table 1: grid and closed-form beta-binomial summaries.

    One row per Beta prior; the grid columns should agree with the exact ones
    to within the grid step.
    """
    print("\n" + "="*60)
    print("Table 1: Grid vs Exact Beta-Binomial Posterior")
    print("="*60)

    priors = [(1, 1), (2, 2), (5, 5), (1, 5), (10, 2)]
    alpha = MC_CONFIG["alpha"]

    results = []
    for a, b in priors:
        post = estimate_posterior(
            [successes], [(0.0, 1.0, step)], BinomialModel(trials), [BetaPrior(a, b)],
            warn_truncation=False,
        )
        a_n, b_n = beta_binomial_params(successes, trials, a, b)
        ci_low, ci_high = post.credible_interval(alpha=alpha)
        results.append({
            'prior': f"Beta({a}, {b})",
            'grid_mean': post.mean(),
            'exact_mean': beta_binomial_mean(successes, trials, a, b),
            'grid_sd': post.sd(),
            'exact_sd': stats.beta.std(a_n, b_n),
            'grid_ci_low': ci_low,
            'exact_ci_low': stats.beta.ppf(alpha / 2, a_n, b_n),
            'grid_ci_high': ci_high,
            'exact_ci_high': stats.beta.ppf(1 - alpha / 2, a_n, b_n),
        })

    df = pd.DataFrame(results).set_index('prior')

    print(f"\n{successes} successes in {trials} trials, grid step {step}:")
    print(df.to_string())

    return df


# =============================================================================
# Table 2: Discretization Error
# =============================================================================

def generate_table_2_resolution(
    steps: list[float],
    successes: int = 5,
    trials: int = 10,
    a: float = 2.0,
    b: float = 2.0,
) -> pd.DataFrame:
    """Generate Table 2: mean error and total variation vs grid step."""
    print("\n" + "="*60)
    print("Table 2: Discretization Error vs Grid Step")
    print("="*60)

    data, _ = resolution_study(
        [successes], BinomialModel(trials), BetaPrior(a, b),
        bounds=(0.0, 1.0),
        steps=steps,
        exact_mean=beta_binomial_mean(successes, trials, a, b),
        exact_density=lambda p: beta_binomial_density(p, successes, trials, a, b),
    )

    df = pd.DataFrame({
        'step': data['steps'],
        'n_points': data['n_points'],
        'grid_mean': data['grid_mean'],
        'abs_mean_error': data['mean_error'],
        'tv_distance': data['tv_distance'],
    }).set_index('step')

    print(df.to_string())
    return df


# =============================================================================
# Table 3: Draw Count
# =============================================================================

def generate_table_3_draws(counts: list[int], seed: int = 42) -> pd.DataFrame:
    """Generate Table 3: summaries of posterior draws vs number of draws."""
    print("\n" + "="*60)
    print("Table 3: Draw-Based Summaries vs Draw Count")
    print("="*60)

    post = estimate_posterior([5], [(0.0, 1.0, 0.01)], BinomialModel(10), [BetaPrior(2, 2)])
    rng = np.random.default_rng(seed)

    results = []
    for count in tqdm(counts, desc="Drawing"):
        summary = summarize_draws(post.sample(count, rng, dimension=0), MC_CONFIG["alpha"])
        results.append({
            'n_draws': count,
            'draw_mean': summary.value,
            'mc_se': summary.se,
            'table_mean': post.mean(),
            'draw_ci_low': summary.ci_low,
            'draw_ci_high': summary.ci_high,
        })

    df = pd.DataFrame(results).set_index('n_draws')
    print(df.to_string())
    return df


# =============================================================================
# Table 4: Two-Parameter Normal Example
# =============================================================================

def generate_table_4_normal(step: float = 0.01, y: float = -2.69833) -> pd.DataFrame:
    """Generate Table 4: posterior summaries of (mu, sigma) from one observation."""
    print("\n" + "="*60)
    print("Table 4: Two-Parameter Normal Example")
    print("="*60)

    grids = [
        {"lower": -5.0, "upper": 5.0, "step": step, "name": "mu"},
        {"lower": step, "upper": 10.0, "step": step, "name": "sigma"},
    ]
    priors = [{"type": "normal", "mu": 0, "sigma": 1}] * 2
    post = estimate_posterior([y], grids, NormalModel(), priors)

    df = pd.DataFrame(post.summary(MC_CONFIG["alpha"])).T
    df.index.name = 'parameter'

    print(f"\ny = {y}, grid shape {post.shape}:")
    print(df.to_string())
    return df


def main():
    parser = argparse.ArgumentParser(description="Generate tutorial tables")
    parser.add_argument("--fast", action="store_true", help="Use coarser grids and fewer draws")
    args = parser.parse_args()

    output_dir = ensure_output_dir()

    steps = [0.1, 0.01] if args.fast else [0.2, 0.1, 0.05, 0.02, 0.01, 0.005, 0.001]
    counts = [10, 100, 1000] if args.fast else [10, 100, 1000, MC_CONFIG["n_draws"], 100_000]
    normal_step = 0.05 if args.fast else 0.01

    print("="*60)
    print("GENERATING TUTORIAL TABLES")
    print("="*60)

    try:
        df1 = generate_table_1_grid_vs_exact()
        save_table(df1, "table_1_grid_vs_exact", output_dir)

        df2 = generate_table_2_resolution(steps)
        save_table(df2, "table_2_resolution", output_dir, float_format="%.2e")

        df3 = generate_table_3_draws(counts, seed=MC_CONFIG["seed"])
        save_table(df3, "table_3_draws", output_dir)

        df4 = generate_table_4_normal(step=normal_step)
        save_table(df4, "table_4_normal_example", output_dir)
    except ValueError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print("\n" + "="*60)
    print("DONE - All tables generated")
    print(f"Output directory: {output_dir}")
    print("="*60)


if __name__ == "__main__":
    main()
