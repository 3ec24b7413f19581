#!/usr/bin/env python3
"""
Master script to run all experiments and generate all figures and tables.

Usage:
    python scripts/generate_all.py [--fast] [--category CATEGORY]

Categories:
    experiments - Stored HDF5 results (fits and convergence studies)
    figures     - Figures 1-5 (grid approximation examples)
    tables      - Tables 1-4 (CSV + LaTeX)
    all         - Everything (default)
"""

import sys
import argparse
import subprocess
from pathlib import Path

SCRIPTS_DIR = Path(__file__).parent

SCRIPTS = {
    'experiments': 'run_experiments.py',
    'figures': 'plot_grid_examples.py',
    'tables': 'generate_tables.py',
}

PRIORITY_ORDER = ['experiments', 'figures', 'tables']


def run_script(script_name: str, fast: bool = False):
    """Run one script in a subprocess."""
    script_path = SCRIPTS_DIR / script_name
    cmd = [sys.executable, str(script_path)]
    if fast:
        cmd.append('--fast')

    print(f"\n{'='*60}")
    print(f"Running: {script_name}")
    print('='*60)

    result = subprocess.run(cmd, cwd=SCRIPTS_DIR.parent)
    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run all experiments, figures and tables")
    parser.add_argument("--fast", action="store_true",
                        help="Use coarser grids and fewer draws")
    parser.add_argument("--category", type=str, default="all",
                        choices=['all'] + list(SCRIPTS.keys()),
                        help="Category to generate")
    args = parser.parse_args()

    print("="*60)
    print("GRID POSTERIOR - GENERATE ALL")
    print("="*60)

    if args.category == 'all':
        categories = PRIORITY_ORDER
    else:
        categories = [args.category]

    results = {}
    for category in categories:
        script = SCRIPTS[category]
        success = run_script(script, args.fast)
        results[category] = 'SUCCESS' if success else 'FAILED'

    print("\n" + "="*60)
    print("GENERATION SUMMARY")
    print("="*60)
    for category, status in results.items():
        status_symbol = "[OK]" if status == 'SUCCESS' else "[FAIL]"
        print(f"  {status_symbol} {category}: {SCRIPTS[category]}")

    output_root = SCRIPTS_DIR.parent / "output"

    experiments_dir = output_root / "experiments"
    if experiments_dir.exists():
        print(f"\nStored results: {len(list(experiments_dir.glob('*.h5')))}")

    figures_dir = output_root / "figures"
    if figures_dir.exists():
        print("\nGenerated figures:")
        for subdir in sorted(figures_dir.iterdir()):
            if subdir.is_dir():
                pngs = list(subdir.glob("*.png"))
                print(f"  {subdir.name}/: {len(pngs)} figures")

    tables_dir = output_root / "tables"
    if tables_dir.exists():
        csvs = list(tables_dir.glob("*.csv"))
        texs = list(tables_dir.glob("*.tex"))
        print(f"\nGenerated tables: {len(csvs)} CSV, {len(texs)} LaTeX")

    print("\n" + "="*60)
    print("DONE")
    print("="*60)

    if any(status == 'FAILED' for status in results.values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
