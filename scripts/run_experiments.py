#!/usr/bin/env python3
"""
Master Experiment Runner

Fits the tutorial posteriors and runs the convergence studies, storing every
result as an HDF5 file under output/experiments/.

Usage:
    # Run everything (existing results are skipped)
    python scripts/run_experiments.py

    # Only the beta-binomial or only the normal-model experiments
    python scripts/run_experiments.py --experiment binomial
    python scripts/run_experiments.py --experiment normal

    # Quick test mode (coarser grids, fewer replicates)
    python scripts/run_experiments.py --fast

    # Force regeneration
    python scripts/run_experiments.py --force

    # List stored results
    python scripts/run_experiments.py --list

    # Delete stored results
    python scripts/run_experiments.py --clear
"""

import sys
import argparse
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gridpost.experiments.runner import (
    ExperimentRunner,
    clear_results,
    format_size,
    list_stored,
)
from gridpost.experiments.storage import RESULTS_DIR, list_results


def main():
    parser = argparse.ArgumentParser(
        description="Run grid-approximation experiments and store the results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--experiment",
        choices=["binomial", "normal", "all"],
        default="all",
        help="Experiment group to run (default: all)"
    )

    # Configuration
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Use coarser grids and fewer replicates for quick testing"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force regeneration even if results exist"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help=f"Results directory (default: {RESULTS_DIR})"
    )

    # Result management
    parser.add_argument(
        "--list",
        action="store_true",
        help="List stored results and exit"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete stored results and exit"
    )

    args = parser.parse_args()

    if args.list:
        list_stored(args.output_dir)
        return

    if args.clear:
        clear_results(output_dir=args.output_dir)
        return

    print("=" * 60)
    print("GRID POSTERIOR - EXPERIMENT GENERATOR")
    print("=" * 60)
    config_str = "FAST (coarse grids)" if args.fast else "PRODUCTION"
    print(f"\nConfiguration: {config_str}")
    print(f"Output directory: {args.output_dir or RESULTS_DIR}")
    print(f"Force regeneration: {args.force}")

    runner = ExperimentRunner(fast=args.fast, output_dir=args.output_dir)

    try:
        paths = runner.run_all(experiment=args.experiment, force=args.force, verbose=True)

        print("\n" + "=" * 60)
        print("COMPLETE")
        print("=" * 60)
        for name, path in paths.items():
            size = path.stat().st_size if path.exists() else 0
            print(f"  - {name}.h5 ({format_size(size)})")
        print(f"\nStored results: {len(list_results(args.output_dir))}")

    except Exception as e:
        print(f"\nError: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
