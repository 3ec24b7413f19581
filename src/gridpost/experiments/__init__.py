"""
Experiment Infrastructure for Grid Posteriors

Modules:
- data: Synthetic observations from seeded generators
- storage: HDF5 I/O for results and fitted posteriors
- convergence: Grid-resolution and draw-count studies
- runner: Orchestrates the stored tutorial experiments
"""

from .data import (
    simulate_binomial,
    simulate_normal,
    simulate_poisson,
    spawn_generators,
)

from .storage import (
    save_result,
    load_result,
    result_exists,
    list_results,
    delete_result,
    get_results_size,
    save_posterior,
    load_posterior,
    RESULTS_DIR,
)

from .convergence import (
    resolution_study,
    draw_count_study,
)

from .runner import (
    ExperimentRunner,
    DEFAULT_CONFIG,
    FAST_CONFIG,
    format_size,
    list_stored,
    clear_results,
)

__all__ = [
    # Data
    "simulate_binomial",
    "simulate_normal",
    "simulate_poisson",
    "spawn_generators",
    # Storage
    "save_result",
    "load_result",
    "result_exists",
    "list_results",
    "delete_result",
    "get_results_size",
    "save_posterior",
    "load_posterior",
    "RESULTS_DIR",
    # Studies
    "resolution_study",
    "draw_count_study",
    # Runner
    "ExperimentRunner",
    "DEFAULT_CONFIG",
    "FAST_CONFIG",
    "format_size",
    "list_stored",
    "clear_results",
]
