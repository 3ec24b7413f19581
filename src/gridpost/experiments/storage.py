"""
HDF5 Storage for Experiment Results

Provides save/load utilities for experiment results and fitted grid
posteriors in HDF5 format.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import h5py
import numpy as np

from ..grid import build_grid
from ..posterior import GridPosterior, grid_posterior


# Default output directory for experiment results
# Path: storage.py -> experiments/ -> gridpost/ -> src/ -> repo/ -> output/experiments/
RESULTS_DIR = Path(__file__).parent.parent.parent.parent / "output" / "experiments"


def _serialize_metadata(metadata: dict) -> str:
    """Serialize metadata dict to JSON string for HDF5 attribute storage."""
    def convert(obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, (np.integer, np.floating)):
            return obj.item()
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, dict):
            return {k: convert(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [convert(v) for v in obj]
        return obj

    return json.dumps(convert(metadata))


def _deserialize_metadata(json_str: str) -> dict:
    """Deserialize JSON string back to metadata dict."""
    return json.loads(json_str)


def _result_path(name: str, output_dir: Optional[Path]) -> Path:
    if output_dir is None:
        output_dir = RESULTS_DIR
    return Path(output_dir) / f"{name}.h5"


def save_result(
    name: str,
    data: dict[str, np.ndarray],
    metadata: dict[str, Any],
    output_dir: Optional[Path] = None
) -> Path:
    """Save experiment results to HDF5 file.

    Args:
        name: Result name (used as filename without extension)
        data: Dictionary of numpy arrays to store
        metadata: Dictionary of metadata (will be stored as JSON attribute)
        output_dir: Output directory (default: output/experiments/)

    Returns:
        Path to saved file
    """
    filepath = _result_path(name, output_dir)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    metadata = metadata.copy()
    metadata["_saved_at"] = datetime.now().isoformat()
    metadata["_name"] = name

    with h5py.File(filepath, "w") as f:
        for key, array in data.items():
            array = np.asarray(array)
            if array.ndim == 0:
                f.create_dataset(key, data=array)
            else:
                f.create_dataset(key, data=array, compression="gzip")

        f.attrs["metadata"] = _serialize_metadata(metadata)

    return filepath


def load_result(
    name: str,
    output_dir: Optional[Path] = None
) -> tuple[dict[str, np.ndarray], dict[str, Any]]:
    """Load experiment results from HDF5 file.

    Args:
        name: Result name (filename without extension)
        output_dir: Directory to look in (default: output/experiments/)

    Returns:
        Tuple of (data dict, metadata dict)

    Raises:
        FileNotFoundError: If result file doesn't exist
    """
    filepath = _result_path(name, output_dir)
    if not filepath.exists():
        raise FileNotFoundError(f"Result not found: {filepath}")

    data = {}
    with h5py.File(filepath, "r") as f:
        for key in f.keys():
            data[key] = f[key][()]
        metadata = _deserialize_metadata(f.attrs["metadata"])

    return data, metadata


def result_exists(name: str, output_dir: Optional[Path] = None) -> bool:
    """Check if a result file exists."""
    return _result_path(name, output_dir).exists()


def list_results(output_dir: Optional[Path] = None) -> list[str]:
    """List all stored result names (without .h5 extension)."""
    output_dir = Path(output_dir) if output_dir is not None else RESULTS_DIR
    if not output_dir.exists():
        return []
    return sorted(f.stem for f in output_dir.glob("*.h5"))


def delete_result(name: str, output_dir: Optional[Path] = None) -> bool:
    """Delete a result file.

    Returns:
        True if file was deleted, False if it didn't exist
    """
    filepath = _result_path(name, output_dir)
    if filepath.exists():
        filepath.unlink()
        return True
    return False


def get_results_size(output_dir: Optional[Path] = None) -> int:
    """Total size of stored results in bytes."""
    output_dir = Path(output_dir) if output_dir is not None else RESULTS_DIR
    if not output_dir.exists():
        return 0
    return sum(f.stat().st_size for f in output_dir.glob("*.h5"))


# ==============================================================================
# Grid Posteriors
# ==============================================================================

def save_posterior(
    name: str,
    posterior: GridPosterior,
    metadata: Optional[dict[str, Any]] = None,
    output_dir: Optional[Path] = None,
) -> Path:
    """Save a fitted grid posterior (tables plus grid definitions).

    Args:
        name: Result name
        posterior: Grid fit to store
        metadata: Extra metadata (model, priors, data description)
        output_dir: Output directory (default: output/experiments/)

    Returns:
        Path to saved file
    """
    metadata = dict(metadata or {})
    metadata["grids"] = [
        {"lower": g.lower, "upper": g.upper, "step": g.step, "name": g.name}
        for g in posterior.grids
    ]
    data = {
        "likelihood_table": posterior.likelihood_table,
        "prior_table": posterior.prior_table,
        "posterior_table": posterior.posterior_table,
    }
    return save_result(name, data, metadata, output_dir)


def load_posterior(
    name: str,
    output_dir: Optional[Path] = None,
) -> tuple[GridPosterior, dict[str, Any]]:
    """Load a grid posterior saved with ``save_posterior``.

    Returns:
        Tuple of (GridPosterior, metadata dict)
    """
    data, metadata = load_result(name, output_dir)
    grids = tuple(
        build_grid(g["lower"], g["upper"], g["step"], name=g["name"])
        for g in metadata["grids"]
    )
    posterior = grid_posterior(
        grids, data["likelihood_table"], data["prior_table"], warn_truncation=False
    )
    return posterior, metadata
