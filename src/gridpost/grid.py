"""
Grid construction for grid-approximated posteriors.

A grid is an ordered, evenly spaced set of candidate values for one unknown
parameter. Several grids span a parameter space whose cells are their
Cartesian product:

    |space| = |grid_1| x ... x |grid_k|

The space itself is never stored as explicit coordinates. Evaluators work on
an open mesh (one broadcastable axis per grid) and individual cells are
addressed through flat indices in C order.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidRangeError

# Relative slack used when counting grid points, so that an upper bound which
# is an exact multiple of the step is not lost to floating-point drift.
_STEP_EPS = 1e-9

GridSpec = Union["Grid", Tuple[float, float, float], Mapping[str, float]]


@dataclass(frozen=True)
class Grid:
    """
    Ordered candidate values for a single parameter.

    Attributes
    ----------
    lower : float
        First grid value
    upper : float
        Declared upper bound (the last value never exceeds it)
    step : float
        Spacing between consecutive values
    name : str, optional
        Parameter label used by plotting and summaries
    values : ndarray
        Read-only array of candidate values
    """
    lower: float
    upper: float
    step: float
    name: Optional[str] = None
    values: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _validate_range(self.lower, self.upper, self.step)
        n_points = int(np.floor((self.upper - self.lower) / self.step + _STEP_EPS)) + 1
        values = self.lower + self.step * np.arange(n_points, dtype=np.float64)
        # Guard the last point against rounding above the declared bound
        values[-1] = min(values[-1], self.upper)
        values.flags.writeable = False
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return self.values.size

    def __iter__(self):
        return iter(self.values)

    def __array__(self, dtype=None, copy=None):
        if dtype is not None:
            return self.values.astype(dtype)
        if copy:
            return self.values.copy()
        return self.values

    @property
    def label(self) -> str:
        """Name for display, falling back to the bounds."""
        if self.name:
            return self.name
        return f"[{self.lower:g}, {self.upper:g}]"


def _validate_range(lower: float, upper: float, step: float) -> None:
    """Raise InvalidRangeError unless lower < upper and step > 0."""
    if not (np.isfinite(lower) and np.isfinite(upper) and np.isfinite(step)):
        raise InvalidRangeError(
            f"Grid bounds and step must be finite, got lower={lower}, "
            f"upper={upper}, step={step}"
        )
    if lower >= upper:
        raise InvalidRangeError(
            f"Grid lower bound must be below upper bound, got lower={lower}, upper={upper}"
        )
    if step <= 0:
        raise InvalidRangeError(f"Grid step must be positive, got step={step}")


def build_grid(
    lower: float,
    upper: float,
    step: float,
    name: Optional[str] = None,
) -> Grid:
    """
    Build an evenly spaced grid lower, lower + step, ... <= upper.

    Parameters
    ----------
    lower : float
        First candidate value
    upper : float
        Inclusive upper bound
    step : float
        Spacing between candidate values
    name : str, optional
        Parameter label

    Returns
    -------
    grid : Grid
        Immutable grid

    Raises
    ------
    InvalidRangeError
        If lower >= upper, step <= 0, or any input is not finite.
    """
    return Grid(float(lower), float(upper), float(step), name=name)


def as_grid(spec: GridSpec) -> Grid:
    """Coerce a Grid, a (lower, upper, step) triple or a mapping into a Grid."""
    if isinstance(spec, Grid):
        return spec
    if isinstance(spec, Mapping):
        return build_grid(spec["lower"], spec["upper"], spec["step"], name=spec.get("name"))
    if len(spec) != 3:
        raise InvalidRangeError(
            f"Grid spec must be (lower, upper, step), got {len(spec)} values"
        )
    lower, upper, step = spec
    return build_grid(lower, upper, step)


def build_grids(specs: Sequence[GridSpec]) -> Tuple[Grid, ...]:
    """Build one grid per parameter, independently."""
    if isinstance(specs, (Grid, Mapping)) or (
        len(specs) == 3 and all(np.isscalar(s) for s in specs)
    ):
        specs = [specs]
    grids = tuple(as_grid(spec) for spec in specs)
    if not grids:
        raise InvalidRangeError("At least one parameter grid is required")
    return grids


def grid_shape(grids: Sequence[Grid]) -> Tuple[int, ...]:
    """Shape of the parameter space spanned by ``grids``."""
    return tuple(len(g) for g in grids)


def mesh(grids: Sequence[Grid]) -> Tuple[np.ndarray, ...]:
    """
    Open mesh over the parameter space.

    Each returned array has length-1 axes everywhere except its own, so
    arithmetic between them broadcasts to the full parameter-space shape
    without materializing every coordinate up front.
    """
    return np.ix_(*[g.values for g in grids])


def cell_coordinates(grids: Sequence[Grid], flat_index) -> np.ndarray:
    """
    Parameter values at one or more flat (C-order) cell indices.

    Parameters
    ----------
    grids : sequence of Grid
        Grids spanning the parameter space
    flat_index : int or array of int
        Flat cell index/indices

    Returns
    -------
    coords : ndarray
        Shape (k,) for a scalar index, (n, k) for an array of indices
    """
    shape = grid_shape(grids)
    size = int(np.prod(shape))
    flat_index = np.asarray(flat_index)
    if np.any((flat_index < 0) | (flat_index >= size)):
        raise IndexError(f"Cell index out of range for parameter space of size {size}")
    indices = np.unravel_index(flat_index, shape)
    coords = [g.values[idx] for g, idx in zip(grids, indices)]
    return np.stack(coords, axis=-1)
