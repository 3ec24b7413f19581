"""
Exceptions and warnings raised by the grid estimator.

All errors subclass ValueError so callers that already guard numerical
input with ``except ValueError`` keep working.
"""


class GridPosteriorError(ValueError):
    """Base class for grid-approximation failures."""


class InvalidRangeError(GridPosteriorError):
    """Grid bounds or step size do not describe a valid grid."""


class DegenerateEvidenceError(GridPosteriorError):
    """Total likelihood x prior mass is zero or not finite."""


class ShapeMismatchError(GridPosteriorError):
    """Tables, grids or weights are built over incompatible shapes."""


class GridTruncationWarning(UserWarning):
    """Posterior mass piles up on the edge of a grid."""
