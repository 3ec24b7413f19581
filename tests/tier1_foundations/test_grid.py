"""
Tests for grid construction.

A grid built from (lower, upper, step) is
    lower, lower + step, ..., <= upper
and several grids span a parameter space addressed by flat C-order indices.
"""

import dataclasses

import pytest
import numpy as np

from gridpost.errors import InvalidRangeError
from gridpost.grid import (
    Grid,
    as_grid,
    build_grid,
    build_grids,
    cell_coordinates,
    grid_shape,
    mesh,
)


@pytest.mark.tier1
class TestBuildGrid:
    """Tests for a single parameter grid."""

    def test_simple_grid_values(self):
        """Grid [0, 1] with step 0.25 has five points including both ends."""
        grid = build_grid(0, 1, 0.25)
        np.testing.assert_allclose(grid.values, [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_upper_bound_not_exceeded(self):
        """A step that does not divide the range stops below the upper bound."""
        grid = build_grid(0, 1, 0.3)
        np.testing.assert_allclose(grid.values, [0.0, 0.3, 0.6, 0.9])

    @pytest.mark.parametrize("lower,upper,step", [
        (0.0, 1.0, 0.01),
        (-5.0, 5.0, 0.01),
        (0.01, 10.0, 0.01),
        (-1.0, 2.5, 0.7),
        (1e-3, 1e-2, 1e-3),
    ])
    def test_grid_contract(self, lower, upper, step):
        """Starts at lower, increases by step, never exceeds upper, covers the range."""
        grid = build_grid(lower, upper, step)
        values = grid.values

        assert values[0] == lower
        assert np.all(np.diff(values) > 0)
        np.testing.assert_allclose(np.diff(values), step, rtol=1e-6)
        assert np.all(values <= upper)
        assert values[-1] + step > upper - 1e-9

    def test_exact_multiple_keeps_upper_bound(self):
        """An upper bound that is a multiple of the step is the last point."""
        grid = build_grid(-5, 5, 0.01)
        assert len(grid) == 1001
        assert grid.values[-1] == 5.0

    def test_step_larger_than_range(self):
        """A step wider than the range leaves only the lower bound."""
        grid = build_grid(0, 1, 5)
        np.testing.assert_array_equal(grid.values, [0.0])

    @pytest.mark.parametrize("lower,upper,step", [
        (1.0, 1.0, 0.1),
        (2.0, 1.0, 0.1),
        (0.0, 1.0, 0.0),
        (0.0, 1.0, -0.1),
        (np.nan, 1.0, 0.1),
        (0.0, np.inf, 0.1),
    ])
    def test_invalid_range(self, lower, upper, step):
        """Malformed bounds or steps raise InvalidRangeError."""
        with pytest.raises(InvalidRangeError):
            build_grid(lower, upper, step)

    def test_invalid_range_is_value_error(self):
        """Callers catching ValueError also catch grid errors."""
        with pytest.raises(ValueError):
            build_grid(1, 0, 0.1)

    def test_grid_is_immutable(self):
        """Neither the fields nor the values can be modified."""
        grid = build_grid(0, 1, 0.5)
        with pytest.raises(ValueError):
            grid.values[0] = 3.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            grid.step = 0.1

    def test_array_protocol(self):
        """A grid behaves like its values array."""
        grid = build_grid(0, 1, 0.5, name="p")
        assert len(grid) == 3
        assert list(grid) == [0.0, 0.5, 1.0]
        np.testing.assert_array_equal(np.asarray(grid), grid.values)

    def test_array_copy(self):
        """Copies requested through the array protocol are writable."""
        grid = build_grid(0, 1, 0.5)
        arr = np.array(grid)
        assert not np.shares_memory(arr, grid.values)
        arr[0] = 5.0
        assert grid.values[0] == 0.0
        assert np.asarray(grid, dtype=np.float32).dtype == np.float32

    def test_label(self):
        """Label falls back to the bounds when unnamed."""
        assert build_grid(0, 1, 0.5, name="p").label == "p"
        assert build_grid(0, 1, 0.5).label == "[0, 1]"

    def test_equality_ignores_values_array(self):
        """Grids with the same definition compare equal."""
        assert build_grid(0, 1, 0.1) == build_grid(0.0, 1.0, 0.1)
        assert build_grid(0, 1, 0.1) != build_grid(0, 1, 0.2)


@pytest.mark.tier1
class TestBuildGrids:
    """Tests for building one grid per parameter."""

    def test_from_triples(self):
        grids = build_grids([(0, 1, 0.5), (10, 20, 5)])
        assert len(grids) == 2
        assert all(isinstance(g, Grid) for g in grids)
        assert grid_shape(grids) == (3, 3)

    def test_single_triple_is_one_grid(self):
        grids = build_grids((0, 1, 0.5))
        assert len(grids) == 1
        assert len(grids[0]) == 3

    def test_from_mapping(self):
        grid = as_grid({"lower": 0, "upper": 2, "step": 1, "name": "mu"})
        assert grid.name == "mu"
        np.testing.assert_array_equal(grid.values, [0.0, 1.0, 2.0])

    def test_grid_passes_through(self):
        grid = build_grid(0, 1, 0.5)
        assert as_grid(grid) is grid

    def test_malformed_triple(self):
        with pytest.raises(InvalidRangeError):
            build_grids([(0, 1)])

    def test_no_grids(self):
        with pytest.raises(InvalidRangeError):
            build_grids([])

    def test_each_grid_validated(self):
        """One bad grid among several is reported."""
        with pytest.raises(InvalidRangeError):
            build_grids([(0, 1, 0.1), (5, 1, 0.1)])


@pytest.mark.tier1
class TestParameterSpace:
    """Tests for the open mesh and flat-index coordinate mapping."""

    def test_mesh_is_open(self):
        """Each mesh array is broadcastable, not a full coordinate grid."""
        grids = build_grids([(0, 2, 1), (0, 3, 1)])
        a, b = mesh(grids)
        assert a.shape == (3, 1)
        assert b.shape == (1, 4)
        assert (a + b).shape == (3, 4)

    def test_cell_coordinates_scalar(self):
        """Flat index 3 of a (3, 2) space is cell (1, 1)."""
        grids = build_grids([(0, 2, 1), (10, 20, 10)])
        np.testing.assert_array_equal(cell_coordinates(grids, 3), [1.0, 20.0])

    def test_cell_coordinates_array(self):
        grids = build_grids([(0, 2, 1), (10, 20, 10)])
        coords = cell_coordinates(grids, [0, 5])
        np.testing.assert_array_equal(coords, [[0.0, 10.0], [2.0, 20.0]])

    def test_cell_coordinates_match_c_order(self):
        """Flat indices follow the C-order ravel of the table."""
        grids = build_grids([(0, 3, 1), (0, 4, 1), (0, 1, 1)])
        a, b, c = mesh(grids)
        table = 100 * a + 10 * b + c
        for flat in [0, 7, 19, 39]:
            x, y, z = cell_coordinates(grids, flat)
            assert table.ravel()[flat] == 100 * x + 10 * y + z

    def test_cell_index_out_of_range(self):
        grids = build_grids([(0, 2, 1), (10, 20, 10)])
        with pytest.raises(IndexError):
            cell_coordinates(grids, 6)
        with pytest.raises(IndexError):
            cell_coordinates(grids, -1)
