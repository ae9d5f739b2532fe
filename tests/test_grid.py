"""Tests for tick_society.grid - bounds, distance and nearest-entity scans."""

import pytest
from tick_society import Grid, Position


class TestBounds:
    def test_valid_positions(self):
        grid = Grid(10, 5)
        assert grid.is_valid_position(Position(0, 0))
        assert grid.is_valid_position(Position(9, 4))

    def test_out_of_bounds(self):
        grid = Grid(10, 5)
        assert not grid.is_valid_position(Position(10, 0))
        assert not grid.is_valid_position(Position(0, 5))
        assert not grid.is_valid_position(Position(-1, 2))

    def test_interior_excludes_ring(self):
        grid = Grid(10, 5)
        assert grid.is_interior(Position(1, 1))
        assert not grid.is_interior(Position(0, 2))
        assert not grid.is_interior(Position(9, 2))
        assert not grid.is_interior(Position(4, 4))

    def test_clamp_interior(self):
        grid = Grid(10, 5)
        assert grid.clamp_interior(Position(-3, 20)) == Position(1, 3)
        assert grid.clamp_interior(Position(4, 2)) == Position(4, 2)

    def test_non_positive_dimensions_raise(self):
        with pytest.raises(ValueError):
            Grid(0, 5)
        with pytest.raises(ValueError):
            Grid(5, -1)


class TestDistance:
    def test_euclidean(self):
        assert Grid.distance(Position(0, 0), Position(3, 4)) == 5.0

    def test_symmetric(self):
        a, b = Position(2, 7), Position(5, 1)
        assert Grid.distance(a, b) == Grid.distance(b, a)


class TestNeighbors:
    def test_fixed_order(self):
        grid = Grid(10, 10)
        assert grid.neighbors(Position(5, 5)) == [
            Position(4, 4), Position(5, 4), Position(6, 4),
            Position(4, 5), Position(6, 5),
            Position(4, 6), Position(5, 6), Position(6, 6),
        ]

    def test_corner_drops_out_of_bounds(self):
        grid = Grid(10, 10)
        assert grid.neighbors(Position(0, 0)) == [Position(1, 0), Position(0, 1), Position(1, 1)]


class TestNearest:
    def test_picks_closest(self):
        points = [Position(9, 9), Position(2, 2), Position(5, 5)]
        assert Grid.nearest(Position(0, 0), points, key=lambda p: p) == Position(2, 2)

    def test_ties_keep_first(self):
        points = [Position(1, 0), Position(0, 1)]
        assert Grid.nearest(Position(0, 0), points, key=lambda p: p) == Position(1, 0)

    def test_empty_returns_none(self):
        assert Grid.nearest(Position(0, 0), [], key=lambda p: p) is None
