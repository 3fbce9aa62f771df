"""Tests for key-matrix addressing."""

import pytest

from keycase.errors import OutOfBoundsCoordinate
from keycase.layout.compass import Direction
from keycase.layout.matrix import ClusterMatrix, resolve_coordinate, walk


@pytest.fixture
def matrix():
    """An irregular cluster: columns of 3, 4 and 2 keys."""
    return ClusterMatrix("main", (3, 4, 2))


def test_first_equals_zero(matrix):
    assert resolve_coordinate(matrix, ("first", "first")) == resolve_coordinate(matrix, (0, 0))


def test_last_uses_the_columns_own_extent(matrix):
    assert resolve_coordinate(matrix, ("last", "last")) == (2, 1)
    assert resolve_coordinate(matrix, (1, "last")) == (1, 3)
    assert resolve_coordinate(matrix, (0, "last")) == (0, 2)


@pytest.mark.parametrize("raw", [(3, 0), (0, 3), (2, 2), (-1, 0), (0, -1), ("middle", 0)])
def test_out_of_bounds(matrix, raw):
    with pytest.raises(OutOfBoundsCoordinate) as excinfo:
        resolve_coordinate(matrix, raw)
    assert "main" in str(excinfo.value)


def test_bounds(matrix):
    assert matrix.bounds() == (3, (3, 4, 2))
    assert len(list(matrix.coordinates())) == 9


def test_matrix_needs_rows():
    with pytest.raises(ValueError):
        ClusterMatrix("empty", ())
    with pytest.raises(ValueError):
        ClusterMatrix("hollow", (2, 0))


@pytest.mark.parametrize("direction,expected", [
    (Direction.N, (1, 2)),
    (Direction.S, (1, 0)),
    (Direction.E, (2, 1)),
    (Direction.W, (0, 1)),
])
def test_walk_steps(direction, expected):
    assert walk((1, 1), direction) == expected


@pytest.mark.parametrize("direction", list(Direction))
def test_walk_there_and_back(matrix, direction):
    start = (1, 1)
    step = matrix.walk(start, direction)
    assert matrix.walk(step, direction.opposite) == start


def test_walk_off_the_matrix_is_an_error(matrix):
    assert walk((2, 1), Direction.N) == (2, 2)
    with pytest.raises(OutOfBoundsCoordinate):
        matrix.walk((2, 1), Direction.N)
    with pytest.raises(OutOfBoundsCoordinate):
        matrix.walk((0, 0), Direction.W)
