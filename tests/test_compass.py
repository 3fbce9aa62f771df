"""Tests for directions, corners and the compass."""

import numpy as np
import pytest

from keycase.errors import InvalidCorner
from keycase.layout.compass import (
    Corner,
    Direction,
    compass,
    corner_from_directions,
    lateral_offset,
)


@pytest.mark.parametrize("a,b", [(Direction.N, Direction.S), (Direction.E, Direction.W)])
def test_opposite_directions_are_antiparallel(a, b):
    va, _ = compass(a)
    vb, _ = compass(b)
    assert np.linalg.norm(va) == pytest.approx(1.0)
    assert np.linalg.norm(vb) == pytest.approx(1.0)
    np.testing.assert_allclose(va, -vb)


@pytest.mark.parametrize("direction,angle", [
    (Direction.N, 0.0),
    (Direction.E, -np.pi / 2),
    (Direction.S, np.pi),
    (Direction.W, np.pi / 2),
])
def test_base_angles(direction, angle):
    assert compass(direction)[1] == pytest.approx(angle)


@pytest.mark.parametrize("direction", list(Direction))
def test_base_angle_turns_north_onto_direction(direction):
    """Rotating +y by a direction's angle gives that direction's vector."""
    angle = direction.radians
    turned = np.array([-np.sin(angle), np.cos(angle), 0.0])
    np.testing.assert_allclose(turned, direction.vector, atol=1e-12)


@pytest.mark.parametrize("corner", list(Corner))
def test_corner_vector_is_normalised_sum(corner):
    vector, _ = compass(corner)
    expected = corner.primary.vector + corner.secondary.vector
    np.testing.assert_allclose(vector, expected / np.linalg.norm(expected))


@pytest.mark.parametrize("corner,angle", [
    (Corner.NNE, -np.pi / 4),
    (Corner.ENE, -np.pi / 4),
    (Corner.NNW, np.pi / 4),
    (Corner.WSW, 3 * np.pi / 4),
    (Corner.SSE, -3 * np.pi / 4),
])
def test_corner_angle_is_halfway(corner, angle):
    assert compass(corner)[1] == pytest.approx(angle)


def test_left_and_right_turns():
    assert Direction.N.left is Direction.W
    assert Direction.N.right is Direction.E
    assert Direction.W.right is Direction.N
    assert Direction.E.opposite is Direction.W
    for direction in Direction:
        assert direction.left.right is direction


def test_corner_from_directions():
    assert corner_from_directions(Direction.S, Direction.E) is Corner.SSE
    assert corner_from_directions(Direction.E, Direction.S) is Corner.ESE
    with pytest.raises(InvalidCorner):
        corner_from_directions(Direction.N, Direction.S)


def test_lateral_offset_is_perpendicular():
    for direction in Direction:
        shim = lateral_offset(direction, 3.0)
        assert np.dot(shim, direction.vector) == pytest.approx(0.0)
        assert np.linalg.norm(shim) == pytest.approx(3.0)
        assert shim[2] == 0.0
    np.testing.assert_allclose(lateral_offset(Direction.N, 2.0), [2.0, 0.0, 0.0])
