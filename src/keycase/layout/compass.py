"""Compass directions and key corners."""

from __future__ import annotations

from enum import Enum

import numpy as np
from numpy.typing import NDArray

from ..errors import InvalidCorner


class Direction(Enum):
    """Cardinal directions in the keyboard frame.

    North is away from the typist (+y), east is to the right (+x).
    """
    N = "N"
    E = "E"
    S = "S"
    W = "W"

    @property
    def vector(self) -> NDArray[np.float64]:
        return np.array(DIRECTION_VECTORS[self], dtype=np.float64)

    @property
    def radians(self) -> float:
        """Rotation about z that turns local +y (north) to face this way."""
        return DIRECTION_RADIANS[self]

    @property
    def left(self) -> Direction:
        return _CLOCKWISE[(_CLOCKWISE.index(self) - 1) % 4]

    @property
    def right(self) -> Direction:
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 1) % 4]

    @property
    def opposite(self) -> Direction:
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 2) % 4]


_CLOCKWISE = (Direction.N, Direction.E, Direction.S, Direction.W)

DIRECTION_VECTORS: dict[Direction, tuple[float, float, float]] = {
    Direction.N: (0.0, 1.0, 0.0),
    Direction.E: (1.0, 0.0, 0.0),
    Direction.S: (0.0, -1.0, 0.0),
    Direction.W: (-1.0, 0.0, 0.0),
}

DIRECTION_RADIANS: dict[Direction, float] = {
    Direction.N: 0.0,
    Direction.E: -np.pi / 2,
    Direction.S: np.pi,
    Direction.W: np.pi / 2,
}

# Matrix steps as (column, row) deltas.
DIRECTION_STEPS: dict[Direction, tuple[int, int]] = {
    Direction.N: (0, 1),
    Direction.E: (1, 0),
    Direction.S: (0, -1),
    Direction.W: (-1, 0),
}


class Corner(Enum):
    """Named corners of a key.

    Each corner is read as "the wall faced, then the end of that wall":
    SSE is the east end of the south wall, ESE the south end of the east
    wall. Both sit at the same physical corner but face different ways.
    """
    NNE = "NNE"
    ENE = "ENE"
    ESE = "ESE"
    SSE = "SSE"
    SSW = "SSW"
    WSW = "WSW"
    WNW = "WNW"
    NNW = "NNW"

    @property
    def primary(self) -> Direction:
        return CORNER_DIRECTIONS[self][0]

    @property
    def secondary(self) -> Direction:
        return CORNER_DIRECTIONS[self][1]

    @property
    def vector(self) -> NDArray[np.float64]:
        """Unit vector from the key centre toward this corner."""
        return compass(self)[0]

    @property
    def offset(self) -> NDArray[np.float64]:
        """Offset from the centre of a unit square to this corner."""
        return (self.primary.vector + self.secondary.vector) / 2


CORNER_DIRECTIONS: dict[Corner, tuple[Direction, Direction]] = {
    Corner.NNE: (Direction.N, Direction.E),
    Corner.ENE: (Direction.E, Direction.N),
    Corner.ESE: (Direction.E, Direction.S),
    Corner.SSE: (Direction.S, Direction.E),
    Corner.SSW: (Direction.S, Direction.W),
    Corner.WSW: (Direction.W, Direction.S),
    Corner.WNW: (Direction.W, Direction.N),
    Corner.NNW: (Direction.N, Direction.W),
}

# Wall extent covering the entire profile rather than one segment.
FULL = "full"


def compass(heading: Direction | Corner) -> tuple[NDArray[np.float64], float]:
    """Resolve a direction or corner to a unit vector and an angle.

    Args:
        heading: A cardinal direction, or a corner (diagonal)

    Returns:
        ``(vector, angle)``. For a corner, the vector is the normalised sum
        of its two cardinal vectors and the angle lies halfway between their
        base angles.
    """
    if isinstance(heading, Direction):
        return heading.vector, heading.radians

    first, second = CORNER_DIRECTIONS[heading]
    vector = first.vector + second.vector
    vector /= np.linalg.norm(vector)
    a, b = first.radians, second.radians
    # Take the short way round between the two base angles.
    delta = (b - a + np.pi) % (2 * np.pi) - np.pi
    angle = a + delta / 2
    angle = (angle + np.pi) % (2 * np.pi) - np.pi
    return vector, float(angle)


def corner_from_directions(primary: Direction, secondary: Direction) -> Corner:
    """Find the corner at the ``secondary`` end of the ``primary`` wall."""
    for corner, pair in CORNER_DIRECTIONS.items():
        if pair == (primary, secondary):
            return corner
    raise InvalidCorner(
        f"Directions {primary.value} and {secondary.value} do not form a corner"
    )


def lateral_offset(direction: Direction, distance: float) -> NDArray[np.float64]:
    """A translation of ``distance`` perpendicular to ``direction``.

    Positive distances go clockwise of the direction (east of north, south of
    east). Useful for shimming a feature away from a wall without changing
    which way it faces.
    """
    return direction.right.vector * distance
