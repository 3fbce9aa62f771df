"""Key-matrix coordinate addressing for a single key cluster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from ..errors import OutOfBoundsCoordinate
from .compass import DIRECTION_STEPS, Direction

# An absolute index or one of the symbolic extremes.
FlexCoord = Union[int, str]
Coordinate = tuple[int, int]

FIRST = "first"
LAST = "last"
EXTREMES = (FIRST, LAST)


@dataclass(frozen=True)
class ClusterMatrix:
    """The shape of one key cluster's coordinate matrix.

    Clusters may be irregular: each column has its own number of rows.
    Valid coordinates are ``(column, row)`` with ``0 <= column < columns``
    and ``0 <= row < rows_per_column[column]``.
    """

    name: str
    rows_per_column: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.rows_per_column:
            raise ValueError(f"Cluster {self.name!r} has no columns")
        if any(rows < 1 for rows in self.rows_per_column):
            raise ValueError(f"Cluster {self.name!r} has a column without rows")

    @property
    def columns(self) -> int:
        return len(self.rows_per_column)

    def rows(self, column: int) -> int:
        return self.rows_per_column[column]

    def bounds(self) -> tuple[int, tuple[int, ...]]:
        """The extents of the matrix: column count and rows per column."""
        return self.columns, self.rows_per_column

    def contains(self, coordinate: Coordinate) -> bool:
        column, row = coordinate
        return 0 <= column < self.columns and 0 <= row < self.rows(column)

    def coordinates(self) -> Iterator[Coordinate]:
        """Iterate over every key position, column by column."""
        for column, rows in enumerate(self.rows_per_column):
            for row in range(rows):
                yield column, row

    def resolve(self, raw: tuple[FlexCoord, FlexCoord]) -> Coordinate:
        return resolve_coordinate(self, raw)

    def walk(self, coordinate: Coordinate, direction: Direction, steps: int = 1) -> Coordinate:
        """Step through the matrix, refusing to leave it.

        Raises:
            OutOfBoundsCoordinate: If the destination is not a key position.
        """
        destination = walk(coordinate, direction, steps)
        if not self.contains(destination):
            raise OutOfBoundsCoordinate(
                self.name, destination,
                f"walking {direction.value} from {coordinate} leaves the matrix",
            )
        return destination


def _resolve_index(cluster: str, raw: FlexCoord, extent: int, axis: str, whole: object) -> int:
    if raw == FIRST:
        return 0
    if raw == LAST:
        return extent - 1
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise OutOfBoundsCoordinate(cluster, whole, f"{axis} {raw!r} is not an index")
    if not 0 <= raw < extent:
        raise OutOfBoundsCoordinate(cluster, whole, f"{axis} {raw} not in [0, {extent})")
    return raw


def resolve_coordinate(matrix: ClusterMatrix, raw: tuple[FlexCoord, FlexCoord]) -> Coordinate:
    """Expand symbolic extremes and check bounds.

    The column is resolved first, then the row against that column's own
    extent, so ``"last"`` means the last row of the chosen column.

    Args:
        matrix: The cluster to address
        raw: ``(column, row)``, each an integer or ``"first"``/``"last"``

    Returns:
        Concrete ``(column, row)``

    Raises:
        OutOfBoundsCoordinate: If an absolute index lies outside the cluster.
    """
    raw_column, raw_row = raw
    column = _resolve_index(matrix.name, raw_column, matrix.columns, "column", raw)
    row = _resolve_index(matrix.name, raw_row, matrix.rows(column), "row", raw)
    return column, row


def walk(coordinate: Coordinate, direction: Direction, steps: int = 1) -> Coordinate:
    """Step ``steps`` keys from ``coordinate`` in a cardinal direction.

    North increases the row, east increases the column. No bounds checking;
    see ``ClusterMatrix.walk`` for that.
    """
    dc, dr = DIRECTION_STEPS[direction]
    column, row = coordinate
    return column + dc * steps, row + dr * steps
