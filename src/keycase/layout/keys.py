"""Default per-key placement and wall profile.

The placement resolver only depends on the two protocols defined here.
The implementations are deliberately simple (flat, staggered, splayed
clusters); curved layouts can be plugged in by implementing ``KeyLayout``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from ..core.transform import Transform
from .compass import Direction
from .matrix import Coordinate

if TYPE_CHECKING:
    from ..config.types import ClusterConfig, KeyboardConfig, WallConfig


@runtime_checkable
class KeyLayout(Protocol):
    """Nominal placement of every key: curvature, stagger, splay."""

    pitch: float

    def key_transform(self, cluster: str, coordinate: Coordinate) -> Transform:
        """Transform of the centre of a key's top face."""
        ...


@runtime_checkable
class WallProfile(Protocol):
    """Offsets of the wall segments below a key edge."""

    def segment_offset(
        self, cluster: str, coordinate: Coordinate, direction: Direction, segment: int
    ) -> NDArray[np.float64]:
        """Offset of ``segment`` in the frame facing ``direction``.

        The returned vector is ``[lateral, outward, vertical]``.
        """
        ...


@dataclass
class StaggeredLayout:
    """Flat clusters with per-column stagger and a splay angle.

    Key ``(column, row)`` of a cluster sits at
    ``position + Rz(rotation) @ [column * pitch, row * pitch + stagger, 0]``.
    """

    clusters: Mapping[str, ClusterConfig]
    pitch: float = 19.05

    @classmethod
    def from_config(cls, config: KeyboardConfig) -> StaggeredLayout:
        return cls(clusters=config.key_clusters, pitch=config.keys.pitch)

    def key_transform(self, cluster: str, coordinate: Coordinate) -> Transform:
        settings = self.clusters[cluster]
        column, row = coordinate
        stagger = settings.matrix_columns[column].stagger
        origin = Transform.about_z(np.deg2rad(settings.rotation), settings.position)
        return origin.moved([column * self.pitch, row * self.pitch + stagger, 0.0])


# Weights of [bevel, parallel, thickness] in the outward offset and of
# [bevel, perpendicular, thickness] in the vertical offset, by segment.
SEGMENT_MULTIPLIERS: dict[int, tuple[tuple[float, float, float], tuple[float, float, float]]] = {
    0: ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    1: ((1.0, 0.0, 0.0), (-1.0, 0.0, 0.0)),
    2: ((1.0, 1.0, 0.0), (-1.0, 1.0, 0.0)),
    3: ((1.0, 1.0, 1.0), (-1.0, 1.0, 0.0)),
    # Segment 4 is segment 3 projected onto the ground by the resolver.
    4: ((1.0, 1.0, 1.0), (-1.0, 1.0, 0.0)),
}


@dataclass
class TaperedWallProfile:
    """A wall that bevels out from the key face and tapers to the floor."""

    thickness: float = 1.0
    bevel: float = 1.0
    parallel: float = 0.0
    perpendicular: float = -4.0

    @classmethod
    def from_config(cls, walls: WallConfig) -> TaperedWallProfile:
        return cls(
            thickness=walls.thickness,
            bevel=walls.bevel,
            parallel=walls.parallel,
            perpendicular=walls.perpendicular,
        )

    def segment_offset(
        self, cluster: str, coordinate: Coordinate, direction: Direction, segment: int
    ) -> NDArray[np.float64]:
        outward_weights, vertical_weights = SEGMENT_MULTIPLIERS[segment]
        outward = np.dot(outward_weights, [self.bevel, self.parallel, self.thickness])
        vertical = np.dot(vertical_weights, [self.bevel, self.perpendicular, self.thickness])
        return np.array([0.0, outward, vertical], dtype=np.float64)
