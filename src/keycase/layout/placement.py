"""Placement resolution: anchors, corners and wall segments to transforms."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.transform import Transform
from ..errors import (
    RESOLUTION_ERRORS,
    CyclicAnchor,
    InvalidCorner,
    InvalidSegment,
    UnknownCluster,
)
from .anchors import REAR_HOUSING, AnchorRegistry, BuiltinAnchor, KeyAnchor, SecondaryAnchor
from .compass import FULL, Corner, lateral_offset
from .keys import KeyLayout, StaggeredLayout, TaperedWallProfile, WallProfile
from .matrix import ClusterMatrix, Coordinate, resolve_coordinate

if TYPE_CHECKING:
    from ..config.types import KeyboardConfig, NookPosition

__all__ = ["GROUND_SEGMENT", "PlacementResolver", "check_segment", "lateral_offset"]

logger = logging.getLogger(__name__)

GROUND_SEGMENT = 4


def check_segment(segment: object) -> int:
    """Validate a single wall segment. ``None`` means segment 0.

    Raises:
        InvalidSegment: For values outside [0, 4] and for the full-wall
            wildcard, which names a span rather than a point.
    """
    if segment is None:
        return 0
    if segment == FULL:
        raise InvalidSegment("A full wall extent was given where a single segment is required")
    if isinstance(segment, bool) or not isinstance(segment, (int, np.integer)):
        raise InvalidSegment(f"Wall segment must be an integer, got {segment!r}")
    if not 0 <= segment <= GROUND_SEGMENT:
        raise InvalidSegment(f"Wall segment {segment} not in [0, {GROUND_SEGMENT}]")
    return int(segment)


class PlacementResolver:
    """Computes global transforms for anchors on demand.

    Resolution is a pure function of the immutable registry and
    collaborators, so results are memoised by ``(anchor, corner, segment)``.
    An explicit in-progress stack turns cycles among secondary anchors into
    ``CyclicAnchor`` instead of unbounded recursion. One resolver is one
    session; call ``reset()`` or build a new one to start over.
    """

    def __init__(
        self,
        registry: AnchorRegistry,
        matrices: Mapping[str, ClusterMatrix],
        layout: KeyLayout,
        wall_profile: WallProfile,
        rear_housing_included: bool = False,
    ) -> None:
        self.registry = registry
        self.matrices = dict(matrices)
        self.layout = layout
        self.wall_profile = wall_profile
        self.rear_housing_included = rear_housing_included
        self._cache: dict[tuple[str, Corner | None, int], Transform] = {}
        self._in_progress: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: KeyboardConfig,
        layout: KeyLayout | None = None,
        wall_profile: WallProfile | None = None,
    ) -> PlacementResolver:
        """Build a resolver with the default collaborators where none are given."""
        return cls(
            registry=AnchorRegistry.from_config(config),
            matrices=config.cluster_matrices(),
            layout=layout or StaggeredLayout.from_config(config),
            wall_profile=wall_profile or TaperedWallProfile.from_config(config.walls),
            rear_housing_included=config.case.rear_housing.include,
        )

    def reset(self) -> None:
        """Discard memoised transforms."""
        self._cache.clear()
        self._in_progress.clear()

    def matrix_bounds(self, cluster: str) -> tuple[int, tuple[int, ...]]:
        return self.matrix(cluster).bounds()

    def matrix(self, cluster: str) -> ClusterMatrix:
        try:
            return self.matrices[cluster]
        except KeyError:
            raise UnknownCluster(cluster) from None

    def resolve(
        self,
        anchor: str,
        corner: Corner | None = None,
        segment: int | None = None,
        offset: Sequence[float] | NDArray[np.float64] | None = None,
    ) -> Transform:
        """Resolve an anchor to a global transform.

        Args:
            anchor: Name of a key alias, built-in or secondary anchor
            corner: Corner of the anchor to move to and face
            segment: Wall segment below that corner, 0 (face) to 4 (ground)
            offset: Final 2D or 3D offset in the local frame of the result:
                x lateral, y toward the direction faced, z vertical

        Raises:
            UnknownAnchor, CyclicAnchor, InvalidCorner, InvalidSegment,
            OutOfBoundsCoordinate
        """
        base = self._resolve_anchor(anchor, corner, check_segment(segment))
        return base.moved(offset)

    def point(
        self,
        anchor: str,
        corner: Corner | None = None,
        segment: int | None = None,
        offset: Sequence[float] | NDArray[np.float64] | None = None,
    ) -> NDArray[np.float64]:
        """Like ``resolve``, but only the position."""
        return self.resolve(anchor, corner, segment, offset).position

    def into_nook(self, position: NookPosition) -> Transform:
        """Resolve a non-key feature's position against a wall.

        The rear housing replaces the configured anchor when the feature
        prefers it and the housing is part of the case.
        """
        anchor = position.anchor
        if position.prefer_rear_housing and self.rear_housing_included:
            anchor = REAR_HOUSING
        return self.resolve(anchor, position.corner, position.segment, position.offset)

    def key_place(
        self,
        cluster: str,
        coordinate: Coordinate,
        corner: Corner | None = None,
        segment: int = 0,
    ) -> Transform:
        """Place a key, or a point on its wall, by concrete coordinate.

        A corner moves half a key pitch toward that corner and turns to face
        its primary direction. Segments beyond 0 then follow the wall profile
        outward and down; segment 4 lands on the ground.
        """
        nominal = self.layout.key_transform(cluster, coordinate)
        if corner is None:
            if segment:
                raise InvalidSegment("A wall segment requires a corner")
            return nominal
        facing = nominal.moved(corner.offset * self.layout.pitch).turned(corner.primary.radians)
        if not segment:
            return facing
        placed = facing.moved(
            self.wall_profile.segment_offset(cluster, coordinate, corner.primary, segment)
        )
        if segment == GROUND_SEGMENT:
            placed = placed.grounded()
        return placed

    def _resolve_anchor(self, name: str, corner: Corner | None, segment: int) -> Transform:
        key = (name, corner, segment)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if name in self._in_progress:
            cycle = self._in_progress[self._in_progress.index(name):]
            raise CyclicAnchor(name, cycle)

        descriptor = self.registry.lookup(name)
        self._in_progress.append(name)
        try:
            if isinstance(descriptor, KeyAnchor):
                coordinate = resolve_coordinate(
                    self.matrix(descriptor.cluster), descriptor.coordinate
                )
                transform = self.key_place(descriptor.cluster, coordinate, corner, segment)
            elif isinstance(descriptor, SecondaryAnchor):
                transform = self._resolve_secondary(descriptor, corner, segment)
            elif isinstance(descriptor, BuiltinAnchor):
                transform = descriptor.recipe(corner, segment)
            else:
                raise TypeError(f"Unsupported anchor descriptor: {descriptor!r}")
        except RESOLUTION_ERRORS as exc:
            exc.via(name)
            raise
        finally:
            self._in_progress.pop()

        logger.debug("Resolved %s corner=%s segment=%s", name, corner, segment)
        self._cache[key] = transform
        return transform

    def _resolve_secondary(
        self, descriptor: SecondaryAnchor, corner: Corner | None, segment: int
    ) -> Transform:
        if corner is not None:
            raise InvalidCorner(f"Secondary anchor {descriptor.name!r} has no corners")
        if segment:
            raise InvalidSegment(f"Secondary anchor {descriptor.name!r} has no wall segments")
        parent = self._resolve_anchor(
            descriptor.anchor, descriptor.corner, check_segment(descriptor.segment)
        )
        return parent.moved(descriptor.offset)
