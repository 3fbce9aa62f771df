"""Tweaks: extra case geometry as convex hulls between anchored points.

A tweak is a tree. Leaves name points on walls; groups hull their children
together, optionally in overlapping windows (chunks) so that a long chain of
far-apart features does not collapse into one self-intersecting hull.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Union

import numpy as np
from numpy.typing import NDArray

from ..errors import InvalidSegment, UnknownTweak
from .compass import Corner

if TYPE_CHECKING:
    from .placement import PlacementResolver

GROUND = 4


@dataclass(frozen=True)
class TweakLeaf:
    """A range of wall segments below one corner of an anchor.

    Attributes:
        anchor: Anchor name
        corner: Corner of the anchor; without one, the anchor's own point
        segment_start: First wall segment
        segment_end: Last wall segment (inclusive)
        explicit_segments: False when the segments were left to default,
            in which case the enclosing group decides the levels
    """

    anchor: str
    corner: Corner | None = None
    segment_start: int = 0
    segment_end: int = 0
    explicit_segments: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.segment_start <= GROUND or not 0 <= self.segment_end <= GROUND:
            raise InvalidSegment(
                f"Segments {self.segment_start}..{self.segment_end} not in [0, {GROUND}]"
            )
        if self.segment_start > self.segment_end:
            raise InvalidSegment(
                f"Segment range {self.segment_start}..{self.segment_end} is reversed"
            )


@dataclass(frozen=True)
class TweakGroup:
    """Children to be hulled together.

    Attributes:
        children: Leaves and nested groups, in order
        chunk_size: Hull windows of this many consecutive children
        at_ground: Include the ground segment for children without segments
        above_ground: Include segment 0 for children without segments
        highlight: Debugging flag, carried through untouched
    """

    children: tuple[TweakNode, ...]
    chunk_size: int | None = None
    at_ground: bool = False
    above_ground: bool = True
    highlight: bool = False

    def __post_init__(self) -> None:
        if not self.children:
            raise ValueError("A tweak group needs at least one child")
        if self.chunk_size is not None and self.chunk_size < 2:
            raise ValueError(f"Chunk size must be at least 2, got {self.chunk_size}")

    def implicit_segments(self) -> tuple[int, ...]:
        levels = ((0,) if self.above_ground else ()) + ((GROUND,) if self.at_ground else ())
        return levels or (0,)


TweakNode = Union[TweakLeaf, TweakGroup]


def hull_windows(count: int, chunk_size: int | None) -> tuple[tuple[int, ...], ...]:
    """Indices of the children to hull together.

    Everything in one window unless ``chunk_size`` is smaller than the number
    of children; then one window per run of ``chunk_size`` consecutive
    children, each overlapping the next by all but one child.
    """
    if count == 0:
        return ()
    if chunk_size is None or chunk_size >= count:
        return (tuple(range(count)),)
    return tuple(tuple(range(i, i + chunk_size)) for i in range(count - chunk_size + 1))


@dataclass(frozen=True, eq=False)
class ResolvedGroup:
    """Ordered point lists of a group's children plus hull windows."""

    point_lists: tuple[NDArray[np.float64], ...]
    windows: tuple[tuple[int, ...], ...]
    highlight: bool = False

    def hull_requests(self) -> list[NDArray[np.float64]]:
        """One stacked ``(n, 3)`` point array per hull."""
        return [np.vstack([self.point_lists[i] for i in window]) for window in self.windows]


@dataclass(frozen=True, eq=False)
class ResolvedTweak:
    """A named tweak: groups whose hulls are unioned."""

    name: str
    groups: tuple[ResolvedGroup, ...]

    @property
    def highlight(self) -> bool:
        return any(group.highlight for group in self.groups)

    def hull_requests(self) -> list[NDArray[np.float64]]:
        return [points for group in self.groups for points in group.hull_requests()]


class TweakResolver:
    """Expands tweak trees into point lists through a placement resolver."""

    def __init__(
        self, resolver: PlacementResolver, tweaks: Mapping[str, tuple[TweakNode, ...]]
    ) -> None:
        self.resolver = resolver
        self.tweaks = dict(tweaks)

    def names(self) -> list[str]:
        return list(self.tweaks)

    def resolve_tweak(self, name: str) -> ResolvedTweak:
        try:
            nodes = self.tweaks[name]
        except KeyError:
            raise UnknownTweak(name) from None
        return ResolvedTweak(name, tuple(self.resolve_node(node) for node in nodes))

    def resolve_node(self, node: TweakNode) -> ResolvedGroup:
        """Resolve one top-level node. A bare leaf is a group of one."""
        if isinstance(node, TweakLeaf):
            return ResolvedGroup((self.leaf_points(node),), ((0,),))
        point_lists = tuple(self._child_points(child, node) for child in node.children)
        return ResolvedGroup(
            point_lists,
            hull_windows(len(point_lists), node.chunk_size),
            highlight=node.highlight,
        )

    def leaf_points(
        self, leaf: TweakLeaf, levels: tuple[int, ...] = (0,)
    ) -> NDArray[np.float64]:
        """Points of a leaf, one per segment.

        ``levels`` are used in place of the leaf's own range when its
        segments were not written out.
        """
        if leaf.corner is None:
            return self.resolver.point(leaf.anchor)[np.newaxis, :]
        if leaf.explicit_segments:
            segments = tuple(range(leaf.segment_start, leaf.segment_end + 1))
        else:
            segments = levels
        return np.vstack([
            self.resolver.point(leaf.anchor, leaf.corner, segment) for segment in segments
        ])

    def group_points(self, group: TweakGroup) -> NDArray[np.float64]:
        """All points under a group.

        Inside a parent's hull, the hull of a nested group's own windows
        equals the hull of all of its points, so nesting flattens.
        """
        return np.vstack([self._child_points(child, group) for child in group.children])

    def _child_points(self, child: TweakNode, parent: TweakGroup) -> NDArray[np.float64]:
        if isinstance(child, TweakLeaf):
            return self.leaf_points(child, parent.implicit_segments())
        return self.group_points(child)
