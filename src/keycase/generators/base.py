"""Base classes and protocols for emitting solids."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from ..core.transform import Transform

if TYPE_CHECKING:
    from ..layout.placement import PlacementResolver
    from ..layout.tweaks import ResolvedTweak

# Solids are opaque to the placement engine; only the builder knows them.
Solid = Any


@runtime_checkable
class SolidBuilder(Protocol):
    """Protocol for geometry back ends.

    Any class with these methods can turn resolved placements into solids.
    """

    def hull(self, points: NDArray[np.float64]) -> Solid:
        """Convex hull around posts at the given ``(n, 3)`` points."""
        ...

    def union(self, solids: Sequence[Solid]) -> Solid:
        ...

    def box(self, size: Sequence[float], transform: Transform) -> Solid:
        """A box of ``size`` centred on ``transform``."""
        ...

    def cylinder(self, radius: float, height: float, transform: Transform) -> Solid:
        """A cylinder along the local z axis, centred on ``transform``."""
        ...

    def plate(
        self, polygon: NDArray[np.float64], height: float, base: float = 0.0
    ) -> Solid:
        """A polygon in the xy plane extruded upward from z = ``base``."""
        ...


class FeatureGenerator(ABC):
    """Abstract base class for one top-level feature of the case.

    Subclasses place themselves exclusively through the placement resolver
    and hand the resulting points and transforms to a ``SolidBuilder``.
    """

    name: str

    @abstractmethod
    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        """Generate and return the feature's solid.

        Returns:
            Whatever the builder produces.
        """
        pass

    def negative(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid | None:
        """Generate the cavities the feature cuts out of the case.

        Returns:
            A solid to subtract, or None for a feature that is all material.
        """
        return None


def build_tweak(resolved: ResolvedTweak, builder: SolidBuilder) -> Solid:
    """Hull every window of a resolved tweak and union the results."""
    return builder.union([builder.hull(points) for points in resolved.hull_requests()])
