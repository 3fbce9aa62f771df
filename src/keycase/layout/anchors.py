"""Named anchors and the registry that binds them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, Mapping, Union

import numpy as np

from ..core.transform import Transform
from ..errors import DuplicateAnchor, InvalidCorner, InvalidSegment, UnknownAnchor
from .compass import Corner
from .matrix import FlexCoord

if TYPE_CHECKING:
    from ..config.types import KeyboardConfig, RearHousingConfig

ORIGIN = "origin"
REAR_HOUSING = "rear-housing"
RESERVED_ANCHORS = (ORIGIN, REAR_HOUSING)

# A built-in anchor's resolution: (corner, segment) -> transform.
BuiltinRecipe = Callable[[Union[Corner, None], int], Transform]


@dataclass(frozen=True)
class KeyAnchor:
    """A key position in a cluster, by possibly symbolic coordinate."""

    name: str
    cluster: str
    coordinate: tuple[FlexCoord, FlexCoord]


@dataclass(frozen=True)
class BuiltinAnchor:
    name: str
    recipe: BuiltinRecipe


@dataclass(frozen=True)
class SecondaryAnchor:
    """A point defined relative to another anchor.

    The offset is applied in the local frame of the resolved parent, so it
    follows the direction the parent's corner faces.
    """

    name: str
    anchor: str
    corner: Corner | None = None
    segment: int | None = None
    offset: tuple[float, ...] = (0.0, 0.0, 0.0)


AnchorDescriptor = Union[KeyAnchor, BuiltinAnchor, SecondaryAnchor]


def origin_recipe(corner: Corner | None, segment: int) -> Transform:
    """The global origin. It has neither corners nor a wall."""
    if corner is not None:
        raise InvalidCorner(f"Anchor {ORIGIN!r} has no corners")
    if segment:
        raise InvalidSegment(f"Anchor {ORIGIN!r} has no wall segments")
    return Transform.identity()


@dataclass(frozen=True)
class RearHousingRecipe:
    """Resolve the rear housing as a box standing on the ground.

    Without a corner, the anchor is the centre of the roof. A corner moves to
    that corner of the roof and faces the corner's primary direction. Wall
    segments descend evenly from the roof (0) to the ground (4).
    """

    position: tuple[float, ...] = (0.0, 0.0, 0.0)
    size: tuple[float, ...] = (40.0, 12.0, 16.0)

    @classmethod
    def from_config(cls, housing: RearHousingConfig) -> RearHousingRecipe:
        return cls(position=housing.position, size=housing.size)

    def __call__(self, corner: Corner | None, segment: int) -> Transform:
        width, depth, height = self.size
        if corner is None:
            if segment:
                raise InvalidSegment(
                    f"Anchor {REAR_HOUSING!r} needs a corner to address a wall segment"
                )
            return Transform(translation=np.add(self.position, [0.0, 0.0, height]))
        half = corner.offset * 2 * np.array([width / 2, depth / 2, 0.0])
        roof_corner = np.add(self.position, half) + [0.0, 0.0, height * (4 - segment) / 4]
        return Transform.about_z(corner.primary.radians, roof_corner)


class AnchorRegistry:
    """Names bound to anchor descriptors.

    Built-in anchors are registered on construction. Names are unique, and
    descriptors are stored unresolved: registration never triggers
    resolution, so secondaries may refer to names declared after them.
    """

    def __init__(self, builtins: Mapping[str, BuiltinRecipe] | None = None) -> None:
        self._anchors: dict[str, AnchorDescriptor] = {}
        recipes: dict[str, BuiltinRecipe] = {
            ORIGIN: origin_recipe,
            REAR_HOUSING: RearHousingRecipe(),
        }
        for name, recipe in (builtins or {}).items():
            if name not in RESERVED_ANCHORS:
                raise ValueError(f"{name!r} is not a built-in anchor")
            recipes[name] = recipe
        for name, recipe in recipes.items():
            self.register(BuiltinAnchor(name, recipe))

    @classmethod
    def from_config(
        cls, config: KeyboardConfig, rear_housing: BuiltinRecipe | None = None
    ) -> AnchorRegistry:
        """Register every key alias and secondary position in a configuration.

        ``rear_housing`` replaces the box recipe built from the configured
        housing, for housings shaped by something other than a box.
        """
        if rear_housing is None:
            rear_housing = RearHousingRecipe.from_config(config.case.rear_housing)
        registry = cls(builtins={REAR_HOUSING: rear_housing})
        for cluster_name, cluster in config.key_clusters.items():
            for alias, coordinate in cluster.aliases.items():
                registry.register(KeyAnchor(alias, cluster_name, coordinate))
        for alias, position in config.secondaries.items():
            registry.register(
                SecondaryAnchor(
                    alias,
                    anchor=position.anchor,
                    corner=position.corner,
                    segment=position.segment,
                    offset=position.offset,
                )
            )
        return registry

    def register(self, descriptor: AnchorDescriptor) -> None:
        """Bind a descriptor to its name.

        Raises:
            DuplicateAnchor: If the name is already bound, built-ins included.
        """
        if descriptor.name in self._anchors:
            raise DuplicateAnchor(descriptor.name)
        self._anchors[descriptor.name] = descriptor

    def lookup(self, name: str) -> AnchorDescriptor:
        try:
            return self._anchors[name]
        except KeyError:
            raise UnknownAnchor(name) from None

    def names(self) -> list[str]:
        return list(self._anchors)

    def __contains__(self, name: object) -> bool:
        return name in self._anchors

    def __iter__(self) -> Iterator[AnchorDescriptor]:
        return iter(self._anchors.values())

    def __len__(self) -> int:
        return len(self._anchors)
