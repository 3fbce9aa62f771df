"""Anchor-based placement of case geometry."""

from .anchors import AnchorRegistry, BuiltinAnchor, KeyAnchor, SecondaryAnchor
from .compass import FULL, Corner, Direction, compass, corner_from_directions, lateral_offset
from .keys import KeyLayout, StaggeredLayout, TaperedWallProfile, WallProfile
from .matrix import ClusterMatrix, resolve_coordinate, walk
from .placement import PlacementResolver
from .tweaks import TweakGroup, TweakLeaf, TweakResolver

__all__ = [
    "AnchorRegistry",
    "BuiltinAnchor",
    "KeyAnchor",
    "SecondaryAnchor",
    "FULL",
    "Corner",
    "Direction",
    "compass",
    "corner_from_directions",
    "lateral_offset",
    "KeyLayout",
    "StaggeredLayout",
    "TaperedWallProfile",
    "WallProfile",
    "ClusterMatrix",
    "resolve_coordinate",
    "walk",
    "PlacementResolver",
    "TweakGroup",
    "TweakLeaf",
    "TweakResolver",
]
