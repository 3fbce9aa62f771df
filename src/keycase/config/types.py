"""Typed configuration produced by the parser.

Every structure here is frozen: configuration is built once at load time and
never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..layout.compass import Corner, Direction
from ..layout.matrix import ClusterMatrix, FlexCoord
from ..layout.tweaks import TweakNode


@dataclass(frozen=True)
class KeysConfig:
    pitch: float = 19.05


@dataclass(frozen=True)
class ColumnConfig:
    """One column of a key cluster.

    Attributes:
        rows: Number of keys in the column
        stagger: Offset of the whole column along y, in mm
    """

    rows: int
    stagger: float = 0.0


@dataclass(frozen=True)
class ClusterConfig:
    """A named group of keys forming one coordinate matrix.

    Attributes:
        matrix_columns: Column shapes, west to east
        position: Global position of key (0, 0) before rotation
        rotation: Splay of the cluster about z, in degrees
        aliases: Anchor names bound to ``(column, row)`` coordinates
    """

    matrix_columns: tuple[ColumnConfig, ...]
    position: tuple[float, ...] = (0.0, 0.0, 0.0)
    rotation: float = 0.0
    aliases: dict[str, tuple[FlexCoord, FlexCoord]] = field(default_factory=dict)

    def matrix(self, name: str) -> ClusterMatrix:
        return ClusterMatrix(name, tuple(column.rows for column in self.matrix_columns))


@dataclass(frozen=True)
class WallConfig:
    """Inputs to the wall profile.

    Attributes:
        thickness: Wall thickness; segment 3 sits this far outside segment 2
        bevel: Outward and downward step from the key face to segment 1
        parallel: Outward reach of segment 2
        perpendicular: Vertical drop of segment 2 (negative is down)
    """

    thickness: float = 1.0
    bevel: float = 1.0
    parallel: float = 0.0
    perpendicular: float = -4.0


@dataclass(frozen=True)
class SecondaryPosition:
    """A user-declared anchor relative to another anchor."""

    anchor: str
    corner: Corner | None = None
    segment: int | None = None
    offset: tuple[float, ...] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class AnchoredPosition:
    """A point tied to an anchor, as used by plates and polygons."""

    anchor: str = "origin"
    corner: Corner | None = None
    segment: int | None = None
    offset: tuple[float, ...] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class NookPosition:
    """Where a feature snugs up against a wall.

    Attributes:
        anchor: Usually a key alias; required for an included feature
            unless it is placed in the rear housing
        corner: Corner of the anchor; its primary direction is the wall faced
        segment: Wall segment to place against
        offset: Final local offset
        prefer_rear_housing: Use the rear housing instead, when it is included
        rotation: Extra rotation of the feature, in degrees (XYZ)
    """

    anchor: str | None = None
    corner: Corner = Corner.NNE
    segment: int | None = None
    offset: tuple[float, ...] = (0.0, 0.0, 0.0)
    prefer_rear_housing: bool = False
    rotation: tuple[float, ...] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class RearHousingConfig:
    """A box behind the main cluster, usable as a built-in anchor.

    Attributes:
        include: Whether the housing is part of the case
        position: Centre of the housing footprint at ground level
        size: Width (x), depth (y) and height (z)
    """

    include: bool = False
    position: tuple[float, ...] = (0.0, 0.0, 0.0)
    size: tuple[float, ...] = (40.0, 12.0, 16.0)
    wall_thickness: float = 2.0
    roof_thickness: float = 2.0


@dataclass(frozen=True)
class FastenerConfig:
    diameter: float = 6.0
    distance: float = 20.0


@dataclass(frozen=True)
class BackPlateConfig:
    include: bool = False
    position: AnchoredPosition = AnchoredPosition()
    beam_height: float = 6.0
    fasteners: FastenerConfig = FastenerConfig()


@dataclass(frozen=True)
class FootPolygon:
    points: tuple[AnchoredPosition, ...]


@dataclass(frozen=True)
class FootPlatesConfig:
    include: bool = False
    height: float = 4.0
    polygons: tuple[FootPolygon, ...] = ()


@dataclass(frozen=True)
class LedConfig:
    """A row of LEDs along the west wall of a cluster's first column."""

    include: bool = False
    cluster: str | None = None
    amount: int = 1
    interval: float = 5.0
    housing_size: float = 5.0
    emitter_diameter: float = 4.0


@dataclass(frozen=True)
class CaseConfig:
    """Case-wide settings.

    Attributes:
        web_thickness: Thickness of the web between keys; also the depth of
            the wire hole behind the connection socket
    """

    web_thickness: float = 2.0
    rear_housing: RearHousingConfig = RearHousingConfig()
    back_plate: BackPlateConfig = BackPlateConfig()
    foot_plates: FootPlatesConfig = FootPlatesConfig()
    leds: LedConfig = LedConfig()


@dataclass(frozen=True)
class McuStopConfig:
    anchor: str
    direction: Direction = Direction.N


@dataclass(frozen=True)
class McuSupportConfig:
    lateral_spacing: float = 1.0
    height_factor: float = 1.5
    stop: McuStopConfig | None = None


@dataclass(frozen=True)
class McuConfig:
    include: bool = False
    type: str = "promicro"
    margin: float = 0.0
    position: NookPosition = NookPosition()
    support: McuSupportConfig = McuSupportConfig()


@dataclass(frozen=True)
class ConnectionConfig:
    """A socket for the cable between halves or to the host."""

    include: bool = False
    socket_size: tuple[float, ...] = (8.0, 10.0, 4.0)
    socket_thickness: float = 1.0
    position: NookPosition = NookPosition()
    raise_to_roof: bool = False


# Names of the top-level features other than tweaks. Each becomes one solid
# and one file, so tweak names must not repeat them.
BUILTIN_FEATURES = ("mcu", "connection", "back-plate", "foot-plates", "leds")
# Appended to a feature name for its cavities.
NEGATIVE_SUFFIX = "-negative"


@dataclass(frozen=True)
class KeyboardConfig:
    """The complete, validated configuration of one keyboard case."""

    key_clusters: dict[str, ClusterConfig]
    keys: KeysConfig = KeysConfig()
    walls: WallConfig = WallConfig()
    secondaries: dict[str, SecondaryPosition] = field(default_factory=dict)
    tweaks: dict[str, tuple[TweakNode, ...]] = field(default_factory=dict)
    case: CaseConfig = CaseConfig()
    mcu: McuConfig = McuConfig()
    connection: ConnectionConfig = ConnectionConfig()

    def cluster_matrices(self) -> dict[str, ClusterMatrix]:
        return {name: cluster.matrix(name) for name, cluster in self.key_clusters.items()}
