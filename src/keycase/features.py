"""Placement of auxiliary case features.

Every feature here positions itself through the placement resolver and
returns transforms or points; turning those into solids is up to a
``SolidBuilder``. Features stand on the floor: nooks are dropped to z = 0
and raised from there.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import Polygon, box

from .config.types import KeyboardConfig
from .core.transform import Transform
from .errors import RESOLUTION_ERRORS, AnchorError
from .layout.anchors import KeyAnchor
from .layout.compass import Corner, corner_from_directions, lateral_offset
from .layout.matrix import resolve_coordinate
from .layout.placement import PlacementResolver


@dataclass(frozen=True)
class PcbDimensions:
    """A microcontroller board standing on its long edge.

    ``thickness`` runs along local x, ``length`` along y and ``width`` is
    the height above the floor.
    """

    width: float
    length: float
    thickness: float = 1.57
    connector_overshoot: float = 1.9


# Floor to the bottom of the LED housings.
LED_HEIGHT = 5.0

MCU_PCBS: dict[str, PcbDimensions] = {
    "promicro": PcbDimensions(width=18.0, length=33.0),
    "teensy": PcbDimensions(width=17.78, length=35.56),
    "teensy++": PcbDimensions(width=17.78, length=53.0),
}


def _facing(nook: Transform, corner: Corner, rotation_degrees: tuple[float, ...]) -> Transform:
    """A floor-level transform facing out through the corner's wall."""
    rotation = np.deg2rad(rotation_degrees) + np.array([0.0, 0.0, corner.primary.radians])
    return Transform(translation=nook.grounded().position, rotation=rotation)


###################
# Microcontroller #
###################


def mcu_pcb(config: KeyboardConfig) -> PcbDimensions:
    return MCU_PCBS[config.mcu.type]


def mcu_transform(resolver: PlacementResolver, config: KeyboardConfig) -> Transform:
    """The reference frame of the MCU holder.

    The PCB faces the wall of its nook with the connector end, shimmed
    sideways away from the supporting wall and raised so the board stands
    on the floor.
    """
    settings = config.mcu
    housing = config.case.rear_housing
    pcb = mcu_pcb(config)
    corner = settings.position.corner
    use_housing = housing.include and settings.position.prefer_rear_housing

    shim = -settings.support.lateral_spacing
    if use_housing:
        # Compensate for the displacement of the housing's wall.
        shim += 1 - housing.wall_thickness / 2 - pcb.thickness / 2

    base = _facing(resolver.into_nook(settings.position), corner, settings.position.rotation)
    return (
        base.translated(lateral_offset(corner.secondary, shim))
        .moved([0.0, -pcb.connector_overshoot, pcb.width / 2])
    )


def mcu_stop_posts(resolver: PlacementResolver, config: KeyboardConfig) -> list[Transform]:
    """Corner posts of the two keys a stop-style MCU support hangs from.

    The posts flank the boundary between the stop's anchor key and its
    neighbour one step in the stop direction.
    """
    stop = config.mcu.support.stop
    if stop is None:
        return []
    try:
        descriptor = resolver.registry.lookup(stop.anchor)
        if not isinstance(descriptor, KeyAnchor):
            raise AnchorError(f"MCU stop anchor {stop.anchor!r} is not a key")
        matrix = resolver.matrix(descriptor.cluster)
        near = resolve_coordinate(matrix, descriptor.coordinate)
        direction = stop.direction
        far = matrix.walk(near, direction)
        opposite = direction.opposite
        return [
            resolver.key_place(descriptor.cluster, near, corner_from_directions(direction, direction.left)),
            resolver.key_place(descriptor.cluster, near, corner_from_directions(direction, direction.right)),
            resolver.key_place(descriptor.cluster, far, corner_from_directions(opposite, direction.left)),
            resolver.key_place(descriptor.cluster, far, corner_from_directions(opposite, direction.right)),
        ]
    except RESOLUTION_ERRORS as exc:
        exc.via(stop.anchor)
        raise


##############
# Connection #
##############


def connection_transform(resolver: PlacementResolver, config: KeyboardConfig) -> Transform:
    """Centre of the connection socket, facing out of its wall.

    In the rear housing, the socket may be raised to just below the roof;
    otherwise it sits just above the floor.
    """
    settings = config.connection
    housing = config.case.rear_housing
    corner = settings.position.corner
    width, depth, height = settings.socket_size
    use_housing = housing.include and settings.position.prefer_rear_housing

    if use_housing and settings.raise_to_roof:
        vertical = (
            housing.size[2]
            - max(settings.socket_thickness, housing.roof_thickness)
            - height / 2
        )
    else:
        vertical = settings.socket_thickness + height / 2

    base = _facing(resolver.into_nook(settings.position), corner, settings.position.rotation)
    if use_housing:
        base = base.translated(lateral_offset(corner.secondary, -width / 2))
    return base.moved([0.0, -depth / 2, vertical])


##############
# Back plate #
##############


def backplate_transform(resolver: PlacementResolver, config: KeyboardConfig) -> Transform:
    """Centre of the mounting plate for a connecting beam."""
    settings = config.case.back_plate
    position = settings.position
    segment = 3 if position.segment is None else position.segment
    anchor = resolver.resolve(position.anchor, position.corner, segment, position.offset)
    return Transform(translation=anchor.position - [0.0, 0.0, settings.beam_height / 2])


def backplate_fastener_positions(
    resolver: PlacementResolver, config: KeyboardConfig
) -> list[NDArray[np.float64]]:
    """Centres of the two fastener holes through the back plate."""
    plate = backplate_transform(resolver, config)
    spacing = config.case.back_plate.fasteners.distance
    return [plate.apply([dx, 0.0, 0.0]) for dx in (spacing / 2, -spacing / 2)]


###############
# Foot plates #
###############


def foot_plate_polygons(
    resolver: PlacementResolver, config: KeyboardConfig
) -> list[NDArray[np.float64]]:
    """Outlines of the foot plates as ``(n, 2)`` arrays on the floor."""
    polygons = []
    for polygon in config.case.foot_plates.polygons:
        points = []
        for point in polygon.points:
            segment = 2 if point.segment is None else point.segment
            points.append(resolver.point(point.anchor, point.corner, segment, point.offset)[:2])
        polygons.append(np.array(points, dtype=np.float64))
    return polygons


########
# LEDs #
########


def _west_wall_points(resolver: PlacementResolver, config: KeyboardConfig) -> list[NDArray[np.float64]]:
    cluster = config.case.leds.cluster
    thickness = config.walls.thickness
    points = []
    for row in range(resolver.matrix(cluster).rows(0)):
        for corner in (Corner.WSW, Corner.WNW):
            x, y, _ = resolver.key_place(cluster, (0, row), corner).position
            point = np.array([x + thickness, y])
            # Adjacent keys share a corner.
            if not points or not np.allclose(points[-1], point):
                points.append(point)
    return points


def led_channel_polygon(resolver: PlacementResolver, config: KeyboardConfig) -> NDArray[np.float64]:
    """A strip along the inside of the west wall of the LED cluster."""
    west = _west_wall_points(resolver, config)
    east = [point + [10.0, 0.0] for point in west]
    return np.array(west + east[::-1], dtype=np.float64)


def led_hole_positions(resolver: PlacementResolver, config: KeyboardConfig) -> list[NDArray[np.float64]]:
    """Centres of the LED holes, spaced north from the first key's west wall."""
    settings = config.case.leds
    x0, y0, _ = resolver.key_place(settings.cluster, (0, 0), Corner.WNW).position
    height = LED_HEIGHT + settings.housing_size / 2
    return [
        np.array([x0, y0 + settings.interval * ordinal, height], dtype=np.float64)
        for ordinal in range(settings.amount)
    ]


def led_housing_outlines(
    resolver: PlacementResolver, config: KeyboardConfig
) -> list[NDArray[np.float64]]:
    """Footprints of the LED housings, clipped to the channel.

    Each housing is a bar of square section reaching 25 mm either side of
    its hole along x; only the part inside the channel is kept.
    """
    size = config.case.leds.housing_size
    channel = Polygon(led_channel_polygon(resolver, config))
    if not channel.is_valid:
        channel = channel.buffer(0)
    outlines = []
    for x, y, _ in led_hole_positions(resolver, config):
        footprint = channel.intersection(box(x - 25, y - size / 2, x + 25, y + size / 2))
        for part in getattr(footprint, "geoms", [footprint]):
            if isinstance(part, Polygon) and part.area > 0:
                outlines.append(np.array(part.exterior.coords[:-1], dtype=np.float64))
    return outlines
