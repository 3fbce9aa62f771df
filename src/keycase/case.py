"""Assembly of the whole case from independently built features."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .config.types import KeyboardConfig
from .core.transform import Transform
from .errors import RESOLUTION_ERRORS, KeycaseError
from .features import (
    LED_HEIGHT,
    backplate_fastener_positions,
    backplate_transform,
    connection_transform,
    foot_plate_polygons,
    led_channel_polygon,
    led_hole_positions,
    led_housing_outlines,
    mcu_pcb,
    mcu_stop_posts,
    mcu_transform,
)
from .generators.base import FeatureGenerator, Solid, SolidBuilder, build_tweak
from .generators.solids import TrimeshBuilder
from .layout.placement import PlacementResolver
from .layout.tweaks import TweakResolver

logger = logging.getLogger(__name__)

# Rotations that lay a z-axis cylinder along x and along y.
ALONG_X = np.array([0.0, np.pi / 2, 0.0])
ALONG_Y = np.array([np.pi / 2, 0.0, 0.0])

BACK_PLATE_DEPTH = 3.0
FASTENER_LENGTH = 25.0
EMITTER_LENGTH = 20.0


class TweakFeature(FeatureGenerator):
    """One named tweak: hulls between anchored points, unioned."""

    def __init__(self, name: str, tweaks: TweakResolver) -> None:
        self.name = name
        self.tweaks = tweaks

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        return build_tweak(self.tweaks.resolve_tweak(self.name), builder)


class McuFeature(FeatureGenerator):
    """A cradle holding the microcontroller PCB on its edge."""

    name = "mcu"

    def __init__(self, config: KeyboardConfig) -> None:
        self.config = config

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        pcb = mcu_pcb(self.config)
        support = self.config.mcu.support
        margin = self.config.mcu.margin
        holder = mcu_transform(resolver, self.config)
        wall = support.lateral_spacing
        cradle = builder.box(
            [pcb.thickness + 2 * wall, pcb.length + margin, pcb.width * support.height_factor],
            holder.moved([0.0, -(pcb.length + margin) / 2, 0.0]),
        )
        solids = [cradle]
        posts = mcu_stop_posts(resolver, self.config)
        if posts:
            solids.append(builder.hull(np.array([post.position for post in posts])))
        return builder.union(solids)

    def negative(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        """The slot for the PCB itself, widened by the margin."""
        pcb = mcu_pcb(self.config)
        margin = self.config.mcu.margin
        return builder.box(
            [pcb.thickness + margin, pcb.length + margin, pcb.width + margin],
            mcu_transform(resolver, self.config).moved([0.0, -pcb.length / 2, 0.0]),
        )


class ConnectionFeature(FeatureGenerator):
    """The housing of the socket for the connecting cable."""

    name = "connection"

    def __init__(self, config: KeyboardConfig) -> None:
        self.config = config

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        width, depth, height = self.config.connection.socket_size
        thickness = self.config.connection.socket_thickness
        socket = connection_transform(resolver, self.config)
        # Walls on every side but the open front.
        return builder.box(
            [width + 2 * thickness, depth + thickness, height + 2 * thickness],
            socket.moved([0.0, -thickness / 2, 0.0]),
        )

    def negative(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        """The socket, and a hole behind it for the wires into the case."""
        width, depth, height = self.config.connection.socket_size
        web = self.config.case.web_thickness
        socket = connection_transform(resolver, self.config)
        return builder.union([
            builder.box([width, depth, height], socket),
            builder.box(
                [width - 1, web + 1, height - 1],
                socket.moved([0.0, -(depth + web) / 2, 0.0]),
            ),
        ])


class BackPlateFeature(FeatureGenerator):
    """A plate for a beam joining two halves, with holes for its fasteners."""

    name = "back-plate"

    def __init__(self, config: KeyboardConfig) -> None:
        self.config = config

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        settings = self.config.case.back_plate
        beam = settings.beam_height
        return builder.box(
            [settings.fasteners.distance + beam, BACK_PLATE_DEPTH, beam],
            backplate_transform(resolver, self.config),
        )

    def negative(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        radius = self.config.case.back_plate.fasteners.diameter / 2
        return builder.union([
            builder.cylinder(
                radius, FASTENER_LENGTH, Transform(translation=position, rotation=ALONG_Y)
            )
            for position in backplate_fastener_positions(resolver, self.config)
        ])


class FootPlatesFeature(FeatureGenerator):
    """Flat plates under the case, to glue on feet."""

    name = "foot-plates"

    def __init__(self, config: KeyboardConfig) -> None:
        self.config = config

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        height = self.config.case.foot_plates.height
        return builder.union([
            builder.plate(polygon, height)
            for polygon in foot_plate_polygons(resolver, self.config)
        ])


class LedFeature(FeatureGenerator):
    """A strip of wall material along the west wall, drilled for LEDs.

    The solid is the block the LED strip is sunk into; the negative holds a
    housing for each LED, clipped to the channel, and the emitter hole
    through the wall beside it.
    """

    name = "leds"

    def __init__(self, config: KeyboardConfig) -> None:
        self.config = config

    def generate(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        size = self.config.case.leds.housing_size
        return builder.plate(led_channel_polygon(resolver, self.config), 10 + size)

    def negative(self, resolver: PlacementResolver, builder: SolidBuilder) -> Solid:
        settings = self.config.case.leds
        positions = led_hole_positions(resolver, self.config)
        housings = [
            builder.plate(outline, settings.housing_size, base=LED_HEIGHT)
            for outline in led_housing_outlines(resolver, self.config)
        ]
        emitters = [
            builder.cylinder(
                settings.emitter_diameter / 2,
                EMITTER_LENGTH,
                Transform(translation=position, rotation=ALONG_X),
            )
            for position in positions
        ]
        return builder.union([*housings, *emitters])


def case_features(config: KeyboardConfig, tweaks: TweakResolver) -> list[FeatureGenerator]:
    """Every top-level feature the configuration asks for, tweaks first."""
    features: list[FeatureGenerator] = [TweakFeature(name, tweaks) for name in tweaks.names()]
    if config.mcu.include:
        features.append(McuFeature(config))
    if config.connection.include:
        features.append(ConnectionFeature(config))
    if config.case.back_plate.include:
        features.append(BackPlateFeature(config))
    if config.case.foot_plates.include:
        features.append(FootPlatesFeature(config))
    if config.case.leds.include:
        features.append(LedFeature(config))
    return features


@dataclass(frozen=True)
class FeatureFailure:
    """A feature left out of the case because it could not be placed."""

    feature: str
    error: KeycaseError

    @property
    def chain(self) -> list[str]:
        return self.error.chain

    def __str__(self) -> str:
        return f"{self.feature}: {self.error}"


@dataclass
class CaseModel:
    """The built case: one solid per feature that could be placed.

    Attributes:
        solids: Feature name to solid, in build order
        negatives: Feature name to the cavities it cuts out of the case, for
            the features that have any
        failures: Features that were skipped, with their errors
    """

    solids: dict[str, Solid] = field(default_factory=dict)
    negatives: dict[str, Solid] = field(default_factory=dict)
    failures: list[FeatureFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def combined(self, builder: SolidBuilder) -> Solid:
        return builder.union(list(self.solids.values()))


def build_case(
    config: KeyboardConfig,
    builder: SolidBuilder | None = None,
    isolate: bool = True,
    resolver: PlacementResolver | None = None,
) -> CaseModel:
    """Build every feature of a case.

    Args:
        config: A validated configuration
        builder: Geometry back end; defaults to ``TrimeshBuilder``
        isolate: Log and skip a feature that cannot be placed instead of
            aborting the whole build
        resolver: A resolver to share; built from ``config`` if omitted

    Raises:
        AnchorError, InvalidCorner, InvalidSegment, OutOfBoundsCoordinate:
            Only when ``isolate`` is False.
    """
    builder = builder or TrimeshBuilder()
    resolver = resolver or PlacementResolver.from_config(config)
    tweaks = TweakResolver(resolver, config.tweaks)

    model = CaseModel()
    for feature in case_features(config, tweaks):
        try:
            solid = feature.generate(resolver, builder)
            negative = feature.negative(resolver, builder)
        except RESOLUTION_ERRORS as exc:
            if not isolate:
                raise
            logger.warning("Skipping feature %s: %s", feature.name, exc)
            model.failures.append(FeatureFailure(feature.name, exc))
        else:
            model.solids[feature.name] = solid
            if negative is not None:
                model.negatives[feature.name] = negative
            logger.debug("Built feature %s", feature.name)

    logger.info(
        "Built %d of %d features", len(model.solids), len(model.solids) + len(model.failures)
    )
    return model
