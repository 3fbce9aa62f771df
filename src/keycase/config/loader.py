"""YAML loader for keyboard configurations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..errors import DuplicateAnchor, MissingField, ParseError
from ..layout.compass import Corner, Direction
from .schema import (
    Field,
    Parser,
    alias,
    boolean,
    case_tweak_map,
    corner_from_string,
    direction_from_string,
    flexcoord,
    integer,
    keyword,
    map_like,
    map_of,
    number,
    one_of,
    segment,
    tuple_of,
    vector,
)
from .types import (
    BUILTIN_FEATURES,
    NEGATIVE_SUFFIX,
    AnchoredPosition,
    BackPlateConfig,
    CaseConfig,
    ClusterConfig,
    ColumnConfig,
    ConnectionConfig,
    FastenerConfig,
    FootPlatesConfig,
    FootPolygon,
    KeyboardConfig,
    KeysConfig,
    LedConfig,
    McuConfig,
    McuStopConfig,
    McuSupportConfig,
    NookPosition,
    RearHousingConfig,
    SecondaryPosition,
    WallConfig,
)

logger = logging.getLogger(__name__)

MCU_TYPES = ("promicro", "teensy", "teensy++")


def _at_least(minimum: float, parser: Parser) -> Parser:
    def parse(candidate: Any) -> Any:
        value = parser(candidate)
        if value < minimum:
            raise ParseError(f"Expected at least {minimum}, got {value}")
        return value
    return parse


def _non_empty(parser: Parser) -> Parser:
    def parse(candidate: Any) -> Any:
        value = parser(candidate)
        if not value:
            raise ParseError("Must not be empty")
        return value
    return parse


def _point3(candidate: Any) -> tuple[float, ...]:
    values = vector(2, 3)(candidate)
    return values if len(values) == 3 else (*values, 0.0)


def _coordinate_pair(candidate: Any) -> tuple:
    pair = tuple_of(flexcoord)(candidate)
    if len(pair) != 2:
        raise ParseError(f"Expected [column, row], got {candidate!r}")
    return pair


ORIGIN_3D = (0.0, 0.0, 0.0)
offset = Field(vector(2, 3), ORIGIN_3D)

column = map_like(
    {"rows": _at_least(1, integer), "stagger": Field(number, 0.0)},
    into=ColumnConfig,
)

cluster = map_like(
    {
        "matrix-columns": _non_empty(tuple_of(column)),
        "position": Field(_point3, ORIGIN_3D),
        "rotation": Field(number, 0.0),
        "aliases": Field(map_of(alias, _coordinate_pair), {}),
    },
    into=ClusterConfig,
)

keys = map_like({"pitch": Field(_at_least(1, number), 19.05)}, into=KeysConfig)

walls = map_like(
    {
        "thickness": Field(number, 1.0),
        "bevel": Field(number, 1.0),
        "parallel": Field(number, 0.0),
        "perpendicular": Field(number, -4.0),
    },
    into=WallConfig,
)

secondary = map_like(
    {
        "anchor": keyword,
        "corner": Field(corner_from_string, None),
        "segment": Field(segment, None),
        "offset": offset,
    },
    into=SecondaryPosition,
)

anchored = map_like(
    {
        "anchor": Field(keyword, "origin"),
        "corner": Field(corner_from_string, None),
        "segment": Field(segment, None),
        "offset": offset,
    },
    into=AnchoredPosition,
)

nook = map_like(
    {
        "anchor": Field(keyword, None),
        "corner": Field(corner_from_string, Corner.NNE),
        "segment": Field(segment, None),
        "offset": offset,
        "prefer-rear-housing": Field(boolean, False),
        "rotation": Field(vector(3, 3), ORIGIN_3D),
    },
    into=NookPosition,
)

rear_housing = map_like(
    {
        "include": Field(boolean, False),
        "position": Field(_point3, ORIGIN_3D),
        "size": Field(vector(3, 3), (40.0, 12.0, 16.0)),
        "wall-thickness": Field(number, 2.0),
        "roof-thickness": Field(number, 2.0),
    },
    into=RearHousingConfig,
)

back_plate = map_like(
    {
        "include": Field(boolean, False),
        "position": Field(anchored, AnchoredPosition()),
        "beam-height": Field(number, 6.0),
        "fasteners": Field(
            map_like(
                {"diameter": Field(number, 6.0), "distance": Field(number, 20.0)},
                into=FastenerConfig,
            ),
            FastenerConfig(),
        ),
    },
    into=BackPlateConfig,
)

foot_plates = map_like(
    {
        "include": Field(boolean, False),
        "height": Field(number, 4.0),
        "polygons": Field(
            tuple_of(map_like({"points": _non_empty(tuple_of(anchored))}, into=FootPolygon)),
            (),
        ),
    },
    into=FootPlatesConfig,
)

leds = map_like(
    {
        "include": Field(boolean, False),
        "cluster": Field(keyword, None),
        "amount": Field(_at_least(0, integer), 1),
        "interval": Field(number, 5.0),
        "housing-size": Field(number, 5.0),
        "emitter-diameter": Field(number, 4.0),
    },
    into=LedConfig,
)

case = map_like(
    {
        "web-thickness": Field(number, 2.0),
        "rear-housing": Field(rear_housing, RearHousingConfig()),
        "back-plate": Field(back_plate, BackPlateConfig()),
        "foot-plates": Field(foot_plates, FootPlatesConfig()),
        "leds": Field(leds, LedConfig()),
    },
    into=CaseConfig,
)

mcu_support = map_like(
    {
        "lateral-spacing": Field(number, 1.0),
        "height-factor": Field(number, 1.5),
        "stop": Field(
            map_like(
                {"anchor": keyword, "direction": Field(direction_from_string, Direction.N)},
                into=McuStopConfig,
            ),
            None,
        ),
    },
    into=McuSupportConfig,
)

mcu = map_like(
    {
        "include": Field(boolean, False),
        "type": Field(one_of(*MCU_TYPES), "promicro"),
        "margin": Field(number, 0.0),
        "position": Field(nook, NookPosition()),
        "support": Field(mcu_support, McuSupportConfig()),
    },
    into=McuConfig,
)

connection = map_like(
    {
        "include": Field(boolean, False),
        "socket-size": Field(vector(3, 3), (8.0, 10.0, 4.0)),
        "socket-thickness": Field(number, 1.0),
        "position": Field(nook, NookPosition()),
        "raise-to-roof": Field(boolean, False),
    },
    into=ConnectionConfig,
)

keyboard = map_like(
    {
        "keys": Field(keys, KeysConfig()),
        "key-clusters": _non_empty(map_of(keyword, cluster)),
        "walls": Field(walls, WallConfig()),
        "secondaries": Field(map_of(alias, secondary), {}),
        "tweaks": Field(case_tweak_map, {}),
        "case": Field(case, CaseConfig()),
        "mcu": Field(mcu, McuConfig()),
        "connection": Field(connection, ConnectionConfig()),
    },
    into=KeyboardConfig,
)


def _check_aliases(config: KeyboardConfig) -> None:
    """Anchor names must be unique across clusters and secondaries."""
    seen: set[str] = set()
    for cluster_name, settings in config.key_clusters.items():
        for name in settings.aliases:
            if name in seen:
                raise _duplicate(name, "key-clusters", cluster_name, "aliases", name)
            seen.add(name)
    for name in config.secondaries:
        if name in seen:
            raise _duplicate(name, "secondaries", name)
        seen.add(name)


def _duplicate(name: str, *path: Any) -> DuplicateAnchor:
    error = DuplicateAnchor(name)
    error.path.extend(path)
    return error


def _check_leds(config: KeyboardConfig) -> None:
    settings = config.case.leds
    if not settings.include:
        return
    if settings.cluster is None:
        error = MissingField("cluster")
        error.path.extend(["case", "leds"])
        raise error
    if settings.cluster not in config.key_clusters:
        error = ParseError(f"Unknown key cluster: {settings.cluster!r}")
        error.path.extend(["case", "leds", "cluster"])
        raise error


def _check_tweak_names(config: KeyboardConfig) -> None:
    """Tweaks share one namespace of solids with the built-in features."""
    for name in config.tweaks:
        if name in BUILTIN_FEATURES or name.endswith(NEGATIVE_SUFFIX):
            error = ParseError(f"Tweak name {name!r} is reserved for a built-in feature")
            error.path.extend(["tweaks", name])
            raise error


def _check_nooks(config: KeyboardConfig) -> None:
    """An included feature against a wall must say which wall."""
    housing = config.case.rear_housing.include
    for section, settings in (("mcu", config.mcu), ("connection", config.connection)):
        position = settings.position
        if not settings.include or position.anchor is not None:
            continue
        if housing and position.prefer_rear_housing:
            continue
        error = MissingField("anchor")
        error.path.extend([section, "position"])
        raise error


def parse_config(document: Any) -> KeyboardConfig:
    """Validate a deserialised document into a ``KeyboardConfig``.

    Raises:
        ParseError: For any malformed, unknown or missing field, with the
            path to it.
        DuplicateAnchor: If an anchor name is declared twice or reuses a
            built-in name.
    """
    config = keyboard(document)
    _check_aliases(config)
    _check_tweak_names(config)
    _check_nooks(config)
    _check_leds(config)
    return config


def merge_documents(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two documents; mappings merge, everything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads keyboard configurations from YAML files.

    Several files can be layered: later files override earlier ones key by
    key, so a shared base configuration can be refined per build.

    YAML format (abridged):
        key-clusters:
          main:
            matrix-columns: [{rows: 4}, {rows: 4, stagger: 3}]
            aliases:
              home: [0, 1]
              corner: [last, first]
        secondaries:
          above-home: {anchor: home, corner: NNE, segment: 0, offset: [0, 5, 0]}
        tweaks:
          bridge:
            - hull-around: [[home, SSE, 0, 3], [corner, SSW]]
              chunk-size: 2
    """

    def load(self, *paths: str | Path) -> KeyboardConfig:
        """Load and layer one or more YAML files.

        Args:
            paths: YAML files, lowest precedence first

        Returns:
            The validated configuration
        """
        if not paths:
            raise ValueError("At least one configuration file is required")
        document: dict[str, Any] = {}
        for path in paths:
            path = Path(path)
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, Mapping):
                raise ParseError(f"{path}: top level must be a mapping")
            document = merge_documents(document, data)
            logger.info("Read configuration layer %s", path)
        return parse_config(document)

    def load_string(self, yaml_string: str) -> KeyboardConfig:
        """Load a configuration from a YAML string."""
        return parse_config(yaml.safe_load(yaml_string))


def load(*paths: str | Path) -> KeyboardConfig:
    return ConfigLoader().load(*paths)


def load_string(yaml_string: str) -> KeyboardConfig:
    return ConfigLoader().load_string(yaml_string)
