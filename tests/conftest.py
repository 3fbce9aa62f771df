"""Shared fixtures: a small split-keyboard configuration."""

import copy

import pytest
import yaml

from keycase.config import parse_config
from keycase.layout import PlacementResolver

KEYBOARD_YAML = """
keys:
  pitch: 20
key-clusters:
  main:
    matrix-columns:
      - rows: 3
      - rows: 4
        stagger: 2
      - rows: 2
    position: [0, 0, 30]
    aliases:
      home: [0, 0]
      top: [1, last]
      far: [last, last]
  thumb:
    matrix-columns: [{rows: 2}, {rows: 2}]
    position: [-10, -40, 20]
    rotation: 90
    aliases:
      thumb-br: [last, first]
secondaries:
  above-home: {anchor: home, corner: NNE, offset: [0, 5, 0]}
  chained: {anchor: above-home, offset: [1, 0]}
tweaks:
  bridge:
    - hull-around: [[home, SSE, 0, 3], [top, NNW], [far, ENE, 1]]
      chunk-size: 2
  skirt:
    - [thumb-br, SSW, 0, 4]
"""


@pytest.fixture
def keyboard_yaml():
    return KEYBOARD_YAML


@pytest.fixture
def document(keyboard_yaml):
    """The sample configuration as a freshly deserialised tree."""
    return yaml.safe_load(keyboard_yaml)


@pytest.fixture
def config(document):
    return parse_config(document)


@pytest.fixture
def resolver(config):
    return PlacementResolver.from_config(config)


@pytest.fixture
def make_config(document):
    """Build a configuration from the sample with extra top-level sections."""
    def make(**sections):
        tree = dict(document)
        for key, value in sections.items():
            tree[key.replace("_", "-")] = value
        return parse_config(tree)
    return make


FEATURE_SECTIONS = {
    "mcu": {
        "include": True,
        "position": {"anchor": "home", "corner": "WNW"},
        "support": {"stop": {"anchor": "home", "direction": "N"}},
    },
    "connection": {"include": True, "position": {"anchor": "home", "corner": "SSW"}},
    "case": {
        "back-plate": {"include": True, "position": {"anchor": "home", "corner": "NNW"}},
        "foot-plates": {
            "include": True,
            "polygons": [{"points": [
                {"anchor": "home", "corner": "SSW"},
                {"anchor": "home", "corner": "SSE"},
                {"anchor": "top", "corner": "NNE"},
            ]}],
        },
        "leds": {"include": True, "cluster": "main", "amount": 3},
    },
}


@pytest.fixture
def feature_sections():
    """Sections that switch on every auxiliary feature."""
    return copy.deepcopy(FEATURE_SECTIONS)
