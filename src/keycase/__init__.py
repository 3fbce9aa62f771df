"""Keycase: parametric keyboard case geometry from anchored configuration."""

from .case import CaseModel, build_case
from .config import KeyboardConfig, load, load_string, parse_config
from .layout import Corner, Direction, PlacementResolver

__all__ = [
    "CaseModel",
    "Corner",
    "Direction",
    "KeyboardConfig",
    "PlacementResolver",
    "build_case",
    "load",
    "load_string",
    "parse_config",
]
