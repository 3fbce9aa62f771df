"""Configuration parsing and the typed configuration tree."""

from .loader import ConfigLoader, load, load_string, parse_config
from .types import KeyboardConfig

__all__ = ["ConfigLoader", "KeyboardConfig", "load", "load_string", "parse_config"]
