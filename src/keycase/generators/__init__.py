"""Solid generators."""

from .base import FeatureGenerator, SolidBuilder, build_tweak
from .solids import TrimeshBuilder

__all__ = ["FeatureGenerator", "SolidBuilder", "TrimeshBuilder", "build_tweak"]
