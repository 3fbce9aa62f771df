"""Core geometry components."""

from .transform import Transform, as_vector3

__all__ = ["Transform", "as_vector3"]
