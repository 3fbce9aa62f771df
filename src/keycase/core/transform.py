"""Rigid 3D transforms used for every resolved placement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Self, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation


def as_vector3(offset: Sequence[float] | NDArray[np.float64] | None) -> NDArray[np.float64]:
    """Pad a 2D or 3D offset to a 3-vector. ``None`` is the zero vector."""
    if offset is None:
        return np.zeros(3, dtype=np.float64)
    vector = np.asarray(offset, dtype=np.float64).ravel()
    if vector.size == 2:
        return np.array([vector[0], vector[1], 0.0], dtype=np.float64)
    if vector.size != 3:
        raise ValueError(f"Expected a 2D or 3D offset, got {vector.size} components")
    return vector.copy()


@dataclass(frozen=True, eq=False)
class Transform:
    """A position and orientation in the global frame of the keyboard.

    The frame is right-handed with x pointing east, y north and z up.
    Rotation is stored as Euler angles (XYZ order) in radians, matching
    ``scipy.spatial.transform.Rotation.from_euler("xyz", ...)``.

    Instances are immutable: the arrays are read-only and every operation
    returns a new transform.
    """

    translation: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )
    rotation: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )

    def __post_init__(self) -> None:
        for name in ("translation", "rotation"):
            value = np.array(getattr(self, name), dtype=np.float64)
            if value.shape != (3,):
                raise ValueError(f"Transform {name} must have 3 components")
            value.flags.writeable = False
            object.__setattr__(self, name, value)

    @property
    def position(self) -> NDArray[np.float64]:
        return self.translation

    @property
    def rotation_matrix(self) -> NDArray[np.float64]:
        return Rotation.from_euler("xyz", self.rotation).as_matrix()

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to a 4x4 homogeneous matrix (rotate, then translate)."""
        matrix = np.eye(4, dtype=np.float64)
        matrix[:3, :3] = self.rotation_matrix
        matrix[:3, 3] = self.translation
        return matrix

    @classmethod
    def from_matrix(cls, matrix: NDArray[np.float64]) -> Self:
        """Create a Transform from a 4x4 rigid transformation matrix."""
        matrix = np.asarray(matrix, dtype=np.float64)
        rotation = Rotation.from_matrix(matrix[:3, :3]).as_euler("xyz")
        return cls(translation=matrix[:3, 3], rotation=rotation)

    @staticmethod
    def identity() -> Transform:
        return Transform()

    @staticmethod
    def about_z(angle: float, translation: Sequence[float] | None = None) -> Transform:
        """A transform rotated ``angle`` radians about z, optionally translated."""
        return Transform(
            translation=as_vector3(translation),
            rotation=np.array([0.0, 0.0, angle], dtype=np.float64),
        )

    def __matmul__(self, other: Transform) -> Transform:
        """Compose: ``(a @ b)`` applies ``b`` in the local frame of ``a``."""
        return Transform.from_matrix(self.to_matrix() @ other.to_matrix())

    def apply(self, point: Sequence[float] | NDArray[np.float64]) -> NDArray[np.float64]:
        """Map a point from this transform's local frame to the global frame."""
        return self.rotation_matrix @ as_vector3(point) + self.translation

    def moved(self, offset: Sequence[float] | NDArray[np.float64] | None) -> Transform:
        """Translate by ``offset`` expressed in the local frame.

        Local x is lateral, local y is forward (the direction faced) and local
        z is vertical. A 2D offset has no vertical component.
        """
        local = as_vector3(offset)
        if not local.any():
            return self
        return Transform(
            translation=self.translation + self.rotation_matrix @ local,
            rotation=self.rotation,
        )

    def translated(self, vector: Sequence[float] | NDArray[np.float64]) -> Transform:
        """Translate by ``vector`` expressed in the global frame."""
        return Transform(translation=self.translation + as_vector3(vector), rotation=self.rotation)

    def turned(self, angle: float) -> Transform:
        """Rotate about this transform's own z axis."""
        if angle == 0:
            return self
        return self @ Transform.about_z(angle)

    def grounded(self) -> Transform:
        """The same orientation, dropped to z = 0."""
        translation = self.translation.copy()
        translation[2] = 0.0
        return Transform(translation=translation, rotation=self.rotation)

    def allclose(self, other: Transform, atol: float = 1e-9) -> bool:
        return bool(
            np.allclose(self.to_matrix(), other.to_matrix(), atol=atol)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(
            np.array_equal(self.translation, other.translation)
            and np.array_equal(self.rotation, other.rotation)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        t = ", ".join(f"{v:.3f}" for v in self.translation)
        r = ", ".join(f"{v:.3f}" for v in self.rotation)
        return f"Transform(translation=[{t}], rotation=[{r}])"
