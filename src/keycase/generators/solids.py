"""Solid construction with trimesh."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import trimesh
from numpy.typing import NDArray
from shapely.geometry import Polygon

from ..core.transform import Transform

# Corners of a unit cube centred on the origin.
POST_CORNERS = np.array(
    [[x, y, z] for x in (-0.5, 0.5) for y in (-0.5, 0.5) for z in (-0.5, 0.5)],
    dtype=np.float64,
)


@dataclass
class TrimeshBuilder:
    """Builds solids as ``trimesh.Trimesh`` objects.

    Hull points are widened into small cubic posts so that a hull around
    points on one wall profile (all in one plane) still has volume.

    Attributes:
        post_size: Edge length of the post placed at every hull point
    """

    post_size: float = 1.0

    def posts(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Vertices of the posts around ``(n, 3)`` points."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        corners = points[:, np.newaxis, :] + POST_CORNERS[np.newaxis, :, :] * self.post_size
        return corners.reshape(-1, 3)

    def hull(self, points: NDArray[np.float64]) -> trimesh.Trimesh:
        return trimesh.convex.convex_hull(self.posts(points))

    def union(self, solids: Sequence[trimesh.Trimesh]) -> trimesh.Trimesh:
        """Combine solids into one mesh.

        Overlapping solids are concatenated rather than merged by a boolean
        operation; slicers and CAD tools treat the result as their union.
        """
        solids = [solid for solid in solids if solid is not None and len(solid.faces)]
        if not solids:
            return trimesh.Trimesh()
        if len(solids) == 1:
            return solids[0]
        return trimesh.util.concatenate(solids)

    def box(self, size: Sequence[float], transform: Transform) -> trimesh.Trimesh:
        return trimesh.creation.box(extents=size, transform=transform.to_matrix())

    def cylinder(self, radius: float, height: float, transform: Transform) -> trimesh.Trimesh:
        return trimesh.creation.cylinder(
            radius=radius, height=height, transform=transform.to_matrix()
        )

    def plate(
        self, polygon: NDArray[np.float64], height: float, base: float = 0.0
    ) -> trimesh.Trimesh:
        outline = Polygon(np.asarray(polygon, dtype=np.float64)[:, :2])
        if not outline.is_valid:
            outline = outline.buffer(0)
        return trimesh.creation.extrude_polygon(
            outline, height, transform=Transform(translation=[0.0, 0.0, base]).to_matrix()
        )
