"""Split planes defined by a reference voxel and a unit normal."""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .geometry import Direction
from .voxel import Voxel

Vector = Tuple[float, float, float]


def unit_vector(vector: Sequence[float]) -> Vector:
    """Scale a vector to unit length."""
    array = np.asarray(vector, dtype=np.float64)
    if array.shape != (3,):
        raise ValueError(f"Plane normal must have 3 components, got {array.shape}")
    magnitude = float(np.linalg.norm(array))
    if magnitude == 0:
        raise ValueError("Plane normal must be non-zero")
    return tuple(float(v) for v in array / magnitude)


@dataclass(frozen=True)
class Plane:
    """Plane through ``reference`` with unit normal ``normal``."""

    reference: Voxel
    normal: Vector

    @classmethod
    def through(cls, reference: Voxel, normal: Union[Direction, Sequence[float]]) -> "Plane":
        """Build a plane from a direction or an arbitrary normal vector."""
        if isinstance(normal, Direction):
            normal = normal.vector
        return cls(reference, unit_vector(normal))

    def signed_distance(self, voxel: Voxel) -> float:
        nx, ny, nz = self.normal
        return (
            (voxel.x - self.reference.x) * nx
            + (voxel.y - self.reference.y) * ny
            + (voxel.z - self.reference.z) * nz
        )

    @staticmethod
    def rotate_normal(normal: Sequence[float], axis: Direction, degrees: float) -> Vector:
        """
        Rotate a normal about a direction's axis (Rodrigues' rotation).

        The normal is scaled to unit length before rotating, so the result
        is a unit vector.
        """
        v = np.asarray(unit_vector(normal))
        k = np.asarray(unit_vector(axis.vector))
        theta = math.radians(degrees)
        rotated = (
            v * math.cos(theta)
            + np.cross(k, v) * math.sin(theta)
            + k * float(np.dot(k, v)) * (1 - math.cos(theta))
        )
        return tuple(float(c) for c in rotated)
