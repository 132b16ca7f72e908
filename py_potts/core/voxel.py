"""
Voxel and region primitives shared by every location type.

A voxel is a single integer lattice site. Regions tag sub-cellular
compartments and are written into the region lattice by their integer value.
"""

from enum import IntEnum
from typing import Iterable, List, NamedTuple, Sequence


class Voxel(NamedTuple):
    """Integer lattice coordinate (z is always 0 in 2D lattices)."""

    x: int
    y: int
    z: int = 0

    def distance(self, other: "Voxel") -> float:
        """Euclidean distance to another voxel."""
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2) ** 0.5

    def shift(self, dx: int, dy: int, dz: int = 0) -> "Voxel":
        return Voxel(self.x + dx, self.y + dy, self.z + dz)


class Region(IntEnum):
    """Sub-cellular regions, valued by the tag written into the region lattice."""

    UNDEFINED = 0  # no region
    DEFAULT = 1  # cytoplasm
    NUCLEUS = 2


def voxel_sort_key(voxel: Voxel):
    """Ordering used for persisted voxel lists (z first, then x, then y)."""
    return (voxel.z, voxel.x, voxel.y)


def sorted_voxels(voxels: Iterable[Voxel]) -> List[Voxel]:
    return sorted(voxels, key=voxel_sort_key)


def as_voxel(value: Sequence[int]) -> Voxel:
    """Coerce a 2- or 3-item coordinate sequence into a Voxel."""
    if isinstance(value, Voxel):
        return value
    if len(value) == 2:
        return Voxel(int(value[0]), int(value[1]), 0)
    if len(value) == 3:
        return Voxel(int(value[0]), int(value[1]), int(value[2]))
    raise ValueError(f"Voxel coordinates must have 2 or 3 values, got {len(value)}")
