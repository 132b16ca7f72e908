"""
Lattice geometry strategies for 2D and 3D potts locations.

A ``Geometry`` bundles every rule that depends on dimensionality: the
neighborhood used for surface and connectivity, the candidate directions used
to measure diameters, the height convention, and the shapes used by the
location factory to lay out candidate neighborhoods. Locations receive one at
construction instead of subclassing per dimension.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Collection, Dict, Iterable, List, Mapping, Sequence, Tuple

from .voxel import Voxel


class Direction(Enum):
    """
    Lattice directions used to measure diameters and orient split planes.

    Each member is named after the split plane that cuts across it; its
    vector is both the axis along which the diameter is measured and the
    normal of that plane.
    """

    YZ_PLANE = (1, 0, 0)
    ZX_PLANE = (0, 1, 0)
    XY_PLANE = (0, 0, 1)
    POSITIVE_XY = (1, 1, 0)
    NEGATIVE_XY = (1, -1, 0)
    POSITIVE_YZ = (0, 1, 1)
    NEGATIVE_YZ = (0, 1, -1)
    POSITIVE_ZX = (1, 0, 1)
    NEGATIVE_ZX = (-1, 0, 1)

    @property
    def vector(self) -> Tuple[int, int, int]:
        return self.value

    def step(self, offset: Tuple[int, int, int]):
        """
        Number of lattice steps along this direction to reach ``offset``.

        Returns None if the offset does not lie on the line through the
        origin parallel to the direction.
        """
        steps = None
        for component, unit in zip(offset, self.value):
            if unit == 0:
                if component != 0:
                    return None
                continue
            t = component * unit
            if steps is None:
                steps = t
            elif steps != t:
                return None
        return steps


NEIGHBORS_2D = ((0, -1, 0), (1, 0, 0), (0, 1, 0), (-1, 0, 0))
NEIGHBORS_3D = NEIGHBORS_2D + ((0, 0, 1), (0, 0, -1))

DIRECTIONS_2D = (
    Direction.YZ_PLANE,
    Direction.ZX_PLANE,
    Direction.POSITIVE_XY,
    Direction.NEGATIVE_XY,
)

DIRECTIONS_3D = (
    Direction.YZ_PLANE,
    Direction.ZX_PLANE,
    Direction.XY_PLANE,
    Direction.POSITIVE_XY,
    Direction.NEGATIVE_XY,
    Direction.POSITIVE_YZ,
    Direction.NEGATIVE_YZ,
    Direction.POSITIVE_ZX,
    Direction.NEGATIVE_ZX,
)

ORTHOGONAL_2D = {
    Direction.YZ_PLANE: Direction.ZX_PLANE,
    Direction.ZX_PLANE: Direction.YZ_PLANE,
    Direction.POSITIVE_XY: Direction.NEGATIVE_XY,
    Direction.NEGATIVE_XY: Direction.POSITIVE_XY,
}

ORTHOGONAL_3D = {
    Direction.YZ_PLANE: Direction.ZX_PLANE,
    Direction.ZX_PLANE: Direction.XY_PLANE,
    Direction.XY_PLANE: Direction.YZ_PLANE,
    Direction.POSITIVE_XY: Direction.NEGATIVE_XY,
    Direction.NEGATIVE_XY: Direction.POSITIVE_XY,
    Direction.POSITIVE_YZ: Direction.NEGATIVE_YZ,
    Direction.NEGATIVE_YZ: Direction.POSITIVE_YZ,
    Direction.POSITIVE_ZX: Direction.NEGATIVE_ZX,
    Direction.NEGATIVE_ZX: Direction.POSITIVE_ZX,
}


@dataclass(frozen=True)
class Geometry:
    """Dimensionality rules for a potts lattice."""

    dimensions: int
    neighbor_offsets: Tuple[Tuple[int, int, int], ...]
    directions: Tuple[Direction, ...]
    orthogonal: Mapping[Direction, Direction] = field(default_factory=dict)

    @property
    def is_3d(self) -> bool:
        return self.dimensions == 3

    def neighbors(self, voxel: Voxel) -> List[Voxel]:
        """Face-adjacent neighbors of a voxel."""
        return [voxel.shift(dx, dy, dz) for dx, dy, dz in self.neighbor_offsets]

    def calculate_surface(self, voxels: Collection[Voxel]) -> int:
        """Count faces of the set that border unoccupied sites."""
        occupied = voxels if isinstance(voxels, (set, frozenset, dict)) else set(voxels)
        surface = 0
        for voxel in occupied:
            for neighbor in self.neighbors(voxel):
                if neighbor not in occupied:
                    surface += 1
        return surface

    def update_surface(self, voxels: Collection[Voxel], voxel: Voxel) -> int:
        """
        Local change in surface when ``voxel`` joins (or leaves) ``voxels``.

        Each unoccupied neighbor contributes one exposed face and each
        occupied neighbor hides one; add the result on insertion and
        subtract it on removal.
        """
        change = 0
        for neighbor in self.neighbors(voxel):
            if neighbor in voxels:
                change -= 1
            else:
                change += 1
        return change

    def height_of_span(self, min_z: int, max_z: int) -> int:
        """Height of a non-empty set spanning ``min_z`` to ``max_z``."""
        if self.is_3d:
            return max_z - min_z + 1
        return 1

    def calculate_height(self, voxels: Iterable[Voxel]) -> int:
        zs = [voxel.z for voxel in voxels]
        if not zs:
            return 0
        return self.height_of_span(min(zs), max(zs))

    def diameters(self, voxels: Iterable[Voxel], focus: Voxel) -> Dict[Direction, int]:
        """
        Extent of the voxels along each candidate direction through ``focus``.

        Only voxels on the line through the focus parallel to a direction
        count toward that direction; directions with no such voxel have a
        diameter of zero.
        """
        minimums = {direction: None for direction in self.directions}
        maximums = {direction: None for direction in self.directions}

        for voxel in voxels:
            offset = (voxel.x - focus.x, voxel.y - focus.y, voxel.z - focus.z)
            for direction in self.directions:
                steps = direction.step(offset)
                if steps is None:
                    continue
                if minimums[direction] is None or steps < minimums[direction]:
                    minimums[direction] = steps
                if maximums[direction] is None or steps > maximums[direction]:
                    maximums[direction] = steps

        return {
            direction: (0 if minimums[direction] is None else maximums[direction] - minimums[direction] + 1)
            for direction in self.directions
        }

    def select_radius(self, voxels: Sequence[Voxel], focus: Voxel, n: float) -> List[Voxel]:
        """
        Voxels within the radius of a disc (2D) or column (3D) of ``n`` voxels.

        Distances are measured in the xy plane; in 3D the disc area is
        spread over the height of the voxel set.
        """
        if self.is_3d:
            height = self.calculate_height(voxels)
            if height == 0:
                return []
            radius = math.sqrt(n / height / math.pi)
        else:
            radius = math.sqrt(n / math.pi)

        return [
            voxel
            for voxel in voxels
            if math.sqrt((focus.x - voxel.x) ** 2 + (focus.y - voxel.y) ** 2) < radius
        ]

    def possible(self, focus: Voxel, side_range: int, height_range: int) -> List[Voxel]:
        """Bounding neighborhood of candidate voxels centered on ``focus``."""
        if side_range <= 0:
            return []
        half = (side_range - 1) // 2
        if self.is_3d:
            if height_range <= 0:
                return []
            half_height = (height_range - 1) // 2
            z_values = range(focus.z - half_height, focus.z - half_height + height_range)
        else:
            z_values = (0,)

        return [
            Voxel(x, y, z)
            for z in z_values
            for x in range(focus.x - half, focus.x - half + side_range)
            for y in range(focus.y - half, focus.y - half + side_range)
        ]

    def centers(
        self,
        length: int,
        width: int,
        height: int,
        margin: int,
        side_range: int,
        height_range: int,
    ) -> List[Voxel]:
        """
        Evenly spaced neighborhood centers that tile the lattice interior.

        The outermost lattice sites and ``margin`` sites on each side in x
        and y are never covered, so neighborhoods never overlap or touch
        the lattice boundary.
        """
        if side_range <= 0:
            return []
        xs = _tile_positions(length, margin, side_range)
        ys = _tile_positions(width, margin, side_range)
        if self.is_3d:
            zs = _tile_positions(height, 0, max(height_range, 1))
        else:
            zs = [0]
        return [Voxel(x, y, z) for z in zs for x in xs for y in ys]


def _tile_positions(size: int, margin: int, step: int) -> List[int]:
    count = (size - 2 - 2 * margin) // step
    start = margin + 1 + (step - 1) // 2
    return [start + i * step for i in range(max(count, 0))]


GEOMETRY_2D = Geometry(
    dimensions=2,
    neighbor_offsets=NEIGHBORS_2D,
    directions=DIRECTIONS_2D,
    orthogonal=ORTHOGONAL_2D,
)

GEOMETRY_3D = Geometry(
    dimensions=3,
    neighbor_offsets=NEIGHBORS_3D,
    directions=DIRECTIONS_3D,
    orthogonal=ORTHOGONAL_3D,
)


def get_geometry(dimensions: int) -> Geometry:
    if dimensions == 2:
        return GEOMETRY_2D
    if dimensions == 3:
        return GEOMETRY_3D
    raise ValueError(f"Unsupported lattice dimensions: {dimensions}")
