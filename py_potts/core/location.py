"""
Potts location bookkeeping and division.

A ``PottsLocation`` owns the voxels occupied by one cell and keeps volume,
surface, height and centroid current on every add and remove. Splitting a
location cuts it with a plane through its center (or an offset point),
repairs connectivity on both sides, balances their sizes and hands one side
to a new location.
"""

import math
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .alea_prng import AleaPRNG
from .connectivity import balance_voxels, connect_voxels, fill_empty_side, split_voxels
from .geometry import Direction, Geometry
from .plane import Plane
from .selection import get_selected
from .voxel import Region, Voxel

logger = structlog.get_logger()


class SplitRule(str, Enum):
    """Rule used to orient the split plane."""

    LONGEST_AXIS = "LONGEST_AXIS"  # cut across the longest diameter
    SHORTEST_AXIS = "SHORTEST_AXIS"  # legacy, cut along the shortest diameter


class LocationContext(BaseModel):
    """Immutable sizing and iteration parameters shared by locations."""

    model_config = ConfigDict(frozen=True)

    balance_difference: float = Field(default=0.05, ge=0, le=1)
    diameter_ratio: float = Field(default=0.9, gt=0, le=1)
    split_probability: float = Field(default=0.5, ge=0, le=1)
    split_rule: SplitRule = Field(default=SplitRule.LONGEST_AXIS)
    max_connect_iterations: int = Field(default=100, ge=1)
    max_balance_iterations: int = Field(default=10000, ge=1)
    max_region_iterations: int = Field(default=1000, ge=1)

    @classmethod
    def from_settings(cls, config=None, **overrides) -> "LocationContext":
        """Build a context from environment-driven settings."""
        from ..config.settings import Settings

        config = config or Settings()
        values = {
            "balance_difference": config.balance_difference,
            "diameter_ratio": config.diameter_ratio,
            "split_probability": config.split_probability,
            "split_rule": config.split_rule,
            "max_connect_iterations": config.max_connect_iterations,
            "max_balance_iterations": config.max_balance_iterations,
            "max_region_iterations": config.max_region_iterations,
        }
        values.update(overrides)
        return cls(**values)


DEFAULT_CONTEXT = LocationContext()


class PottsLocation:
    """Voxels occupied by a single cell on a potts lattice."""

    def __init__(
        self,
        voxels: Iterable[Voxel],
        geometry: Geometry,
        context: Optional[LocationContext] = None,
    ):
        self._geometry = geometry
        self._context = context or DEFAULT_CONTEXT
        self._reset(voxels)

    # Bookkeeping

    def _reset(self, voxels: Iterable[Voxel]) -> None:
        """Replace all voxels and recompute every measure from scratch."""
        self._voxels: Dict[Voxel, None] = {}
        for voxel in voxels:
            self._voxels[Voxel(*voxel)] = None

        self._sums = [0, 0, 0]
        self._z_counts: Dict[int, int] = {}
        for voxel in self._voxels:
            self._track(voxel, 1)

        self._surface = self._geometry.calculate_surface(self._voxels)

    def _track(self, voxel: Voxel, sign: int) -> None:
        self._sums[0] += sign * voxel.x
        self._sums[1] += sign * voxel.y
        self._sums[2] += sign * voxel.z

        count = self._z_counts.get(voxel.z, 0) + sign
        if count:
            self._z_counts[voxel.z] = count
        else:
            del self._z_counts[voxel.z]

    def _insert(self, voxel: Voxel) -> None:
        self._surface += self._geometry.update_surface(self._voxels, voxel)
        self._voxels[voxel] = None
        self._track(voxel, 1)

    def _delete(self, voxel: Voxel) -> None:
        del self._voxels[voxel]
        self._surface -= self._geometry.update_surface(self._voxels, voxel)
        self._track(voxel, -1)

    def add(self, x: int, y: int, z: int = 0) -> None:
        """Add a voxel; adding an owned voxel does nothing."""
        voxel = Voxel(x, y, z)
        if voxel in self._voxels:
            return
        self._insert(voxel)

    def remove(self, x: int, y: int, z: int = 0) -> None:
        """Remove a voxel; removing a voxel not owned does nothing."""
        voxel = Voxel(x, y, z)
        if voxel not in self._voxels:
            return
        self._delete(voxel)

    def __contains__(self, voxel) -> bool:
        return Voxel(*voxel) in self._voxels

    def __iter__(self) -> Iterator[Voxel]:
        return iter(list(self._voxels))

    def __len__(self) -> int:
        return len(self._voxels)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(volume={self.volume}, surface={self.surface}, height={self.height})"

    @property
    def geometry(self) -> Geometry:
        return self._geometry

    @property
    def context(self) -> LocationContext:
        return self._context

    @property
    def voxels(self) -> List[Voxel]:
        return list(self._voxels)

    @property
    def volume(self) -> int:
        return len(self._voxels)

    @property
    def surface(self) -> int:
        return self._surface

    @property
    def height(self) -> int:
        if not self._z_counts:
            return 0
        return self._geometry.height_of_span(min(self._z_counts), max(self._z_counts))

    @property
    def centroid(self) -> Optional[Tuple[float, float, float]]:
        """Mean voxel coordinate, or None when empty."""
        volume = len(self._voxels)
        if volume == 0:
            return None
        return tuple(total / volume for total in self._sums)

    # Region-aware accessors return whole-location values for a single region

    def get_voxels(self, region: Optional[Region] = None) -> List[Voxel]:
        return self.voxels

    def get_volume(self, region: Optional[Region] = None) -> int:
        return self.volume

    def get_surface(self, region: Optional[Region] = None) -> int:
        return self.surface

    def get_height(self, region: Optional[Region] = None) -> int:
        return self.height

    def get_centroid(self, region: Optional[Region] = None) -> Optional[Tuple[float, float, float]]:
        return self.centroid

    def get_neighbors(self, voxel: Voxel) -> List[Voxel]:
        """Owned voxels face-adjacent to ``voxel``."""
        return [neighbor for neighbor in self._geometry.neighbors(voxel) if neighbor in self._voxels]

    def is_consistent(self) -> bool:
        """Compare the running measures against a from-scratch recomputation."""
        voxels = list(self._voxels)
        if self._surface != self._geometry.calculate_surface(voxels):
            return False
        if self.height != self._geometry.calculate_height(voxels):
            return False
        if not voxels:
            return self.centroid is None
        expected = np.mean(np.asarray(voxels, dtype=np.float64), axis=0)
        return bool(np.allclose(self.centroid, expected, rtol=0, atol=1e-9))

    # Positions

    def get_center(self) -> Optional[Voxel]:
        """
        Centroid rounded to the nearest lattice site (halves round up).

        The site is not necessarily occupied.
        """
        centroid = self.centroid
        if centroid is None:
            return None
        return Voxel(*(int(math.floor(c + 0.5)) for c in centroid))

    def get_offset(self, percentages: Sequence[float]) -> Optional[Voxel]:
        """
        Site at the given percentages across the bounding box.

        One value applies to every axis, two values set x and y with z at
        its minimum, and three values set x, y and z.
        """
        count = len(percentages)
        if count == 1:
            percentages = [percentages[0]] * 3
        elif count == 2:
            percentages = [percentages[0], percentages[1], 0]
        elif count != 3:
            raise ValueError(f"Offset needs 1, 2 or 3 percentages, got {count}")

        if not self._voxels:
            return None

        coordinates = np.asarray(list(self._voxels), dtype=np.int64)
        minimum = coordinates.min(axis=0)
        maximum = coordinates.max(axis=0)
        offset = [
            int(low + (high - low) * percent / 100.0)
            for low, high, percent in zip(minimum.tolist(), maximum.tolist(), percentages)
        ]
        return Voxel(*offset)

    def adjust(self, voxel: Voxel) -> Optional[Voxel]:
        """Return ``voxel`` if owned, otherwise the closest owned voxel."""
        if voxel in self._voxels:
            return voxel

        closest = None
        minimum = math.inf
        for candidate in self._voxels:
            distance = voxel.distance(candidate)
            if distance < minimum:
                minimum = distance
                closest = candidate
        return closest

    def get_selected(self, focus: Voxel, n: float) -> List[Voxel]:
        """The ``n`` owned voxels closest to ``focus``."""
        return get_selected(list(self._voxels), focus, n)

    # Lattice

    def clear(self, ids: np.ndarray, regions: Optional[np.ndarray] = None) -> None:
        """Zero this location's lattice sites and drop all voxels."""
        for voxel in self._voxels:
            ids[voxel.z, voxel.x, voxel.y] = 0
            if regions is not None:
                regions[voxel.z, voxel.x, voxel.y] = 0
        self._reset(())

    def update(self, cell_id: int, ids: np.ndarray, regions: Optional[np.ndarray] = None) -> None:
        """Write ``cell_id`` into this location's lattice sites."""
        for voxel in self._voxels:
            ids[voxel.z, voxel.x, voxel.y] = cell_id

    def convert(self, cell_id: int):
        """Snapshot as a ``LocationContainer``."""
        from .container import LocationContainer

        return LocationContainer(id=cell_id, center=self.get_center(), voxels=self.voxels)

    # Division

    def _make_location(self, voxels: List[Voxel]) -> "PottsLocation":
        return type(self)(voxels, self._geometry, self._context)

    def get_direction(self, prng: AleaPRNG) -> Direction:
        """
        Direction whose vector is used as the split plane normal.

        Under the longest-axis rule, directions whose diameter through the
        center is within ``diameter_ratio`` of the largest are candidates.
        Under the shortest-axis rule, the directions with the smallest
        non-zero diameter are candidates and the orthogonal of the chosen one
        is returned. Ties are broken at random.
        """
        diameters = self._geometry.diameters(self._voxels, self.get_center())

        if self._context.split_rule == SplitRule.SHORTEST_AXIS:
            nonzero = {direction: size for direction, size in diameters.items() if size > 0} or diameters
            minimum = min(nonzero.values())
            candidates = [direction for direction in self._geometry.directions if nonzero.get(direction) == minimum]
            return self._geometry.orthogonal[prng.choice(candidates)]

        maximum = max(diameters.values())
        threshold = self._context.diameter_ratio * maximum
        candidates = [direction for direction in self._geometry.directions if diameters[direction] >= threshold]
        return prng.choice(candidates)

    def split(
        self,
        prng: AleaPRNG,
        offset: Optional[Sequence[float]] = None,
        direction: Optional[Direction] = None,
        normal: Optional[Sequence[float]] = None,
        probability: Optional[float] = None,
    ) -> "PottsLocation":
        """
        Split this location in two and return the other half.

        Args:
            prng: Random source for direction, ties and side choice
            offset: Percentages through the bounding box for the plane point;
                the center is used when omitted, and only center cuts are
                balanced
            direction: Direction whose vector is the plane normal
            normal: Explicit plane normal, takes precedence over ``direction``
            probability: Chance this location keeps the first side

        Returns:
            New location holding the voxels this one gave up
        """
        if self.volume < 2:
            raise ValueError(f"Cannot split a location with {self.volume} voxel(s)")

        if offset is None:
            point = self.get_center()
            balance = True
        else:
            point = self.get_offset(offset)
            balance = False

        if normal is None:
            if direction is None:
                direction = self.get_direction(prng)
            normal = direction.vector

        plane = Plane.through(point, normal)
        side_a, side_b = split_voxels(plane, self._voxels, prng)

        context = self._context
        connect_voxels(side_a, side_b, self._geometry, prng, context.max_connect_iterations)
        if balance:
            balance_voxels(
                side_a,
                side_b,
                self._geometry,
                prng,
                context.balance_difference,
                context.max_balance_iterations,
                context.max_connect_iterations,
            )
        fill_empty_side(side_a, side_b, self._geometry, prng)

        if probability is None:
            probability = context.split_probability

        if prng.random() < probability:
            kept, given = side_a, side_b
        else:
            kept, given = side_b, side_a

        logger.debug(
            "Split location",
            point=tuple(point),
            normal=tuple(plane.normal),
            kept=len(kept),
            given=len(given),
        )

        return self._separate(kept, given, prng)

    def _separate(self, kept: List[Voxel], given: List[Voxel], prng: AleaPRNG) -> "PottsLocation":
        self._reset(kept)
        return self._make_location(given)

