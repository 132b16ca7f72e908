"""
Potts locations partitioned into sub-cellular regions.

A single voxel-to-region map decides membership. Each registered region
also keeps a nested ``PottsLocation`` so its volume, surface, height and
centroid stay current; those nested locations are only changed through the
map operations below.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .connectivity import check_voxels
from .geometry import Geometry
from .location import LocationContext, PottsLocation
from .selection import decrease, increase
from .voxel import Region, Voxel

logger = structlog.get_logger()


class PottsLocations(PottsLocation):
    """Potts location whose voxels are split among regions."""

    def __init__(
        self,
        voxels: Iterable[Voxel],
        geometry: Geometry,
        context: Optional[LocationContext] = None,
        regions: Iterable[Region] = (),
    ):
        self._registered = [Region.DEFAULT]
        super().__init__(voxels, geometry, context)
        for region in regions:
            self._register(region)

    def _register(self, region: Region) -> None:
        if region == Region.UNDEFINED:
            raise ValueError("UNDEFINED cannot hold voxels")
        if region not in self._registered:
            self._registered.append(region)
            self._locations[region] = PottsLocation((), self._geometry, self._context)

    def _reset(self, voxels: Iterable[Voxel]) -> None:
        super()._reset(voxels)
        self._regions: Dict[Voxel, Region] = {voxel: Region.DEFAULT for voxel in self._voxels}
        self._locations: Dict[Region, PottsLocation] = {
            region: PottsLocation((), self._geometry, self._context) for region in self._registered
        }
        self._locations[Region.DEFAULT] = PottsLocation(self._voxels, self._geometry, self._context)

    @property
    def regions(self) -> List[Region]:
        """Registered regions, default first."""
        return list(self._registered)

    def get_region(self, voxel: Voxel) -> Optional[Region]:
        return self._regions.get(Voxel(*voxel))

    def add(self, x: int, y: int, z: int = 0, region: Optional[Region] = None) -> None:
        """Add a voxel to a region (default region when omitted)."""
        voxel = Voxel(x, y, z)
        if voxel in self._voxels:
            return
        if region is None:
            region = Region.DEFAULT
        self._register(region)
        self._insert(voxel)
        self._regions[voxel] = region
        self._locations[region]._insert(voxel)

    def remove(self, x: int, y: int, z: int = 0, region: Optional[Region] = None) -> None:
        """Remove a voxel; with a region given, only if it belongs to that region."""
        voxel = Voxel(x, y, z)
        current = self._regions.get(voxel)
        if current is None or (region is not None and region != current):
            return
        self._delete(voxel)
        del self._regions[voxel]
        self._locations[current]._delete(voxel)

    def assign(self, region: Region, voxel: Voxel) -> None:
        """Move an owned voxel into ``region``."""
        voxel = Voxel(*voxel)
        current = self._regions.get(voxel)
        if current is None or current == region:
            return
        self._register(region)
        self._locations[current]._delete(voxel)
        self._locations[region]._insert(voxel)
        self._regions[voxel] = region

    def _region_location(self, region: Optional[Region]) -> Optional[PottsLocation]:
        if region is None:
            return self
        return self._locations.get(region)

    def get_voxels(self, region: Optional[Region] = None) -> List[Voxel]:
        location = self._region_location(region)
        return location.voxels if location is not None else []

    def get_volume(self, region: Optional[Region] = None) -> int:
        location = self._region_location(region)
        return location.volume if location is not None else 0

    def get_surface(self, region: Optional[Region] = None) -> int:
        location = self._region_location(region)
        return location.surface if location is not None else 0

    def get_height(self, region: Optional[Region] = None) -> int:
        location = self._region_location(region)
        return location.height if location is not None else 0

    def get_centroid(self, region: Optional[Region] = None) -> Optional[Tuple[float, float, float]]:
        location = self._region_location(region)
        return location.centroid if location is not None else None

    def is_consistent(self) -> bool:
        if not super().is_consistent():
            return False
        counted = 0
        for region, location in self._locations.items():
            expected = [voxel for voxel, owner in self._regions.items() if owner == region]
            if set(expected) != set(location.voxels) or not location.is_consistent():
                return False
            counted += location.volume
        return counted == self.volume and set(self._regions) == set(self._voxels)

    def distribute(self, region: Region, target: int, prng: AleaPRNG) -> None:
        """
        Reassign voxels so ``region`` holds a connected patch of ``target`` voxels.

        The region's current voxels return to the default region. A patch is
        then selected around the region's previous center (or the default
        region's center when the region was empty), trimmed to a connected
        set, and grown or shrunk to the target.

        Raises:
            ValueError: If the region is not registered on this location
        """
        if region not in self._registered:
            raise ValueError(f"Region {region.name} is not registered on this location")
        if region == Region.DEFAULT:
            return

        region_location = self._locations[region]
        if region_location.volume:
            center = region_location.adjust(region_location.get_center())
            for voxel in region_location.voxels:
                self.assign(Region.DEFAULT, voxel)
        else:
            default_location = self._locations[Region.DEFAULT]
            center = default_location.adjust(default_location.get_center())

        if target <= 0 or center is None:
            return

        selected = self._geometry.select_radius(list(self._voxels), center, target)
        if not selected:
            selected = [center]
        check_voxels(selected, self._geometry, prng, update=True)

        if len(selected) < target:
            increase(
                self._voxels,
                selected,
                target,
                prng,
                self._geometry,
                self._context.max_region_iterations,
            )
        elif len(selected) > target:
            decrease(selected, target, prng, self._geometry)

        for voxel in selected:
            self.assign(region, voxel)

    # Lattice

    def update(self, cell_id: int, ids: np.ndarray, regions: Optional[np.ndarray] = None) -> None:
        """Write ``cell_id`` and each voxel's region tag into the lattices."""
        super().update(cell_id, ids, regions)
        if regions is None:
            return
        for voxel, region in self._regions.items():
            regions[voxel.z, voxel.x, voxel.y] = region.value

    def convert(self, cell_id: int):
        from .container import LocationContainer

        return LocationContainer(
            id=cell_id,
            center=self.get_center(),
            voxels=self.voxels,
            regions={region: self.get_voxels(region) for region in self._registered},
        )

    # Division

    def _make_location(self, voxels: List[Voxel]) -> "PottsLocations":
        return PottsLocations(voxels, self._geometry, self._context, regions=self._registered)

    def _separate(self, kept: List[Voxel], given: List[Voxel], prng: AleaPRNG) -> "PottsLocations":
        total = self.volume
        counts = {region: self.get_volume(region) for region in self._registered if region != Region.DEFAULT}
        fractions = {region: count / total for region, count in counts.items()}

        self._reset(kept)
        daughter = self._make_location(given)

        for region, fraction in fractions.items():
            self.distribute(region, int(fraction * self.volume), prng)
            remainder = counts[region] - self.get_volume(region)
            daughter.distribute(region, min(max(remainder, 0), daughter.volume), prng)

        logger.debug(
            "Redistributed regions",
            regions={region.name: (self.get_volume(region), daughter.get_volume(region)) for region in fractions},
        )
        return daughter
