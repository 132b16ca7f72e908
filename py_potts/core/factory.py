"""
Location factory for initial tissue layouts.

The lattice is tiled into disjoint neighborhoods sized from the populations
of a series. Each neighborhood becomes a location container holding more
voxels than a cell needs; a location is later made from a container by
selecting voxels from the center outward.
"""

import math
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

import structlog

from .alea_prng import AleaPRNG
from .container import LocationContainer
from .geometry import Geometry
from .location import LocationContext, PottsLocation
from .selection import decrease, get_selected, increase
from .voxel import Region

if TYPE_CHECKING:
    from ..config.options import SeriesOptions

logger = structlog.get_logger()


class PottsLocationFactory:
    """Creates and holds location containers for a lattice."""

    def __init__(self, geometry: Geometry, prng: AleaPRNG, context: Optional[LocationContext] = None):
        self.geometry = geometry
        self.prng = prng
        self.context = context or LocationContext()
        self.locations: Dict[int, LocationContainer] = {}

    @staticmethod
    def convert(volume: float, height: float) -> int:
        """Smallest odd side whose square prism of the given height holds ``volume``."""
        if volume <= 0:
            return 0
        side = math.ceil(math.sqrt(volume / max(height, 1)))
        if side % 2 == 0:
            side += 1
        return side

    def get_voxels_per_height(self, series: "SeriesOptions") -> int:
        """Largest neighborhood height needed by any population."""
        height_range = 1
        for population in series.populations:
            height = min(series.height - 2, math.ceil(population.critical_height_mean))
            height_range = max(height_range, height)
        return height_range

    def get_voxels_per_side(self, series: "SeriesOptions", height_range: int) -> int:
        """Largest neighborhood side needed by any population, padding included."""
        side_range = 0
        for population in series.populations:
            side = self.convert(2 * population.critical_volume_mean, height_range) + population.padding
            side_range = max(side_range, side)
        return side_range

    def get_centers(self, series: "SeriesOptions", side_range: int, height_range: int):
        """Neighborhood centers in random order, lowest layers first."""
        centers = self.geometry.centers(
            series.length, series.width, series.height, series.margin, side_range, height_range
        )
        self.prng.shuffle(centers)
        centers.sort(key=lambda voxel: voxel.z)
        return centers

    def create_locations(self, series: "SeriesOptions") -> Dict[int, LocationContainer]:
        """
        Tile the lattice with location containers.

        Containers are numbered from 1. When any population defines regions,
        every container also gets a smaller candidate neighborhood per region.

        Args:
            series: Lattice size and population sizing

        Returns:
            Mapping of id to container (empty when no neighborhood fits)
        """
        height_range = self.get_voxels_per_height(series)
        side_range = self.get_voxels_per_side(series, height_range)

        if side_range == 0:
            logger.info("No location containers created", reason="zero side range")
            return self.locations

        centers = self.get_centers(series, side_range, height_range)

        region_keys: List[Region] = []
        for population in series.populations:
            for region in population.regions or {}:
                if region != Region.DEFAULT and region not in region_keys:
                    region_keys.append(region)

        next_id = len(self.locations) + 1
        for center in centers:
            voxels = self.geometry.possible(center, side_range, height_range)

            regions = None
            if region_keys:
                regions = {
                    region: self.geometry.possible(center, side_range - 2, height_range) for region in region_keys
                }

            self.locations[next_id] = LocationContainer(id=next_id, center=center, voxels=voxels, regions=regions)
            next_id += 1

        logger.info(
            "Created location containers",
            count=len(centers),
            side_range=side_range,
            height_range=height_range,
            regions=[region.name for region in region_keys],
        )
        return self.locations

    def load_locations(self, containers: Iterable[LocationContainer]) -> Dict[int, LocationContainer]:
        """Register previously saved containers by id."""
        for container in containers:
            self.locations[container.id] = container
        logger.info("Loaded location containers", count=len(self.locations))
        return self.locations

    def make_location(
        self,
        location_id: int,
        volume: int,
        region_volumes: Optional[Dict[Region, int]] = None,
    ) -> PottsLocation:
        """Build the location for a container id with the given volumes."""
        if location_id not in self.locations:
            raise ValueError(f"No location container with id {location_id}")
        return self.locations[location_id].to_location(self, volume, region_volumes)

    def get_selected(self, candidates, focus, n):
        return get_selected(candidates, focus, n)

    def increase(self, candidates, selected, target):
        return increase(candidates, selected, target, self.prng, self.geometry)

    def decrease(self, selected, target):
        return decrease(selected, target, self.prng, self.geometry)
