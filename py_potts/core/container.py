"""
Location containers: the persisted form of a location.

A container holds the id, a representative center and the voxels a
location may occupy, optionally grouped by region. Converting a container
back into a location selects the requested number of voxels around the
center.
"""

from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .location import PottsLocation
from .regions import PottsLocations
from .selection import decrease, get_selected, increase
from .voxel import Region, Voxel

if TYPE_CHECKING:
    from .factory import PottsLocationFactory


class LocationContainer(BaseModel):
    """Serializable snapshot of a location."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Cell id")
    center: Optional[Voxel] = Field(default=None, description="Representative center voxel")
    voxels: List[Voxel] = Field(default_factory=list, description="Candidate or owned voxels")
    regions: Optional[Dict[Region, List[Voxel]]] = Field(default=None, description="Voxels grouped by region")

    def to_location(
        self,
        factory: "PottsLocationFactory",
        volume: Optional[int] = None,
        region_volumes: Optional[Dict[Region, int]] = None,
    ) -> PottsLocation:
        """
        Build a location holding ``volume`` voxels of this container.

        Voxels closest to the center are selected, then grown or shrunk to the
        target volume. When the container carries regions, each non-default
        region is selected the same way from its own voxels and assigned.

        Args:
            factory: Factory providing geometry, context and random source
            volume: Target volume; defaults to all container voxels
            region_volumes: Target volume per region; defaults to each
                region's voxel count

        Returns:
            PottsLocation, or PottsLocations if the container has regions
        """
        if volume is None:
            volume = len(self.voxels)
        voxels = self._select(volume, factory, self.voxels)

        if not self.regions:
            return PottsLocation(voxels, factory.geometry, factory.context)

        regions = [region for region in self.regions if region not in (Region.DEFAULT, Region.UNDEFINED)]
        location = PottsLocations(voxels, factory.geometry, factory.context, regions=regions)

        for region in regions:
            candidates = self.regions[region]
            target = len(candidates) if region_volumes is None else region_volumes.get(region, 0)
            for voxel in self._select(target, factory, candidates):
                location.assign(region, voxel)

        return location

    def _select(self, target: int, factory: "PottsLocationFactory", candidates: List[Voxel]) -> List[Voxel]:
        if target == len(candidates):
            selected = list(candidates)
        else:
            selected = get_selected(candidates, self.center, target)

        if len(selected) < target:
            increase(set(candidates), selected, target, factory.prng, factory.geometry)
        elif len(selected) > target:
            decrease(selected, target, factory.prng, factory.geometry)

        return selected
