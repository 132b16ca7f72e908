"""
Series and population options for the location factory.

Only the sizing inputs the factory reads are modeled here; population
parameters used by cell behavior live with the simulation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.voxel import Region


class PopulationOptions(BaseModel):
    """Sizing parameters for one cell population."""

    code: str = Field(default="A", description="Population code")
    critical_volume_mean: float = Field(..., ge=0, description="Mean critical volume in voxels")
    critical_height_mean: float = Field(..., ge=0, description="Mean critical height in voxels")
    padding: int = Field(default=0, ge=0, description="Extra voxels added to the neighborhood side")
    init: int = Field(default=0, ge=0, description="Number of cells to seed")
    regions: Optional[Dict[Region, float]] = Field(
        default=None, description="Region name to fraction of cell volume"
    )

    @field_validator("regions", mode="before")
    @classmethod
    def parse_regions(cls, value):
        if value is None:
            return None
        return {Region[key] if isinstance(key, str) else Region(key): fraction for key, fraction in value.items()}

    @field_validator("regions")
    @classmethod
    def check_fractions(cls, value):
        if value is None:
            return None
        for region, fraction in value.items():
            if region == Region.UNDEFINED:
                raise ValueError("UNDEFINED is not a valid population region")
            if not 0 <= fraction <= 1:
                raise ValueError(f"Region fraction for {region.name} must be between 0 and 1")
        return value


class SeriesOptions(BaseModel):
    """Lattice dimensions and the populations seeded into it."""

    name: str = Field(default="series", description="Series name")
    length: int = Field(..., ge=1, description="Lattice size in x")
    width: int = Field(..., ge=1, description="Lattice size in y")
    height: int = Field(default=1, ge=1, description="Lattice size in z")
    margin: int = Field(default=0, ge=0, description="Sites kept free along each x and y edge")
    populations: List[PopulationOptions] = Field(default_factory=list)

    @property
    def dimensions(self) -> int:
        return 3 if self.height > 1 else 2

    @property
    def has_regions(self) -> bool:
        return any(population.regions for population in self.populations)
