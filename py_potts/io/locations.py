"""
JSON persistence of location containers.

Files hold a list of entries of the form::

    {"id": 1, "center": [x, y, z],
     "location": [{"region": "DEFAULT", "voxels": [[x, y, z], ...]}]}

Voxel lists are sorted by (z, x, y). A location without regions is written
as a single entry with region ``UNDEFINED``.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import structlog

from ..core.container import LocationContainer
from ..core.voxel import Region, as_voxel, sorted_voxels

logger = structlog.get_logger()

PathLike = Union[str, Path]


def container_to_dict(container: LocationContainer) -> Dict[str, Any]:
    if container.regions:
        tagged = {
            region: voxels for region, voxels in container.regions.items() if region != Region.DEFAULT
        }
        assigned = {voxel for voxels in tagged.values() for voxel in voxels}
        tagged = {Region.DEFAULT: [voxel for voxel in container.voxels if voxel not in assigned], **tagged}
        groups = [
            {"region": region.name, "voxels": [list(voxel) for voxel in sorted_voxels(voxels)]}
            for region, voxels in tagged.items()
        ]
    else:
        groups = [
            {"region": Region.UNDEFINED.name, "voxels": [list(voxel) for voxel in sorted_voxels(container.voxels)]}
        ]

    return {
        "id": container.id,
        "center": list(container.center) if container.center is not None else None,
        "location": groups,
    }


def container_from_dict(data: Dict[str, Any]) -> LocationContainer:
    groups = data.get("location", [])
    center = data.get("center")

    voxels = []
    regions = {}
    for group in groups:
        region = Region[group["region"]]
        group_voxels = [as_voxel(voxel) for voxel in group["voxels"]]
        voxels.extend(group_voxels)
        if region != Region.UNDEFINED:
            regions[region] = group_voxels

    return LocationContainer(
        id=data["id"],
        center=as_voxel(center) if center is not None else None,
        voxels=voxels,
        regions=regions or None,
    )


def save_locations(containers: Iterable[LocationContainer], path: PathLike) -> None:
    """Write containers to a JSON file, ordered by id."""
    entries = [container_to_dict(container) for container in sorted(containers, key=lambda c: c.id)]
    with open(path, "w") as f:
        json.dump(entries, f, indent=2)
    logger.info("Saved locations", path=str(path), count=len(entries))


def load_locations(path: PathLike) -> List[LocationContainer]:
    """Read containers from a JSON file."""
    with open(path) as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise ValueError(f"Expected a list of locations in {path}")
    containers = [container_from_dict(entry) for entry in entries]
    logger.info("Loaded locations", path=str(path), count=len(containers))
    return containers
