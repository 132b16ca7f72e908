"""
Voxel selection utilities shared by the location factory and regions.
"""

from typing import Container, List, Optional, Sequence

import structlog

from .alea_prng import AleaPRNG
from .connectivity import is_connected
from .geometry import Geometry
from .voxel import Voxel

logger = structlog.get_logger()


def get_selected(candidates: Sequence[Voxel], focus: Voxel, n: float) -> List[Voxel]:
    """
    Select the ``n`` candidates closest to ``focus``.

    Ties keep candidate order, so the result depends only on the inputs.
    """
    count = max(int(n), 0)
    ranked = sorted(candidates, key=focus.distance)
    return ranked[:count]


def increase(
    candidates: Container[Voxel],
    selected: List[Voxel],
    target: int,
    prng: AleaPRNG,
    geometry: Geometry,
    max_iterations: Optional[int] = None,
) -> List[Voxel]:
    """
    Grow a selection outward until it reaches ``target`` voxels.

    Each round gathers the unselected neighbors of the selection that are
    in ``candidates`` and appends them in random order. Growth stops early
    when no neighbor is left or after ``max_iterations`` rounds.

    Args:
        candidates: Voxels allowed in the selection; anything supporting ``in``
        selected: Current selection, extended in place
        target: Target selection size
        prng: Random source for neighbor order
        geometry: Lattice geometry providing the neighborhood
        max_iterations: Optional cap on growth rounds

    Returns:
        The extended selection
    """
    chosen = set(selected)
    rounds = 0

    while len(selected) < target:
        if max_iterations is not None and rounds >= max_iterations:
            logger.warning("Selection growth reached iteration cap", size=len(selected), target=target)
            break
        rounds += 1

        # Ordered for reproducible shuffles
        neighbors = {}
        for voxel in selected:
            for neighbor in geometry.neighbors(voxel):
                if neighbor in candidates and neighbor not in chosen:
                    neighbors[neighbor] = None

        if not neighbors:
            break

        additions = list(neighbors)
        prng.shuffle(additions)

        for neighbor in additions:
            if len(selected) >= target:
                break
            selected.append(neighbor)
            chosen.add(neighbor)

    return selected


def decrease(selected: List[Voxel], target: int, prng: AleaPRNG, geometry: Geometry) -> List[Voxel]:
    """
    Shrink a selection to ``target`` voxels without disconnecting it.

    Voxels are tried in random order and removed only if the remaining
    selection stays connected. When nothing can be removed, a target of one
    voxel allows free removal; any other target stops short.
    """
    target = max(target, 0)

    while len(selected) > target:
        candidates = list(selected)
        prng.shuffle(candidates)

        removed = None
        for candidate in candidates:
            remaining = [voxel for voxel in selected if voxel != candidate]
            if is_connected(remaining, geometry):
                removed = candidate
                break

        if removed is None:
            if target > 1:
                logger.debug("Selection could not shrink without disconnecting", size=len(selected), target=target)
                break
            removed = candidates[0]

        selected.remove(removed)

    return selected
