"""
Connectivity and balance routines used when a location divides.

All routines operate on plain voxel lists and mutate them in place; the
lists are the two halves of a location being split. Every loop carries an
iteration cap, and reaching it keeps the current result, preferring
connected halves over balanced ones.
"""

import math
from typing import Iterable, List, Optional, Tuple

import structlog

from .alea_prng import AleaPRNG
from .geometry import Geometry
from .plane import Plane
from .voxel import Voxel

logger = structlog.get_logger()


def _flood(voxels: Iterable[Voxel], seed: Voxel, geometry: Geometry) -> set:
    """Voxels reachable from ``seed`` through face-adjacent members of ``voxels``."""
    members = voxels if isinstance(voxels, (set, frozenset, dict)) else set(voxels)
    visited = {seed}
    stack = [seed]

    while stack:
        current = stack.pop()
        for neighbor in geometry.neighbors(current):
            if neighbor in members and neighbor not in visited:
                visited.add(neighbor)
                stack.append(neighbor)

    return visited


def is_connected(voxels: Iterable[Voxel], geometry: Geometry) -> bool:
    """True if the voxels form a single face-connected component (or none)."""
    members = voxels if isinstance(voxels, (set, frozenset, dict)) else set(voxels)
    if not members:
        return True
    seed = next(iter(members))
    return len(_flood(members, seed, geometry)) == len(members)


def check_voxels(
    voxels: List[Voxel],
    geometry: Geometry,
    prng: AleaPRNG,
    update: bool = False,
) -> Optional[List[Voxel]]:
    """
    Find the disconnected part of a voxel list.

    Flood fills from a random voxel. If some voxels are not reached, the
    smaller of the reached and unreached groups is returned (in list order)
    and, when ``update`` is set, removed from ``voxels``.

    Args:
        voxels: Voxel list to check, modified when ``update`` is True
        geometry: Lattice geometry providing the neighborhood
        prng: Random source for the flood seed
        update: Remove the returned voxels from ``voxels``

    Returns:
        The smaller group of voxels, or None if the list is connected
    """
    if not voxels:
        return None

    seed = voxels[prng.next_int(len(voxels))]
    visited = _flood(voxels, seed, geometry)

    if len(visited) == len(set(voxels)):
        return None

    reached = [voxel for voxel in voxels if voxel in visited]
    unreached = [voxel for voxel in voxels if voxel not in visited]
    fragment = reached if len(reached) < len(unreached) else unreached

    if update:
        removed = set(fragment)
        voxels[:] = [voxel for voxel in voxels if voxel not in removed]

    return fragment


def split_voxels(plane: Plane, voxels: Iterable[Voxel], prng: AleaPRNG) -> Tuple[List[Voxel], List[Voxel]]:
    """Partition voxels by side of a plane; voxels on the plane go to a random side."""
    side_a = []
    side_b = []

    for voxel in voxels:
        distance = plane.signed_distance(voxel)
        if distance < 0:
            side_a.append(voxel)
        elif distance > 0:
            side_b.append(voxel)
        elif prng.random() > 0.5:
            side_a.append(voxel)
        else:
            side_b.append(voxel)

    return side_a, side_b


def connect_voxels(
    side_a: List[Voxel],
    side_b: List[Voxel],
    geometry: Geometry,
    prng: AleaPRNG,
    max_iterations: int = 100,
) -> bool:
    """
    Move disconnected fragments of each side onto the other side.

    Repeats until neither side yields a fragment or the iteration cap is
    reached.

    Returns:
        True if both sides were left connected
    """
    for _ in range(max_iterations):
        fragment_a = check_voxels(side_a, geometry, prng, update=True)
        if fragment_a:
            side_b.extend(fragment_a)

        fragment_b = check_voxels(side_b, geometry, prng, update=True)
        if fragment_b:
            side_a.extend(fragment_b)

        if not fragment_a and not fragment_b:
            return True

    logger.warning(
        "Connectivity repair reached iteration cap",
        max_iterations=max_iterations,
        size_a=len(side_a),
        size_b=len(side_b),
    )
    return False


def balance_voxels(
    side_a: List[Voxel],
    side_b: List[Voxel],
    geometry: Geometry,
    prng: AleaPRNG,
    difference: float = 0.05,
    max_iterations: int = 10000,
    max_connect_iterations: int = 100,
) -> bool:
    """
    Even out the sizes of two adjacent voxel lists without disconnecting them.

    While the size gap exceeds ``ceil(difference * total)``, a random voxel
    of the larger side that touches the smaller side (any voxel, while the
    smaller side is empty) is moved across, as long as the larger side stays
    connected without it. If no such voxel
    exists the lists are left unbalanced and connectivity is repaired once
    more.

    Returns:
        True if the sizes ended within tolerance
    """
    total = len(side_a) + len(side_b)
    tolerance = math.ceil(difference * total)

    for _ in range(max_iterations):
        if abs(len(side_a) - len(side_b)) <= tolerance:
            return True

        larger, smaller = (side_a, side_b) if len(side_a) > len(side_b) else (side_b, side_a)
        if smaller:
            occupied = set(smaller)
            candidates = [
                voxel for voxel in larger if any(neighbor in occupied for neighbor in geometry.neighbors(voxel))
            ]
        else:
            candidates = list(larger)
        prng.shuffle(candidates)

        moved = None
        for candidate in candidates:
            remaining = [voxel for voxel in larger if voxel != candidate]
            if is_connected(remaining, geometry):
                moved = candidate
                break

        if moved is None:
            logger.debug("Accepted unbalanced split", size_a=len(side_a), size_b=len(side_b), tolerance=tolerance)
            connect_voxels(side_a, side_b, geometry, prng, max_connect_iterations)
            return False

        larger.remove(moved)
        smaller.append(moved)

    logger.warning("Balancing reached iteration cap", max_iterations=max_iterations)
    return abs(len(side_a) - len(side_b)) <= tolerance


def fill_empty_side(side_a: List[Voxel], side_b: List[Voxel], geometry: Geometry, prng: AleaPRNG) -> None:
    """
    Give an empty side one voxel from the other side.

    The voxel is chosen among those whose removal keeps the donor connected;
    a disconnected donor gives any voxel.
    """
    if side_a and side_b:
        return

    donor, receiver = (side_a, side_b) if side_a else (side_b, side_a)
    if len(donor) < 2:
        return

    candidates = list(donor)
    prng.shuffle(candidates)

    chosen = candidates[0]
    for candidate in candidates:
        if is_connected([voxel for voxel in donor if voxel != candidate], geometry):
            chosen = candidate
            break

    donor.remove(chosen)
    receiver.append(chosen)
