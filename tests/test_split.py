"""Tests for location division."""

import math

import pytest

from py_potts.core.alea_prng import AleaPRNG
from py_potts.core.connectivity import is_connected
from py_potts.core.geometry import GEOMETRY_2D, GEOMETRY_3D, Direction
from py_potts.core.location import LocationContext, PottsLocation, SplitRule
from py_potts.core.selection import increase
from py_potts.core.voxel import Voxel

from tests.shapes import cuboid, rectangle

SEEDS = [f"split_{i}" for i in range(12)]


def assert_valid_split(original, retained, returned, geometry):
    retained_voxels = set(retained.voxels)
    returned_voxels = set(returned.voxels)

    assert retained_voxels | returned_voxels == set(original)
    assert not retained_voxels & returned_voxels
    assert retained.volume + returned.volume == len(original)
    assert retained.volume > 0
    assert returned.volume > 0
    assert is_connected(retained_voxels, geometry)
    assert is_connected(returned_voxels, geometry)
    assert retained.is_consistent()
    assert returned.is_consistent()


def blob(seed, size, geometry):
    prng = AleaPRNG(seed)
    selected = [Voxel(10, 10, 2 if geometry.is_3d else 0)]
    increase(OpenLattice(geometry), selected, size, prng, geometry)
    return selected


class OpenLattice:
    """Unbounded candidate space for blob growth."""

    def __init__(self, geometry):
        self.geometry = geometry

    def __contains__(self, voxel):
        return self.geometry.is_3d or voxel.z == 0


class TestSplitScenarios:
    """Test fixed division cases."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_line_splits_into_halves(self, seed):
        location = PottsLocation([(x, 0, 0) for x in range(6)], GEOMETRY_2D)
        daughter = location.split(AleaPRNG(seed), direction=Direction.YZ_PLANE)

        halves = {frozenset(location.voxels), frozenset(daughter.voxels)}
        assert halves == {
            frozenset(Voxel(x, 0, 0) for x in range(3)),
            frozenset(Voxel(x, 0, 0) for x in range(3, 6)),
        }

    def test_line_chooses_long_axis(self):
        location = PottsLocation([(0, y, 0) for y in range(6)], GEOMETRY_2D)
        for seed in SEEDS:
            assert location.get_direction(AleaPRNG(seed)) == Direction.ZX_PLANE

    def test_split_requires_two_voxels(self, prng):
        with pytest.raises(ValueError):
            PottsLocation([], GEOMETRY_2D).split(prng)
        with pytest.raises(ValueError):
            PottsLocation([(0, 0, 0)], GEOMETRY_2D).split(prng)

    def test_two_voxels(self, prng):
        location = PottsLocation([(0, 0, 0), (1, 0, 0)], GEOMETRY_2D)
        daughter = location.split(prng)
        assert location.volume == 1
        assert daughter.volume == 1

    @pytest.mark.parametrize("seed", [f"square_{i}" for i in range(20)])
    def test_diagonal_cut_through_square_corner(self, seed):
        # The cut passes through one corner, so a side may start empty
        location = PottsLocation(rectangle(2, 2), GEOMETRY_2D)
        original = location.voxels
        daughter = location.split(AleaPRNG(seed), direction=Direction.POSITIVE_XY)

        assert_valid_split(original, location, daughter, GEOMETRY_2D)
        assert (location.volume, daughter.volume) == (2, 2)

    def test_probability_picks_side(self):
        for probability, expected in ((1.0, {0, 1, 2}), (0.0, {3, 4, 5})):
            location = PottsLocation([(x, 0, 0) for x in range(6)], GEOMETRY_2D)
            location.split(AleaPRNG("side"), direction=Direction.YZ_PLANE, probability=probability)
            assert {voxel.x for voxel in location.voxels} == expected

    def test_offset_cut_is_not_balanced(self):
        location = PottsLocation([(x, 0, 0) for x in range(10)], GEOMETRY_2D)
        daughter = location.split(AleaPRNG("offset"), offset=[20], direction=Direction.YZ_PLANE, probability=1.0)
        assert location.volume in (1, 2)
        assert daughter.volume == 10 - location.volume

    def test_explicit_normal(self):
        location = PottsLocation(rectangle(4, 4), GEOMETRY_2D)
        original = location.voxels
        daughter = location.split(AleaPRNG("normal"), normal=(0, 1, 0))
        assert_valid_split(original, location, daughter, GEOMETRY_2D)


class TestSplitProperties:
    """Test division invariants across seeds and shapes."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_rectangle_balanced(self, seed):
        location = PottsLocation(rectangle(6, 5), GEOMETRY_2D)
        original = location.voxels
        daughter = location.split(AleaPRNG(seed))

        assert_valid_split(original, location, daughter, GEOMETRY_2D)
        assert abs(location.volume - daughter.volume) <= math.ceil(0.05 * 30)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_blob_2d(self, seed):
        voxels = blob(seed, 40, GEOMETRY_2D)
        location = PottsLocation(voxels, GEOMETRY_2D)
        daughter = location.split(AleaPRNG(seed))
        assert_valid_split(voxels, location, daughter, GEOMETRY_2D)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_blob_3d(self, seed):
        voxels = blob(seed, 60, GEOMETRY_3D)
        location = PottsLocation(voxels, GEOMETRY_3D)
        daughter = location.split(AleaPRNG(seed))
        assert_valid_split(voxels, location, daughter, GEOMETRY_3D)

    @pytest.mark.parametrize("seed", SEEDS[:4])
    def test_cube(self, seed):
        location = PottsLocation(cuboid(4, 4, 4), GEOMETRY_3D)
        original = location.voxels
        daughter = location.split(AleaPRNG(seed))

        assert_valid_split(original, location, daughter, GEOMETRY_3D)
        assert abs(location.volume - daughter.volume) <= math.ceil(0.05 * 64)

    @pytest.mark.parametrize("seed", SEEDS[:4])
    def test_snake(self, seed):
        # One voxel wide zigzag
        snake = [(x, 0, 0) for x in range(8)] + [(7, 1, 0)] + [(x, 2, 0) for x in range(8)]
        location = PottsLocation(snake, GEOMETRY_2D)
        daughter = location.split(AleaPRNG(seed))
        assert_valid_split(snake, location, daughter, GEOMETRY_2D)

    @pytest.mark.parametrize("seed", SEEDS[:4])
    def test_shortest_axis_rule(self, seed):
        context = LocationContext(split_rule=SplitRule.SHORTEST_AXIS)
        location = PottsLocation(rectangle(6, 3), GEOMETRY_2D, context)
        original = location.voxels
        daughter = location.split(AleaPRNG(seed))
        assert_valid_split(original, location, daughter, GEOMETRY_2D)

    def test_same_seed_same_split(self):
        first = PottsLocation(rectangle(7, 5), GEOMETRY_2D)
        second = PottsLocation(rectangle(7, 5), GEOMETRY_2D)
        assert set(first.split(AleaPRNG("repeat")).voxels) == set(second.split(AleaPRNG("repeat")).voxels)

    def test_repeated_division(self):
        prng = AleaPRNG("lineage")
        cells = [PottsLocation(rectangle(8, 8), GEOMETRY_2D)]
        for _ in range(3):
            cells = cells + [cell.split(prng) for cell in cells]

        assert sum(cell.volume for cell in cells) == 64
        assert all(is_connected(cell.voxels, GEOMETRY_2D) for cell in cells)
