"""Tests for potts locations with regions."""

import numpy as np
import pytest

from py_potts.core.alea_prng import AleaPRNG
from py_potts.core.connectivity import is_connected
from py_potts.core.geometry import GEOMETRY_2D, GEOMETRY_3D
from py_potts.core.regions import PottsLocations
from py_potts.core.voxel import Region, Voxel

from tests.shapes import cuboid, rectangle


class TestPottsLocations:
    """Test region bookkeeping."""

    @pytest.fixture
    def block(self):
        return PottsLocations(rectangle(3, 3), GEOMETRY_2D)

    def test_voxels_start_in_default(self, block):
        assert block.regions == [Region.DEFAULT]
        assert block.get_volume(Region.DEFAULT) == 9
        assert block.get_volume() == 9
        assert block.get_region(Voxel(1, 1, 0)) == Region.DEFAULT
        assert block.is_consistent()

    def test_add_to_region(self, block):
        block.add(3, 1, 0, Region.NUCLEUS)
        assert block.volume == 10
        assert block.get_volume(Region.NUCLEUS) == 1
        assert block.get_surface(Region.NUCLEUS) == 4
        assert block.get_region(Voxel(3, 1, 0)) == Region.NUCLEUS
        assert block.is_consistent()

    def test_assign_moves_voxel(self, block):
        block.assign(Region.NUCLEUS, Voxel(1, 1, 0))
        assert block.get_volume(Region.NUCLEUS) == 1
        assert block.get_volume(Region.DEFAULT) == 8
        assert block.get_surface(Region.DEFAULT) == 16
        assert block.volume == 9
        assert block.is_consistent()

    def test_assign_absent_voxel_is_noop(self, block):
        block.assign(Region.NUCLEUS, Voxel(7, 7, 0))
        assert block.get_volume(Region.NUCLEUS) == 0
        assert block.volume == 9

    def test_assign_same_region_is_noop(self, block):
        block.assign(Region.DEFAULT, Voxel(1, 1, 0))
        assert block.get_volume(Region.DEFAULT) == 9

    def test_remove_with_region(self, block):
        block.assign(Region.NUCLEUS, Voxel(1, 1, 0))
        block.remove(1, 1, 0, Region.DEFAULT)
        assert block.volume == 9

        block.remove(1, 1, 0, Region.NUCLEUS)
        assert block.volume == 8
        assert block.get_volume(Region.NUCLEUS) == 0
        assert block.is_consistent()

    def test_remove_without_region(self, block):
        block.assign(Region.NUCLEUS, Voxel(0, 0, 0))
        block.remove(0, 0, 0)
        assert block.volume == 8
        assert block.get_volume(Region.NUCLEUS) == 0

    def test_unregistered_region_getters(self, block):
        assert block.get_volume(Region.NUCLEUS) == 0
        assert block.get_surface(Region.NUCLEUS) == 0
        assert block.get_height(Region.NUCLEUS) == 0
        assert block.get_centroid(Region.NUCLEUS) is None
        assert block.get_voxels(Region.NUCLEUS) == []

    def test_undefined_region_rejected(self, block):
        with pytest.raises(ValueError):
            block.add(5, 5, 0, Region.UNDEFINED)

    def test_region_centroid(self, block):
        block.assign(Region.NUCLEUS, Voxel(0, 0, 0))
        block.assign(Region.NUCLEUS, Voxel(2, 0, 0))
        assert block.get_centroid(Region.NUCLEUS) == pytest.approx((1, 0, 0))


class TestDistribute:
    """Test region redistribution."""

    def test_distribute_unregistered_region(self):
        location = PottsLocations(rectangle(5, 5), GEOMETRY_2D)
        with pytest.raises(ValueError):
            location.distribute(Region.NUCLEUS, 5, AleaPRNG("distribute"))

    def test_distribute_around_center(self):
        location = PottsLocations(rectangle(5, 5), GEOMETRY_2D, regions=[Region.NUCLEUS])
        location.distribute(Region.NUCLEUS, 5, AleaPRNG("distribute"))

        nucleus = set(location.get_voxels(Region.NUCLEUS))
        assert nucleus == {Voxel(2, 2, 0), Voxel(1, 2, 0), Voxel(3, 2, 0), Voxel(2, 1, 0), Voxel(2, 3, 0)}
        assert location.get_volume(Region.DEFAULT) == 20
        assert location.is_consistent()

    @pytest.mark.parametrize("target", [1, 4, 12, 20])
    def test_distribute_reaches_target(self, target):
        location = PottsLocations(rectangle(6, 6), GEOMETRY_2D, regions=[Region.NUCLEUS])
        location.distribute(Region.NUCLEUS, target, AleaPRNG(f"target_{target}"))

        assert location.get_volume(Region.NUCLEUS) == target
        assert is_connected(location.get_voxels(Region.NUCLEUS), GEOMETRY_2D)
        assert location.is_consistent()

    def test_redistribute_replaces_region(self):
        location = PottsLocations(rectangle(6, 6), GEOMETRY_2D, regions=[Region.NUCLEUS])
        prng = AleaPRNG("again")
        location.distribute(Region.NUCLEUS, 9, prng)
        location.distribute(Region.NUCLEUS, 4, prng)
        assert location.get_volume(Region.NUCLEUS) == 4
        assert location.get_volume(Region.DEFAULT) == 32

    def test_distribute_zero(self):
        location = PottsLocations(rectangle(4, 4), GEOMETRY_2D, regions=[Region.NUCLEUS])
        location.distribute(Region.NUCLEUS, 0, AleaPRNG("zero"))
        assert location.get_volume(Region.NUCLEUS) == 0

    def test_distribute_3d(self):
        location = PottsLocations(cuboid(5, 5, 3), GEOMETRY_3D, regions=[Region.NUCLEUS])
        location.distribute(Region.NUCLEUS, 10, AleaPRNG("cube"))
        assert location.get_volume(Region.NUCLEUS) == 10
        assert is_connected(location.get_voxels(Region.NUCLEUS), GEOMETRY_3D)
        assert location.is_consistent()


class TestRegionLattice:
    def test_update_writes_region_values(self):
        location = PottsLocations(rectangle(3, 3), GEOMETRY_2D)
        location.assign(Region.NUCLEUS, Voxel(1, 1, 0))
        ids = np.zeros((1, 3, 3), dtype=np.int32)
        regions = np.zeros((1, 3, 3), dtype=np.int32)

        location.update(5, ids, regions)
        assert (ids == 5).all()
        assert regions[0, 1, 1] == Region.NUCLEUS.value
        assert (regions == Region.DEFAULT.value).sum() == 8

        location.clear(ids, regions)
        assert ids.sum() == 0
        assert regions.sum() == 0
        assert location.volume == 0
        assert location.get_volume(Region.NUCLEUS) == 0

    def test_convert_includes_regions(self):
        location = PottsLocations(rectangle(3, 3), GEOMETRY_2D)
        location.assign(Region.NUCLEUS, Voxel(1, 1, 0))
        container = location.convert(2)
        assert container.regions[Region.NUCLEUS] == [Voxel(1, 1, 0)]
        assert len(container.regions[Region.DEFAULT]) == 8


class TestRegionSplit:
    """Test region preservation through division."""

    @pytest.mark.parametrize("seed", [f"regions_{i}" for i in range(8)])
    def test_split_conserves_regions(self, seed):
        prng = AleaPRNG(seed)
        location = PottsLocations(rectangle(7, 7), GEOMETRY_2D, regions=[Region.NUCLEUS])
        location.distribute(Region.NUCLEUS, 9, prng)
        original = set(location.voxels)

        daughter = location.split(prng)

        assert isinstance(daughter, PottsLocations)
        assert set(location.voxels) | set(daughter.voxels) == original
        assert location.get_volume(Region.NUCLEUS) + daughter.get_volume(Region.NUCLEUS) == 9
        assert set(location.get_voxels(Region.NUCLEUS)) <= set(location.voxels)
        assert set(daughter.get_voxels(Region.NUCLEUS)) <= set(daughter.voxels)
        assert location.is_consistent()
        assert daughter.is_consistent()

    def test_split_keeps_registered_regions(self):
        prng = AleaPRNG("registered")
        location = PottsLocations(rectangle(6, 6), GEOMETRY_2D, regions=[Region.NUCLEUS])
        daughter = location.split(prng)
        assert daughter.regions == [Region.DEFAULT, Region.NUCLEUS]
        assert location.get_volume(Region.NUCLEUS) == 0
