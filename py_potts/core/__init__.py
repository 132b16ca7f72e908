"""
Core location bookkeeping and division.
"""

from .alea_prng import AleaPRNG
from .voxel import Voxel, Region
from .geometry import Direction, Geometry, GEOMETRY_2D, GEOMETRY_3D, get_geometry
from .plane import Plane
from .location import LocationContext, PottsLocation, SplitRule
from .regions import PottsLocations
from .container import LocationContainer
from .factory import PottsLocationFactory, get_selected, increase, decrease

__all__ = ['AleaPRNG', 'Voxel', 'Region', 'Direction', 'Geometry', 'GEOMETRY_2D', 'GEOMETRY_3D',
           'get_geometry', 'Plane', 'LocationContext', 'PottsLocation', 'SplitRule', 'PottsLocations',
           'LocationContainer', 'PottsLocationFactory', 'get_selected', 'increase', 'decrease']
