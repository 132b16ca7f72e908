"""
File input and output for locations and series options.
"""

from .locations import load_locations, save_locations
from .series import load_series_options

__all__ = ['load_locations', 'save_locations', 'load_series_options']
