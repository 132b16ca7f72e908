"""
Configuration modules for the potts engine.
"""

from .logging import configure_logging
from .options import PopulationOptions, SeriesOptions
from .settings import Settings, settings

__all__ = ['configure_logging', 'PopulationOptions', 'SeriesOptions', 'Settings', 'settings']
