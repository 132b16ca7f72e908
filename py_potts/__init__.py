"""
Discrete spatial engine for cellular Potts model tissue simulations.
"""

__version__ = "0.1.0"
