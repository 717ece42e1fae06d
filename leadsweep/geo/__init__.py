"""
Geographic utilities module.

- grid.py: Sweep point generation around a city center
"""

from .grid import Coordinate, City, generate_sweep_points
