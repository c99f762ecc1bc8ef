"""Partial density profiles, height grids and distance profiles from molecular dynamics trajectories"""
from densityMD.version import __version__

__all__ = ["__version__"]
