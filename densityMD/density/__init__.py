"""
Density profile classes for densityMD.

This package provides streaming accumulators and the frame driver:
- Group / build_groups: Atom groups and their mass, number, charge or electron weights
- SlabProfile: Density in slices along one box axis
- HeightGrid: Density projected onto the plane normal to an axis
- DistanceProfile: Density in shells or annuli around a reference group
- DensityAnalysis: One trajectory pass feeding all of the above
- compute_density_profiles: Convenience function for the whole analysis in one call
"""

from densityMD.density._base import NoFramesError
from densityMD.density.selection import Group, build_groups
from densityMD.density.slab_profile import SlabProfile, symmetrize
from densityMD.density.height_grid import HeightGrid
from densityMD.density.distance_profile import DistanceProfile
from densityMD.density.writers import write_grid, write_profile
from densityMD.density.analysis import DensityAnalysis, compute_density_profiles

__all__ = [
    "NoFramesError",
    "Group",
    "build_groups",
    "SlabProfile",
    "symmetrize",
    "HeightGrid",
    "DistanceProfile",
    "write_grid",
    "write_profile",
    "DensityAnalysis",
    "compute_density_profiles",
]
