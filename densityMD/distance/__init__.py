"""
Distance helpers for densityMD.

This package provides the geometric primitives behind distance profiles:
- minimum_distances: nearest-reference-atom distances (numpy or numba backend)
- center_of_mass / project / distance_to_point: centre-of-mass mode
- shell_volume / annulus_volume: bin volumes for 3D and 2D profiles
"""

from densityMD.distance.distance_helpers import (
    ZeroReferenceMassError,
    annulus_volume,
    center_of_mass,
    distance_to_point,
    get_backend_functions,
    minimum_distance,
    minimum_distances,
    project,
    shell_volume,
)

__all__ = [
    "ZeroReferenceMassError",
    "annulus_volume",
    "center_of_mass",
    "distance_to_point",
    "get_backend_functions",
    "minimum_distance",
    "minimum_distances",
    "project",
    "shell_volume",
]
