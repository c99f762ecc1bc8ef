"""
Utility functions for densityMD.

This package provides shared utilities used across the densityMD codebase.
"""

from .conversion_factors import AMU_PER_NM3_TO_KG_PER_M3, density_conversion_factor

__all__ = [
    "AMU_PER_NM3_TO_KG_PER_M3",
    "density_conversion_factor",
]
