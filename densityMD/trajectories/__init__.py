"""
Trajectory handling package for densityMD.

This package provides classes for reading molecular dynamics trajectories
from various file formats and data sources.

Classes
-------
MDATrajectory
    MDAnalysis-based trajectory reader.
NumpyTrajectory
    In-memory NumPy array trajectory.

Functions
---------
read_index_file
    Read atom groups from a GROMACS index file.

Exceptions
----------
DataUnavailableError
    Raised when requested data is not available for a trajectory type.
"""

from ._base import DataUnavailableError, Trajectory
from .index import read_index_file
from .mda import MDATrajectory
from .numpy import NumpyTrajectory


__all__ = [
    # Trajectory classes
    "MDATrajectory",
    "NumpyTrajectory",
    "Trajectory",
    # Index files
    "read_index_file",
    # Exception
    "DataUnavailableError",
]
