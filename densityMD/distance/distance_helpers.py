"""
Geometric helper functions for distance-from-reference density profiles.

This module provides the minimum-image distance computations used to bin
atoms by their distance to a reference group. Two backends are available for
the nearest-reference-atom kernel, which dominates the cost of a distance
profile (it is O(atoms x reference atoms) per frame):

- 'numba' (default): Uses Numba JIT compilation with parallel execution.

- 'numpy': Uses NumPy broadcasting over chunks of query atoms.

Backend selection is controlled by the DENSITYMD_BACKEND environment variable.
See `densityMD.backends` for configuration details.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from densityMD.backends import get_backend, AVAILABLE_BACKENDS
from densityMD.cell import (
    apply_minimum_image,
    apply_minimum_image_orthorhombic,
    is_orthorhombic,
)

#: Number of query atoms handled per broadcast block by the NumPy backend.
CHUNK_SIZE = 1024


class ZeroReferenceMassError(ValueError):
    """Raised when a centre of mass is requested for a group with zero total mass."""
    pass


# ---------------------------------------------------------------------------
# Backend selection
# ---------------------------------------------------------------------------


def _get_numba_functions() -> Callable:
    """Import and return the Numba backend function."""
    try:
        from densityMD.distance.distance_helpers_numba import minimum_distances_numba
        return minimum_distances_numba
    except ImportError as e:
        raise ImportError(
            "Numba backend requested but numba is not installed. "
            "Install with: pip install numba"
        ) from e


def get_backend_functions(backend: str | None = None) -> Callable:
    """
    Get the minimum-distance kernel for the specified backend.

    Parameters
    ----------
    backend : str or None
        Backend to use: 'numpy' or 'numba'. If None, uses the
        DENSITYMD_BACKEND environment variable, defaulting to 'numba'.

    Returns
    -------
    Callable
        ``minimum_distances(points, reference, cell_matrix, excluded_axis)``
        for the selected backend.

    Raises
    ------
    ValueError
        If an unknown backend is specified.
    ImportError
        If numba backend is requested but numba is not installed.
    """
    if backend is None:
        backend = get_backend()

    if backend not in AVAILABLE_BACKENDS:
        raise ValueError(
            f"Unknown distance backend: {backend!r}. "
            f"Available backends: {sorted(AVAILABLE_BACKENDS)}"
        )

    if backend == 'numba':
        return _get_numba_functions()

    # Default: numpy backend
    return minimum_distances


# ---------------------------------------------------------------------------
# NumPy backend implementation
# ---------------------------------------------------------------------------


def _minimum_image(displacement: np.ndarray, cell_matrix: np.ndarray) -> np.ndarray:
    """Minimum-image displacements, using the per-axis form for orthorhombic cells."""
    if is_orthorhombic(cell_matrix):
        return apply_minimum_image_orthorhombic(displacement, np.diag(cell_matrix))
    return apply_minimum_image(displacement, cell_matrix, np.linalg.inv(cell_matrix))


def project(point: np.ndarray, excluded_axis: int | None) -> np.ndarray:
    """
    Project points onto the plane orthogonal to *excluded_axis*.

    Parameters
    ----------
    point : np.ndarray, shape (3,) or (N, 3)
        Point(s) to project.
    excluded_axis : int or None
        Axis whose coordinate is zeroed. ``None`` keeps all three axes
        (full 3D distances).

    Returns
    -------
    np.ndarray
        Projected copy of *point*.
    """
    projected = np.array(point, dtype=np.float64, copy=True)
    if excluded_axis is not None:
        projected[..., excluded_axis] = 0.0
    return projected


def minimum_distances(
    points: np.ndarray,
    reference: np.ndarray,
    cell_matrix: np.ndarray,
    excluded_axis: int | None = None,
) -> np.ndarray:
    """
    Distance from each point to its nearest reference atom.

    Both the query points and the reference atoms are projected onto the
    working plane first, then the minimum-image displacement to every
    reference atom is taken and the smallest norm is kept.

    Parameters
    ----------
    points : np.ndarray, shape (N, 3)
        Query positions.
    reference : np.ndarray, shape (M, 3)
        Reference atom positions, M >= 1.
    cell_matrix : np.ndarray, shape (3, 3)
        Cell matrix with rows = lattice vectors.
    excluded_axis : int or None
        Axis ignored in the distance (2D mode), or None for 3D.

    Returns
    -------
    np.ndarray, shape (N,), dtype=np.float64
        Minimum distance per query point.

    Notes
    -----
    Displacements are built in blocks of ``CHUNK_SIZE`` query points so the
    ``(block, M, 3)`` broadcast stays bounded in memory.
    """
    points = project(np.atleast_2d(points), excluded_axis)
    reference = project(np.atleast_2d(reference), excluded_axis)
    if reference.shape[0] == 0:
        raise ValueError("The reference group is empty.")

    cell_matrix = np.asarray(cell_matrix, dtype=np.float64)

    result = np.empty(points.shape[0], dtype=np.float64)
    for start in range(0, points.shape[0], CHUNK_SIZE):
        block = points[start:start + CHUNK_SIZE]
        displacement = block[:, np.newaxis, :] - reference[np.newaxis, :, :]
        displacement = _minimum_image(displacement, cell_matrix)
        result[start:start + CHUNK_SIZE] = np.sqrt(np.sum(displacement ** 2, axis=-1)).min(axis=1)
    return result


def minimum_distance(
    point: np.ndarray,
    reference_indices: np.ndarray,
    positions: np.ndarray,
    cell_matrix: np.ndarray,
    excluded_axis: int | None = None,
) -> float:
    """
    Distance from one point to the nearest atom of a reference group.

    Parameters
    ----------
    point : np.ndarray, shape (3,)
        Query position.
    reference_indices : np.ndarray
        Indices of the reference atoms in *positions*.
    positions : np.ndarray, shape (n_atoms, 3)
        Positions of every atom in the frame.
    cell_matrix : np.ndarray, shape (3, 3)
        Cell matrix with rows = lattice vectors.
    excluded_axis : int or None
        Axis ignored in the distance (2D mode), or None for 3D.

    Returns
    -------
    float
        The minimum distance.
    """
    reference = np.asarray(positions, dtype=np.float64)[np.asarray(reference_indices, dtype=np.int64)]
    return float(minimum_distances(point, reference, cell_matrix, excluded_axis)[0])


def distance_to_point(
    points: np.ndarray,
    point: np.ndarray,
    cell_matrix: np.ndarray,
    excluded_axis: int | None = None,
) -> np.ndarray:
    """
    Minimum-image distance from each projected point to a single point.

    Parameters
    ----------
    points : np.ndarray, shape (N, 3)
        Query positions.
    point : np.ndarray, shape (3,)
        Target position, already projected for 2D mode.
    cell_matrix : np.ndarray, shape (3, 3)
        Cell matrix with rows = lattice vectors.
    excluded_axis : int or None
        Axis ignored in the distance (2D mode), or None for 3D.

    Returns
    -------
    np.ndarray, shape (N,)
        Distances.
    """
    cell_matrix = np.asarray(cell_matrix, dtype=np.float64)
    displacement = project(np.atleast_2d(points), excluded_axis) - project(point, excluded_axis)
    displacement = _minimum_image(displacement, cell_matrix)
    return np.sqrt(np.sum(displacement ** 2, axis=-1))


def center_of_mass(
    reference_indices: np.ndarray,
    positions: np.ndarray,
    masses: np.ndarray,
    total_mass: float | None = None,
) -> np.ndarray:
    """
    Mass-weighted mean position of a reference group.

    Parameters
    ----------
    reference_indices : np.ndarray
        Indices of the reference atoms in *positions*.
    positions : np.ndarray, shape (n_atoms, 3)
        Positions of every atom in the frame.
    masses : np.ndarray
        Masses of the reference atoms, aligned with *reference_indices*.
    total_mass : float, optional
        Precomputed total mass of the reference group.

    Returns
    -------
    np.ndarray, shape (3,)
        Centre of mass.

    Raises
    ------
    ZeroReferenceMassError
        If the total mass is zero.
    """
    masses = np.asarray(masses, dtype=np.float64)
    if total_mass is None:
        total_mass = float(masses.sum())
    if total_mass == 0:
        raise ZeroReferenceMassError("The reference group has a total mass of zero.")
    reference = np.asarray(positions, dtype=np.float64)[np.asarray(reference_indices, dtype=np.int64)]
    return (reference * masses[:, np.newaxis]).sum(axis=0) / total_mass


def shell_volume(r1: np.ndarray | float, r2: np.ndarray | float) -> np.ndarray | float:
    """Volume of the spherical shell between radii *r1* and *r2*."""
    return (4.0 / 3.0) * np.pi * (np.power(r2, 3) - np.power(r1, 3))


def annulus_volume(
    r1: np.ndarray | float, r2: np.ndarray | float, height: float
) -> np.ndarray | float:
    """Volume of the cylindrical annulus between radii *r1* and *r2*."""
    return height * np.pi * (np.power(r2, 2) - np.power(r1, 2))
