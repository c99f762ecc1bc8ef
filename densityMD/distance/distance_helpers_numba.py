"""
Numba-accelerated helper functions for distance profiles.

This module provides a JIT-compiled implementation of the nearest-reference
atom search, the critical path of a distance profile. Query atoms are
independent, so the outer loop runs in parallel with ``prange``.
"""

from __future__ import annotations

import numpy as np
from numba import jit, prange  # type: ignore[import-untyped]


@jit(nopython=True, cache=True)
def _is_diagonal(cell: np.ndarray) -> bool:
    """Check if a 3x3 matrix is diagonal (all off-diagonal elements near zero)."""
    tol = 1e-6
    for i in range(3):
        for j in range(3):
            if i != j and abs(cell[i, j]) > tol:
                return False
    return True


@jit(nopython=True, cache=True)
def _mic_triclinic(
    rx: float, ry: float, rz: float,
    cell: np.ndarray, cell_inv: np.ndarray,
) -> tuple[float, float, float]:
    """
    Apply minimum image convention for a triclinic cell.

    Converts displacement to fractional coordinates, wraps to nearest image
    via round(), and converts back to Cartesian.
    """
    sx = rx * cell_inv[0, 0] + ry * cell_inv[1, 0] + rz * cell_inv[2, 0]
    sy = rx * cell_inv[0, 1] + ry * cell_inv[1, 1] + rz * cell_inv[2, 1]
    sz = rx * cell_inv[0, 2] + ry * cell_inv[1, 2] + rz * cell_inv[2, 2]
    sx -= round(sx)
    sy -= round(sy)
    sz -= round(sz)
    rx = sx * cell[0, 0] + sy * cell[1, 0] + sz * cell[2, 0]
    ry = sx * cell[0, 1] + sy * cell[1, 1] + sz * cell[2, 1]
    rz = sx * cell[0, 2] + sy * cell[1, 2] + sz * cell[2, 2]
    return rx, ry, rz


@jit(nopython=True, cache=True)
def _mic_orthorhombic(
    rx: float, ry: float, rz: float,
    box_x: float, box_y: float, box_z: float,
) -> tuple[float, float, float]:
    """Apply minimum image convention for an orthorhombic cell."""
    half_box_x = box_x / 2
    half_box_y = box_y / 2
    half_box_z = box_z / 2
    if abs(rx) > half_box_x:
        rx -= np.ceil((abs(rx) - half_box_x) / box_x) * box_x * np.sign(rx)
    if abs(ry) > half_box_y:
        ry -= np.ceil((abs(ry) - half_box_y) / box_y) * box_y * np.sign(ry)
    if abs(rz) > half_box_z:
        rz -= np.ceil((abs(rz) - half_box_z) / box_z) * box_z * np.sign(rz)
    return rx, ry, rz


@jit(nopython=True, parallel=True, cache=True)
def _minimum_distances_numba(
    points: np.ndarray,
    reference: np.ndarray,
    cell: np.ndarray,
    cell_inv: np.ndarray,
) -> np.ndarray:
    """Nearest-reference distance for each (already projected) query point."""
    n_points = points.shape[0]
    n_reference = reference.shape[0]
    orthorhombic = _is_diagonal(cell)

    result = np.empty(n_points, dtype=np.float64)
    for i in prange(n_points):
        best = np.inf
        for j in range(n_reference):
            rx = points[i, 0] - reference[j, 0]
            ry = points[i, 1] - reference[j, 1]
            rz = points[i, 2] - reference[j, 2]

            if orthorhombic:
                rx, ry, rz = _mic_orthorhombic(
                    rx, ry, rz,
                    cell[0, 0], cell[1, 1], cell[2, 2],
                )
            else:
                rx, ry, rz = _mic_triclinic(rx, ry, rz, cell, cell_inv)

            r_mag = np.sqrt(rx * rx + ry * ry + rz * rz)
            if r_mag < best:
                best = r_mag
        result[i] = best
    return result


def minimum_distances_numba(
    points: np.ndarray,
    reference: np.ndarray,
    cell_matrix: np.ndarray,
    excluded_axis: int | None = None,
) -> np.ndarray:
    """
    Distance from each point to its nearest reference atom (Numba backend).

    Same contract as :func:`densityMD.distance.distance_helpers.minimum_distances`.
    """
    points = np.array(np.atleast_2d(points), dtype=np.float64, copy=True)
    reference = np.array(np.atleast_2d(reference), dtype=np.float64, copy=True)
    if reference.shape[0] == 0:
        raise ValueError("The reference group is empty.")
    if excluded_axis is not None:
        points[:, excluded_axis] = 0.0
        reference[:, excluded_axis] = 0.0

    cell = np.ascontiguousarray(cell_matrix, dtype=np.float64)
    cell_inv = np.ascontiguousarray(np.linalg.inv(cell))
    return _minimum_distances_numba(
        np.ascontiguousarray(points), np.ascontiguousarray(reference), cell, cell_inv,
    )
