"""
Periodic box primitives for slab, grid and distance binning.

All functions use the convention that rows of the cell matrix are lattice
vectors: ``M[0] = a``, ``M[1] = b``, ``M[2] = c`` (matching MDAnalysis and
GROMACS). Binning treats the box as rectangular and uses its diagonal as the
three edge lengths.

Key operations:

- Edge lengths: ``diag(M)``
- Periodic wrapping: ``x_wrapped = x mod L`` in ``[0, L)``
- Minimum image convention: ``ds = r @ inv(M)``, ``ds -= round(ds)``,
  ``dr = ds @ M``
"""

import numpy as np

#: Absolute tolerance for deciding whether off-diagonal cell matrix elements
#: are zero, i.e. whether the cell is orthorhombic.
ORTHORHOMBIC_TOLERANCE: float = 1e-6


def is_orthorhombic(
    cell_matrix: np.ndarray, atol: float = ORTHORHOMBIC_TOLERANCE
) -> bool:
    """
    Return ``True`` if all off-diagonal elements of *cell_matrix* are below
    *atol*, i.e. the cell is orthorhombic (or cubic).

    Parameters
    ----------
    cell_matrix : np.ndarray, shape (3, 3)
        Cell matrix with rows = lattice vectors.
    atol : float, optional
        Absolute tolerance for off-diagonal elements (default:
        ``ORTHORHOMBIC_TOLERANCE``).
    """
    off_diagonal = cell_matrix[~np.eye(3, dtype=bool)]
    return bool(np.all(np.abs(off_diagonal) < atol))


def box_lengths(cell_matrix: np.ndarray) -> np.ndarray:
    """
    Return the three box edge lengths (the diagonal of the cell matrix).

    Parameters
    ----------
    cell_matrix : np.ndarray, shape (3, 3) or (3,)
        Cell matrix with rows = lattice vectors, or the edge lengths
        themselves.

    Returns
    -------
    np.ndarray, shape (3,)
        Box edge lengths.

    Raises
    ------
    ValueError
        If the input has the wrong shape or any edge length is not positive
        and finite.
    """
    cell = np.asarray(cell_matrix, dtype=np.float64)
    if cell.shape == (3, 3):
        lengths = np.diag(cell).copy()
    elif cell.shape == (3,):
        lengths = cell.copy()
    else:
        raise ValueError(f"Box must be a (3, 3) cell matrix or 3 edge lengths, got shape {cell.shape}.")
    if not np.all(np.isfinite(lengths)) or np.any(lengths <= 0):
        raise ValueError(f"Box dimensions must be positive and finite. Got: {tuple(lengths)}")
    return lengths


def wrap_coordinates(values: np.ndarray, length: float | np.ndarray) -> np.ndarray:
    """
    Wrap coordinates into ``[0, length)``.

    Wrapping an in-range coordinate is a no-op, and coordinates any number of
    periods outside the box are brought back.

    Parameters
    ----------
    values : np.ndarray
        Coordinates along one axis, or ``(N, 3)`` positions when *length* is
        a ``(3,)`` array of edge lengths.
    length : float or np.ndarray
        Box edge length(s), broadcast against *values*.

    Returns
    -------
    np.ndarray
        Wrapped coordinates in ``[0, length)``.
    """
    wrapped = np.remainder(values, length)
    # remainder of a tiny negative value can round up to exactly `length`
    return np.where(wrapped >= length, wrapped - length, wrapped)


def wrap_positions(positions: np.ndarray, box: np.ndarray) -> np.ndarray:
    """
    Put every atom in the primary box image on all three axes.

    Parameters
    ----------
    positions : np.ndarray, shape (N, 3)
        Cartesian positions.
    box : np.ndarray, shape (3,)
        Box edge lengths.

    Returns
    -------
    np.ndarray, shape (N, 3)
        Wrapped positions.
    """
    return wrap_coordinates(np.asarray(positions, dtype=np.float64), np.asarray(box, dtype=np.float64))


def apply_minimum_image(
    displacement: np.ndarray,
    cell_matrix: np.ndarray,
    cell_inverse: np.ndarray,
) -> np.ndarray:
    """
    Apply the minimum image convention to displacement vectors.

    Works for arbitrary triclinic cells.  The displacement is converted to
    fractional coordinates, each component is rounded to the nearest integer
    and subtracted, then the result is converted back to Cartesian.

    Parameters
    ----------
    displacement : np.ndarray, shape (..., 3)
        Displacement vectors in Cartesian coordinates.
    cell_matrix : np.ndarray, shape (3, 3)
        Cell matrix with rows = lattice vectors.
    cell_inverse : np.ndarray, shape (3, 3)
        Inverse of the cell matrix.

    Returns
    -------
    np.ndarray, shape (..., 3)
        Minimum-image displacement vectors in Cartesian coordinates.
    """
    fractional = displacement @ cell_inverse
    fractional -= np.round(fractional)
    return fractional @ cell_matrix


def apply_minimum_image_orthorhombic(
    displacement: np.ndarray, box: np.ndarray
) -> np.ndarray:
    """
    Apply the minimum image convention for an orthorhombic cell.

    Uses the per-axis formula:
    ``r -= ceil((abs(r) - box/2) / box) * box * sign(r)``

    Parameters
    ----------
    displacement : np.ndarray, shape (..., 3)
        Displacement vectors in Cartesian coordinates.
    box : np.ndarray, shape (3,)
        Box dimensions ``[box_x, box_y, box_z]``.

    Returns
    -------
    np.ndarray, shape (..., 3)
        Minimum-image displacement vectors.
    """
    result = np.array(displacement, dtype=np.float64, copy=True)
    for i in range(3):
        result[..., i] -= (
            np.ceil((np.abs(result[..., i]) - box[i] / 2) / box[i])
            * box[i]
            * np.sign(result[..., i])
        )
    return result


def center_positions(
    positions: np.ndarray,
    masses: np.ndarray | None,
    box: np.ndarray,
    axis: int,
) -> np.ndarray:
    """
    Shift all atoms so the system centre of mass sits at the box centre in
    the plane and at zero along *axis*.

    For a box ``(bX, bY, bZ)`` and ``axis = 2`` the centre of mass ends up at
    ``(bX/2, bY/2, 0)``, which places a centred slab on the box edge so that a
    profile along *axis* is symmetric about its middle.

    Parameters
    ----------
    positions : np.ndarray, shape (N, 3)
        Positions of every atom in the system.
    masses : np.ndarray, shape (N,) or None
        Atomic masses. ``None`` uses the geometric centre.
    box : np.ndarray, shape (3,)
        Box edge lengths.
    axis : int
        Axis along which the centre is moved to zero.

    Returns
    -------
    np.ndarray, shape (N, 3)
        Shifted copy of *positions*.
    """
    positions = np.asarray(positions, dtype=np.float64)
    if masses is None:
        com = positions.mean(axis=0)
    else:
        masses = np.asarray(masses, dtype=np.float64)
        total = masses.sum()
        if total == 0:
            raise ValueError("Cannot centre a system whose total mass is zero.")
        com = (positions * masses[:, np.newaxis]).sum(axis=0) / total

    target = np.asarray(box, dtype=np.float64) / 2
    target[axis] = 0.0
    return positions + (target - com)
