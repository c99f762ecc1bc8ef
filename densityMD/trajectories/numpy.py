"""
NumPy array trajectory backend for densityMD.

This module provides the NumpyTrajectory class for trajectories stored
directly as NumPy arrays in memory.
"""

from typing import Iterator

import numpy as np

from ._base import Trajectory, DataUnavailableError


class NumpyTrajectory(Trajectory):
    """
    Represents a trajectory stored directly as NumPy arrays.

    Designed for simulation data already resident in memory, or for synthetic
    trajectories generated numerically.

    Parameters
    ----------
    positions : np.ndarray
        Atomic positions of shape ``(frames, atoms, 3)`` in nm.
    box_x, box_y, box_z : float, optional
        Simulation box lengths in each Cartesian direction.
        All three must be provided together.
        Mutually exclusive with ``cell_matrix`` and ``cell_matrices``.
    species_list : list of str, optional
        Atom names corresponding to each atom index.  If ``None``,
        ``get_indices`` only accepts explicit index arrays and ``get_names``
        is not available.
    cell_matrix : np.ndarray, optional
        Full 3x3 cell matrix with rows = lattice vectors, used for every frame.
    cell_matrices : np.ndarray, optional
        Per-frame cell matrices of shape ``(frames, 3, 3)``.
    charge_list : np.ndarray, optional
        Atomic charge array (optional).
    mass_list : np.ndarray, optional
        Atomic mass array in amu (optional).

    Raises
    ------
    ValueError
        If the arrays are inconsistent, if box dimensions are invalid, or if
        not exactly one of ``box_x/y/z``, ``cell_matrix`` and
        ``cell_matrices`` is provided.
    """

    def __init__(
        self,
        positions: np.ndarray,
        box_x: float | None = None,
        box_y: float | None = None,
        box_z: float | None = None,
        species_list: list[str] | None = None,
        *,
        cell_matrix: np.ndarray | None = None,
        cell_matrices: np.ndarray | None = None,
        charge_list: np.ndarray | None = None,
        mass_list: np.ndarray | None = None,
    ):
        positions = np.asarray(positions, dtype=np.float64)
        if positions.ndim != 3 or positions.shape[2] != 3:
            raise ValueError(f"Positions must have shape (frames, atoms, 3), got {positions.shape}.")

        self.frames = positions.shape[0]
        self.n_atoms = positions.shape[1]

        if species_list is not None and self.n_atoms != len(species_list):
            raise ValueError("Species list and trajectory arrays are incommensurate.")
        for label, values in (("Charge", charge_list), ("Mass", mass_list)):
            if values is not None and len(values) != self.n_atoms:
                raise ValueError(f"{label} list and trajectory arrays are incommensurate.")

        # Determine cell geometry from exactly one of the three box sources
        box_args = (box_x, box_y, box_z)
        has_box = any(v is not None for v in box_args)
        has_cell = cell_matrix is not None
        has_cells = cell_matrices is not None

        if has_box + has_cell + has_cells > 1:
            raise ValueError(
                "Specify only one of box_x/box_y/box_z, cell_matrix or cell_matrices."
            )
        if not (has_box or has_cell or has_cells):
            raise ValueError(
                "Must specify either cell_matrix, cell_matrices or box_x/box_y/box_z."
            )

        if has_cells:
            cells = np.array(cell_matrices, dtype=np.float64, copy=True)
            if cells.shape != (self.frames, 3, 3):
                raise ValueError(
                    f"cell_matrices must have shape ({self.frames}, 3, 3), got {cells.shape}."
                )
            for cell in cells:
                self._validate_cell_matrix(cell)
            self.cell_matrices = cells
        else:
            if has_cell:
                cell = np.array(cell_matrix, dtype=np.float64, copy=True)
                self._validate_cell_matrix(cell)
            else:
                if not all(v is not None for v in box_args):
                    raise ValueError(
                        "All three of box_x, box_y, box_z must be provided together."
                    )
                assert box_x is not None and box_y is not None and box_z is not None
                self._validate_box_dimensions(box_x, box_y, box_z)
                cell = self._cell_matrix_from_dimensions(box_x, box_y, box_z)
            self.cell_matrices = np.broadcast_to(cell, (self.frames, 3, 3))

        self.cell_matrix = self.cell_matrices[0] if self.frames else None
        self.positions = positions
        self.species_string = species_list

        self.charge_list = None if charge_list is None else np.asarray(charge_list, dtype=np.float64)
        self.mass_list = None if mass_list is None else np.asarray(mass_list, dtype=np.float64)

    def get_indices(self, selection: str) -> np.ndarray:
        """
        Return atom indices for a given species.

        Parameters
        ----------
        selection : str
            Atom species name to select (e.g., `'O'`, `'H'`, `'C'`).

        Returns
        -------
        np.ndarray
            Indices of selected atoms.

        Raises
        ------
        ValueError
            If the species name is not present in the provided species list.
        """
        if self.species_string is None:
            raise ValueError("Species list was not provided for this trajectory.")
        inds = np.where(np.array(self.species_string) == selection)[0]
        if len(inds) == 0:
            raise ValueError(f"Species '{selection}' not found in species list.")
        return inds

    def get_charges(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic charges of the atoms at *indices*."""
        if self.charge_list is None:
            raise DataUnavailableError("Charge data not available for this trajectory.")
        return self.charge_list[np.asarray(indices, dtype=np.int64)]

    def get_masses(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic masses of the atoms at *indices*."""
        if self.mass_list is None:
            raise DataUnavailableError("Mass data not available for this trajectory.")
        return self.mass_list[np.asarray(indices, dtype=np.int64)]

    def get_names(self, indices: np.ndarray) -> np.ndarray:
        """Return species names of the atoms at *indices*."""
        if self.species_string is None:
            raise DataUnavailableError("Species list was not provided for this trajectory.")
        return np.array(self.species_string)[np.asarray(indices, dtype=np.int64)]

    def _iter_frames_impl(self, frames: range) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        for i in frames:
            yield self.positions[i], self.cell_matrices[i]

    def get_frame(self, index: int) -> tuple[np.ndarray, np.ndarray]:
        """Return positions and cell matrix for a specific frame by index."""
        return self.positions[index], self.cell_matrices[index]
