"""
MDAnalysis trajectory backend for densityMD.

This module provides the MDATrajectory class for reading trajectories
via MDAnalysis. MDAnalysis works in Angstrom; positions and cell matrices
are converted to nm here.
"""

import logging
from typing import Iterator

import MDAnalysis as MD  # type: ignore[import-untyped]
from MDAnalysis import transformations  # type: ignore[import-untyped]
from MDAnalysis.exceptions import NoDataError  # type: ignore[import-untyped]
import numpy as np

from ._base import Trajectory, DataUnavailableError

logger = logging.getLogger(__name__)

#: Angstrom to nanometre.
ANGSTROM_TO_NM: float = 0.1


class MDATrajectory(Trajectory):
    """
    Represents a molecular dynamics trajectory handled by **MDAnalysis**.

    This class acts as a unified interface for reading, validating, and accessing
    data from MDAnalysis-compatible trajectory and topology files.

    Parameters
    ----------
    trajectory_file : str
        Path to the trajectory file (e.g., `.xtc`, `.trr`, `.dcd`).
    topology_file : str
        Path to the topology file (e.g., `.tpr`, `.gro`, `.pdb`).
    unwrap : bool, optional
        Make molecules whole across the periodic boundaries before each frame
        is yielded (default: False). Requires bond information in the
        topology.

    Attributes
    ----------
    frames : int
        Number of trajectory frames.
    n_atoms : int
        Number of atoms.
    cell_matrix : np.ndarray
        Cell matrix of the first frame in nm, rows = lattice vectors, shape ``(3, 3)``.

    Raises
    ------
    ValueError
        If no topology file is provided, the cell matrix is invalid, or
        *unwrap* is requested without bonds.
    RuntimeError
        If MDAnalysis fails to load the trajectory or topology file.
    """

    def __init__(self, trajectory_file: str, topology_file: str, *, unwrap: bool = False):
        if not topology_file:
            raise ValueError("A topology file is required for MDAnalysis trajectories.")

        self.trajectory_file = trajectory_file
        self.topology_file = topology_file

        try:
            mdanalysis_universe = MD.Universe(topology_file, trajectory_file)
        except Exception as e:
            raise RuntimeError(f"Failed to load MDAnalysis Universe: {e}")

        self.mdanalysis_universe = mdanalysis_universe
        self.frames = len(mdanalysis_universe.trajectory)
        self.n_atoms = len(mdanalysis_universe.atoms)

        if unwrap:
            try:
                mdanalysis_universe.trajectory.add_transformations(
                    transformations.unwrap(mdanalysis_universe.atoms)
                )
            except NoDataError as e:
                raise ValueError(f"Making molecules whole needs bonds in the topology: {e}")
            logger.info("Molecules are made whole across periodic boundaries.")

        self.cell_matrix = self._cell_matrix(mdanalysis_universe.trajectory.ts)

    def _cell_matrix(self, ts) -> np.ndarray:
        """Return the validated cell matrix of a timestep in nm."""
        box = ts.triclinic_dimensions
        if box is None:
            raise ValueError(f"No simulation box in frame {ts.frame} of {self.trajectory_file}.")
        cell_matrix = np.array(box, dtype=np.float64) * ANGSTROM_TO_NM
        self._validate_cell_matrix(cell_matrix)
        return cell_matrix

    def get_indices(self, selection: str) -> np.ndarray:
        """
        Return 0-based indices of atoms matching an MDAnalysis selection.

        Parameters
        ----------
        selection : str
            MDAnalysis selection string (e.g., ``'name OW'``, ``'resname SOL'``).

        Returns
        -------
        np.ndarray
            Array of atom indices.
        """
        return np.array(self.mdanalysis_universe.select_atoms(selection).indices)

    def _attribute(self, indices: np.ndarray, attribute: str) -> np.ndarray:
        atoms = self.mdanalysis_universe.atoms[np.asarray(indices, dtype=np.int64)]
        try:
            return np.array(getattr(atoms, attribute))
        except NoDataError as e:
            raise DataUnavailableError(f"Topology {self.topology_file} has no {attribute}: {e}")

    def get_charges(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic charges of the atoms at *indices*."""
        return self._attribute(indices, 'charges')

    def get_masses(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic masses of the atoms at *indices*."""
        return self._attribute(indices, 'masses')

    def get_names(self, indices: np.ndarray) -> np.ndarray:
        """Return atom names of the atoms at *indices*."""
        return self._attribute(indices, 'names')

    def _iter_frames_impl(self, frames: range) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        for ts in self.mdanalysis_universe.trajectory[frames.start:frames.stop:frames.step]:
            yield ts.positions * ANGSTROM_TO_NM, self._cell_matrix(ts)

    def get_frame(self, index: int) -> tuple[np.ndarray, np.ndarray]:
        """Return positions and cell matrix for a specific frame by index."""
        ts = self.mdanalysis_universe.trajectory[index]
        return ts.positions * ANGSTROM_TO_NM, self._cell_matrix(ts)
