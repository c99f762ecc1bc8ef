"""
Base classes for trajectory handling in densityMD.

This module defines the abstract base class and common exceptions used by
all trajectory backends.
"""

from abc import ABC, abstractmethod
from typing import Iterator

import numpy as np


class DataUnavailableError(Exception):
    """Raised when requested data (charges, masses, names) is not available for a trajectory type."""
    pass


class Trajectory(ABC):
    """
    Abstract base class defining the interface for trajectory objects.

    All trajectory backends must implement this interface to ensure consistent
    access patterns across different file formats and data sources.
    Positions and cell matrices are in nm.

    Required Attributes
    -------------------
    frames : int
        Number of frames in the trajectory.
    n_atoms : int
        Number of atoms in every frame.
    """

    # Required attributes - subclasses must set these
    frames: int
    n_atoms: int

    def frame_range(self, start: int = 0, stop: int | None = None, stride: int = 1) -> range:
        """
        Frame indices selected by *start*, *stop* and *stride*.

        Bounds follow slice semantics: negative values count from the end
        and out-of-range values are clamped.

        Raises
        ------
        ValueError
            If *stride* is not a positive integer.
        """
        if stride <= 0:
            raise ValueError(f"Frame stride must be a positive integer, got {stride}.")
        return range(*slice(start, stop, stride).indices(self.frames))

    @staticmethod
    def _validate_box_dimensions(lx: float, ly: float, lz: float) -> tuple[float, float, float]:
        """
        Validate that box dimensions are positive and finite.

        Parameters
        ----------
        lx, ly, lz : float
            Box dimensions in each Cartesian direction.

        Returns
        -------
        tuple of (float, float, float)
            The validated box dimensions.

        Raises
        ------
        ValueError
            If any dimension is not positive or not finite.
        """
        dims = [lx, ly, lz]
        if not all(np.isfinite(dims)):
            raise ValueError(f"Box dimensions must be finite. Got: ({lx}, {ly}, {lz})")
        if not all(d > 0 for d in dims):
            raise ValueError(f"Box dimensions must be positive. Got: ({lx}, {ly}, {lz})")
        return lx, ly, lz

    @staticmethod
    def _cell_matrix_from_dimensions(lx: float, ly: float, lz: float) -> np.ndarray:
        """Return the diagonal cell matrix of an orthorhombic box."""
        return np.diag([float(lx), float(ly), float(lz)])

    @staticmethod
    def _validate_cell_matrix(cell_matrix: np.ndarray) -> None:
        """
        Validate a cell matrix.

        Parameters
        ----------
        cell_matrix : np.ndarray
            Cell matrix with rows = lattice vectors.

        Raises
        ------
        ValueError
            If the matrix is not 3x3, is not finite, or has a non-positive
            diagonal (the edge lengths used for binning).
        """
        if cell_matrix.shape != (3, 3):
            raise ValueError(f"Cell matrix must have shape (3, 3), got {cell_matrix.shape}.")
        if not np.all(np.isfinite(cell_matrix)):
            raise ValueError("Cell matrix must be finite.")
        if np.any(np.diag(cell_matrix) <= 0):
            raise ValueError(
                f"Cell matrix diagonal must be positive. Got: {tuple(np.diag(cell_matrix))}"
            )

    @abstractmethod
    def get_indices(self, selection: str) -> np.ndarray:
        """Return 0-based atom indices for a selection (species name or selection string)."""
        ...

    def get_charges(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic charges of the atoms at *indices*.

        Subclasses should override this method if charge data is available.
        The default implementation raises DataUnavailableError.
        """
        raise DataUnavailableError("Charge data not available for this trajectory type.")

    def get_masses(self, indices: np.ndarray) -> np.ndarray:
        """Return atomic masses of the atoms at *indices*.

        Subclasses should override this method if mass data is available.
        The default implementation raises DataUnavailableError.
        """
        raise DataUnavailableError("Mass data not available for this trajectory type.")

    def get_names(self, indices: np.ndarray) -> np.ndarray:
        """Return atom names of the atoms at *indices*.

        Subclasses should override this method if atom names are available.
        The default implementation raises DataUnavailableError.
        """
        raise DataUnavailableError("Atom names not available for this trajectory type.")

    def iter_frames(
        self,
        start: int = 0,
        stop: int | None = None,
        stride: int = 1
    ) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """
        Iterate over trajectory frames, yielding positions and cell matrices.

        Parameters
        ----------
        start : int, optional
            First frame index (default: 0). Negative indices count from end.
        stop : int, optional
            Stop iteration before this frame (default: None, meaning all frames).
            Negative indices count from end.
        stride : int, optional
            Step between frames (default: 1).

        Yields
        ------
        positions : np.ndarray
            Atomic positions for the current frame, shape (n_atoms, 3).
        cell_matrix : np.ndarray
            Cell matrix for the current frame, shape (3, 3).
        """
        return self._iter_frames_impl(self.frame_range(start, stop, stride))

    def n_frames_in(self, start: int = 0, stop: int | None = None, stride: int = 1) -> int:
        """Number of frames :meth:`iter_frames` yields for these bounds."""
        return len(self.frame_range(start, stop, stride))

    @abstractmethod
    def _iter_frames_impl(self, frames: range) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """Yield the frames in *frames*, a range of valid non-negative indices."""
        ...

    @abstractmethod
    def get_frame(self, index: int) -> tuple[np.ndarray, np.ndarray]:
        """
        Return positions and cell matrix for a specific frame by index.

        Parameters
        ----------
        index : int
            Frame index to retrieve.

        Returns
        -------
        positions : np.ndarray
            Atomic positions for the frame, shape (n_atoms, 3).
        cell_matrix : np.ndarray
            Cell matrix for the frame, shape (3, 3).
        """
        ...
